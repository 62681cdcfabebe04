"""Search request construction and execution."""

from .engine import HttpSearchEngine, InMemorySearchEngine, SearchEngine, SearchEngineError
from .request import Inspector, SearchRequest, build_search_request, render_inspector

__all__ = [
    "HttpSearchEngine",
    "InMemorySearchEngine",
    "Inspector",
    "SearchEngine",
    "SearchEngineError",
    "SearchRequest",
    "build_search_request",
    "render_inspector",
]
