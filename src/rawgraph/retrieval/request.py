"""Outbound search request construction and its inspector rendering."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from rawgraph.config import PanelConfig

# Largest 32-bit signed int; asks the engine for whole-field highlights.
HIGHLIGHT_FRAGMENT_SIZE = 2147483647
HIGHLIGHT_PRE_TAG = "@start-highlight@"
HIGHLIGHT_POST_TAG = "@end-highlight@"


@dataclass(frozen=True)
class SearchRequest:
    """Search request for one index segment."""

    index: str
    body: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Inspector:
    """Human-readable copy of the last request."""

    title: str
    body: str


def build_search_request(config: PanelConfig, index: str, bool_filter: Mapping[str, Any] | None = None) -> SearchRequest:
    should = [{"query_string": {"query": spec.query or "*"}} for spec in config.queries]
    query: dict[str, Any] = {"bool": {"must": [{"bool": {"should": should, "minimum_should_match": 1}}]}}
    if bool_filter:
        query["bool"]["filter"] = [dict(bool_filter)]
    body = {
        "query": query,
        "highlight": {
            "fields": {name: {} for name in config.highlight_fields},
            "fragment_size": HIGHLIGHT_FRAGMENT_SIZE,
            "pre_tags": [HIGHLIGHT_PRE_TAG],
            "post_tags": [HIGHLIGHT_POST_TAG],
        },
        "size": config.max_points,
        "sort": [{config.time_field: {"order": "desc"}}],
    }
    return SearchRequest(index=index, body=body)


def render_inspector(request: SearchRequest, base_url: str, indices: Sequence[str]) -> Inspector:
    """Render the request as a copyable curl command. Never raises."""

    target = ",".join(str(index) for index in indices) or request.index
    command = f"curl -XGET {base_url.rstrip('/')}/{target}/_search?pretty -d'\n{_dump_body(request.body)}'"
    return Inspector(title="Inspector", body=command)


def _dump_body(body: Any) -> str:
    try:
        return json.dumps(body, indent=2)
    except Exception:
        pass
    try:
        return json.dumps(body, indent=2, default=str)
    except Exception:
        pass
    try:
        return repr(body)
    except Exception:
        return "<unrenderable request body>"
