"""Search engine backends that execute segment requests."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import httpx

from rawgraph.metrics.observability import get_logger
from rawgraph.retrieval.request import SearchRequest

EMPTY_RESPONSE: Mapping[str, Any] = {"hits": {"total": 0, "hits": []}}


class SearchEngineError(RuntimeError):
    """Raised when a segment request could not be executed at all."""


class SearchEngine(Protocol):
    """Execute one search request against one index segment."""

    async def search(self, request: SearchRequest) -> Mapping[str, Any]:
        """Return the raw engine response, including any ``error`` payload."""


class HttpSearchEngine:
    """Elasticsearch-compatible engine reached over HTTP."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = get_logger("retrieval")

    @property
    def base_url(self) -> str:
        return self._base_url

    async def search(self, request: SearchRequest) -> Mapping[str, Any]:
        url = f"{self._base_url}/{request.index}/_search"
        try:
            response = await self._client.post(url, json=dict(request.body))
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._logger.warning("search.transport_error", index=request.index, detail=str(exc))
            raise SearchEngineError(f"Search request to {url} failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchEngineError(f"Search engine returned non-JSON body (HTTP {response.status_code})") from exc
        if not isinstance(payload, Mapping):
            raise SearchEngineError(f"Unexpected search response type: {type(payload).__name__}")
        if response.status_code >= 400 and "error" not in payload:
            return {"error": f"HTTP {response.status_code}", **payload}
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()


class InMemorySearchEngine:
    """Serve canned responses per index; used for tests and replays."""

    def __init__(self, responses: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._responses = dict(responses or {})
        self.requests: list[SearchRequest] = []

    async def search(self, request: SearchRequest) -> Mapping[str, Any]:
        self.requests.append(request)
        response = self._responses.get(request.index, EMPTY_RESPONSE)
        if "error" in response:
            return response
        hits = response.get("hits") or {}
        size = request.body.get("size")
        rows = list(hits.get("hits") or [])
        if isinstance(size, int):
            rows = rows[:size]
        return {**response, "hits": {**hits, "hits": rows}}
