from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from rawgraph.retrieval.engine import HttpSearchEngine, InMemorySearchEngine, SearchEngineError
from rawgraph.retrieval.request import SearchRequest


def _engine(handler) -> HttpSearchEngine:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSearchEngine("http://es:9200/", client=client)


def test_http_engine_posts_body_to_index():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"hits": {"total": 0, "hits": []}})

    engine = _engine(handler)
    response = asyncio.run(engine.search(SearchRequest(index="logs", body={"size": 5})))

    assert response == {"hits": {"total": 0, "hits": []}}
    assert str(seen[0].url) == "http://es:9200/logs/_search"
    assert json.loads(seen[0].content) == {"size": 5}


def test_http_engine_returns_error_payload():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"reason": "bad query"}, "status": 400})

    response = asyncio.run(_engine(handler).search(SearchRequest(index="logs")))
    assert response["error"] == {"reason": "bad query"}


def test_http_engine_marks_bare_http_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"status": 503})

    response = asyncio.run(_engine(handler).search(SearchRequest(index="logs")))
    assert response["error"] == "HTTP 503"


def test_http_engine_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SearchEngineError):
        asyncio.run(_engine(handler).search(SearchRequest(index="logs")))


def test_http_engine_wraps_invalid_urls():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    with pytest.raises(SearchEngineError, match="Invalid non-printable"):
        asyncio.run(_engine(handler).search(SearchRequest(index="logs")))


def test_http_engine_rejects_non_json():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>proxy</html>")

    with pytest.raises(SearchEngineError):
        asyncio.run(_engine(handler).search(SearchRequest(index="logs")))


def test_in_memory_engine_honors_size_and_records_requests():
    engine = InMemorySearchEngine({"logs": {"hits": {"total": 3, "hits": [{"_source": {"n": i}} for i in range(3)]}}})
    response = asyncio.run(engine.search(SearchRequest(index="logs", body={"size": 2})))
    assert len(response["hits"]["hits"]) == 2
    assert response["hits"]["total"] == 3
    empty = asyncio.run(engine.search(SearchRequest(index="other")))
    assert empty["hits"]["hits"] == []
    assert [r.index for r in engine.requests] == ["logs", "other"]
