import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastmcp import Client, FastMCP

from searchops.client import SearchOps
from searchops.config import Settings
from searchops.mcp.tools.search import register_search_tools


def _search_body(req: httpx.Request) -> Dict[str, Any]:
    return json.loads(req.content) if req.content else {}


def responder(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/":
        return httpx.Response(200, json={"name": "node-1", "cluster_name": "c", "version": {"number": "8.13.0"}})
    if request.method == "HEAD":
        return httpx.Response(200 if path == "/books" else 404)
    if path == "/books/_count":
        return httpx.Response(200, json={"count": 7})
    if path == "/books/_search" and "scroll" in request.url.params:
        size = _search_body(request).get("size", 10)
        hits = [{"_id": str(i), "_source": {"n": i}} for i in range(size)]
        return httpx.Response(200, json={"_scroll_id": "s1", "hits": {"total": 5, "hits": hits}})
    if path == "/_search/scroll":
        hits = [{"_id": str(i), "_source": {"n": i}} for i in range(3, 5)]
        return httpx.Response(200, json={"_scroll_id": "s2", "hits": {"total": 5, "hits": hits}})
    if path == "/books/_search":
        return httpx.Response(
            200, json={"hits": {"total": {"value": 1}, "hits": [{"_id": "1", "_source": {"title": "Dune"}}]}}
        )
    if path == "/books/_doc/1":
        return httpx.Response(200, json={"_source": {"title": "Dune"}})
    return httpx.Response(404, json={"found": False})


class DummyState:
    def __init__(self, configured: bool = True) -> None:
        self.settings = Settings()
        self.ops: Optional[SearchOps] = None
        if configured:
            self.ops = SearchOps.from_hosts("http://es:9200", transport=httpx.MockTransport(responder))


def _extract_json_payload(result: Any) -> Any:
    if isinstance(result, (dict, list)):
        return result
    content = getattr(result, "content", None)
    if isinstance(content, list) and content:
        for item in content:
            text = getattr(item, "text", None)
            if isinstance(text, str):
                try:
                    return json.loads(text)
                except json.JSONDecodeError:
                    continue
    raise AssertionError("Unable to extract JSON payload from tool result")


@pytest.mark.asyncio
async def test_search_tools_info_exists_count() -> None:
    mcp = FastMCP("test")
    state = DummyState()
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        res_info = await client.call_tool("search_info", {})
        res_exists = await client.call_tool("search_exists", {"index": "books"})
        res_missing = await client.call_tool("search_exists", {"index": "films"})
        res_count = await client.call_tool("search_count", {"index": "books"})

    info = _extract_json_payload(res_info)
    assert info["name"] == "node-1"
    assert info["version"]["number"] == "8.13.0"
    assert _extract_json_payload(res_exists) is True
    assert _extract_json_payload(res_missing) is False
    assert _extract_json_payload(res_count) == 7


@pytest.mark.asyncio
async def test_search_tools_query_and_lookup() -> None:
    mcp = FastMCP("test")
    state = DummyState()
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        res_query = await client.call_tool(
            "search_query", {"index": "books", "query": {"match": {"title": "dune"}}, "size": 5}
        )
        res_lookup = await client.call_tool("search_lookup", {"index": "books", "doc_id": "1"})

    payload = _extract_json_payload(res_query)
    assert payload["total"] == 1
    assert payload["hits"] == [{"id": "1", "source": {"title": "Dune"}}]
    assert _extract_json_payload(res_lookup) == {"title": "Dune"}


@pytest.mark.asyncio
async def test_search_scan_walks_scroll_pages() -> None:
    mcp = FastMCP("test")
    state = DummyState()
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        res_all = await client.call_tool("search_scan", {"index": "books", "page_size": 3})
        res_capped = await client.call_tool(
            "search_scan", {"index": "books", "page_size": 3, "max_hits": 2}
        )

    everything = _extract_json_payload(res_all)
    assert everything["total"] == 5
    ids: List[str] = [h["id"] for h in everything["hits"]]
    assert ids == ["0", "1", "2", "3", "4"]

    capped = _extract_json_payload(res_capped)
    assert len(capped["hits"]) == 2


@pytest.mark.asyncio
async def test_search_tools_require_configured_cluster() -> None:
    mcp = FastMCP("test")
    state = DummyState(configured=False)
    register_search_tools(mcp, get_state=lambda: state)

    client = Client(mcp)
    async with client:
        with pytest.raises(Exception):
            await client.call_tool("search_count", {"index": "books"})
