"""Search tools for FastMCP.

Read-only access to the configured cluster: node info, index existence,
counts, one-shot queries, scans over a scroll, and single-document lookups.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from searchops.client import SearchOps
from searchops.ops.results import SearchResult
from searchops.search.query import RootQuery


def _serialize_page(page: Optional[SearchResult]) -> Dict[str, Any]:
    if page is None:
        return {"total": 0, "hits": []}
    return {
        "total": page.total(),
        "hits": [{"id": h.id, "source": h.source} for h in page.get_hits()],
    }


def _build_query(query: Optional[Dict[str, Any]]) -> RootQuery:
    if not query:
        return RootQuery.match_all()
    return RootQuery(query=query)


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register search tools on the given FastMCP instance.

    The `get_state` callable should return an object with attribute `ops`
    holding a configured SearchOps.
    """

    def _ops() -> SearchOps:
        state = get_state()
        ops = getattr(state, "ops", None)
        if ops is None:
            raise RuntimeError(
                "Search cluster is not configured. Set SEARCHOPS_CLUSTER__HOSTS in config/.env."
            )
        return ops

    @mcp.tool
    async def search_info() -> Dict[str, Any]:
        """Return the node banner (name, cluster, version) of the first reachable host."""
        info = await _ops().info()
        return info.model_dump(exclude_none=True) if info else {}

    @mcp.tool
    async def search_exists(index: str) -> bool:
        """Check whether an index exists."""
        return await _ops().exists(index)

    @mcp.tool
    async def search_count(index: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching a query DSL clause (match_all when omitted)."""
        return await _ops().count(index, _build_query(query)) or 0

    @mcp.tool
    async def search_query(
        index: str,
        query: Optional[Dict[str, Any]] = None,
        size: int = 10,
        fields: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Run one search and return total plus hits (id and source).

        Parameters
        ----------
        index: str
            Index (or alias/pattern) to search.
        query: dict | None
            Query DSL clause, e.g. {"match": {"title": "python"}}.
        size: int
            Maximum number of hits (default 10).
        fields: list[str] | None
            Restrict returned sources to these fields.
        """
        q = _build_query(query).limit(max(0, int(size)))
        page = await _ops().query(index, q, fields=fields)
        return _serialize_page(page)

    @mcp.tool
    async def search_scan(
        index: str,
        query: Optional[Dict[str, Any]] = None,
        max_hits: int = 1000,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Collect up to `max_hits` matches by scrolling through the results."""
        q = _build_query(query).limit(max(1, int(page_size)))
        hits: List[Dict[str, Any]] = []
        total = 0
        async for page in _ops().astream(index, q):
            total = page.total()
            hits.extend(_serialize_page(page)["hits"])
            if len(hits) >= max_hits:
                break
        return {"total": total, "hits": hits[:max_hits]}

    @mcp.tool
    async def search_lookup(
        index: str, doc_id: str, fields: Optional[List[str]] = None
    ) -> Optional[Dict[str, Any]]:
        """Fetch a single document source by id (null when missing)."""
        return await _ops().lookup(index, doc_id, fields=fields)
