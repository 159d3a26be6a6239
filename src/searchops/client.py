"""Operations facade over a search cluster.

Every call goes through the failover Dispatcher; responses are filtered
server-side with ``filter_path`` and validated into the models of
``searchops.ops.results``. Index mappings and settings are returned as plain
dicts for schema-aware callers to interpret.
"""

from __future__ import annotations

import json
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from searchops.config import OpsConfig, Settings
from searchops.exceptions import ApplicationError
from searchops.ops.bulk import BulkBatcher, Sink, Statement, insert_batcher, update_batcher
from searchops.ops.results import (
    BulkDeleteResult,
    BulkOperationResult,
    NodeInfo,
    RefreshResult,
    SearchResult,
    WriteResult,
)
from searchops.search.query import RootQuery
from searchops.search.scroll import Scroll
from searchops.transport.dispatcher import Dispatcher
from searchops.transport.selector import EndpointSelector

Mapper = Callable[[Any], Any]
Payload = Union[str, bytes]

SEARCH_FILTER = "took,_shards,timed_out,hits.hits._source,hits.hits._id,hits.total,aggregations"
SCROLL_FILTER = "took,_shards,timed_out,hits.hits._source,hits.hits._id,hits.total,_scroll_id"
SCROLL_PATH = "_search/scroll"


def _dumps(obj: Any) -> str:
    if isinstance(obj, BaseModel):
        return obj.model_dump_json(by_alias=True, exclude_none=True)
    return json.dumps(obj)


def _plain(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    return obj


def _search_params(fields: Optional[Sequence[str]], ttl: Optional[int] = None) -> Dict[str, str]:
    params: Dict[str, str] = {"filter_path": SCROLL_FILTER if ttl else SEARCH_FILTER}
    if fields:
        params["_source_includes"] = ",".join(fields)
    if ttl:
        params["scroll"] = f"{ttl}s"
    return params


class SearchOps:
    """High-level client for one search cluster.

    Parameters
    ----------
    dispatcher: Dispatcher
        Failover transport bound to the cluster's host pool.
    config: OpsConfig | None
        Document type, batch size, scroll keep-alive and error policy.
    """

    def __init__(self, dispatcher: Dispatcher, config: Optional[OpsConfig] = None) -> None:
        self.dispatcher = dispatcher
        self.config = config or OpsConfig()

    @classmethod
    def from_hosts(
        cls,
        *urls: str,
        config: Optional[OpsConfig] = None,
        cooldown: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SearchOps":
        cfg = config or OpsConfig()
        selector = EndpointSelector(list(urls), cooldown=cooldown)
        dispatcher = Dispatcher(selector, error_policy=cfg.error_policy, transport=transport)
        return cls(dispatcher, cfg)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "SearchOps":
        dispatcher = Dispatcher.from_config(
            settings.cluster, error_policy=settings.ops.error_policy, transport=transport
        )
        return cls(dispatcher, settings.ops)

    # ----- Paths -----

    @property
    def _typeless(self) -> bool:
        return self.config.doc_type == "_doc"

    def _doc_path(self, index: str, doc_id: Optional[str] = None) -> str:
        path = f"{index}/{self.config.doc_type}"
        return path if doc_id is None else f"{path}/{quote(str(doc_id), safe='')}"

    def _update_path(self, index: str, doc_id: str) -> str:
        enc = quote(str(doc_id), safe="")
        if self._typeless:
            return f"{index}/_update/{enc}"
        return f"{index}/{self.config.doc_type}/{enc}/_update"

    def _bulk_path(self, index: str) -> str:
        return f"{index}/_bulk" if self._typeless else f"{index}/{self.config.doc_type}/_bulk"

    # ----- Cluster / index admin -----

    async def info(self, host: Optional[str] = None) -> Optional[NodeInfo]:
        """Node banner of ``host``, or of the first host that answers."""
        return await self.dispatcher.request("GET", "", decode=NodeInfo.model_validate, host=host)

    async def mappings(self, index: str) -> Optional[Dict[str, Any]]:
        return await self.dispatcher.request(
            "GET", f"{index}/_mapping", decode=lambda o: o[index]["mappings"]
        )

    async def settings(self, index: str) -> Optional[Dict[str, Any]]:
        return await self.dispatcher.request(
            "GET", f"{index}/_settings", decode=lambda o: o[index]["settings"]["index"]
        )

    async def exists(self, index: str) -> bool:
        try:
            found = await self.dispatcher.request("HEAD", index, decode=lambda _: True)
        except ApplicationError as exc:
            if exc.status == 404:
                return False
            raise
        return bool(found)

    async def delete_index(self, index: str) -> bool:
        if not await self.exists(index):
            return False
        try:
            done = await self.dispatcher.request("DELETE", index, decode=lambda _: True)
        except ApplicationError as exc:
            if exc.status == 404:
                return False
            raise
        return bool(done)

    async def create_index(self, index: str, definition: Union[Mapping[str, Any], BaseModel]) -> bool:
        """Create ``index``; returns False when it already exists."""
        if await self.exists(index):
            return False
        done = await self.dispatcher.request(
            "PUT", index, body=_dumps(_plain(definition)), decode=lambda _: True
        )
        return bool(done)

    async def refresh(self, index: str) -> Optional[RefreshResult]:
        return await self.dispatcher.request(
            "POST", f"{index}/_refresh", decode=RefreshResult.model_validate
        )

    # ----- Single documents -----

    async def insert_raw(self, index: str, payload: Payload) -> Optional[WriteResult]:
        return await self.dispatcher.request(
            "POST", self._doc_path(index), body=payload, decode=WriteResult.model_validate
        )

    async def insert(self, index: str, doc: Any) -> Optional[WriteResult]:
        return await self.insert_raw(index, _dumps(doc))

    async def partial_update_raw(self, index: str, doc_id: str, payload: Payload) -> Optional[WriteResult]:
        return await self.dispatcher.request(
            "POST",
            self._update_path(index, doc_id),
            body=payload,
            decode=WriteResult.model_validate,
        )

    async def partial_update(self, index: str, doc_id: str, doc: Any) -> Optional[WriteResult]:
        return await self.partial_update_raw(index, doc_id, json.dumps({"doc": _plain(doc)}))

    async def save_or_update_raw(self, index: str, doc_id: str, payload: Payload) -> Optional[WriteResult]:
        return await self.dispatcher.request(
            "PUT", self._doc_path(index, doc_id), body=payload, decode=WriteResult.model_validate
        )

    async def save_or_update(self, index: str, doc_id: str, doc: Any) -> Optional[WriteResult]:
        return await self.save_or_update_raw(index, doc_id, _dumps(doc))

    async def lookup(
        self,
        index: str,
        doc_id: str,
        mapper: Optional[Mapper] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> Any:
        """Fetch one document's source (optionally projected); None if missing."""
        if fields:
            filter_path = ",".join(f"_source.{f}" for f in fields)
        else:
            filter_path = "_source"

        def decode(o: Any) -> Any:
            if not o or "_source" not in o:
                return None
            return mapper(o["_source"]) if mapper else o["_source"]

        try:
            return await self.dispatcher.request(
                "GET",
                self._doc_path(index, doc_id),
                params={"filter_path": filter_path},
                decode=decode,
            )
        except ApplicationError as exc:
            if exc.status == 404:
                return None
            raise

    # ----- Search -----

    async def query(
        self,
        index: str,
        q: RootQuery,
        mapper: Optional[Mapper] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> Optional[SearchResult]:
        return await self.dispatcher.request(
            "POST",
            f"{index}/_search",
            body=q.json(),
            params=_search_params(fields),
            decode=lambda r: SearchResult.create(r, mapper),
        )

    async def query_raw(
        self, index: str, q: RootQuery, fields: Optional[Sequence[str]] = None
    ) -> Optional[SearchResult]:
        return await self.query(index, q, None, fields)

    async def count(self, index: str, q: RootQuery) -> Optional[int]:
        # _count accepts only the query clause
        body = json.dumps({"query": q.query} if q.query is not None else {})
        return await self.dispatcher.request(
            "POST",
            f"{index}/_count",
            body=body,
            params={"filter_path": "count"},
            decode=lambda b: int(b["count"]),
        )

    def scroll(
        self,
        index: str,
        q: RootQuery,
        mapper: Optional[Mapper] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> Scroll:
        """Build a scroll over ``q``; the first request starts when consumed."""
        ttl = q.scroll_ttl_or_default(self.config.scroll_ttl)

        def decode(r: Any) -> SearchResult:
            return SearchResult.create(r, mapper)

        body = q.json()
        params = _search_params(fields, ttl)

        def head() -> Awaitable[Optional[SearchResult]]:
            return self.dispatcher.request(
                "POST", f"{index}/_search", body=body, params=params, decode=decode
            )

        def factory(scroll_id: str) -> Awaitable[Optional[SearchResult]]:
            return self.dispatcher.request(
                "POST",
                SCROLL_PATH,
                body=json.dumps({"scroll": f"{ttl}s", "scroll_id": scroll_id}),
                params={"filter_path": SCROLL_FILTER},
                decode=decode,
            )

        return Scroll(head, factory, best_effort=self.dispatcher.lenient)

    def stream(
        self,
        index: str,
        q: RootQuery,
        mapper: Optional[Mapper] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> Iterator[Awaitable[Optional[SearchResult]]]:
        return self.scroll(index, q, mapper, fields).stream()

    def astream(
        self,
        index: str,
        q: RootQuery,
        mapper: Optional[Mapper] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> AsyncIterator[SearchResult]:
        return self.scroll(index, q, mapper, fields).astream()

    # ----- Bulk -----

    def bulk_insert(
        self,
        index: str,
        docs: Iterable[Any],
        *,
        deep: bool = False,
        batch_size: Optional[int] = None,
        id_factory: Optional[Callable[[Any], str]] = None,
        sink: Optional[Sink] = None,
    ) -> BulkBatcher:
        return insert_batcher(
            self.dispatcher,
            self._bulk_path(index),
            docs,
            deep=deep,
            batch_size=batch_size or self.config.batch_size,
            id_factory=id_factory,
            sink=sink,
        )

    def bulk_update(
        self,
        index: str,
        pairs: Iterable[Tuple[str, Any]],
        *,
        deep: bool = False,
        batch_size: Optional[int] = None,
        statement: Optional[Statement] = None,
    ) -> BulkBatcher:
        return update_batcher(
            self.dispatcher,
            self._bulk_path(index),
            pairs,
            deep=deep,
            batch_size=batch_size or self.config.batch_size,
            statement=statement,
        )

    async def delete_matching(self, index: str, q: RootQuery) -> Optional[BulkDeleteResult]:
        return await self.dispatcher.request(
            "POST",
            f"{index}/_delete_by_query",
            body=q.json(),
            params={"conflicts": "proceed"},
            decode=BulkDeleteResult.wrap,
        )

    async def update_matching(
        self, index: str, q: RootQuery, script: Union[str, Mapping[str, Any]]
    ) -> Optional[BulkOperationResult]:
        """Run ``script`` (painless source or full script object) on every match."""
        body = q.body()
        body["script"] = {"source": script} if isinstance(script, str) else dict(script)
        return await self.dispatcher.request(
            "POST",
            f"{index}/_update_by_query",
            body=json.dumps(body),
            params={"conflicts": "proceed"},
            decode=BulkOperationResult.model_validate,
        )
