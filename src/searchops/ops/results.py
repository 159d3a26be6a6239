"""Typed response models built from decoded JSON bodies.

Each model is validated straight from the server payload (``model_validate``);
field aliases carry the underscore-prefixed wire names (``_id``, ``_source``,
``_scroll_id``...).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def json(self, pretty: bool = False) -> str:  # type: ignore[override]
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2 if pretty else None)


class ShardStats(_Wire):
    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0


class WriteResult(_Wire):
    """Outcome of a single-document write (index, update, upsert)."""

    index: Optional[str] = Field(default=None, alias="_index")
    id: Optional[str] = Field(default=None, alias="_id")
    version: Optional[int] = Field(default=None, alias="_version")
    result: Optional[str] = None
    shards: Optional[ShardStats] = Field(default=None, alias="_shards")
    seq_no: Optional[int] = Field(default=None, alias="_seq_no")
    primary_term: Optional[int] = Field(default=None, alias="_primary_term")


class RefreshResult(_Wire):
    shards: ShardStats = Field(default_factory=ShardStats, alias="_shards")


class VersionInfo(_Wire):
    number: Optional[str] = None
    build_flavor: Optional[str] = None
    lucene_version: Optional[str] = None


class NodeInfo(_Wire):
    name: Optional[str] = None
    cluster_name: Optional[str] = None
    cluster_uuid: Optional[str] = None
    version: Optional[VersionInfo] = None
    tagline: Optional[str] = None


# ----- Search -----


class Hit(_Wire):
    id: Optional[str] = Field(default=None, alias="_id")
    source: Any = Field(default=None, alias="_source")


class Hits(_Wire):
    total: int = 0
    hits: List[Hit] = Field(default_factory=list)

    @field_validator("total", mode="before")
    @classmethod
    def _total_value(cls, v: Any) -> Any:
        # Servers from 7.x report {"value": n, "relation": "eq"}
        if isinstance(v, dict):
            return v.get("value", 0)
        return 0 if v is None else v


class SearchResult(_Wire):
    """One page of search hits.

    ``offset`` counts the hits delivered by earlier pages of the same scroll,
    so completion is judged on everything received so far.
    """

    took: Optional[int] = None
    timed_out: Optional[bool] = None
    shards: Optional[ShardStats] = Field(default=None, alias="_shards")
    hits: Optional[Hits] = None
    aggregations: Optional[Dict[str, Any]] = None
    scroll_id_: Optional[str] = Field(default=None, alias="_scroll_id")
    offset: int = 0

    @classmethod
    def create(cls, payload: Any, mapper: Optional[Callable[[Any], Any]] = None) -> "SearchResult":
        rv = cls.model_validate(payload or {})
        if mapper is not None and rv.hits is not None:
            for hit in rv.hits.hits:
                hit.source = mapper(hit.source)
        return rv

    def is_complete(self) -> bool:
        if self.hits is None:
            return False
        return self.offset + len(self.hits.hits) >= self.total()

    def is_empty(self) -> bool:
        return self.hits is None or not self.hits.hits

    def is_empty_or_complete(self) -> bool:
        return self.is_empty() or self.is_complete()

    def scroll_id(self) -> Optional[str]:
        return self.scroll_id_ or None

    def total(self) -> int:
        return self.hits.total if self.hits else 0

    def size(self) -> int:
        return len(self.get_hits())

    def get_hits(self) -> List[Hit]:
        return self.hits.hits if self.hits else []

    def first(self) -> Any:
        hits = self.get_hits()
        return hits[0].source if hits else None

    def last(self) -> Any:
        hits = self.get_hits()
        return hits[-1].source if hits else None

    def id_list(self) -> List[Optional[str]]:
        return [h.id for h in self.get_hits()]

    def values(self) -> List[Any]:
        return [h.source for h in self.get_hits()]


# ----- Bulk -----


class ItemStatus(_Wire):
    index: Optional[str] = Field(default=None, alias="_index")
    id: Optional[str] = Field(default=None, alias="_id")
    status: Optional[int] = None
    result: Optional[str] = None
    error: Optional[Any] = None


class BulkItem(_Wire):
    """Per-document bulk response, keyed by the action that produced it."""

    index: Optional[ItemStatus] = None
    create: Optional[ItemStatus] = None
    update: Optional[ItemStatus] = None
    delete: Optional[ItemStatus] = None

    def op(self) -> Optional[ItemStatus]:
        return self.index or self.create or self.update or self.delete

    def id(self) -> Optional[str]:
        op = self.op()
        return op.id if op else None

    def status(self) -> Optional[int]:
        op = self.op()
        return op.status if op else None

    def failed(self) -> bool:
        op = self.op()
        return bool(op and (op.error is not None or (op.status or 0) >= 400))


class BulkInsertResult(_Wire):
    """Report for one or more ``_bulk`` requests.

    Shallow results (``deep=False``) keep only ``took`` and ``errors``; deep
    results also keep the per-item statuses.
    """

    took: int = 0
    errors: bool = False
    items: Optional[List[BulkItem]] = None

    @classmethod
    def create(cls, payload: Any, deep: bool = False) -> "BulkInsertResult":
        data = dict(payload or {})
        if not deep:
            data.pop("items", None)
        return cls.model_validate(data)

    def has_errors(self) -> bool:
        return self.errors

    def get_items(self) -> List[BulkItem]:
        return list(self.items or [])

    def taken(self) -> int:
        return self.took

    def merge(self, other: Optional["BulkInsertResult"]) -> "BulkInsertResult":
        """Fold ``other`` into a new result: times add up, any error taints."""
        if other is None:
            return self.model_copy()
        items: Optional[List[BulkItem]]
        if self.items is None and other.items is None:
            items = None
        else:
            items = self.get_items() + other.get_items()
        return BulkInsertResult(
            took=self.took + other.taken(),
            errors=self.errors or other.has_errors(),
            items=items,
        )


class Retries(_Wire):
    bulk: int = 0
    search: int = 0


class BulkOperationResult(_Wire):
    """Report of an update-by-query or delete-by-query run."""

    took: int = 0
    timed_out: bool = False
    total: int = 0
    updated: int = 0
    deleted: int = 0
    batches: int = 0
    version_conflicts: int = 0
    noops: int = 0
    retries: Retries = Field(default_factory=Retries)
    throttled_millis: int = 0
    requests_per_second: float = 0.0
    throttled_until_millis: int = 0
    failures: List[Any] = Field(default_factory=list)
    task: Optional[str] = None


class BulkDeleteResult(BulkOperationResult):
    @classmethod
    def wrap(cls, payload: Any) -> "BulkDeleteResult":
        return cls.model_validate(payload or {})
