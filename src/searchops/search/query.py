"""Root search request body."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SCROLL_TTL = 60


class RootQuery(BaseModel):
    """Body of a ``_search``/``_count``/by-query request.

    ``scroll_ttl`` is client-side only: it picks the scroll keep-alive and is
    never serialized into the body.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[int] = Field(default=None, alias="from")
    size: Optional[int] = None
    source: Optional[Any] = Field(default=None, alias="_source")
    query: Optional[Dict[str, Any]] = None
    sort: Optional[List[Any]] = None
    search_after: Optional[List[Any]] = None
    aggs: Optional[Dict[str, Any]] = None
    scroll_ttl: Optional[int] = Field(default=None, exclude=True)

    @classmethod
    def match_all(cls) -> "RootQuery":
        return cls(query={"match_all": {}})

    def starting_at(self, v: int) -> "RootQuery":
        self.from_ = v
        return self

    def limit(self, v: int) -> "RootQuery":
        self.size = v
        return self

    def with_scroll_ttl(self, seconds: int) -> "RootQuery":
        self.scroll_ttl = seconds
        return self

    def body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def json(self) -> str:  # type: ignore[override]
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def scroll_ttl_or_default(self, default: int = DEFAULT_SCROLL_TTL) -> int:
        ttl = self.scroll_ttl
        return default if not ttl or ttl < 1 else ttl
