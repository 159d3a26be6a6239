"""Bulk write batching.

Documents are framed as newline-delimited JSON (an action line, then the
document line) into one reusable buffer. Every ``batch_size`` documents the
written bytes are sliced off and posted to ``_bulk``; the batcher yields one
future per request. Accumulation is pull-driven: the next batch is only built
when the consumer asks for it.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from pydantic import BaseModel

from searchops.config import clamp_batch_size
from searchops.ops.results import BulkInsertResult
from searchops.transport.buffer import GrowableBuffer
from searchops.transport.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

Sink = Callable[[Any, GrowableBuffer], None]
HeaderFactory = Callable[[Any], bytes]
Statement = Callable[[str, Any], Dict[str, Any]]

INDEX_HEADER = b'{"index":{}}\n'
NEWLINE = b"\n"
NDJSON_HEADERS = {"Content-Type": "application/x-ndjson"}


def _plain(doc: Any) -> Any:
    if isinstance(doc, BaseModel):
        return doc.model_dump(mode="json", by_alias=True, exclude_none=True)
    return doc


def default_sink(doc: Any, dst: GrowableBuffer) -> None:
    """Serialize ``doc`` as a single JSON line (no trailing newline)."""
    if isinstance(doc, BaseModel):
        dst.write(doc.model_dump_json(by_alias=True, exclude_none=True))
    else:
        dst.write(json.dumps(doc, separators=(",", ":")))


def _action_line(action: str, doc_id: Optional[str]) -> bytes:
    meta = {} if doc_id is None else {"_id": str(doc_id)}
    return (json.dumps({action: meta}, separators=(",", ":")) + "\n").encode("utf-8")


def index_header(id_factory: Optional[Callable[[Any], str]] = None) -> HeaderFactory:
    if id_factory is None:
        return lambda _doc: INDEX_HEADER
    return lambda doc: _action_line("index", id_factory(doc))


def doc_statement(doc_id: str, payload: Any) -> Dict[str, Any]:
    """Default update statement: partial document merge."""
    return {"doc": _plain(payload)}


def upsert_statement(doc_id: str, payload: Any) -> Dict[str, Any]:
    return {"doc": _plain(payload), "doc_as_upsert": True}


class BulkBatcher:
    """Iterable of batch futures over a document source.

    Parameters
    ----------
    dispatcher: Dispatcher
        Sends each framed batch with host failover.
    path: str
        Bulk endpoint path, e.g. ``"books/_bulk"``.
    docs: Iterable
        Finite or unbounded document source, consumed lazily.
    deep: bool
        Keep per-item statuses in the results.
    batch_size: int
        Documents per request, clamped to [1, 10000].
    header: callable
        Produces the action line (with trailing newline) for a document.
    sink: callable
        Writes the document line into the buffer.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        path: str,
        docs: Iterable[Any],
        *,
        deep: bool = False,
        batch_size: Optional[int] = None,
        header: Optional[HeaderFactory] = None,
        sink: Optional[Sink] = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.path = path
        self.docs = docs
        self.deep = deep
        self.batch_size = clamp_batch_size(batch_size)
        self.header = header or index_header()
        self.sink = sink or default_sink

    def __iter__(self) -> Iterator["asyncio.Future[Optional[BulkInsertResult]]"]:
        buffer = GrowableBuffer(self.batch_size * 1024)
        count = 0
        for doc in self.docs:
            buffer.write_buffer(self.header(doc))
            self.sink(doc, buffer)
            buffer.write_buffer(NEWLINE)
            count += 1
            if count >= self.batch_size:
                yield self._dispatch(buffer.slice(), count)
                count = 0
        if count:
            yield self._dispatch(buffer.slice(), count)

    def _decode(self, payload: Any) -> BulkInsertResult:
        return BulkInsertResult.create(payload, deep=self.deep)

    def _dispatch(self, payload: bytes, count: int) -> "asyncio.Future[Optional[BulkInsertResult]]":
        logger.debug("Flushing bulk batch of %d docs (%d bytes) to %s", count, len(payload), self.path)
        return asyncio.ensure_future(
            self.dispatcher.request(
                "POST",
                self.path,
                body=payload,
                decode=self._decode,
                headers=NDJSON_HEADERS,
            )
        )

    async def run(self) -> BulkInsertResult:
        """Send every batch one after another and merge the reports.

        A batch resolved to None (error response under the lenient policy)
        counts as an errored batch.
        """
        total = BulkInsertResult(items=[] if self.deep else None)
        for fut in self:
            res = await fut
            total = total.merge(res if res is not None else BulkInsertResult(errors=True))
        return total


def insert_batcher(
    dispatcher: Dispatcher,
    path: str,
    docs: Iterable[Any],
    *,
    deep: bool = False,
    batch_size: Optional[int] = None,
    id_factory: Optional[Callable[[Any], str]] = None,
    sink: Optional[Sink] = None,
) -> BulkBatcher:
    return BulkBatcher(
        dispatcher,
        path,
        docs,
        deep=deep,
        batch_size=batch_size,
        header=index_header(id_factory),
        sink=sink,
    )


def update_batcher(
    dispatcher: Dispatcher,
    path: str,
    pairs: Iterable[Tuple[str, Any]],
    *,
    deep: bool = False,
    batch_size: Optional[int] = None,
    statement: Optional[Statement] = None,
) -> BulkBatcher:
    """Batch ``(id, payload)`` pairs as update actions."""
    make = statement or doc_statement

    def header(pair: Tuple[str, Any]) -> bytes:
        return _action_line("update", pair[0])

    def sink(pair: Tuple[str, Any], dst: GrowableBuffer) -> None:
        doc_id, payload = pair
        dst.write(json.dumps(make(doc_id, payload), separators=(",", ":")))

    return BulkBatcher(
        dispatcher, path, pairs, deep=deep, batch_size=batch_size, header=header, sink=sink
    )
