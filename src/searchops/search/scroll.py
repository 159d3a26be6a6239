"""Scroll cursor: a multi-request paginated search exposed as one sequence.

Two ways to consume a scroll:

- ``stream()``: a generator of awaitables, one per page. Each element must be
  awaited before the next one is pulled, because page N+1 is requested with
  the cursor token returned by page N. The page that ends the scroll (empty or
  completing the total) is included.
- ``astream()``: an async generator of pages. Every page carrying hits is
  yielded; an empty terminal page is not.

A scroll wraps exactly one server-side cursor and can be consumed once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Iterator, Optional

from searchops.exceptions import HostsExhausted, SearchOpsError
from searchops.ops.results import SearchResult

logger = logging.getLogger(__name__)

PageFactory = Callable[[str], Awaitable[Optional[SearchResult]]]
HeadFactory = Callable[[], Awaitable[Optional[SearchResult]]]


@dataclass(slots=True)
class _ScrollState:
    scroll_id: Optional[str] = None
    seen: int = 0
    done: bool = False


class Scroll:
    """Pairs a first-page request with a continuation factory.

    Parameters
    ----------
    head: Callable[[], Awaitable[SearchResult | None]]
        Starts the first page request; called once, when consumption begins.
    factory: Callable[[str], Awaitable[SearchResult | None]]
        Requests the page following the given cursor token.
    best_effort: bool
        When True, a failing page fetch is logged and ends the sequence
        instead of raising. Host exhaustion always raises.
    """

    def __init__(
        self,
        head: HeadFactory,
        factory: PageFactory,
        *,
        best_effort: bool = False,
    ) -> None:
        self.head = head
        self.factory = factory
        self.best_effort = best_effort
        self._claimed = False

    def _claim(self) -> _ScrollState:
        if self._claimed:
            raise RuntimeError("Scroll already consumed; build a new one to restart")
        self._claimed = True
        return _ScrollState()

    def _record(self, state: _ScrollState, page: Optional[SearchResult]) -> Optional[SearchResult]:
        if page is None:
            state.done = True
            return None
        page.offset = state.seen
        state.seen += page.size()
        state.scroll_id = page.scroll_id()
        if page.is_empty_or_complete():
            state.done = True
        elif not state.scroll_id:
            logger.warning("Scroll page without cursor token after %d hits; stopping", state.seen)
            state.done = True
        return page

    async def _guarded(
        self, state: _ScrollState, fetch: Awaitable[Optional[SearchResult]]
    ) -> Optional[SearchResult]:
        try:
            page = await fetch
        except HostsExhausted:
            state.done = True
            raise
        except SearchOpsError as exc:
            state.done = True
            if not self.best_effort:
                raise
            logger.error("Scroll stopped after %d hits: %s", state.seen, exc)
            return None
        return self._record(state, page)

    async def _next_page(self, state: _ScrollState) -> Optional[SearchResult]:
        logger.debug("Fetching scroll page after %d hits", state.seen)
        return await self._guarded(state, self.factory(state.scroll_id or ""))

    def stream(self) -> Iterator[Awaitable[Optional[SearchResult]]]:
        """Yield one awaitable per page; await each before pulling the next."""
        return self._pull(self._claim())

    def astream(self) -> AsyncIterator[SearchResult]:
        """Yield pages as they arrive until the scroll is exhausted."""
        return self._push(self._claim())

    def _pull(self, state: _ScrollState) -> Iterator[Awaitable[Optional[SearchResult]]]:
        prev: asyncio.Future = asyncio.ensure_future(self._guarded(state, self.head()))
        yield prev
        while True:
            if not prev.done():
                raise RuntimeError("Await the previous scroll page before requesting the next")
            if state.done:
                return
            prev = asyncio.ensure_future(self._next_page(state))
            yield prev

    async def _push(self, state: _ScrollState) -> AsyncIterator[SearchResult]:
        page = await self._guarded(state, self.head())
        while page is not None and not page.is_empty():
            yield page
            if state.done:
                return
            page = await self._next_page(state)
