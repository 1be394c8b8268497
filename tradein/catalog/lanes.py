"""
Trade-In Client — Cancellable Request Lanes & Debounced Search

A lane allows one in-flight request. Starting a new request cancels the
previous one, and a superseded request never yields a result, even if its
response already arrived (last-request-wins, not last-response-wins).

Search and browse each get their own lane, so typing never cancels a page
load and vice versa.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

import structlog

from tradein.config import settings
from tradein.errors import RequestCancelled, TransportError

if TYPE_CHECKING:
    from tradein.catalog.client import CatalogClient
    from tradein.catalog.models import SearchResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RequestLane:
    """
    One-in-flight request slot.

    Usage:
        lane = RequestLane("search")
        result = await lane.run(lambda: api.get_json("/cards/search", params))
    """

    def __init__(self, name: str):
        self.name = name
        self._current: asyncio.Task[Any] | None = None
        self._generation = 0

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    def cancel(self) -> None:
        """Cancel whatever is in flight. Its caller gets RequestCancelled."""
        self._generation += 1
        if self._current is not None and not self._current.done():
            self._current.cancel()
            logger.debug("lane_request_cancelled", lane=self.name)

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run a request in this lane, superseding any request already in it.

        Raises:
            RequestCancelled: if a newer request started before this one's
                result could be delivered.
        """
        self.cancel()
        generation = self._generation
        task: asyncio.Task[T] = asyncio.ensure_future(factory())
        self._current = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                raise RequestCancelled(self.name) from None
            # The caller itself was cancelled, not superseded.
            raise

        if generation != self._generation:
            logger.debug("lane_stale_result_discarded", lane=self.name)
            raise RequestCancelled(self.name)
        return result


class DebouncedSearch:
    """
    Search-as-you-type scheduler.

    Each trigger() restarts the debounce timer; only the trailing keystroke in
    a burst reaches the network. Results are handed to `on_results` only when
    they belong to the latest triggered query. `on_results(None)` means "hide
    the results dropdown" (query too short).
    """

    def __init__(
        self,
        catalog: CatalogClient,
        on_results: Callable[[SearchResult | None], None],
        on_error: Callable[[TransportError], None] | None = None,
        delay_ms: int | None = None,
        min_length: int | None = None,
    ):
        self._catalog = catalog
        self._on_results = on_results
        self._on_error = on_error
        self._delay = (delay_ms if delay_ms is not None else settings.SEARCH_DEBOUNCE_MS) / 1000
        self._min_length = min_length if min_length is not None else settings.SEARCH_MIN_LENGTH
        self._pending: asyncio.Task[None] | None = None
        self._latest_query: str | None = None

    @property
    def pending(self) -> asyncio.Task[None] | None:
        return self._pending

    def trigger(self, query: str) -> asyncio.Task[None]:
        """Schedule a search for `query`, replacing any pending one."""
        query = query.strip()
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

        self._latest_query = query
        self._pending = asyncio.get_running_loop().create_task(self._fire(query))
        return self._pending

    async def _fire(self, query: str) -> None:
        await asyncio.sleep(self._delay)

        if len(query) < self._min_length:
            self._on_results(None)
            return

        try:
            result = await self._catalog.search(query)
        except TransportError as e:
            if query == self._latest_query and self._on_error is not None:
                self._on_error(e)
            return

        if result is None or query != self._latest_query:
            return
        self._on_results(result)
