"""
Tests for request lanes and debounced search (tradein/catalog/lanes.py).

Covers:
- A newer request in a lane supersedes the outstanding one
- Independent lanes do not cancel each other
- Debounce: only the trailing query of a burst reaches the catalog
- Short queries hide results without a request
- Transport errors reach on_error
"""

from __future__ import annotations

import asyncio

import pytest

from tradein.catalog.lanes import DebouncedSearch, RequestLane
from tradein.catalog.models import SearchResult
from tradein.errors import RequestCancelled, TransportError


class FakeCatalog:
    """Records queries; optionally fails."""

    def __init__(self, fail: bool = False) -> None:
        self.queries: list[str] = []
        self.fail = fail

    async def search(self, query: str) -> SearchResult | None:
        self.queries.append(query)
        if self.fail:
            raise TransportError("Request failed. Please try again.", status_code=500)
        return SearchResult(query=query, cards=[], count=0)


async def _until_in_flight(lane: RequestLane) -> None:
    while not lane.in_flight:
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Test 1: Last request wins
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_superseded_request_is_cancelled() -> None:
    """The first request never delivers once a second one starts."""
    lane = RequestLane("search")
    gate = asyncio.Event()

    async def slow() -> str:
        await gate.wait()
        return "stale"

    async def fast() -> str:
        return "fresh"

    first = asyncio.create_task(lane.run(slow))
    await _until_in_flight(lane)

    assert await lane.run(fast) == "fresh"
    with pytest.raises(RequestCancelled):
        await first


@pytest.mark.asyncio
async def test_lanes_are_independent() -> None:
    search = RequestLane("search")
    browse = RequestLane("browse")
    gate = asyncio.Event()

    async def waits() -> str:
        await gate.wait()
        return "browse page"

    async def immediate() -> str:
        return "search results"

    browse_task = asyncio.create_task(browse.run(waits))
    await _until_in_flight(browse)

    assert await search.run(immediate) == "search results"
    gate.set()
    assert await browse_task == "browse page"


@pytest.mark.asyncio
async def test_cancel_without_in_flight_request() -> None:
    lane = RequestLane("browse")
    lane.cancel()

    async def value() -> int:
        return 7

    assert await lane.run(value) == 7
    assert not lane.in_flight


# ---------------------------------------------------------------------------
# Test 2: Debounce
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_debounce_only_trailing_query_searched() -> None:
    catalog = FakeCatalog()
    delivered: list[SearchResult | None] = []
    debounced = DebouncedSearch(catalog, delivered.append, delay_ms=10)

    debounced.trigger("lu")
    debounced.trigger("luf")
    last = debounced.trigger("luffy ")
    await last

    assert catalog.queries == ["luffy"]
    assert len(delivered) == 1
    assert delivered[0].query == "luffy"


@pytest.mark.asyncio
async def test_debounce_short_query_hides_results() -> None:
    catalog = FakeCatalog()
    delivered: list[SearchResult | None] = []
    debounced = DebouncedSearch(catalog, delivered.append, delay_ms=0)

    await debounced.trigger("l")

    assert catalog.queries == []
    assert delivered == [None]


@pytest.mark.asyncio
async def test_debounce_error_reported() -> None:
    catalog = FakeCatalog(fail=True)
    delivered: list[SearchResult | None] = []
    errors: list[TransportError] = []
    debounced = DebouncedSearch(catalog, delivered.append, on_error=errors.append, delay_ms=0)

    await debounced.trigger("zoro")

    assert delivered == []
    assert len(errors) == 1
    assert errors[0].status_code == 500
