"""
Tests for the browse session (tradein/catalog/browse.py).
"""

from __future__ import annotations

import httpx
import pytest
import respx

from tradein.api.client import TradeInAPIClient
from tradein.catalog.browse import BrowseSession
from tradein.catalog.client import CatalogClient
from tradein.config import settings


def _page(total_pages: int = 3, current_page: int = 1) -> httpx.Response:
    return httpx.Response(
        200,
        json={"cards": [], "totalPages": total_pages, "currentPage": current_page, "totalCards": 30},
    )


def _mock_facets(mock: respx.MockRouter) -> tuple[respx.Route, respx.Route]:
    sets = mock.get("/cards/sets").mock(
        return_value=httpx.Response(200, json={"sets": [{"code": "OP01", "name": "Romance Dawn"}]})
    )
    languages = mock.get("/cards/languages").mock(
        return_value=httpx.Response(200, json={"languages": [{"code": "EN", "name": "English"}]})
    )
    return sets, languages


@pytest.mark.asyncio
async def test_start_loads_cards_and_facets(api: TradeInAPIClient) -> None:
    session = BrowseSession(CatalogClient(api))

    with respx.mock(base_url=settings.API_BASE_URL) as mock:
        mock.get("/cards/browse").mock(return_value=_page())
        _mock_facets(mock)
        page = await session.start()

    assert page.total_pages == 3
    assert session.total_pages == 3
    assert [s.code for s in session.sets] == ["OP01"]
    assert [lang.code for lang in session.languages] == ["EN"]


@pytest.mark.asyncio
async def test_facet_change_resets_to_first_page(api: TradeInAPIClient) -> None:
    session = BrowseSession(CatalogClient(api))
    session.current_page = 3
    session.total_pages = 3

    with respx.mock(base_url=settings.API_BASE_URL) as mock:
        route = mock.get("/cards/browse").mock(return_value=_page())
        await session.set_language("JP")

    params = route.calls.last.request.url.params
    assert session.current_page == 1
    assert params["page"] == "1"
    assert params["language"] == "JP"


@pytest.mark.asyncio
async def test_go_to_page_ignores_out_of_range(api: TradeInAPIClient) -> None:
    session = BrowseSession(CatalogClient(api))
    session.total_pages = 2

    with respx.mock(base_url=settings.API_BASE_URL) as mock:
        route = mock.get("/cards/browse").mock(return_value=_page(total_pages=2, current_page=2))
        assert await session.go_to_page(0) is None
        assert await session.go_to_page(3) is None
        page = await session.go_to_page(2)

    assert route.call_count == 1
    assert page.current_page == 2
    assert session.current_page == 2


@pytest.mark.asyncio
async def test_select_game_resets_and_refetches_facets(api: TradeInAPIClient) -> None:
    session = BrowseSession(CatalogClient(api), game="onepiece")
    session.language = "EN"
    session.set_code = "OP01"
    session.current_page = 2

    with respx.mock(base_url=settings.API_BASE_URL) as mock:
        browse = mock.get("/cards/browse").mock(return_value=_page())
        sets, _ = _mock_facets(mock)
        await session.start()
        await session.select_game("pokemon")

    params = browse.calls.last.request.url.params
    assert session.game == "pokemon"
    assert session.language == ""
    assert session.set_code == ""
    assert params["game"] == "pokemon"
    assert "language" not in params
    assert sets.call_count == 2


@pytest.mark.asyncio
async def test_select_same_game_is_noop(api: TradeInAPIClient) -> None:
    session = BrowseSession(CatalogClient(api), game="onepiece")

    with respx.mock(base_url=settings.API_BASE_URL, assert_all_called=False) as mock:
        route = mock.get("/cards/browse")
        assert await session.select_game("onepiece") is None

    assert not route.called
