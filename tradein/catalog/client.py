"""
Trade-In Client — Catalog Client

Search, browse and facet lookups against the trade-in backend.

- search / full_search share the search lane; browse has its own lane.
  A superseded request returns None and must not be rendered.
- Sets and languages are cached (5 minutes, keyed by full request) and
  degrade to an empty list on failure.
"""

from __future__ import annotations

from typing import Any

import structlog

from tradein.api.client import TradeInAPIClient
from tradein.catalog.cache import TTLCache, request_key
from tradein.catalog.lanes import RequestLane
from tradein.catalog.models import BrowsePage, CardLanguage, CardSet, SearchResult
from tradein.catalog.normalize import normalize_cards
from tradein.config import settings
from tradein.errors import RequestCancelled, TransportError

logger = structlog.get_logger(__name__)


class CatalogClient:
    """
    Catalog queries with cancellation lanes and a reference-data cache.

    Usage:
        async with TradeInAPIClient() as api:
            catalog = CatalogClient(api)
            result = await catalog.search("luffy")
            if result is not None:
                render(result.cards)
    """

    def __init__(self, api: TradeInAPIClient, cache: TTLCache | None = None):
        self._api = api
        self._cache = cache if cache is not None else TTLCache()
        self.search_lane = RequestLane("search")
        self.browse_lane = RequestLane("browse")

    # -----------------------------------------------------------------------
    # Search lane
    # -----------------------------------------------------------------------

    async def search(self, query: str, limit: int | None = None) -> SearchResult | None:
        """
        Search cards by name.

        Returns:
            SearchResult, or None when the query is below the minimum length
            or the request was superseded by a newer search.

        Raises:
            TransportError: if the backend request fails.
        """
        query = query.strip()
        if len(query) < settings.SEARCH_MIN_LENGTH:
            logger.debug("catalog_search_skipped_short_query", length=len(query))
            return None

        params = {"q": query, "limit": limit or settings.SEARCH_LIMIT}
        logger.info("catalog_search", query=query, limit=params["limit"])

        try:
            data = await self.search_lane.run(
                lambda: self._api.get_json("/cards/search", params=params)
            )
        except RequestCancelled:
            logger.debug("catalog_search_superseded", query=query)
            return None

        data = data if isinstance(data, dict) else {}
        # Older backends answer with `results` instead of `cards`.
        raw_cards = data.get("cards") or data.get("results") or []
        cards = normalize_cards(raw_cards, endpoint="search")
        count = data.get("count")

        logger.info("catalog_search_complete", query=query, results_count=len(cards))
        return SearchResult(
            query=query,
            cards=cards,
            count=count if isinstance(count, int) else len(cards),
        )

    async def full_search(self, query: str) -> SearchResult | None:
        """'Show all matches' search, used for the browse grid."""
        return await self.search(query, limit=settings.FULL_SEARCH_LIMIT)

    # -----------------------------------------------------------------------
    # Browse lane
    # -----------------------------------------------------------------------

    async def browse(
        self,
        page: int = 1,
        game: str | None = None,
        language: str = "",
        set_code: str = "",
        limit: int | None = None,
    ) -> BrowsePage | None:
        """
        Fetch one page of the catalog filtered by facets.

        Returns:
            BrowsePage, or None if superseded by a newer browse request.

        Raises:
            TransportError: if the backend request fails.
        """
        params: dict[str, Any] = {
            "page": page,
            "limit": limit or settings.BROWSE_PAGE_SIZE,
            "game": game or settings.DEFAULT_GAME,
        }
        if language:
            params["language"] = language
        if set_code:
            params["set"] = set_code

        logger.info("catalog_browse", **params)

        try:
            data = await self.browse_lane.run(
                lambda: self._api.get_json("/cards/browse", params=params)
            )
        except RequestCancelled:
            logger.debug("catalog_browse_superseded", page=page)
            return None

        data = data if isinstance(data, dict) else {}
        cards = normalize_cards(data.get("cards") or [], endpoint="browse")

        browse_page = BrowsePage(
            cards=cards,
            total_pages=max(int(data.get("totalPages") or 1), 1),
            current_page=int(data.get("currentPage") or page),
            total_cards=int(data.get("totalCards") or len(cards)),
        )
        logger.info(
            "catalog_browse_complete",
            page=browse_page.current_page,
            total_pages=browse_page.total_pages,
            results_count=len(cards),
        )
        return browse_page

    # -----------------------------------------------------------------------
    # Reference data (cached)
    # -----------------------------------------------------------------------

    async def _get_cached(self, path: str, params: dict[str, Any]) -> Any:
        key = request_key(path, params)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        data = await self._api.get_json(path, params=params)
        self._cache.set(key, data)
        return data

    async def list_sets(self, game: str | None = None) -> list[CardSet]:
        """Sets for a game. Failures are logged and yield an empty list."""
        params = {"game": game or settings.DEFAULT_GAME}
        try:
            data = await self._get_cached("/cards/sets", params)
        except TransportError as e:
            logger.error("catalog_sets_failed", game=params["game"], error=str(e))
            return []

        raw_sets = data.get("sets", []) if isinstance(data, dict) else []
        return [CardSet.model_validate(s) for s in raw_sets if isinstance(s, dict) and s.get("code")]

    async def list_languages(self, game: str | None = None) -> list[CardLanguage]:
        """Languages for a game. Failures are logged and yield an empty list."""
        params = {"game": game or settings.DEFAULT_GAME}
        try:
            data = await self._get_cached("/cards/languages", params)
        except TransportError as e:
            logger.error("catalog_languages_failed", game=params["game"], error=str(e))
            return []

        raw_languages = data.get("languages", []) if isinstance(data, dict) else []
        return [
            CardLanguage.model_validate(lang)
            for lang in raw_languages
            if isinstance(lang, dict) and lang.get("code")
        ]

    def refresh(self) -> None:
        """User-initiated refresh: forget all cached reference data."""
        self._cache.invalidate()
