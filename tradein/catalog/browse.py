"""
Trade-In Client — Browse Session

Holds the shopper's browse facets (game, language, set) and pagination,
and reloads the grid through the catalog's browse lane when they change.
"""

from __future__ import annotations

import asyncio

import structlog

from tradein.catalog.client import CatalogClient
from tradein.catalog.models import BrowsePage, CardLanguage, CardSet
from tradein.config import settings

logger = structlog.get_logger(__name__)


class BrowseSession:
    """
    Facet and page state for the browse grid.

    Every loader returns the fresh page, or None when the load was superseded
    by a newer one (in which case the caller must keep the current grid).
    """

    def __init__(self, catalog: CatalogClient, game: str | None = None):
        self._catalog = catalog
        self.game = game or settings.DEFAULT_GAME
        self.language = ""
        self.set_code = ""
        self.current_page = 1
        self.total_pages = 1
        self.sets: list[CardSet] = []
        self.languages: list[CardLanguage] = []

    async def load_cards(self) -> BrowsePage | None:
        page = await self._catalog.browse(
            page=self.current_page,
            game=self.game,
            language=self.language,
            set_code=self.set_code,
        )
        if page is not None:
            self.total_pages = page.total_pages
        return page

    async def load_facets(self) -> None:
        self.sets, self.languages = await asyncio.gather(
            self._catalog.list_sets(self.game),
            self._catalog.list_languages(self.game),
        )

    async def start(self) -> BrowsePage | None:
        """Initial load: first page plus facet lists, concurrently."""
        page, _ = await asyncio.gather(self.load_cards(), self.load_facets())
        return page

    async def select_game(self, game: str) -> BrowsePage | None:
        """Switch game: resets facets and page, and drops cached reference data."""
        if game == self.game:
            return None

        logger.info("browse_game_selected", previous=self.game, game=game)
        self.game = game
        self.language = ""
        self.set_code = ""
        self.current_page = 1
        self._catalog.refresh()
        return await self.start()

    async def set_language(self, language: str) -> BrowsePage | None:
        self.language = language
        self.current_page = 1
        return await self.load_cards()

    async def set_set(self, set_code: str) -> BrowsePage | None:
        self.set_code = set_code
        self.current_page = 1
        return await self.load_cards()

    async def go_to_page(self, page: int) -> BrowsePage | None:
        """Navigate within 1..total_pages; out-of-range pages are ignored."""
        if page < 1 or page > self.total_pages:
            logger.debug("browse_page_out_of_range", page=page, total_pages=self.total_pages)
            return None
        self.current_page = page
        return await self.load_cards()

    async def refresh(self) -> BrowsePage | None:
        """User-initiated refresh: invalidate cache, back to page 1, reload all."""
        self._catalog.refresh()
        self.current_page = 1
        return await self.start()
