"""
Trade-In Client — Canonical Catalog Records

Every catalog endpoint answers in its own shape. These are the only shapes
the rest of the package ever sees; normalize.py is the single boundary that
produces them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tradein.config import ConditionCode


class CatalogCard(BaseModel):
    """
    One card as offered for trade-in.

    Immutable once fetched. All prices are integer minor units (pence).
    `condition_prices` already has the condition multiplier applied by the
    backend; it is None when the endpoint did not supply per-condition prices.
    """

    model_config = ConfigDict(frozen=True)

    card_id: str = Field(..., description="Backend card price identifier")
    name: str = Field(default="", description="Display name")
    set_code: str = Field(default="", description="Set code (e.g., 'OP01')")
    card_number: str = Field(default="", description="Number within set")
    variant_type: str = Field(default="", description="Variant tag (e.g., 'Alt Art')")
    full_card_number: str = Field(default="", description="'<set>-<number>' or just '<set>'")
    rarity: str = Field(default="")
    image_url: str | None = Field(default=None)
    market_price: int = Field(default=0, description="Reference market price")
    condition_prices: dict[ConditionCode, int] | None = Field(default=None)

    @property
    def display_set(self) -> str:
        return self.full_card_number or self.set_code


class CardSet(BaseModel):
    """Set facet entry from /cards/sets."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    name: str = ""
    card_count: int = Field(default=0, alias="cardCount")


class CardLanguage(BaseModel):
    """Language facet entry from /cards/languages."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    name: str = ""
    card_count: int = Field(default=0, alias="cardCount")


class SearchResult(BaseModel):
    """Normalized /cards/search response."""

    query: str
    cards: list[CatalogCard] = Field(default_factory=list)
    count: int = 0


class BrowsePage(BaseModel):
    """Normalized /cards/browse response."""

    cards: list[CatalogCard] = Field(default_factory=list)
    total_pages: int = 1
    current_page: int = 1
    total_cards: int = 0
