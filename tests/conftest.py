"""
Trade-In Client — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Backend API client (HTTP intercepted with respx per test)
- In-memory client storage and a cart bound to it
- Catalog card factories in both backend response shapes
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Callable

import pytest

from tradein.api.client import TradeInAPIClient
from tradein.cart.engine import CartEngine
from tradein.cart.storage import MemoryStorage
from tradein.catalog.models import CatalogCard
from tradein.config import ConditionCode, settings

BASE_URL = settings.API_BASE_URL


# ---------------------------------------------------------------------------
# Backend Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def api() -> AsyncGenerator[TradeInAPIClient, None]:
    """
    Opened backend client. Tests wrap calls in `respx.mock(base_url=BASE_URL)`
    so nothing reaches a live API.
    """
    async with TradeInAPIClient(base_url=BASE_URL) as client:
        yield client


# ---------------------------------------------------------------------------
# Storage & Cart Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def cart(storage: MemoryStorage) -> CartEngine:
    """Empty cart on fresh in-memory storage with default quote settings."""
    engine = CartEngine(storage)
    engine.load()
    return engine


# ---------------------------------------------------------------------------
# Card Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_card() -> Callable[..., CatalogCard]:
    """Build a normalized CatalogCard with sensible defaults."""

    def _make(
        card_id: str = "op01-001",
        name: str = "Monkey D. Luffy",
        market_price: int = 1000,
        condition_prices: dict[ConditionCode, int] | None = None,
        **overrides: Any,
    ) -> CatalogCard:
        fields: dict[str, Any] = {
            "card_id": card_id,
            "name": name,
            "set_code": "OP01",
            "card_number": "001",
            "full_card_number": "OP01-001",
            "market_price": market_price,
            "condition_prices": condition_prices,
        }
        fields.update(overrides)
        return CatalogCard(**fields)

    return _make


@pytest.fixture
def search_card_payload() -> dict[str, Any]:
    """Raw card as returned by /cards/search."""
    return {
        "id": "cp-1001",
        "cardName": "Roronoa Zoro",
        "setName": "OP01",
        "cardNumber": "025",
        "variant": "Alt Art",
        "rarity": "SR",
        "imageUrl": "https://cdn.example.com/op01-025.png",
        "bestPriceGbp": 2400,
        "prices": {"NM": 1680, "LP": 1320, "MP": 960, "HP": 600, "DMG": 240},
    }


@pytest.fixture
def browse_card_payload() -> dict[str, Any]:
    """Raw card as returned by /cards/browse."""
    return {
        "cardId": "cp-2002",
        "name": "Nami",
        "setCode": "OP02",
        "cardNumber": "036",
        "variantType": "Normal",
        "prices": {
            "market": 800,
            "tradein": {"NM": 560, "LP": 440, "MP": 320, "HP": 200, "DMG": 80},
        },
    }
