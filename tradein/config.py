"""
Trade-In Client — Configuration & Constants

Every threshold, default and endpoint lives here. Quote values (minimum,
store credit bonus, condition multipliers) are only *defaults*: the backend
may override them at startup via GET /settings (see cart/pricing.py).

Usage:
    from tradein.config import settings
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ConditionCode(str, Enum):
    """Card condition grades accepted for trade-in."""
    NEAR_MINT = "NM"
    LIGHTLY_PLAYED = "LP"
    MODERATELY_PLAYED = "MP"
    HEAVILY_PLAYED = "HP"
    DAMAGED = "DMG"


class PayoutType(str, Enum):
    """How the shopper is paid once the submission is approved."""
    STORE_CREDIT = "STORE_CREDIT"
    BANK = "BANK"
    PAYPAL = "PAYPAL"  # legacy submissions only


class SubmissionStatus(str, Enum):
    """Backend lifecycle states of a submission."""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_TRANSIT = "IN_TRANSIT"
    RECEIVED = "RECEIVED"
    GRADING = "GRADING"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for the trade-in client.

    Loads from environment variables (prefixed TRADEIN_) with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "TRADEIN_"}

    # -----------------------------------------------------------------------
    # Backend
    # -----------------------------------------------------------------------
    API_BASE_URL: str = "https://shop.example.com/apps/trade-in"
    TRACKING_PAGE_PATH: str = "/pages/trade-in-track"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # -----------------------------------------------------------------------
    # Catalog
    # -----------------------------------------------------------------------
    SEARCH_MIN_LENGTH: int = 2
    SEARCH_DEBOUNCE_MS: int = 300
    SEARCH_LIMIT: int = 10
    FULL_SEARCH_LIMIT: int = 50
    BROWSE_PAGE_SIZE: int = 12
    DEFAULT_GAME: str = "onepiece"
    CACHE_TTL_SECONDS: int = 300  # 5 minutes

    # -----------------------------------------------------------------------
    # Cart persistence
    # -----------------------------------------------------------------------
    CART_STORAGE_KEY: str = "tradeInCart"
    CART_VERSION_KEY: str = "tradeInCartVersion"
    CART_VERSION: int = 2  # bump when the serialized CartItem shape changes
    STORAGE_DATABASE_URL: str = "sqlite:///tradein_client.db"

    # -----------------------------------------------------------------------
    # Quote defaults (all money in minor units, i.e. pence)
    # -----------------------------------------------------------------------
    DEFAULT_MINIMUM_VALUE: int = 500               # £5
    DEFAULT_STORE_CREDIT_BONUS: Decimal = Decimal("0.10")
    DEFAULT_FREE_SHIPPING_THRESHOLD: int = 5000    # £50
    MAX_ITEM_QUANTITY: int = 99
    MAX_CART_ITEMS: int = 100
    CURRENCY_SYMBOL: str = "£"

    CONDITION_MULTIPLIERS: dict[str, Decimal] = {
        "NM": Decimal("0.70"),
        "LP": Decimal("0.55"),
        "MP": Decimal("0.40"),
        "HP": Decimal("0.25"),
        "DMG": Decimal("0.10"),
    }
    CONDITION_NAMES: dict[str, str] = {
        "NM": "Near Mint",
        "LP": "Lightly Played",
        "MP": "Moderately Played",
        "HP": "Heavily Played",
        "DMG": "Damaged",
    }


# Singleton instance
settings = Settings()
