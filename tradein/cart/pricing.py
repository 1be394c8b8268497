"""
Trade-In Client — Quote Configuration & Price Resolution

Price rule (never double-discount):
1. If the catalog supplied a per-condition price, use it as-is. It already
   has the condition multiplier applied by the backend.
2. Otherwise price = floor(market_price × multiplier[condition]).

Quote settings (minimum value, store credit bonus, multiplier table) start
from config defaults and may be replaced once at startup by GET /settings.
A failed settings fetch leaves the defaults in place.

All money is integer minor units. Multipliers are Decimal, never float.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tradein.api.client import TradeInAPIClient
from tradein.catalog.models import CatalogCard
from tradein.config import ConditionCode, settings
from tradein.errors import TransportError

logger = structlog.get_logger(__name__)


def floor_minor(value: Decimal) -> int:
    """Round down to a whole minor unit."""
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


class ConditionInfo(BaseModel):
    """One row of the condition table shown in the condition picker."""

    code: str
    name: str = ""
    multiplier: Decimal

    @field_validator("multiplier", mode="before")
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal:
        """JSON floats go through str() so 0.55 stays 0.55."""
        try:
            return Decimal(str(v))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"invalid multiplier {v!r}") from e


class ReturnAddress(BaseModel):
    """Where shoppers post their cards."""

    model_config = ConfigDict(populate_by_name=True)

    company_name: str | None = Field(default=None, alias="companyName")
    address_line1: str | None = Field(default=None, alias="addressLine1")
    address_line2: str | None = Field(default=None, alias="addressLine2")
    city: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")

    def lines(self) -> list[str]:
        return [
            line
            for line in (
                self.company_name,
                self.address_line1,
                self.address_line2,
                self.city,
                self.postal_code,
            )
            if line
        ]


def _default_conditions() -> list[ConditionInfo]:
    return [
        ConditionInfo(code=code, name=settings.CONDITION_NAMES.get(code, code), multiplier=mult)
        for code, mult in settings.CONDITION_MULTIPLIERS.items()
    ]


class QuoteConfig(BaseModel):
    """Runtime quote settings. `loaded` is True once the server values arrived."""

    minimum_value: int = Field(default_factory=lambda: settings.DEFAULT_MINIMUM_VALUE)
    store_credit_bonus: Decimal = Field(default_factory=lambda: settings.DEFAULT_STORE_CREDIT_BONUS)
    free_shipping_threshold: int = Field(
        default_factory=lambda: settings.DEFAULT_FREE_SHIPPING_THRESHOLD
    )
    conditions: list[ConditionInfo] = Field(default_factory=_default_conditions)
    return_address: ReturnAddress | None = None
    loaded: bool = False

    def multiplier_for(self, condition: str) -> Decimal | None:
        for info in self.conditions:
            if info.code == condition:
                return info.multiplier
        return None

    def condition_name(self, condition: str) -> str:
        for info in self.conditions:
            if info.code == condition:
                return info.name or condition
        return condition


def _condition_value(condition: ConditionCode | str) -> str:
    return condition.value if isinstance(condition, ConditionCode) else str(condition)


def price_of(
    card: CatalogCard,
    condition: ConditionCode | str,
    config: QuoteConfig | None = None,
) -> int:
    """
    Resolve the per-item trade-in price for a card in a given condition.

    Args:
        card: Normalized catalog card.
        condition: Condition code (enum or raw "NM"/"LP"/...).
        config: Quote config supplying the fallback multiplier table.

    Returns:
        Price in minor units. 0 when neither a condition price nor a
        usable market price/multiplier exists.
    """
    code = _condition_value(condition)

    if card.condition_prices:
        for key, value in card.condition_prices.items():
            if _condition_value(key) == code:
                return value

    config = config or QuoteConfig()
    multiplier = config.multiplier_for(code)
    if multiplier is None or not card.market_price:
        logger.debug(
            "price_unresolved",
            card_id=card.card_id,
            condition=code,
            market_price=card.market_price,
        )
        return 0

    price = floor_minor(Decimal(card.market_price) * multiplier)
    logger.debug(
        "price_fallback_from_market",
        card_id=card.card_id,
        condition=code,
        market_price=card.market_price,
        multiplier=str(multiplier),
        price=price,
    )
    return price


def apply_settings(config: QuoteConfig, data: dict[str, Any]) -> QuoteConfig:
    """
    Overlay a /settings payload onto a config. Missing or malformed values
    keep the current value.
    """
    updates: dict[str, Any] = {"loaded": True}

    if isinstance(data.get("minimumValue"), int):
        updates["minimum_value"] = data["minimumValue"]
    if data.get("storeCreditBonus") is not None:
        try:
            updates["store_credit_bonus"] = Decimal(str(data["storeCreditBonus"]))
        except InvalidOperation:
            logger.warning("quote_config_invalid_bonus", value=str(data["storeCreditBonus"]))
    if isinstance(data.get("freeShippingThreshold"), int):
        updates["free_shipping_threshold"] = data["freeShippingThreshold"]

    raw_conditions = data.get("conditions")
    if isinstance(raw_conditions, list) and raw_conditions:
        try:
            updates["conditions"] = [ConditionInfo.model_validate(c) for c in raw_conditions]
        except ValidationError as e:
            logger.warning("quote_config_invalid_conditions", error=str(e))

    if isinstance(data.get("returnAddress"), dict):
        try:
            updates["return_address"] = ReturnAddress.model_validate(data["returnAddress"])
        except ValidationError as e:
            logger.warning("quote_config_invalid_return_address", error=str(e))

    return config.model_copy(update=updates)


async def load_quote_config(api: TradeInAPIClient) -> QuoteConfig:
    """
    One-time startup fetch of quote settings.

    Never raises: on any transport failure the defaults remain in effect so
    the cart stays usable.
    """
    config = QuoteConfig()
    try:
        data = await api.get_json("/settings")
    except TransportError as e:
        logger.warning("quote_config_load_failed_using_defaults", error=str(e))
        return config

    if not isinstance(data, dict):
        logger.warning("quote_config_unexpected_payload_using_defaults")
        return config

    config = apply_settings(config, data)
    logger.info(
        "quote_config_loaded",
        minimum_value=config.minimum_value,
        store_credit_bonus=str(config.store_credit_bonus),
        conditions=[c.code for c in config.conditions],
    )
    return config
