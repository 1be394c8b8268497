"""
Trade-In Client — Cart Records

CartItem is serialized with the camelCase field names used in client
storage, so carts written by older sessions of the same version load as-is.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tradein.config import ConditionCode


class CartItem(BaseModel):
    """
    One (card, condition) line in the cart.

    `price_per_item` is a snapshot taken at add time and is never recomputed,
    even if catalog prices change later.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    card_id: str = Field(..., alias="cardId", min_length=1)
    name: str = Field(..., min_length=1)
    set_label: str = Field(default="", alias="set")
    set_code: str | None = Field(default=None, alias="setCode")
    variant_type: str | None = Field(default=None, alias="variantType")
    image_url: str | None = Field(default=None, alias="imageUrl")
    condition: ConditionCode
    quantity: int = Field(default=1, ge=1)
    price_per_item: int = Field(default=0, ge=0, alias="pricePerItem")
    base_price: int = Field(default=0, alias="basePriceGbp")

    @property
    def line_total(self) -> int:
        return self.quantity * self.price_per_item


class QuoteTotals(BaseModel):
    """Derived from the cart on every read. Never stored."""

    model_config = ConfigDict(frozen=True)

    item_count: int = 0
    subtotal: int = 0
    store_credit_total: int = 0
    bank_total: int = 0


class Eligibility(BaseModel):
    """Whether the cart may be submitted, and why not."""

    model_config = ConfigDict(frozen=True)

    eligible: bool
    shortfall: int = 0  # minimum_value - subtotal, when below the minimum
    reasons: list[str] = Field(default_factory=list)
