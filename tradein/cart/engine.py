"""
Trade-In Client — Cart/Quote Engine

Owns the shopper's in-progress trade-in selection:

- add/remove/change-quantity/clear, with at most one line per
  (card_id, condition) pair
- price snapshot at add time (see pricing.price_of)
- totals and submission eligibility, always derived from the items
- versioned persistence to client storage

Every mutation persists immediately. Persistence is best-effort: a storage
failure is logged and the in-memory cart carries on unchanged.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import structlog
from pydantic import ValidationError

from tradein.cart.migrations import CartMigrator
from tradein.cart.models import CartItem, Eligibility, QuoteTotals
from tradein.cart.pricing import QuoteConfig, floor_minor, price_of
from tradein.cart.storage import KeyValueStorage
from tradein.catalog.models import CatalogCard
from tradein.config import ConditionCode, settings
from tradein.errors import PersistenceError

logger = structlog.get_logger(__name__)

_REQUIRED_FIELDS = ("cardId", "name", "condition")


def compute_totals(items: list[CartItem], store_credit_bonus: Decimal) -> QuoteTotals:
    """
    item_count = Σ quantity
    subtotal = Σ quantity × price_per_item
    store_credit_total = floor(subtotal × (1 + bonus))
    bank_total = subtotal
    """
    item_count = sum(item.quantity for item in items)
    subtotal = sum(item.line_total for item in items)
    return QuoteTotals(
        item_count=item_count,
        subtotal=subtotal,
        store_credit_total=floor_minor(Decimal(subtotal) * (Decimal("1") + store_credit_bonus)),
        bank_total=subtotal,
    )


def check_eligibility(items: list[CartItem], totals: QuoteTotals, minimum_value: int) -> Eligibility:
    """Eligible iff subtotal ≥ minimum, item_count ≤ 100 and every quantity ≤ 99."""
    reasons: list[str] = []
    shortfall = 0

    if totals.subtotal < minimum_value:
        reasons.append("below_minimum")
        shortfall = minimum_value - totals.subtotal
    if totals.item_count > settings.MAX_CART_ITEMS:
        reasons.append("too_many_items")
    if any(item.quantity > settings.MAX_ITEM_QUANTITY for item in items):
        reasons.append("quantity_over_limit")

    return Eligibility(eligible=not reasons, shortfall=shortfall, reasons=reasons)


class CartEngine:
    """
    The shopper's trade-in cart.

    Usage:
        cart = CartEngine(SqlAlchemyStorage())
        cart.load()
        cart.add_item(card, "NM", 2)
        cart.totals().store_credit_total
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        config: QuoteConfig | None = None,
        migrator: CartMigrator | None = None,
        version: int | None = None,
    ):
        self._storage = storage
        self.config = config or QuoteConfig()
        self._migrator = migrator or CartMigrator()
        self._version = str(version if version is not None else settings.CART_VERSION)
        self._cart_key = settings.CART_STORAGE_KEY
        self._version_key = settings.CART_VERSION_KEY
        self.items: list[CartItem] = []

    def __len__(self) -> int:
        return len(self.items)

    @property
    def version(self) -> str:
        return self._version

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    def serialize(self) -> str:
        return json.dumps(
            [item.model_dump(mode="json", by_alias=True) for item in self.items]
        )

    def save(self) -> bool:
        """Write the cart and version marker. Returns False (logged) on failure."""
        try:
            self._storage.set_item(self._cart_key, self.serialize())
            self._storage.set_item(self._version_key, self._version)
        except PersistenceError as e:
            logger.error("cart_save_failed", error=str(e), items=len(self.items))
            return False
        return True

    def _reset_storage(self) -> None:
        try:
            self._storage.remove_item(self._cart_key)
            self._storage.set_item(self._version_key, self._version)
        except PersistenceError as e:
            logger.error("cart_storage_reset_failed", error=str(e))

    def discard_persisted(self) -> None:
        """Remove the stored cart payload (after a successful submission)."""
        try:
            self._storage.remove_item(self._cart_key)
        except PersistenceError as e:
            logger.error("cart_storage_remove_failed", error=str(e))

    @staticmethod
    def _parse(raw: str | None) -> list[Any] | None:
        if raw is None:
            return None
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.error("cart_payload_unparseable", size=len(raw))
            return None
        if not isinstance(parsed, list):
            logger.error("cart_payload_not_a_list", payload_type=type(parsed).__name__)
            return None
        return parsed

    @staticmethod
    def _sanitize(raw_items: list[Any]) -> list[CartItem]:
        """Keep only items that carry identity fields and validate."""
        items: list[CartItem] = []
        for raw in raw_items:
            if not isinstance(raw, dict) or not all(raw.get(f) for f in _REQUIRED_FIELDS):
                logger.warning("cart_invalid_item_removed", item=str(raw)[:100])
                continue
            try:
                items.append(CartItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "cart_invalid_item_removed",
                    item=str(raw)[:100],
                    error=str(e),
                )
        return items

    def load(self) -> list[CartItem]:
        """
        Restore the cart from storage.

        - Version marker mismatch: hand the stored items to the migrator
          (default: discard) and stamp the current version.
        - Items missing cardId/name/condition are dropped, and the cleaned
          cart is written back immediately.
        - Unreadable storage or payload: start empty.
        """
        try:
            stored_version = self._storage.get_item(self._version_key)
            raw = self._storage.get_item(self._cart_key)
        except PersistenceError as e:
            logger.error("cart_load_failed", error=str(e))
            self.items = []
            return self.items

        if stored_version != self._version:
            migrated = self._migrator.migrate(stored_version, self._parse(raw))
            self.items = self._sanitize(migrated)
            if self.items:
                self.save()
            else:
                self._reset_storage()
            return self.items

        parsed = self._parse(raw)
        if parsed is None:
            self.items = []
            return self.items

        self.items = self._sanitize(parsed)
        if len(self.items) != len(parsed):
            self.save()

        logger.info("cart_loaded", items=len(self.items), version=self._version)
        return self.items

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    def find(self, card_id: str, condition: ConditionCode | str) -> int | None:
        code = ConditionCode(condition)
        for index, item in enumerate(self.items):
            if item.card_id == card_id and item.condition == code:
                return index
        return None

    def add_item(
        self,
        card: CatalogCard,
        condition: ConditionCode | str,
        quantity: int = 1,
    ) -> CartItem:
        """
        Add a card in a condition, merging into an existing line if present.

        Raises:
            ValueError: unknown condition code, or quantity outside 1..99.
        """
        code = ConditionCode(condition)
        if quantity < 1 or quantity > settings.MAX_ITEM_QUANTITY:
            raise ValueError(
                f"quantity must be between 1 and {settings.MAX_ITEM_QUANTITY}, got {quantity}"
            )

        index = self.find(card.card_id, code)
        if index is not None:
            item = self.items[index]
            item.quantity += quantity
            logger.info(
                "cart_item_merged",
                card_id=card.card_id,
                condition=code.value,
                quantity=item.quantity,
            )
        else:
            item = CartItem(
                card_id=card.card_id,
                name=card.name,
                set_label=card.display_set,
                set_code=card.set_code or None,
                variant_type=card.variant_type or None,
                image_url=card.image_url,
                condition=code,
                quantity=quantity,
                price_per_item=price_of(card, code, self.config),
                base_price=card.market_price,
            )
            self.items.append(item)
            logger.info(
                "cart_item_added",
                card_id=card.card_id,
                condition=code.value,
                quantity=quantity,
                price_per_item=item.price_per_item,
            )

        self.save()
        return item

    def remove_item(self, index: int) -> CartItem | None:
        if not 0 <= index < len(self.items):
            logger.warning("cart_remove_invalid_index", index=index, items=len(self.items))
            return None

        item = self.items.pop(index)
        logger.info("cart_item_removed", card_id=item.card_id, condition=item.condition.value)
        self.save()
        return item

    def change_quantity(self, index: int, delta: int) -> CartItem | None:
        """Adjust a line's quantity, clamped to [1, 99]. Never removes the line."""
        if not 0 <= index < len(self.items):
            logger.warning("cart_quantity_invalid_index", index=index, items=len(self.items))
            return None

        item = self.items[index]
        item.quantity = max(1, min(settings.MAX_ITEM_QUANTITY, item.quantity + delta))
        logger.info(
            "cart_quantity_changed",
            card_id=item.card_id,
            delta=delta,
            quantity=item.quantity,
        )
        self.save()
        return item

    def clear(self) -> None:
        self.items = []
        logger.info("cart_cleared")
        self.save()

    # -----------------------------------------------------------------------
    # Quote
    # -----------------------------------------------------------------------

    def totals(self) -> QuoteTotals:
        return compute_totals(self.items, self.config.store_credit_bonus)

    def eligibility(self) -> Eligibility:
        return check_eligibility(self.items, self.totals(), self.config.minimum_value)

    def free_shipping_shortfall(self) -> int:
        """Minor units still needed for free shipping (0 once reached)."""
        return max(0, self.config.free_shipping_threshold - self.totals().subtotal)
