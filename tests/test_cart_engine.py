"""
Tests for the cart/quote engine (tradein/cart/engine.py).

Covers:
- add/merge/remove/change-quantity/clear
- price snapshot at add time
- totals, store credit bonus, eligibility, free shipping shortfall
- persistence round trip, version reset, migration, sanitization
- best-effort persistence when storage fails
"""

from __future__ import annotations

import json
from typing import Callable

import pytest

from tradein.cart.engine import CartEngine, check_eligibility, compute_totals
from tradein.cart.migrations import CartMigrator
from tradein.cart.models import CartItem
from tradein.cart.storage import MemoryStorage
from tradein.catalog.models import CatalogCard
from tradein.config import ConditionCode, settings
from tradein.errors import PersistenceError


class FailingStorage(MemoryStorage):
    """Reads work, writes fail."""

    def set_item(self, key: str, value: str) -> None:
        raise PersistenceError(f"write failed for key '{key}'")

    def remove_item(self, key: str) -> None:
        raise PersistenceError(f"remove failed for key '{key}'")


def _item(card_id: str, price: int, quantity: int = 1, condition: str = "NM") -> CartItem:
    return CartItem(
        card_id=card_id,
        name=f"Card {card_id}",
        condition=ConditionCode(condition),
        quantity=quantity,
        price_per_item=price,
    )


# ---------------------------------------------------------------------------
# Test 1: Adding and merging
# ---------------------------------------------------------------------------


def test_add_item_snapshots_price(cart: CartEngine, make_card: Callable[..., CatalogCard]) -> None:
    item = cart.add_item(make_card(market_price=1000), "LP", 2)

    assert item.price_per_item == 550
    assert item.base_price == 1000
    assert item.set_label == "OP01-001"
    assert item.quantity == 2
    assert len(cart) == 1


def test_re_add_same_condition_merges(cart: CartEngine, make_card: Callable[..., CatalogCard]) -> None:
    card = make_card()
    cart.add_item(card, "NM", 1)
    cart.add_item(card, "NM", 3)

    assert len(cart) == 1
    assert cart.items[0].quantity == 4


def test_different_condition_is_separate_line(
    cart: CartEngine, make_card: Callable[..., CatalogCard]
) -> None:
    card = make_card()
    cart.add_item(card, "NM")
    cart.add_item(card, "HP")

    assert [i.condition for i in cart.items] == [ConditionCode.NEAR_MINT, ConditionCode.HEAVILY_PLAYED]


def test_merge_keeps_original_price(cart: CartEngine, make_card: Callable[..., CatalogCard]) -> None:
    cart.add_item(make_card(market_price=1000), "NM")
    cart.add_item(make_card(market_price=2000), "NM")

    assert cart.items[0].price_per_item == 700
    assert cart.items[0].quantity == 2


@pytest.mark.parametrize("quantity", [0, -1, 100])
def test_add_item_rejects_bad_quantity(
    cart: CartEngine, make_card: Callable[..., CatalogCard], quantity: int
) -> None:
    with pytest.raises(ValueError):
        cart.add_item(make_card(), "NM", quantity)
    assert len(cart) == 0


def test_add_item_rejects_unknown_condition(
    cart: CartEngine, make_card: Callable[..., CatalogCard]
) -> None:
    with pytest.raises(ValueError):
        cart.add_item(make_card(), "MINT")


# ---------------------------------------------------------------------------
# Test 2: Quantity clamping and removal
# ---------------------------------------------------------------------------


def test_change_quantity_clamps(cart: CartEngine, make_card: Callable[..., CatalogCard]) -> None:
    cart.add_item(make_card(), "NM", 1)

    cart.change_quantity(0, -5)
    assert cart.items[0].quantity == 1

    cart.change_quantity(0, 1000)
    assert cart.items[0].quantity == 99


def test_change_quantity_invalid_index(cart: CartEngine) -> None:
    assert cart.change_quantity(3, 1) is None


def test_remove_item(cart: CartEngine, make_card: Callable[..., CatalogCard]) -> None:
    cart.add_item(make_card(card_id="a"), "NM")
    cart.add_item(make_card(card_id="b"), "NM")

    removed = cart.remove_item(0)

    assert removed.card_id == "a"
    assert [i.card_id for i in cart.items] == ["b"]
    assert cart.remove_item(5) is None


def test_clear(cart: CartEngine, storage: MemoryStorage, make_card: Callable[..., CatalogCard]) -> None:
    cart.add_item(make_card(), "NM")
    cart.clear()

    assert cart.items == []
    assert json.loads(storage.data[settings.CART_STORAGE_KEY]) == []


# ---------------------------------------------------------------------------
# Test 3: Totals and eligibility
# ---------------------------------------------------------------------------


def test_store_credit_bonus_floored(cart: CartEngine) -> None:
    cart.items = [_item("a", 4760, 2)]

    totals = cart.totals()

    assert totals.subtotal == 9520
    assert totals.bank_total == 9520
    assert totals.store_credit_total == 10472
    assert totals.item_count == 2


def test_compute_totals_empty() -> None:
    totals = compute_totals([], settings.DEFAULT_STORE_CREDIT_BONUS)

    assert totals.subtotal == 0
    assert totals.store_credit_total == 0


def test_below_minimum_shortfall(cart: CartEngine) -> None:
    cart.items = [_item("a", 240, 2)]

    eligibility = cart.eligibility()

    assert not eligibility.eligible
    assert eligibility.shortfall == 20
    assert eligibility.reasons == ["below_minimum"]


def test_exactly_minimum_is_eligible(cart: CartEngine) -> None:
    cart.items = [_item("a", 500)]

    assert cart.eligibility().eligible


def test_too_many_items() -> None:
    items = [_item(str(i), 100, 99) for i in range(2)]
    totals = compute_totals(items, settings.DEFAULT_STORE_CREDIT_BONUS)

    eligibility = check_eligibility(items, totals, 500)

    assert "too_many_items" in eligibility.reasons


def test_merged_quantity_over_limit_blocks_submission(
    cart: CartEngine, make_card: Callable[..., CatalogCard]
) -> None:
    card = make_card(market_price=1000)
    cart.add_item(card, "NM", 60)
    cart.add_item(card, "NM", 60)

    eligibility = cart.eligibility()

    assert cart.items[0].quantity == 120
    assert "quantity_over_limit" in eligibility.reasons


def test_free_shipping_shortfall(cart: CartEngine) -> None:
    cart.items = [_item("a", 1500, 2)]
    assert cart.free_shipping_shortfall() == 2000

    cart.items = [_item("a", 6000)]
    assert cart.free_shipping_shortfall() == 0


# ---------------------------------------------------------------------------
# Test 4: Persistence
# ---------------------------------------------------------------------------


def test_round_trip(storage: MemoryStorage, make_card: Callable[..., CatalogCard]) -> None:
    first = CartEngine(storage)
    first.add_item(make_card(card_id="a"), "NM", 2)
    first.add_item(make_card(card_id="b", market_price=500), "DMG", 1)

    second = CartEngine(storage)
    second.load()

    assert second.items == first.items
    assert storage.data[settings.CART_VERSION_KEY] == str(settings.CART_VERSION)


def test_serialized_shape_uses_storage_names(
    cart: CartEngine, storage: MemoryStorage, make_card: Callable[..., CatalogCard]
) -> None:
    cart.add_item(make_card(), "NM")

    stored = json.loads(storage.data[settings.CART_STORAGE_KEY])[0]

    assert stored["cardId"] == "op01-001"
    assert stored["pricePerItem"] == 700
    assert stored["condition"] == "NM"


def test_version_mismatch_wipes_cart() -> None:
    storage = MemoryStorage(
        {
            settings.CART_STORAGE_KEY: json.dumps([{"cardId": "a", "name": "Old", "condition": "NM"}]),
            settings.CART_VERSION_KEY: "1",
        }
    )
    cart = CartEngine(storage)

    assert cart.load() == []
    assert settings.CART_STORAGE_KEY not in storage.data
    assert storage.data[settings.CART_VERSION_KEY] == str(settings.CART_VERSION)


def test_missing_version_wipes_cart() -> None:
    storage = MemoryStorage(
        {settings.CART_STORAGE_KEY: json.dumps([{"cardId": "a", "name": "Old", "condition": "NM"}])}
    )

    assert CartEngine(storage).load() == []


def test_registered_migration_upgrades_items() -> None:
    migrator = CartMigrator()

    @migrator.register(1)
    def from_v1(items: list[dict]) -> list[dict]:
        return [{**item, "pricePerItem": item.pop("price")} for item in items]

    storage = MemoryStorage(
        {
            settings.CART_STORAGE_KEY: json.dumps(
                [{"cardId": "a", "name": "Old", "condition": "LP", "price": 320, "quantity": 2}]
            ),
            settings.CART_VERSION_KEY: "1",
        }
    )
    cart = CartEngine(storage, migrator=migrator)

    items = cart.load()

    assert items[0].price_per_item == 320
    assert items[0].quantity == 2
    assert storage.data[settings.CART_VERSION_KEY] == str(settings.CART_VERSION)


def test_invalid_items_dropped_and_resaved() -> None:
    stored = [
        {"cardId": "a", "name": "Good", "condition": "NM", "quantity": 1, "pricePerItem": 100},
        {"cardId": "b", "name": "", "condition": "NM"},
        {"name": "No id", "condition": "NM"},
        {"cardId": "c", "name": "Bad condition", "condition": "MINT"},
    ]
    storage = MemoryStorage(
        {
            settings.CART_STORAGE_KEY: json.dumps(stored),
            settings.CART_VERSION_KEY: str(settings.CART_VERSION),
        }
    )

    items = CartEngine(storage).load()

    assert [i.card_id for i in items] == ["a"]
    assert len(json.loads(storage.data[settings.CART_STORAGE_KEY])) == 1


def test_unparseable_payload_starts_empty() -> None:
    storage = MemoryStorage(
        {
            settings.CART_STORAGE_KEY: "{not json",
            settings.CART_VERSION_KEY: str(settings.CART_VERSION),
        }
    )

    assert CartEngine(storage).load() == []


def test_storage_failure_keeps_in_memory_cart(make_card: Callable[..., CatalogCard]) -> None:
    cart = CartEngine(FailingStorage())

    cart.add_item(make_card(), "NM", 2)
    cart.change_quantity(0, 1)

    assert cart.items[0].quantity == 3
    assert cart.save() is False


def test_discard_persisted(cart: CartEngine, storage: MemoryStorage, make_card: Callable[..., CatalogCard]) -> None:
    cart.add_item(make_card(), "NM")

    cart.discard_persisted()

    assert settings.CART_STORAGE_KEY not in storage.data
