"""
Trade-In Client — Card Normalization Boundary

The backend exposes (at least) two card shapes:

    search:  {id, cardName, setName, bestPriceGbp, prices: {NM, LP, MP, HP, DMG}}
    browse:  {cardId, name, setCode, prices: {market, tradein: {NM, ...}}}

Newer backends send `byCondition` instead of `tradein`. Everything is folded
into one CatalogCard here, regardless of the endpoint it came from.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from tradein.catalog.models import CatalogCard
from tradein.config import ConditionCode

logger = structlog.get_logger(__name__)

_NESTED_PRICE_KEYS = ("tradein", "byCondition")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    """First truthy value among field-name aliases."""
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def _extract_condition_map(prices: Mapping[str, Any]) -> dict[ConditionCode, int]:
    return {
        code: int(prices[code.value])
        for code in ConditionCode
        if _is_number(prices.get(code.value))
    }


def extract_condition_prices(raw: Mapping[str, Any]) -> dict[ConditionCode, int] | None:
    """
    Fold either pricing shape into a per-condition price map.

    A shape only counts when its NM price is numeric, matching what the
    backend guarantees for fully priced cards.
    """
    prices = raw.get("prices")
    if not isinstance(prices, Mapping):
        return None

    if _is_number(prices.get(ConditionCode.NEAR_MINT.value)):
        return _extract_condition_map(prices)

    for key in _NESTED_PRICE_KEYS:
        nested = prices.get(key)
        if isinstance(nested, Mapping) and _is_number(nested.get(ConditionCode.NEAR_MINT.value)):
            return _extract_condition_map(nested)

    return None


def extract_market_price(raw: Mapping[str, Any]) -> int:
    best = raw.get("bestPriceGbp")
    if _is_number(best):
        return int(best)
    prices = raw.get("prices")
    if isinstance(prices, Mapping) and _is_number(prices.get("market")):
        return int(prices["market"])
    return 0


def compose_full_card_number(set_code: str, card_number: str) -> str:
    """'OP01' + '001' -> 'OP01-001'; no number -> just the set code."""
    if card_number:
        return f"{set_code}-{card_number}"
    return set_code


def normalize_card(raw: Mapping[str, Any]) -> CatalogCard:
    """
    Normalize one raw card payload from any catalog endpoint.

    Raises:
        ValueError: if the payload carries no card identifier at all.
    """
    card_id = _first(raw, "cardId", "id")
    if card_id is None:
        raise ValueError("card payload has no cardId/id")

    set_code = str(_first(raw, "setCode", "setName") or "")
    card_number = str(raw.get("cardNumber") or "")

    return CatalogCard(
        card_id=str(card_id),
        name=str(_first(raw, "name", "cardName") or ""),
        set_code=set_code,
        card_number=card_number,
        variant_type=str(_first(raw, "variantType", "variant") or ""),
        full_card_number=compose_full_card_number(set_code, card_number),
        rarity=str(raw.get("rarity") or ""),
        image_url=raw.get("imageUrl") or None,
        market_price=extract_market_price(raw),
        condition_prices=extract_condition_prices(raw),
    )


def normalize_cards(raw_cards: Any, endpoint: str) -> list[CatalogCard]:
    """Normalize a list of raw cards, skipping (and logging) unusable entries."""
    if not isinstance(raw_cards, list):
        return []

    cards: list[CatalogCard] = []
    for raw in raw_cards:
        if not isinstance(raw, Mapping):
            continue
        try:
            cards.append(normalize_card(raw))
        except ValueError as e:
            logger.warning(
                "catalog_card_skipped",
                endpoint=endpoint,
                error=str(e),
                card_data=str(raw)[:100],
            )
    return cards
