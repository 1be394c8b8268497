"""
Trade-In Client — Display Formatting

Money is stored in minor units (pence) everywhere; only these helpers turn
it into display strings.
"""

from __future__ import annotations

from decimal import Decimal

from tradein.config import PayoutType, settings

_TWO_DP = Decimal("0.01")

_PAYOUT_LABELS = {
    PayoutType.STORE_CREDIT: "Store Credit",
    PayoutType.BANK: "Bank Transfer",
    PayoutType.PAYPAL: "PayPal",
}

ELLIPSIS = "..."


def format_price(minor_units: int) -> str:
    """4760 -> '£47.60'. Negative amounts keep their sign: -250 -> '-£2.50'."""
    amount = (Decimal(abs(minor_units)) / 100).quantize(_TWO_DP)
    sign = "-" if minor_units < 0 else ""
    return f"{sign}{settings.CURRENCY_SYMBOL}{amount}"


def format_payout_type(payout_type: str) -> str:
    """Human label for a payout type; unknown types pass through unchanged."""
    try:
        return _PAYOUT_LABELS[PayoutType(payout_type)]
    except ValueError:
        return payout_type


def pagination_window(current_page: int, total_pages: int) -> list[int | str]:
    """
    Page buttons to show: first, last, current and its neighbours, with
    ELLIPSIS standing in for each gap. Empty when there is only one page.

    >>> pagination_window(5, 10)
    [1, '...', 4, 5, 6, '...', 10]
    """
    if total_pages <= 1:
        return []

    pages: list[int | str] = []
    for page in range(1, total_pages + 1):
        if page in (1, total_pages) or current_page - 1 <= page <= current_page + 1:
            pages.append(page)
        elif pages[-1] != ELLIPSIS:
            pages.append(ELLIPSIS)
    return pages
