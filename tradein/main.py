"""
Trade-In Client — Command Line Entrypoint

Configures structlog and runs one catalog, cart or tracking command against
the trade-in backend.

Run via:
    python -m tradein.main search "luffy"
    python -m tradein.main browse --game onepiece --page 2
    python -m tradein.main sets
    python -m tradein.main languages
    python -m tradein.main cart
    python -m tradein.main track TI-2024-ABC123
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

import structlog

from tradein.api.client import TradeInAPIClient
from tradein.cart.engine import CartEngine
from tradein.cart.pricing import load_quote_config
from tradein.cart.storage import SqlAlchemyStorage
from tradein.catalog.browse import BrowseSession
from tradein.catalog.client import CatalogClient
from tradein.catalog.models import CatalogCard
from tradein.config import settings
from tradein.errors import FieldValidationError, TradeInError
from tradein.tracking.client import TrackingClient
from tradein.tracking.models import TrackingResult
from tradein.utils.formatters import format_payout_type, format_price, pagination_window


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output on stderr, leaving stdout for
    command output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper())

    # Configure stdlib logging first (for third-party libraries)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _print_cards(cards: list[CatalogCard]) -> None:
    for card in cards:
        number = f" [{card.full_card_number}]" if card.full_card_number else ""
        print(f"{card.card_id}  {card.name}{number}  {card.display_set}  {format_price(card.market_price)}")


def _print_tracking(result: TrackingResult) -> None:
    submission = result.submission
    print(f"{submission.submission_number}  {submission.status_label or submission.status}")
    if submission.status_description:
        print(submission.status_description)

    for step in result.timeline:
        mark = "x" if step.is_complete else " "
        current = "  <- current" if step.is_current else ""
        print(f"  [{mark}] {step.label or step.status}{current}")

    print(f"Items: {result.items_count}")
    print(f"Quoted total: {format_price(submission.quoted_total)}")
    print(f"Payout: {format_payout_type(submission.payout_type)}")
    if submission.show_bonus:
        print(f"Bonus: +{format_price(submission.bonus_amount)}")

    grading = result.grading_results
    if grading is not None:
        print(f"Original total: {format_price(grading.original_total)}")
        print(f"Final total: {format_price(grading.adjusted_total)}")
        if grading.show_adjustment_row:
            print(
                f"Adjustment: {format_price(grading.adjustment)} "
                f"({grading.adjusted_item_count} items adjusted)"
            )

    for item in result.items:
        status = f"  {item.status}" if item.show_status else ""
        set_code = f"{item.set_code} · " if item.set_code else ""
        print(
            f"  {item.card_name}  {set_code}{item.quantity}x · {item.condition_label}  "
            f"{format_price(item.display_total)}{status}"
        )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _cmd_search(api: TradeInAPIClient, args: argparse.Namespace) -> int:
    catalog = CatalogClient(api)
    result = await (catalog.full_search(args.query) if args.full else catalog.search(args.query))
    if result is None:
        print(f"Enter at least {settings.SEARCH_MIN_LENGTH} characters to search")
        return 1
    _print_cards(result.cards)
    print(f"{result.count} result(s)")
    return 0


async def _cmd_browse(api: TradeInAPIClient, args: argparse.Namespace) -> int:
    session = BrowseSession(CatalogClient(api), game=args.game)
    session.language = args.language
    session.set_code = args.set_code
    session.current_page = max(1, args.page)
    page = await session.load_cards()
    if page is None:
        return 1
    _print_cards(page.cards)
    window = " ".join(str(p) for p in pagination_window(page.current_page, page.total_pages))
    print(f"Page {page.current_page} of {page.total_pages} ({page.total_cards} cards)  {window}")
    return 0


async def _cmd_sets(api: TradeInAPIClient, args: argparse.Namespace) -> int:
    for card_set in await CatalogClient(api).list_sets(args.game):
        print(f"{card_set.code}  {card_set.name}  ({card_set.card_count})")
    return 0


async def _cmd_languages(api: TradeInAPIClient, args: argparse.Namespace) -> int:
    for language in await CatalogClient(api).list_languages(args.game):
        print(f"{language.code}  {language.name}  ({language.card_count})")
    return 0


async def _cmd_cart(api: TradeInAPIClient, args: argparse.Namespace) -> int:
    storage = SqlAlchemyStorage(database_url=args.database_url)
    try:
        cart = CartEngine(storage, config=await load_quote_config(api))
        cart.load()
        for item in cart.items:
            print(
                f"{item.quantity}x {item.name} ({item.condition.value})  "
                f"{format_price(item.price_per_item)}  {format_price(item.line_total)}"
            )
        totals = cart.totals()
        eligibility = cart.eligibility()
        print(f"Items: {totals.item_count}")
        print(f"Bank transfer: {format_price(totals.bank_total)}")
        print(f"Store credit: {format_price(totals.store_credit_total)}")
        if eligibility.shortfall:
            print(f"Add {format_price(eligibility.shortfall)} more to submit")
        shipping = cart.free_shipping_shortfall()
        if shipping:
            print(f"{format_price(shipping)} away from free shipping")
    finally:
        storage.dispose()
    return 0


async def _cmd_track(api: TradeInAPIClient, args: argparse.Namespace) -> int:
    tracking = TrackingClient(api)
    result = await tracking.track(args.number)
    if not result.found:
        print(result.error)
        return 1
    _print_tracking(result)
    print(f"Packing slip: {tracking.packing_slip_url()}")
    return 0


COMMANDS = {
    "search": _cmd_search,
    "browse": _cmd_browse,
    "sets": _cmd_sets,
    "languages": _cmd_languages,
    "cart": _cmd_cart,
    "track": _cmd_track,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradein", description="Trade-in quote client")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--base-url", default=None, help="override TRADEIN_API_BASE_URL")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="search the catalog by name or number")
    search.add_argument("query")
    search.add_argument("--full", action="store_true", help="return the full result set")

    browse = sub.add_parser("browse", help="page through the catalog")
    browse.add_argument("--game", default=settings.DEFAULT_GAME)
    browse.add_argument("--language", default="")
    browse.add_argument("--set", dest="set_code", default="")
    browse.add_argument("--page", type=int, default=1)

    for name in ("sets", "languages"):
        facet = sub.add_parser(name, help=f"list catalog {name}")
        facet.add_argument("--game", default=settings.DEFAULT_GAME)

    cart = sub.add_parser("cart", help="show the saved cart and its quote")
    cart.add_argument("--database-url", default=None)

    track = sub.add_parser("track", help="track a submission by number")
    track.add_argument("number")

    return parser


async def run(args: argparse.Namespace) -> int:
    logger = structlog.get_logger(__name__)
    async with TradeInAPIClient(base_url=args.base_url) as api:
        try:
            return await COMMANDS[args.command](api, args)
        except FieldValidationError as e:
            print(e.message)
            return 2
        except TradeInError as e:
            logger.error("tradein_command_failed", command=args.command, error=str(e))
            print(e.message)
            return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(log_level=args.log_level)
    return asyncio.run(run(args))


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    sys.exit(main())
