"""
Trade-In Client — Submission Document Links

Packing slips and shipping instructions are printable documents rendered by
the backend; this client only links to them. The tracking link points at
the storefront tracking page, pre-seeded with the submission number.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

import structlog

from tradein.config import settings

logger = structlog.get_logger(__name__)


def build_tracking_url(submission_number: str, page_path: str | None = None) -> str:
    path = page_path or settings.TRACKING_PAGE_PATH
    return f"{path}?{urlencode({'number': submission_number})}"


def build_packing_slip_url(submission_number: str, api_base: str | None = None) -> str:
    base = (api_base or settings.API_BASE_URL).rstrip("/")
    return f"{base}/packing-slip/{quote(submission_number)}"


def build_shipping_instructions_url(submission_number: str, api_base: str | None = None) -> str:
    base = (api_base or settings.API_BASE_URL).rstrip("/")
    return f"{base}/shipping-instructions/{quote(submission_number)}"


def build_submission_links(
    submission_number: str,
    api_base: str | None = None,
) -> dict[str, str]:
    """
    All links shown after a successful submission.

    Returns:
        Dict with "tracking_url", "packing_slip_url" and
        "shipping_instructions_url" keys.
    """
    links = {
        "tracking_url": build_tracking_url(submission_number),
        "packing_slip_url": build_packing_slip_url(submission_number, api_base),
        "shipping_instructions_url": build_shipping_instructions_url(submission_number, api_base),
    }
    logger.debug("submission_links_built", submission_number=submission_number)
    return links
