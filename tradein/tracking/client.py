"""
Trade-In Client — Submission Tracking

Looks up a submission by reference number and hands back the server's view
of it. The timeline is used exactly as returned: each step's complete and
current flags are authoritative, and validate_timeline only reports server
data that breaks the canonical lifecycle, it never corrects it.

Canonical lifecycle:
    DRAFT → SUBMITTED → IN_TRANSIT → RECEIVED → GRADING → PENDING_APPROVAL
          → APPROVED → COMPLETED
    with CANCELLED / RETURNED as terminal branches.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import structlog
from pydantic import ValidationError

from tradein.api.client import TradeInAPIClient
from tradein.api.documents import build_packing_slip_url
from tradein.config import SubmissionStatus
from tradein.errors import FieldValidationError, TransportError
from tradein.tracking.models import TimelineStep, TrackingResult
from tradein.utils.validators import normalize_submission_number

logger = structlog.get_logger(__name__)

NOT_FOUND = "Submission not found"

CANONICAL_ORDER: list[SubmissionStatus] = [
    SubmissionStatus.DRAFT,
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.IN_TRANSIT,
    SubmissionStatus.RECEIVED,
    SubmissionStatus.GRADING,
    SubmissionStatus.PENDING_APPROVAL,
    SubmissionStatus.APPROVED,
    SubmissionStatus.COMPLETED,
]
TERMINAL_BRANCHES = {SubmissionStatus.CANCELLED, SubmissionStatus.RETURNED}


def validate_timeline(timeline: list[TimelineStep]) -> list[str]:
    """
    Check a server timeline against the canonical lifecycle.

    Returns:
        Anomaly codes, empty when the timeline is consistent. Each anomaly is
        also logged as a warning.
    """
    anomalies: list[str] = []
    last_rank = -1
    current_index: int | None = None

    for index, step in enumerate(timeline):
        try:
            status = SubmissionStatus(step.status)
        except ValueError:
            anomalies.append(f"unknown_status:{step.status}")
            continue

        if status == SubmissionStatus.DRAFT and index != 0:
            anomalies.append("draft_mid_timeline")
        elif status in TERMINAL_BRANCHES and index != len(timeline) - 1:
            anomalies.append(f"terminal_mid_timeline:{status.value}")
        elif status not in TERMINAL_BRANCHES:
            rank = CANONICAL_ORDER.index(status)
            if rank <= last_rank:
                anomalies.append(f"out_of_order:{status.value}")
            last_rank = max(last_rank, rank)

        if step.is_current:
            if current_index is not None:
                anomalies.append("multiple_current_steps")
            else:
                current_index = index

    if current_index is not None:
        for step in timeline[current_index + 1:]:
            if step.is_complete:
                anomalies.append(f"complete_after_current:{step.status}")

    for anomaly in anomalies:
        logger.warning("timeline_anomaly", anomaly=anomaly, steps=len(timeline))
    return anomalies


def number_from_query(url_or_query: str) -> str | None:
    """
    Submission number seeded from a tracking link's `number` parameter.

    >>> number_from_query("/pages/trade-in-track?number=ti-1")
    'TI-1'
    """
    query = urlsplit(url_or_query).query if "?" in url_or_query else url_or_query
    values = parse_qs(query).get("number")
    if not values:
        return None
    return normalize_submission_number(values[0]) or None


class TrackingClient:
    """
    Explicit, one-shot tracking lookups. Nothing polls.

    Usage:
        tracking = TrackingClient(api)
        result = await tracking.track("TI-2024-ABC123")
        if result.found:
            ...
    """

    def __init__(self, api: TradeInAPIClient):
        self._api = api
        self.current_number: str | None = None

    async def track(self, submission_number: str) -> TrackingResult:
        """
        Look up a submission.

        Raises:
            FieldValidationError: the number is blank.
            TransportError: the backend could not be reached (404 is treated
                as not-found instead).
        """
        number = normalize_submission_number(submission_number)
        if not number:
            raise FieldValidationError("number", "Please enter a submission number")

        try:
            data = await self._api.get_json("/track", params={"number": number})
        except TransportError as e:
            if e.status_code == 404:
                logger.info("tracking_not_found", number=number)
                return TrackingResult(found=False, error=e.message or NOT_FOUND)
            logger.error("tracking_failed", number=number, error=str(e))
            raise

        if not isinstance(data, dict) or not data.get("found"):
            error = data.get("error") if isinstance(data, dict) else None
            logger.info("tracking_not_found", number=number)
            return TrackingResult(found=False, error=error or NOT_FOUND)

        try:
            result = TrackingResult.model_validate(data)
        except ValidationError as e:
            logger.error("tracking_response_invalid", number=number, error=str(e))
            raise TransportError("An error occurred. Please try again.", cause=e) from e

        if result.submission is None:
            logger.error("tracking_response_missing_submission", number=number)
            raise TransportError("An error occurred. Please try again.")

        validate_timeline(result.timeline)
        self.current_number = result.submission.submission_number

        current = result.current_step
        logger.info(
            "tracking_loaded",
            number=self.current_number,
            status=result.submission.status,
            current_step=current.status if current else None,
            items=result.items_count,
        )
        return result

    def packing_slip_url(self) -> str | None:
        """Printable packing slip for the last successfully tracked submission."""
        if not self.current_number:
            return None
        return build_packing_slip_url(self.current_number, self._api.base_url)
