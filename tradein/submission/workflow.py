"""
Trade-In Client — Submission Workflow

One attempt runs IDLE → VALIDATING → SUBMITTING → SUCCESS | FAILED.

- Validation failures and ineligible carts stop before the network.
- On success the cart and its stored copy are cleared, and the tracking,
  packing-slip and shipping-instruction links are derived from the
  submission number.
- On failure the cart is untouched and the shopper can simply retry.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tradein.api.client import TradeInAPIClient
from tradein.api.documents import build_submission_links
from tradein.cart.engine import CartEngine
from tradein.cart.models import QuoteTotals
from tradein.cart.pricing import QuoteConfig, ReturnAddress
from tradein.config import PayoutType
from tradein.errors import FieldValidationError, TransportError
from tradein.submission.validation import SubmissionForm, validate_form
from tradein.utils.formatters import format_payout_type, format_price

logger = structlog.get_logger(__name__)

GENERIC_FAILURE = "Submission failed. Please try again."
ADDRESS_FALLBACK = "See confirmation email for shipping address"


class SubmissionState(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class CreatedSubmission(BaseModel):
    """
    The backend's answer to POST /submissions. Only the number is required;
    once it is present the submission exists server-side, whatever else the
    body carries.
    """

    model_config = ConfigDict(populate_by_name=True)

    submission_number: str = Field(..., alias="submissionNumber", min_length=1)
    status: str | None = None
    quoted_total: int | None = Field(default=None, alias="quotedTotal")
    bonus_amount: int | None = Field(default=None, alias="bonusAmount")
    items: list[Any] | None = None


class SubmissionSummary(BaseModel):
    """What the confirmation screen shows."""

    item_count: int
    payout_total: int
    payout_label: str


class SubmissionOutcome(BaseModel):
    state: SubmissionState
    submission: CreatedSubmission | None = None
    links: dict[str, str] = Field(default_factory=dict)
    summary: SubmissionSummary | None = None
    error_message: str | None = None
    error_field: str | None = None  # field to focus after a validation failure


def payout_label(payout_type: PayoutType, store_credit_bonus: Decimal) -> str:
    """'Store Credit (+10%)' or the plain payout name."""
    if payout_type != PayoutType.STORE_CREDIT:
        return format_payout_type(payout_type.value)

    percent = store_credit_bonus * 100
    if percent == percent.to_integral_value():
        shown = str(int(percent))
    else:
        shown = str(percent.normalize())
    return f"{format_payout_type(payout_type.value)} (+{shown}%)"


def summarize(totals: QuoteTotals, payout_type: PayoutType, config: QuoteConfig) -> SubmissionSummary:
    payout_total = (
        totals.store_credit_total if payout_type == PayoutType.STORE_CREDIT else totals.subtotal
    )
    return SubmissionSummary(
        item_count=totals.item_count,
        payout_total=payout_total,
        payout_label=payout_label(payout_type, config.store_credit_bonus),
    )


class SubmissionWorkflow:
    """
    Posts the cart to the backend for fulfillment.

    Usage:
        workflow = SubmissionWorkflow(api, cart)
        outcome = await workflow.submit(form)
        if outcome.state is SubmissionState.SUCCESS:
            show(outcome.submission.submission_number, outcome.links)
    """

    def __init__(self, api: TradeInAPIClient, cart: CartEngine):
        self._api = api
        self._cart = cart
        self.state = SubmissionState.IDLE

    def build_payload(self, form: SubmissionForm) -> dict[str, Any]:
        """
        Request body for POST /submissions. Expects an already validated form.
        Bank fields are only sent for BANK payouts.
        """
        payload: dict[str, Any] = {
            "email": form.email,
            "firstName": form.first_name,
            "lastName": form.last_name,
            "payoutType": form.payout_type.value,
            "shopifyCustomerId": form.shopify_customer_id,
            "phone": form.phone,
            "contactChannel": form.contact_channel,
            "items": [
                {
                    "cardPriceId": item.card_id,
                    "cardName": item.name,
                    "setName": item.set_label or "Unknown",
                    "setCode": item.set_code,
                    "variant": item.variant_type,
                    "conditionClaimed": item.condition.value,
                    "quantity": item.quantity,
                }
                for item in self._cart.items
            ],
        }
        if form.payout_type == PayoutType.BANK:
            payload["bankAccountName"] = form.bank_account_name
            payload["bankSortCode"] = form.bank_sort_code
            payload["bankAccountNumber"] = form.bank_account_number
        return payload

    def _failed(self, message: str, field: str | None = None) -> SubmissionOutcome:
        self.state = SubmissionState.FAILED
        return SubmissionOutcome(
            state=SubmissionState.FAILED,
            error_message=message,
            error_field=field,
        )

    def _check_cart(self) -> str | None:
        if not self._cart.items:
            return "Your trade-in is empty. Add some cards first."

        eligibility = self._cart.eligibility()
        if eligibility.eligible:
            return None
        if "below_minimum" in eligibility.reasons:
            return (
                f"Add {format_price(eligibility.shortfall)} more to meet the "
                f"{format_price(self._cart.config.minimum_value)} minimum"
            )
        return "Your trade-in exceeds the maximum number of cards per submission"

    async def submit(self, form: SubmissionForm) -> SubmissionOutcome:
        """Run one submission attempt. Never raises for expected failures."""
        if self.state == SubmissionState.SUBMITTING:
            logger.warning("submission_already_in_progress")
            return SubmissionOutcome(
                state=SubmissionState.SUBMITTING,
                error_message="Submission already in progress",
            )

        self.state = SubmissionState.VALIDATING

        cart_problem = self._check_cart()
        if cart_problem is not None:
            logger.info("submission_cart_ineligible", items=len(self._cart.items))
            return self._failed(cart_problem)

        try:
            form = validate_form(form)
        except FieldValidationError as e:
            return self._failed(e.message, field=e.field)

        self.state = SubmissionState.SUBMITTING
        try:
            return await self._post(form)
        finally:
            if self.state == SubmissionState.SUBMITTING:
                # Cancelled or crashed mid-request; the cart is untouched.
                self.state = SubmissionState.FAILED

    async def _post(self, form: SubmissionForm) -> SubmissionOutcome:
        payload = self.build_payload(form)
        totals = self._cart.totals()
        logger.info(
            "submission_posting",
            items=len(payload["items"]),
            item_count=totals.item_count,
            payout_type=form.payout_type.value,
        )

        try:
            data = await self._api.post_json("/submissions", payload)
        except TransportError as e:
            logger.error("submission_failed", status_code=e.status_code, error=e.message)
            return self._failed(e.message or GENERIC_FAILURE)

        try:
            created = CreatedSubmission.model_validate(data)
        except ValidationError as e:
            logger.error("submission_response_invalid", error=str(e))
            return self._failed(GENERIC_FAILURE)

        summary = summarize(totals, form.payout_type, self._cart.config)
        self._cart.clear()
        self._cart.discard_persisted()
        self.state = SubmissionState.SUCCESS

        logger.info(
            "submission_created",
            submission_number=created.submission_number,
            quoted_total=created.quoted_total,
        )
        return SubmissionOutcome(
            state=SubmissionState.SUCCESS,
            submission=created,
            links=build_submission_links(created.submission_number, self._api.base_url),
            summary=summary,
        )

    def reset(self) -> None:
        """Start a new submission (the 'submit another' action)."""
        self.state = SubmissionState.IDLE

    async def ship_to_address(self) -> list[str]:
        """
        Address lines the shopper posts their cards to, fresh from /settings.
        Falls back to a pointer at the confirmation email.
        """
        try:
            data = await self._api.get_json("/settings")
        except TransportError as e:
            logger.warning("return_address_load_failed", error=str(e))
            return [ADDRESS_FALLBACK]

        raw = data.get("returnAddress") if isinstance(data, dict) else None
        if not isinstance(raw, dict):
            return [ADDRESS_FALLBACK]

        try:
            lines = ReturnAddress.model_validate(raw).lines()
        except ValidationError as e:
            logger.warning("return_address_invalid", error=str(e))
            return [ADDRESS_FALLBACK]
        return lines or [ADDRESS_FALLBACK]
