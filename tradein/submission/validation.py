"""
Trade-In Client — Submission Form Validation

Checked in this order; the first failure stops the submission and names the
field to focus:

1. email present
2. phone present
3. contact channel selected
4. BANK payout only: account holder name, 6-digit sort code, 8-digit
   account number (separators stripped before checking)

Validation never touches the network.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel

from tradein.config import PayoutType
from tradein.errors import FieldValidationError
from tradein.utils.validators import (
    is_valid_account_number,
    is_valid_sort_code,
    normalize_account_number,
    normalize_sort_code,
)

logger = structlog.get_logger(__name__)


class SubmissionForm(BaseModel):
    """Contact and payout details as entered by the shopper."""

    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    contact_channel: str = ""
    payout_type: PayoutType = PayoutType.STORE_CREDIT
    shopify_customer_id: str | None = None
    bank_account_name: str = ""
    bank_sort_code: str = ""
    bank_account_number: str = ""

    def normalized(self) -> SubmissionForm:
        """Trimmed copy with bank fields stripped of separators."""
        return self.model_copy(
            update={
                "email": self.email.strip(),
                "first_name": self.first_name.strip(),
                "last_name": self.last_name.strip(),
                "phone": self.phone.strip(),
                "contact_channel": self.contact_channel.strip(),
                "bank_account_name": self.bank_account_name.strip(),
                "bank_sort_code": normalize_sort_code(self.bank_sort_code),
                "bank_account_number": normalize_account_number(self.bank_account_number),
            }
        )


def _fail(field: str, message: str) -> FieldValidationError:
    logger.info("submission_field_invalid", field=field)
    return FieldValidationError(field, message)


def validate_form(form: SubmissionForm) -> SubmissionForm:
    """
    Normalize and validate a submission form.

    Returns:
        The normalized form, ready to transmit.

    Raises:
        FieldValidationError: for the first invalid field, in form order.
    """
    form = form.normalized()

    if not form.email:
        raise _fail("email", "Please enter your email address")
    if not form.phone:
        raise _fail("phone", "Please enter your phone number")
    if not form.contact_channel:
        raise _fail("contact_channel", "Please select a contact method")

    if form.payout_type == PayoutType.BANK:
        if not form.bank_account_name:
            raise _fail(
                "bank_account_name",
                "Please enter the account holder name for bank transfer",
            )
        if not is_valid_sort_code(form.bank_sort_code):
            raise _fail(
                "bank_sort_code",
                "Please enter a valid 6-digit sort code (e.g. 12-34-56)",
            )
        if not is_valid_account_number(form.bank_account_number):
            raise _fail("bank_account_number", "Please enter a valid 8-digit account number")

    return form
