"""
Trade-In Client — Tracking View Models

Read-only projections of GET /track. The server owns every value here; the
properties below only decide what to show, never what the status is.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

_ALIASED = ConfigDict(populate_by_name=True)


class _NullTolerant(BaseModel):
    """Explicit JSON nulls on defaulted fields fall back to the field default."""

    model_config = _ALIASED

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return v


class TrackedSubmission(_NullTolerant):
    submission_number: str = Field(..., alias="submissionNumber")
    status: str
    status_label: str = Field(default="", alias="statusLabel")
    status_description: str = Field(default="", alias="statusDescription")
    payout_type: str = Field(default="", alias="payoutType")
    item_count: int = Field(default=0, alias="itemCount")
    quoted_total: int = Field(default=0, alias="quotedTotal")
    final_total: int | None = Field(default=None, alias="finalTotal")
    bonus_amount: int | None = Field(default=None, alias="bonusAmount")

    @property
    def show_bonus(self) -> bool:
        return bool(self.bonus_amount and self.bonus_amount > 0)


class SubmissionItem(_NullTolerant):
    card_name: str = Field(..., alias="cardName")
    set_code: str | None = Field(default=None, alias="setCode")
    quantity: int = 1
    condition_claimed: str = Field(..., alias="conditionClaimed")
    condition_actual: str | None = Field(default=None, alias="conditionActual")
    quoted_price: int = Field(default=0, alias="quotedPrice")
    final_price: int | None = Field(default=None, alias="finalPrice")
    status: str = "PENDING"

    @property
    def display_price(self) -> int:
        return self.final_price if self.final_price is not None else self.quoted_price

    @property
    def has_adjustment(self) -> bool:
        return self.final_price is not None and self.final_price != self.quoted_price

    @property
    def display_total(self) -> int:
        return self.display_price * self.quantity

    @property
    def condition_label(self) -> str:
        """'NM', or 'NM → LP' when grading found a different condition."""
        if self.condition_actual and self.condition_actual != self.condition_claimed:
            return f"{self.condition_claimed} → {self.condition_actual}"
        return self.condition_claimed

    @property
    def show_status(self) -> bool:
        return self.status != "PENDING"


class TimelineStep(_NullTolerant):
    status: str
    label: str = ""
    is_complete: bool = Field(default=False, alias="isComplete")
    is_current: bool = Field(default=False, alias="isCurrent")


class GradingResults(_NullTolerant):
    original_total: int = Field(default=0, alias="originalTotal")
    adjusted_total: int = Field(default=0, alias="adjustedTotal")
    adjusted_item_count: int = Field(default=0, alias="adjustedItemCount")
    has_adjustments: bool = Field(default=False, alias="hasAdjustments")

    @property
    def adjustment(self) -> int:
        """Negative when grading lowered the payout."""
        return self.adjusted_total - self.original_total

    @property
    def show_adjustment_row(self) -> bool:
        return self.has_adjustments


class TrackingResult(_NullTolerant):
    """One answer from GET /track. `found=False` is terminal for the query."""

    found: bool
    error: str | None = None
    submission: TrackedSubmission | None = None
    timeline: list[TimelineStep] = Field(default_factory=list)
    items: list[SubmissionItem] = Field(default_factory=list)
    grading_results: GradingResults | None = Field(default=None, alias="gradingResults")

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def current_step(self) -> TimelineStep | None:
        for step in self.timeline:
            if step.is_current:
                return step
        return None

    @property
    def completed_statuses(self) -> list[str]:
        return [step.status for step in self.timeline if step.is_complete]
