"""
Trade-In Client — Error Taxonomy

Nothing here is fatal to a session. Callers turn each error back into an
interactive, retryable state:

- RequestCancelled: a newer request superseded this one. Silent.
- TransportError: network or HTTP failure, optionally with a server message.
- FieldValidationError: a form field failed validation. Never hits the network.
- PersistenceError: durable storage failed. Logged only.

Not-found tracking lookups are results (TrackingResult.found is False), not errors.
"""

from __future__ import annotations


class TradeInError(Exception):
    """Base class for trade-in client errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class RequestCancelled(TradeInError):
    """A lane request was superseded by a newer one before it completed."""

    def __init__(self, lane: str):
        super().__init__(f"request cancelled in lane '{lane}'")
        self.lane = lane


class TransportError(TradeInError):
    """The backend could not be reached or answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code

    def __str__(self) -> str:
        # Shown verbatim in the failure banner, so no cause suffix.
        return self.message


class FieldValidationError(TradeInError):
    """A submission form field is missing or malformed."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class PersistenceError(TradeInError):
    """Reading or writing durable client storage failed."""
