"""Error taxonomy for booking operations.

Internal layers raise :class:`BookingError`; the public service boundary
catches it and hands callers a :class:`BookingFailure` instead.  Anything
that is not a ``BookingError`` is a genuine bug and propagates.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel


class ErrorCategory(str, enum.Enum):
    AUTH_FAILURE = "auth_failure"
    SESSION_EXPIRED = "session_expired"
    BOOKING_CONFLICT = "booking_conflict"
    VALIDATION_ERROR = "validation_error"
    NETWORK_ERROR = "network_error"
    SYSTEM_ERROR = "system_error"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"


# Short messages for riders, written for a Grade 6 reading level.
PLAIN_LANGUAGE_ERRORS: dict[ErrorCategory, str] = {
    ErrorCategory.AUTH_FAILURE: (
        "Could not log in. Please check your client ID and passcode."
    ),
    ErrorCategory.SESSION_EXPIRED: "Your session ended. Please log in again.",
    ErrorCategory.BOOKING_CONFLICT: (
        "That time is not available. Please try a different time."
    ),
    ErrorCategory.VALIDATION_ERROR: (
        "Something was not right with your request. Please check the details and try again."
    ),
    ErrorCategory.NETWORK_ERROR: (
        "Could not connect to the booking service. Please try again."
    ),
    ErrorCategory.SYSTEM_ERROR: "Something went wrong. Please try again later.",
    ErrorCategory.BUSINESS_RULE_VIOLATION: (
        "This request does not follow the booking rules. Please check the times."
    ),
}


def plain_language_error(category: ErrorCategory) -> str:
    """Return the rider-facing message for an error category."""
    return PLAIN_LANGUAGE_ERRORS[category]


class BookingFailure(BaseModel):
    """Typed failure returned across the public boundary."""

    model_config = {"frozen": True}

    category: ErrorCategory
    message: str
    recoverable: bool
    step: Optional[str] = None        # "create" | "schedule" | "save" when inside the transaction
    booking_id: Optional[str] = None  # draft possibly left on the backend

    @property
    def plain_language_message(self) -> str:
        return plain_language_error(self.category)


class BookingError(Exception):
    """Raised inside the package; converted to :class:`BookingFailure` at the edge."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        recoverable: bool = True,
        *,
        step: str | None = None,
        booking_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.message = message
        self.recoverable = recoverable
        self.step = step
        self.booking_id = booking_id

    def __repr__(self) -> str:
        return (
            f"BookingError(category={self.category.value!r}, "
            f"message={self.message!r}, step={self.step!r})"
        )

    def to_failure(self) -> BookingFailure:
        return BookingFailure(
            category=self.category,
            message=self.message,
            recoverable=self.recoverable,
            step=self.step,
            booking_id=self.booking_id,
        )

