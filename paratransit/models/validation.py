"""Result type shared by the booking-window and cancellation validators."""

from typing import Optional

from pydantic import BaseModel


class ValidationResult(BaseModel):
    """Outcome of a local rule check, computed before any backend call."""

    model_config = {"frozen": True}

    valid: bool
    warning: Optional[str] = None
    error: Optional[str] = None
    minutes_until_trip: Optional[int] = None  # cancellation checks only
