"""Models for the booking transaction: intent, draft, solutions, confirmation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, Field

MobilityDevice = Literal["wheelchair", "scooter", "walker", "none"]
PassengerType = Literal["escort", "pca", "guest"]


class AdditionalPassenger(BaseModel):
    """Companion travelling with the client."""

    model_config = {"frozen": True}

    type: PassengerType
    count: int = Field(default=1, ge=1, le=3)


class BookingIntent(BaseModel):
    """What the rider asked for. Immutable once handed to the orchestrator."""

    model_config = {"frozen": True}

    pickup_date: str  # YYYY-MM-DD, or "tomorrow", "thursday", ...
    pickup_time: str  # HH:MM, 24-hour
    pickup_address: str = Field(min_length=1)
    destination_address: str = Field(min_length=1)
    mobility_device: Optional[MobilityDevice] = None
    additional_passenger: Optional[AdditionalPassenger] = None
    pickup_phone: Optional[str] = None
    dropoff_phone: Optional[str] = None
    pickup_comments: Optional[str] = None
    dropoff_comments: Optional[str] = None
    purpose: Optional[str] = None


@dataclass(frozen=True)
class GeocodedAddress:
    """An address resolved for the backend. Coordinates are microdegrees."""

    text: str
    latitude: int
    longitude: int
    street_number: str = ""
    street_name: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""


@dataclass(frozen=True)
class TripDraft:
    """Booking record created by step 1; not yet scheduled or confirmed."""

    booking_id: str


@dataclass(frozen=True)
class ScheduleSolution:
    """One pickup-window offer from the scheduling step."""

    schedule_id: str
    solution_set_number: str
    solution_number: str
    window_start: Optional[int] = None  # seconds since midnight
    window_end: Optional[int] = None
    estimated_dropoff: Optional[int] = None
    fare: Optional[float] = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.schedule_id, self.solution_set_number, self.solution_number)


class PickupWindow(BaseModel):
    """Pickup window as 12-hour clock strings, e.g. ``"7:50 AM"``."""

    model_config = {"frozen": True}

    start: str = ""
    end: str = ""


class SolutionOffer(BaseModel):
    """Caller-facing view of a :class:`ScheduleSolution`."""

    model_config = {"frozen": True}

    schedule_id: str
    solution_set_number: str
    solution_number: str
    pickup_window: PickupWindow
    estimated_dropoff: str = ""
    fare: Optional[float] = None


class ConfirmedBooking(BaseModel):
    """Result of a completed create → schedule → save transaction."""

    model_config = {"frozen": True}

    success: Literal[True] = True
    booking_id: str
    confirmation_number: str
    pickup_window: PickupWindow
    warning: Optional[str] = None
    solutions: list[SolutionOffer] = []
