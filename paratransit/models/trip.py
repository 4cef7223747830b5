"""Query-side models: trips as read back from the backend."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .booking import PassengerType, PickupWindow
from ..errors import ErrorCategory
from .status import TripStatusCode, status_info


class TripPassenger(BaseModel):
    model_config = {"frozen": True}

    type: PassengerType
    count: int = 1


class TripRecord(BaseModel):
    """One booking as reported by the backend.

    Built fresh on every query. The backend is the source of truth, so these
    are never cached or updated in place.
    """

    model_config = {"frozen": True}

    booking_id: str
    confirmation_number: str
    date: str                     # display form, e.g. "Tue, Jan 13, 2026"
    raw_date: str = ""            # YYYYMMDD
    pickup_window: PickupWindow = PickupWindow()
    pickup_address: str
    destination_address: str
    status: TripStatusCode
    estimated_pickup_time: Optional[str] = None
    estimated_dropoff_time: Optional[str] = None
    space_type: Optional[str] = None
    mobility_device: Optional[str] = None
    additional_passengers: list[TripPassenger] = []
    pickup_phone: Optional[str] = None
    dropoff_phone: Optional[str] = None
    pickup_comments: Optional[str] = None
    dropoff_comments: Optional[str] = None
    fare: Optional[str] = None
    provider_name: Optional[str] = None
    provider_description: Optional[str] = None

    @property
    def status_label(self) -> str:
        return status_info(self.status).label


class CancelOutcome(BaseModel):
    """Result of a cancellation request."""

    model_config = {"frozen": True}

    success: bool
    message: str
    ref_code: Optional[str] = None
    warning: Optional[str] = None
    category: Optional[ErrorCategory] = None  # set when success is False
    recoverable: bool = True


class SavedLocation(BaseModel):
    model_config = {"frozen": True}

    location_id: str
    name: str
    address: str
    city: str = ""
    state: str = ""
    postal_code: str = ""


class BookingTimesWindow(BaseModel):
    """Earliest and latest pickup time the backend accepts on one date."""

    model_config = {"frozen": True}

    date: str       # YYYYMMDD
    earliest: str   # "6:00 AM"
    latest: str


class MobilityAid(BaseModel):
    model_config = {"frozen": True}

    code: str
    description: str = ""


class ClientProfile(BaseModel):
    """The rider's account record from ``PassGetClientInfo``."""

    model_config = {"frozen": True}

    client_id: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    street_number: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    mobility_aid_codes: list[str] = []
    space_type: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
