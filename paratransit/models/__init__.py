"""Data models for the booking layer."""

from .booking import (
    AdditionalPassenger,
    BookingIntent,
    ConfirmedBooking,
    GeocodedAddress,
    PickupWindow,
    ScheduleSolution,
    SolutionOffer,
    TripDraft,
)
from .status import TRIP_STATUSES, StatusInfo, TripStatusCode, status_from_text
from .trip import (
    BookingTimesWindow,
    CancelOutcome,
    ClientProfile,
    MobilityAid,
    SavedLocation,
    TripPassenger,
    TripRecord,
)
from .validation import ValidationResult

__all__ = [
    "AdditionalPassenger",
    "BookingIntent",
    "BookingTimesWindow",
    "CancelOutcome",
    "ClientProfile",
    "ConfirmedBooking",
    "GeocodedAddress",
    "MobilityAid",
    "PickupWindow",
    "SavedLocation",
    "ScheduleSolution",
    "SolutionOffer",
    "StatusInfo",
    "TRIP_STATUSES",
    "TripDraft",
    "TripPassenger",
    "TripRecord",
    "TripStatusCode",
    "ValidationResult",
    "status_from_text",
]
