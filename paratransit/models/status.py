"""Trip status taxonomy and mapping from backend status text."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TripStatusCode(str, enum.Enum):
    SCHEDULED = "S"
    UNSCHEDULED = "U"
    ARRIVED = "A"
    PENDING = "Pn"
    PERFORMED = "Pf"
    CANCELLED = "CA"
    NO_SHOW = "NS"
    MISSED = "NM"
    REFUSED = "R"


@dataclass(frozen=True)
class StatusInfo:
    label: str
    description: str
    is_active: bool  # belongs in the default "upcoming trips" view


TRIP_STATUSES: dict[TripStatusCode, StatusInfo] = {
    TripStatusCode.SCHEDULED: StatusInfo(
        "Scheduled", "Trip is booked and a pickup window is assigned", True
    ),
    TripStatusCode.UNSCHEDULED: StatusInfo(
        "Unscheduled", "Trip is booked but not yet placed on a run", True
    ),
    TripStatusCode.ARRIVED: StatusInfo(
        "Arrived", "Vehicle has arrived at the pickup location", True
    ),
    TripStatusCode.PENDING: StatusInfo(
        "Pending", "Trip request is waiting for confirmation", True
    ),
    TripStatusCode.PERFORMED: StatusInfo(
        "Performed", "Trip was completed", False
    ),
    TripStatusCode.CANCELLED: StatusInfo(
        "Cancelled", "Trip was cancelled", False
    ),
    TripStatusCode.NO_SHOW: StatusInfo(
        "No Show", "Rider was not at the pickup location", False
    ),
    TripStatusCode.MISSED: StatusInfo(
        "Missed", "Vehicle missed the pickup", False
    ),
    TripStatusCode.REFUSED: StatusInfo(
        "Refused", "Rider refused the trip at pickup", False
    ),
}

# Checked in order: "unscheduled" must come before "scheduled", which it contains.
_STATUS_KEYWORDS: list[tuple[str, TripStatusCode]] = [
    ("unscheduled", TripStatusCode.UNSCHEDULED),
    ("scheduled", TripStatusCode.SCHEDULED),
    ("no show", TripStatusCode.NO_SHOW),
    ("no-show", TripStatusCode.NO_SHOW),
    ("noshow", TripStatusCode.NO_SHOW),
    ("arrived", TripStatusCode.ARRIVED),
    ("cancel", TripStatusCode.CANCELLED),
    ("pending", TripStatusCode.PENDING),
    ("perform", TripStatusCode.PERFORMED),
    ("missed", TripStatusCode.MISSED),
    ("refused", TripStatusCode.REFUSED),
]


def status_from_text(text: str | None) -> TripStatusCode:
    """Map backend status text (e.g. ``"Performed"``) to a status code.

    Matching is a case-insensitive substring search over an ordered keyword
    list; unrecognised or empty text maps to Unscheduled.
    """
    lowered = (text or "").strip().lower()
    if lowered:
        for keyword, code in _STATUS_KEYWORDS:
            if keyword in lowered:
                return code
    return TripStatusCode.UNSCHEDULED


def status_info(code: TripStatusCode) -> StatusInfo:
    return TRIP_STATUSES[code]


def is_active(code: TripStatusCode) -> bool:
    return TRIP_STATUSES[code].is_active
