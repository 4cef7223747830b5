"""Trip query parsing: ``PassGetClientTrips`` responses into :class:`TripRecord`.

The backend describes one booking in several overlapping places.  Per-leg
data is the most current, so every field here is read from the legs first
and from the booking level only as a fallback.  In particular the
booking-level ``SchedStatusF`` can still say "Scheduled" after the legs
report the trip as performed.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, Optional

from paratransit.constants import CLIENT_PASSENGER_CODE, MOBILITY_AID_CODES, PASSENGER_TYPE_CODES
from paratransit.dates import parse_trip_date
from paratransit.models.booking import PickupWindow
from paratransit.models.status import TripStatusCode, is_active, status_from_text
from paratransit.models.trip import TripPassenger, TripRecord
from paratransit.soap.convert import format_date_display, parse_backend_date, parse_seconds, seconds_to_time, to_backend_date
from paratransit.soap.extract import extract_all_blocks, extract_all_fields, extract_block, extract_field

log = logging.getLogger("paratransit.trips")

UNKNOWN_ADDRESS = "Unknown address"

_LEG_RE = re.compile(r"<(PickUpLeg|DropOffLeg)(?:\s[^>]*)?>.*?</\1\s*>", re.DOTALL)
_PASSENGER_TYPES = {code: name for name, code in PASSENGER_TYPE_CODES.items()}
_MOBILITY_AIDS = {code: name for name, code in MOBILITY_AID_CODES.items()}


def parse_trips(xml: str) -> list[TripRecord]:
    """Parse every ``<PassBooking>`` in a response, skipping malformed ones."""
    trips: list[TripRecord] = []
    for block in extract_all_blocks(xml, "PassBooking"):
        try:
            trips.append(parse_booking(block))
        except ValueError as exc:
            log.warning("Skipping unparseable booking: %s", exc)
    return trips


def parse_booking(block: str) -> TripRecord:
    """Build a :class:`TripRecord` from the inner XML of one ``PassBooking``.

    Raises:
        ValueError: if the booking has no ``BookingId``.
    """
    booking_id = extract_field(block, "BookingId")
    if not booking_id:
        raise ValueError("booking has no BookingId")

    pickup_leg = extract_block(block, "PickUpLeg")
    dropoff_leg = extract_block(block, "DropOffLeg")
    booking_level = _LEG_RE.sub("", block)

    status_text = (
        _leg_status(pickup_leg)
        or _leg_status(dropoff_leg)
        or extract_field(booking_level, "SchedStatusF")
    )

    provider = extract_block(pickup_leg, "EventsProviderInfo") or extract_block(
        booking_level, "EventsProviderInfo"
    )

    raw_date = extract_field(block, "RawDate")
    display_date = extract_field(block, "DateF")
    if not raw_date and display_date:
        parsed = parse_trip_date(display_date)
        raw_date = to_backend_date(parsed) if parsed else ""
    if not display_date:
        display_date = format_date_display(raw_date)

    return TripRecord(
        booking_id=booking_id,
        confirmation_number=extract_field(block, "CreationConfirmationNumber") or booking_id,
        date=display_date,
        raw_date=raw_date,
        pickup_window=PickupWindow(
            start=_clock(pickup_leg, "PickupTimeFrom", "SchEarly")
            or _clock(booking_level, "PickupTimeFrom", "SchEarly"),
            end=_clock(pickup_leg, "PickupTimeTo", "SchLate")
            or _clock(booking_level, "PickupTimeTo", "SchLate"),
        ),
        pickup_address=_leg_address(pickup_leg),
        destination_address=_leg_address(dropoff_leg),
        status=status_from_text(status_text),
        estimated_pickup_time=_clock(pickup_leg, "EstTime") or None,
        estimated_dropoff_time=_clock(dropoff_leg, "EstTime") or None,
        space_type=extract_field(block, "SpaceType") or None,
        mobility_device=_mobility(block),
        additional_passengers=_passengers(block),
        pickup_phone=extract_field(pickup_leg, "Phone") or None,
        dropoff_phone=extract_field(dropoff_leg, "Phone") or None,
        pickup_comments=extract_field(pickup_leg, "Comments") or None,
        dropoff_comments=extract_field(dropoff_leg, "Comments") or None,
        fare=extract_field(block, "FareAmount") or extract_field(block, "Fare") or None,
        provider_name=extract_field(provider, "ProviderName") or None,
        provider_description=extract_field(provider, "Description") or None,
    )


def _leg_status(leg: str) -> str:
    return extract_field(extract_block(leg, "EventsInfo"), "SchedStatusF")


def _clock(xml: str, *tags: str) -> str:
    # Zero means "not set" on the backend.
    for tag in tags:
        seconds = parse_seconds(extract_field(xml, tag))
        if seconds is not None and seconds > 0:
            return seconds_to_time(seconds)
    return ""


def _leg_address(leg: str) -> str:
    # Legs carry flat LegDescrAddrOn / LegDescrCity / ... siblings.
    address = _join_address(
        extract_field(leg, "LegDescrAddrName"),
        extract_field(leg, "LegDescrAddrNo"),
        extract_field(leg, "LegDescrAddrOn"),
        extract_field(leg, "LegDescrCity"),
        extract_field(leg, "LegDescrState"),
        extract_field(leg, "LegDescrZipCode"),
    )
    if address:
        return address

    mapped = extract_block(leg, "MapAddress")
    if mapped:
        address = _join_address(
            extract_field(mapped, "AddrName"),
            extract_field(mapped, "StreetNo"),
            extract_field(mapped, "OnStreet"),
            extract_field(mapped, "City"),
            extract_field(mapped, "State"),
            extract_field(mapped, "ZipCode"),
        )
        if address:
            return address

    return UNKNOWN_ADDRESS


def _join_address(name: str, number: str, street: str, city: str, state: str, zip_code: str) -> str:
    parts = [name] if name else []
    if number and street:
        parts.append(f"{number} {street}")
    elif street:
        parts.append(street)
    parts.extend(p for p in (city, state, zip_code) if p)
    return ", ".join(parts)


def _passengers(block: str) -> list[TripPassenger]:
    passengers = []
    for entry in extract_all_blocks(block, "PassBookingPassenger"):
        code = extract_field(entry, "PassengerType").upper()
        if code == CLIENT_PASSENGER_CODE:
            continue
        kind = _PASSENGER_TYPES.get(code)
        if kind is None:
            log.debug("Ignoring passenger type %r", code)
            continue
        count_text = extract_field(entry, "NumPassengers")
        count = int(count_text) if count_text.isdigit() else 0
        passengers.append(TripPassenger(type=kind, count=count or 1))
    return passengers


def _mobility(block: str) -> Optional[str]:
    codes = extract_all_fields(extract_block(block, "MobAids"), "MobAidCode")
    names = [_MOBILITY_AIDS.get(code.upper(), code) for code in codes if code]
    return ", ".join(names) or None


def trip_date(trip: TripRecord) -> date | None:
    """Calendar date of a trip, from ``raw_date`` or else the display date."""
    return parse_backend_date(trip.raw_date) or parse_trip_date(trip.date)


def filter_trips(
    trips: Iterable[TripRecord],
    today: date,
    include_all: bool = False,
    statuses: Optional[Iterable[TripStatusCode]] = None,
) -> list[TripRecord]:
    """Select trips for display.

    With ``statuses``, keep exactly those.  With ``include_all``, keep
    everything.  Otherwise keep every trip today (so a just-finished ride
    still shows) plus future trips that are still active.
    """
    if statuses is not None:
        wanted = set(statuses)
        return [t for t in trips if t.status in wanted]
    if include_all:
        return list(trips)

    selected = []
    for trip in trips:
        day = trip_date(trip)
        if day == today or ((day is None or day > today) and is_active(trip.status)):
            selected.append(trip)
    return selected
