"""PassInfoServer operations and their response parsers.

:class:`PassInfoClient` knows the request shape of each backend operation
and hands back the raw response text.  Deciding what a response *means*
for a booking lives with the caller (the orchestrator for the transaction
steps, the service for queries), except for the read-only queries, which
fail loudly here when the backend reports an error.

The module-level ``parse_*`` functions are pure and tested on recorded
response fragments.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from paratransit.constants import DEFAULT_BOOKING_TIMES, MOBILITY_AID_CODES, PASSENGER_TYPE_CODES
from paratransit.errors import BookingError, ErrorCategory
from paratransit.models.booking import BookingIntent, GeocodedAddress, ScheduleSolution
from paratransit.models.trip import BookingTimesWindow, ClientProfile, MobilityAid, SavedLocation
from paratransit.soap.convert import format_date_display, parse_seconds, seconds_to_time, to_backend_date
from paratransit.soap.envelope import build_request, repeated_elements
from paratransit.soap.extract import (
    extract_all_blocks,
    extract_all_fields,
    extract_block,
    extract_field,
    has_element,
)
from paratransit.transport.base import Transport

log = logging.getLogger("paratransit.client")

GENERIC_BACKEND_ERROR = "The booking service reported an error."


def redact(value: str | None) -> str:
    """Mask client ids and session tokens for logging: first 3 and last 2 chars."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


# ── Response inspection ──────────────────────────────────────────


def backend_error(xml: str) -> str | None:
    """Return the backend's error message if ``xml`` carries an error marker.

    Markers are a ``RESULTERROR`` result code, a non-empty ``<Error>`` or
    ``<ErrorMessage>`` element, or a SOAP fault.  The message prefers
    ``ErrorMessage``, then ``Message``, then ``faultstring``.
    """
    if not xml:
        return None
    error_message = extract_field(xml, "ErrorMessage")
    flagged = (
        "RESULTERROR" in xml
        or bool(error_message)
        or bool(extract_block(xml, "Error"))
        or has_element(xml, "faultstring")
    )
    if not flagged:
        return None
    return (
        error_message
        or extract_field(xml, "Message")
        or extract_field(xml, "faultstring")
        or extract_field(xml, "Error")
        or GENERIC_BACKEND_ERROR
    )


def parse_booking_id(xml: str) -> str:
    return extract_field(xml, "BookingId")


def parse_solutions(xml: str) -> list[ScheduleSolution]:
    """Read ``<Solution>`` offers in backend order.

    An offer missing any part of its composite key can't be saved, so it
    is logged and dropped.
    """
    solutions: list[ScheduleSolution] = []
    for block in extract_all_blocks(xml, "Solution"):
        schedule_id = extract_field(block, "ScheduleId")
        set_number = extract_field(block, "SolutionSetNum")
        number = extract_field(block, "SolutionNum")
        if not (schedule_id and set_number and number):
            log.warning("Skipping solution without a complete key")
            continue
        fare_text = extract_field(block, "Fare")
        try:
            fare = float(fare_text) if fare_text else None
        except ValueError:
            fare = None
        solutions.append(
            ScheduleSolution(
                schedule_id=schedule_id,
                solution_set_number=set_number,
                solution_number=number,
                window_start=parse_seconds(extract_field(block, "SchEarly")),
                window_end=parse_seconds(extract_field(block, "SchLate")),
                estimated_dropoff=parse_seconds(extract_field(block, "EstDropoff")),
                fare=fare,
            )
        )
    return solutions


def parse_saved_locations(xml: str) -> list[SavedLocation]:
    locations = []
    for block in extract_all_blocks(xml, "Location"):
        street = " ".join(
            part
            for part in (extract_field(block, "StreetNo"), extract_field(block, "OnStreet"))
            if part
        )
        locations.append(
            SavedLocation(
                location_id=extract_field(block, "LocationId"),
                name=extract_field(block, "AddrName") or extract_field(block, "SiteName"),
                address=street,
                city=extract_field(block, "City"),
                state=extract_field(block, "State"),
                postal_code=extract_field(block, "ZipCode"),
            )
        )
    return locations


def parse_booking_days(xml: str) -> list[str]:
    """Bookable dates, display-formatted (``"Tue, Jan 13, 2026"``)."""
    return [format_date_display(day) for day in extract_all_fields(xml, "Date") if day]


def parse_booking_times(xml: str, booking_date: str) -> BookingTimesWindow:
    """``EarliestTime``/``LatestTime``; an unset bound falls back to the usual hours."""
    default_earliest, default_latest = DEFAULT_BOOKING_TIMES
    earliest = parse_seconds(extract_field(xml, "EarliestTime")) or 0
    latest = parse_seconds(extract_field(xml, "LatestTime")) or 0
    return BookingTimesWindow(
        date=booking_date,
        earliest=seconds_to_time(earliest if earliest > 0 else default_earliest),
        latest=seconds_to_time(latest if latest > 0 else default_latest),
    )


def parse_client_profile(xml: str) -> ClientProfile | None:
    """The client record, or ``None`` when the response carries none."""
    record = extract_block(xml, "PassGetClientInfoResult") or xml
    client_id = extract_field(record, "ClientId")
    if not client_id:
        return None
    return ClientProfile(
        client_id=client_id,
        first_name=extract_field(record, "FirstName"),
        last_name=extract_field(record, "LastName"),
        phone=extract_field(record, "Phone"),
        street_number=extract_field(record, "StreetNo"),
        street=extract_field(record, "OnStreet"),
        city=extract_field(record, "City"),
        state=extract_field(record, "State"),
        postal_code=extract_field(record, "ZipCode"),
        mobility_aid_codes=[c for c in extract_all_fields(record, "MobAidCode") if c],
        space_type=extract_field(record, "PrefSpaceType"),
    )


def parse_mobility_aids(xml: str) -> list[MobilityAid]:
    aids = []
    for block in extract_all_blocks(xml, "MobilityAid"):
        code = extract_field(block, "MobAidCode")
        if code:
            aids.append(MobilityAid(code=code, description=extract_field(block, "Description")))
    return aids


# ── Request parameters ───────────────────────────────────────────


def _leg_params(
    address: GeocodedAddress,
    phone: str | None,
    comments: str | None,
    req_time: int | None = None,
) -> dict[str, Any]:
    return {
        "ReqTime": req_time,
        "LegAddress": {
            "AddrNo": address.street_number or None,
            "AddrOn": address.street_name or None,
            "City": address.city or None,
            "State": address.state or None,
            "ZipCode": address.postal_code or None,
            "Lat": address.latitude,
            "Lon": address.longitude,
        },
        "Phone": phone or None,
        "Comments": comments or None,
    }


def create_trip_params(
    client_id: str,
    pickup_date: date,
    pickup_seconds: int,
    intent: BookingIntent,
    pickup: GeocodedAddress,
    destination: GeocodedAddress,
) -> dict[str, Any]:
    """Parameter tree for ``PassCreateTrip``."""
    params: dict[str, Any] = {
        "ClientId": client_id,
        "Date": to_backend_date(pickup_date),
        "PickUpLeg": _leg_params(
            pickup, intent.pickup_phone, intent.pickup_comments, pickup_seconds
        ),
        "DropOffLeg": _leg_params(
            destination, intent.dropoff_phone, intent.dropoff_comments
        ),
    }

    aid_code = MOBILITY_AID_CODES.get(intent.mobility_device or "")
    if aid_code:
        params["MobAids"] = {"MobAidCode": aid_code}

    companion = intent.additional_passenger
    if companion is not None:
        params["Passengers"] = repeated_elements(
            "PassBookingPassenger",
            [
                {
                    "PassengerType": PASSENGER_TYPE_CODES[companion.type],
                    "NumPassengers": companion.count,
                }
            ],
            indent="  ",
        )

    if intent.purpose:
        params["Purpose"] = intent.purpose
    return params


# ── Client ───────────────────────────────────────────────────────


class PassInfoClient:
    """Thin operation layer over a :class:`Transport`.

    Holds no session state: every method takes the session token.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def _call(
        self,
        operation: str,
        params: dict[str, Any],
        session_token: str,
        *,
        use_async_endpoint: bool = False,
    ) -> str:
        log.debug("Calling %s", operation)
        body = build_request(operation, params)
        return await self._transport.post(
            body, session_token, use_async_endpoint=use_async_endpoint
        )

    async def _query(
        self, operation: str, params: dict[str, Any], session_token: str
    ) -> str:
        xml = await self._call(operation, params, session_token)
        message = backend_error(xml)
        if message is not None:
            log.warning("%s rejected: %s", operation, message)
            raise BookingError(ErrorCategory.SYSTEM_ERROR, message, recoverable=True)
        return xml

    # ------------------------------------------------------------------
    # Booking transaction
    # ------------------------------------------------------------------

    async def create_trip(
        self,
        session_token: str,
        client_id: str,
        pickup_date: date,
        pickup_seconds: int,
        intent: BookingIntent,
        pickup: GeocodedAddress,
        destination: GeocodedAddress,
    ) -> str:
        params = create_trip_params(
            client_id, pickup_date, pickup_seconds, intent, pickup, destination
        )
        return await self._call("PassCreateTrip", params, session_token)

    async def schedule_trip(self, session_token: str, booking_id: str) -> str:
        # Scheduling is slow on the backend and is served by the async endpoint.
        return await self._call(
            "PassScheduleTrip",
            {"BookingId": booking_id},
            session_token,
            use_async_endpoint=True,
        )

    async def save_solution(
        self, session_token: str, booking_id: str, solution: ScheduleSolution
    ) -> str:
        return await self._call(
            "PassSaveSolution",
            {
                "BookingId": booking_id,
                "ScheduleId": solution.schedule_id,
                "SolutionSetNum": solution.solution_set_number,
                "SolutionNum": solution.solution_number,
            },
            session_token,
        )

    # ------------------------------------------------------------------
    # Queries and cancellation
    # ------------------------------------------------------------------

    async def get_client_trips(
        self, session_token: str, client_id: str, from_date: date, to_date: date
    ) -> str:
        return await self._query(
            "PassGetClientTrips",
            {
                "ClientId": client_id,
                "FromDate": to_backend_date(from_date),
                "ToDate": to_backend_date(to_date),
                "SchTypeId": "1",
            },
            session_token,
        )

    async def cancel_trip(
        self, session_token: str, client_id: str, booking_id: str, reason: str = ""
    ) -> str:
        return await self._call(
            "PassCancelTrip",
            {
                "ClientId": client_id,
                "BookingId": booking_id,
                "CancellationReason": reason,
            },
            session_token,
        )

    async def get_client_locations(self, session_token: str, client_id: str) -> str:
        return await self._query(
            "PassGetClientLocationsMerged", {"ClientId": client_id}, session_token
        )

    async def get_booking_days_window(self, session_token: str, client_id: str) -> str:
        return await self._query(
            "PassBookingDaysWindow", {"ClientId": client_id}, session_token
        )

    async def get_booking_times_window(
        self, session_token: str, client_id: str, booking_date: date
    ) -> str:
        return await self._query(
            "PassBookingTimesWindow",
            {"ClientId": client_id, "Date": to_backend_date(booking_date)},
            session_token,
        )

    async def get_frequent_trips(self, session_token: str, client_id: str) -> str:
        return await self._query(
            "PassGetMostFrequentClientTrips", {"ClientId": client_id}, session_token
        )

    async def get_client_info(self, session_token: str, client_id: str) -> str:
        return await self._query(
            "PassGetClientInfo", {"ClientId": client_id}, session_token
        )

    async def get_mobility_aids(self, session_token: str) -> str:
        return await self._query("PassGetAllMobilityAids", {}, session_token)
