"""Public booking operations.

:class:`BookingService` is the one boundary callers use.  Every operation
returns a typed result: rule and backend failures come back as
:class:`BookingFailure` (or an unsuccessful :class:`CancelOutcome`), never as
exceptions.  Only genuine bugs propagate.

The session token is an argument to each call and is never stored, so a
single service instance can serve many riders at once.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Union

from paratransit.client import (
    PassInfoClient,
    backend_error,
    parse_booking_days,
    parse_booking_times,
    parse_client_profile,
    parse_mobility_aids,
    parse_saved_locations,
    redact,
)
from paratransit.config import Settings, settings as default_settings
from paratransit.dates import localize, parse_flexible_date, parse_iso_date, today_in
from paratransit.errors import BookingError, BookingFailure, ErrorCategory
from paratransit.geocoding.adapter import resolve_address
from paratransit.geocoding.base import Geocoder
from paratransit.models.booking import BookingIntent, ConfirmedBooking
from paratransit.models.status import TripStatusCode
from paratransit.models.trip import (
    BookingTimesWindow,
    CancelOutcome,
    ClientProfile,
    MobilityAid,
    SavedLocation,
    TripRecord,
)
from paratransit.models.validation import ValidationResult
from paratransit.orchestrator import BookingOrchestrator
from paratransit.soap.convert import time_to_seconds, to_backend_date
from paratransit.soap.extract import extract_field
from paratransit.transport.base import Transport
from paratransit.trips import filter_trips, parse_trips
from paratransit.validation import validate_booking_window, validate_cancellation

log = logging.getLogger("paratransit.service")

DateInput = Union[date, str, None]


class BookingService:
    """Facade over validation, geocoding, the transaction and trip queries.

    Args:
        transport: Backend transport (usually :class:`HttpTransport`).
        geocoder: Address lookup provider.
        settings: Defaults to the module-level settings.
        clock: Returns the current instant; tests pin it.  Every operation
            also accepts an explicit ``now`` that takes precedence.
    """

    def __init__(
        self,
        transport: Transport,
        geocoder: Geocoder,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._tz = self._settings.tz
        self._transport = transport
        self._geocoder = geocoder
        self._clock = clock or (lambda: datetime.now(tz=self._tz))
        self._client = PassInfoClient(transport)
        self._orchestrator = BookingOrchestrator(self._client)

    @property
    def settings(self) -> Settings:
        return self._settings

    def _now(self, now: datetime | None) -> datetime:
        return localize(now if now is not None else self._clock(), self._tz)

    def _resolve_date(self, value: DateInput, today: date) -> date | None:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return parse_iso_date(parse_flexible_date(value or "", today))

    # ── Booking ──────────────────────────────────────────────────

    def validate_booking(
        self, intent: BookingIntent, now: datetime | None = None
    ) -> ValidationResult:
        """Check the intent against the booking-window rules. No network I/O."""
        now = self._now(now)
        pickup_date = parse_flexible_date(intent.pickup_date, now.date())
        return validate_booking_window(pickup_date, intent.pickup_time, now, self._tz)

    async def book_trip(
        self,
        session_token: str,
        client_id: str,
        intent: BookingIntent,
        now: datetime | None = None,
    ) -> Union[ConfirmedBooking, BookingFailure]:
        """Validate, geocode both addresses, then run the booking transaction."""
        now = self._now(now)
        pickup_date_text = parse_flexible_date(intent.pickup_date, now.date())
        check = validate_booking_window(pickup_date_text, intent.pickup_time, now, self._tz)

        pickup_date = parse_iso_date(pickup_date_text)
        pickup_seconds = time_to_seconds(intent.pickup_time)

        if not check.valid:
            unreadable = pickup_date is None or pickup_seconds is None
            log.info("Booking for client %s rejected locally", redact(client_id))
            return BookingFailure(
                category=(
                    ErrorCategory.VALIDATION_ERROR
                    if unreadable
                    else ErrorCategory.BUSINESS_RULE_VIOLATION
                ),
                message=check.error or "The booking request is not valid.",
                recoverable=True,
            )

        try:
            pickup = await resolve_address(self._geocoder, intent.pickup_address)
            destination = await resolve_address(self._geocoder, intent.destination_address)
            return await self._orchestrator.book(
                session_token,
                client_id,
                intent,
                pickup,
                destination,
                pickup_date=pickup_date,
                pickup_seconds=pickup_seconds,
                warning=check.warning,
            )
        except BookingError as exc:
            return exc.to_failure()

    # ── Trips ────────────────────────────────────────────────────

    async def _fetch_trips(
        self, session_token: str, client_id: str, from_date: date, to_date: date
    ) -> list[TripRecord]:
        xml = await self._client.get_client_trips(
            session_token, client_id, from_date, to_date
        )
        trips = parse_trips(xml)
        log.info("Fetched %d trip(s) for client %s", len(trips), redact(client_id))
        return trips

    async def get_trips(
        self,
        session_token: str,
        client_id: str,
        from_date: DateInput = None,
        to_date: DateInput = None,
        *,
        include_all: bool = False,
        statuses: Optional[Iterable[TripStatusCode]] = None,
        now: datetime | None = None,
    ) -> Union[list[TripRecord], BookingFailure]:
        """Trips in ``[from_date, to_date]``, filtered for display.

        Dates default to today and today plus ``trip_lookahead_days``.  By
        default, today's trips and upcoming active trips are returned; see
        :func:`paratransit.trips.filter_trips`.
        """
        today = self._now(now).date()
        start = self._resolve_date(from_date, today) if from_date else today
        end = None
        if start is not None:
            end = (
                self._resolve_date(to_date, today)
                if to_date
                else start + timedelta(days=self._settings.trip_lookahead_days)
            )
        if start is None or end is None:
            return BookingFailure(
                category=ErrorCategory.VALIDATION_ERROR,
                message="Could not read the date range. Please use YYYY-MM-DD.",
                recoverable=True,
            )

        try:
            trips = await self._fetch_trips(session_token, client_id, start, end)
        except BookingError as exc:
            return exc.to_failure()
        return filter_trips(trips, today, include_all=include_all, statuses=statuses)

    # ── Cancellation ─────────────────────────────────────────────

    def validate_cancellation(
        self, trip_date: str, pickup_start: str, now: datetime | None = None
    ) -> ValidationResult:
        return validate_cancellation(
            trip_date,
            pickup_start,
            self._now(now),
            self._tz,
            self._settings.office_phone,
        )

    async def cancel_trip(
        self,
        session_token: str,
        client_id: str,
        booking_id: str,
        now: datetime | None = None,
    ) -> CancelOutcome:
        """Cancel a booking after checking the notice rule locally.

        ``booking_id`` may also be the confirmation number shown to riders.
        """
        now = self._now(now)
        today = today_in(self._tz, now)

        try:
            trips = await self._fetch_trips(
                session_token,
                client_id,
                today,
                today + timedelta(days=self._settings.trip_lookahead_days),
            )
        except BookingError as exc:
            return _cancel_failure(exc.message, exc.category, exc.recoverable)

        trip = next(
            (t for t in trips if booking_id in (t.booking_id, t.confirmation_number)),
            None,
        )
        if trip is None:
            return _cancel_failure(
                f"Could not find trip {booking_id} among your upcoming trips.",
                ErrorCategory.VALIDATION_ERROR,
                True,
            )
        if trip.status == TripStatusCode.CANCELLED:
            return _cancel_failure(
                "This trip is already cancelled.",
                ErrorCategory.BUSINESS_RULE_VIOLATION,
                False,
            )

        check = self.validate_cancellation(
            trip.raw_date or trip.date, trip.pickup_window.start, now
        )
        if not check.valid:
            log.info("Cancellation of %s refused locally", trip.booking_id)
            return _cancel_failure(
                check.error or "This trip cannot be cancelled online.",
                ErrorCategory.BUSINESS_RULE_VIOLATION,
                False,
            )

        try:
            xml = await self._client.cancel_trip(session_token, client_id, trip.booking_id)
        except BookingError as exc:
            return _cancel_failure(exc.message, exc.category, exc.recoverable)

        message = backend_error(xml)
        if message is not None or "RESULTOK" not in xml:
            message = message or extract_field(xml, "Message") or "Cancellation failed."
            log.warning("Backend refused to cancel %s: %s", trip.booking_id, message)
            return _cancel_failure(message, ErrorCategory.BOOKING_CONFLICT, True)

        log.info("Trip %s cancelled", trip.booking_id)
        return CancelOutcome(
            success=True,
            message="Trip cancelled successfully.",
            ref_code=extract_field(xml, "CancelRefCode") or None,
            warning=check.warning,
        )

    # ── Account lookups ──────────────────────────────────────────

    async def get_saved_locations(
        self, session_token: str, client_id: str
    ) -> Union[list[SavedLocation], BookingFailure]:
        try:
            xml = await self._client.get_client_locations(session_token, client_id)
        except BookingError as exc:
            return exc.to_failure()
        return parse_saved_locations(xml)

    async def get_booking_days(
        self, session_token: str, client_id: str
    ) -> Union[list[str], BookingFailure]:
        """Dates currently open for booking, display-formatted."""
        try:
            xml = await self._client.get_booking_days_window(session_token, client_id)
        except BookingError as exc:
            return exc.to_failure()
        return parse_booking_days(xml)

    async def get_booking_times(
        self,
        session_token: str,
        client_id: str,
        booking_date: DateInput = None,
        now: datetime | None = None,
    ) -> Union[BookingTimesWindow, BookingFailure]:
        """Earliest and latest bookable pickup on ``booking_date`` (default today)."""
        today = self._now(now).date()
        day = self._resolve_date(booking_date, today) if booking_date else today
        if day is None:
            return BookingFailure(
                category=ErrorCategory.VALIDATION_ERROR,
                message="Could not read the date. Please use YYYY-MM-DD.",
                recoverable=True,
            )
        try:
            xml = await self._client.get_booking_times_window(session_token, client_id, day)
        except BookingError as exc:
            return exc.to_failure()
        return parse_booking_times(xml, to_backend_date(day))

    async def get_frequent_trips(
        self, session_token: str, client_id: str
    ) -> Union[list[TripRecord], BookingFailure]:
        """The rider's most frequent trips, as the backend ranks them."""
        try:
            xml = await self._client.get_frequent_trips(session_token, client_id)
        except BookingError as exc:
            return exc.to_failure()
        return parse_trips(xml)

    async def get_client_profile(
        self, session_token: str, client_id: str
    ) -> Union[ClientProfile, BookingFailure]:
        try:
            xml = await self._client.get_client_info(session_token, client_id)
        except BookingError as exc:
            return exc.to_failure()
        profile = parse_client_profile(xml)
        if profile is None:
            log.warning("No client record returned for %s", redact(client_id))
            return BookingFailure(
                category=ErrorCategory.SYSTEM_ERROR,
                message="The booking service did not return your account details.",
                recoverable=True,
            )
        return profile

    async def get_mobility_aids(
        self, session_token: str
    ) -> Union[list[MobilityAid], BookingFailure]:
        """Every mobility aid code the backend accepts, with descriptions."""
        try:
            xml = await self._client.get_mobility_aids(session_token)
        except BookingError as exc:
            return exc.to_failure()
        return parse_mobility_aids(xml)

    async def aclose(self) -> None:
        await self._transport.aclose()
        await self._geocoder.aclose()


def _cancel_failure(
    message: str, category: ErrorCategory, recoverable: bool
) -> CancelOutcome:
    return CancelOutcome(
        success=False, message=message, category=category, recoverable=recoverable
    )
