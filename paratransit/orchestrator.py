"""The three-step booking transaction: create → schedule → save.

Each step is its own coroutine taking only the previous step's output,
so the pipeline is ``TripDraft`` → ``list[ScheduleSolution]`` →
``ConfirmedBooking`` with nothing shared in between.

The transaction is not atomic.  A draft created in step 1 stays on the
backend if step 2 or 3 fails; the client neither deletes it nor retries,
and instead reports its id on the raised :class:`BookingError`.
"""

from __future__ import annotations

import logging
from datetime import date

from paratransit.client import PassInfoClient, backend_error, parse_booking_id, parse_solutions, redact
from paratransit.errors import BookingError, ErrorCategory
from paratransit.models.booking import (
    BookingIntent,
    ConfirmedBooking,
    GeocodedAddress,
    PickupWindow,
    ScheduleSolution,
    SolutionOffer,
    TripDraft,
)
from paratransit.soap.convert import parse_seconds, seconds_to_time
from paratransit.soap.extract import extract_field, has_element

log = logging.getLogger("paratransit.orchestrator")

NO_SLOTS_MESSAGE = (
    "There are no available trip slots for that time. Please try a different time."
)


def _at_step(exc: BookingError, step: str, booking_id: str | None) -> BookingError:
    """Copy ``exc`` tagged with the failing step and any draft it leaves behind."""
    return BookingError(
        exc.category,
        exc.message,
        exc.recoverable,
        step=step,
        booking_id=booking_id,
    )


def _conflict(message: str, step: str, booking_id: str | None = None) -> BookingError:
    return BookingError(
        ErrorCategory.BOOKING_CONFLICT, message, True, step=step, booking_id=booking_id
    )


def _window(start: int | None, end: int | None) -> PickupWindow:
    return PickupWindow(start=seconds_to_time(start), end=seconds_to_time(end))


def _offer(solution: ScheduleSolution) -> SolutionOffer:
    return SolutionOffer(
        schedule_id=solution.schedule_id,
        solution_set_number=solution.solution_set_number,
        solution_number=solution.solution_number,
        pickup_window=_window(solution.window_start, solution.window_end),
        estimated_dropoff=seconds_to_time(solution.estimated_dropoff),
        fare=solution.fare,
    )


class BookingOrchestrator:
    """Drives one booking attempt through the backend.

    Stateless between attempts; one instance can serve concurrent callers.
    """

    def __init__(self, client: PassInfoClient) -> None:
        self._client = client

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def create_draft(
        self,
        session_token: str,
        client_id: str,
        pickup_date: date,
        pickup_seconds: int,
        intent: BookingIntent,
        pickup: GeocodedAddress,
        destination: GeocodedAddress,
    ) -> TripDraft:
        """Step 1: ``PassCreateTrip``."""
        try:
            xml = await self._client.create_trip(
                session_token,
                client_id,
                pickup_date,
                pickup_seconds,
                intent,
                pickup,
                destination,
            )
        except BookingError as exc:
            raise _at_step(exc, "create", None) from exc

        message = backend_error(xml)
        if message is not None:
            log.info("Create rejected for client %s: %s", redact(client_id), message)
            raise _conflict(message, "create")

        booking_id = parse_booking_id(xml)
        if not booking_id:
            raise _conflict(
                "The booking service did not return a booking number.", "create"
            )

        log.info("Draft %s created for client %s", booking_id, redact(client_id))
        return TripDraft(booking_id=booking_id)

    async def schedule_draft(
        self, session_token: str, draft: TripDraft
    ) -> list[ScheduleSolution]:
        """Step 2: ``PassScheduleTrip``; returns offers in backend order."""
        try:
            xml = await self._client.schedule_trip(session_token, draft.booking_id)
        except BookingError as exc:
            raise _at_step(exc, "schedule", draft.booking_id) from exc

        message = backend_error(xml)
        if message is not None:
            raise _conflict(message, "schedule", draft.booking_id)

        solutions = parse_solutions(xml)
        if not solutions:
            raise _conflict(NO_SLOTS_MESSAGE, "schedule", draft.booking_id)

        log.info("Draft %s scheduled: %d solution(s)", draft.booking_id, len(solutions))
        return solutions

    async def confirm_solution(
        self,
        session_token: str,
        draft: TripDraft,
        solutions: list[ScheduleSolution],
        warning: str | None = None,
    ) -> ConfirmedBooking:
        """Step 3: ``PassSaveSolution`` with the first offer.

        The full offer list is kept on the result so callers can show what
        else was available.
        """
        if not solutions:
            raise _conflict(NO_SLOTS_MESSAGE, "save", draft.booking_id)
        chosen = solutions[0]

        try:
            xml = await self._client.save_solution(session_token, draft.booking_id, chosen)
        except BookingError as exc:
            raise _at_step(exc, "save", draft.booking_id) from exc

        message = backend_error(xml)
        if message is None and not ("RESULTOK" in xml or has_element(xml, "BookingId")):
            message = "The booking service did not confirm the trip."
        if message is not None:
            raise _conflict(message, "save", draft.booking_id)

        booking_id = parse_booking_id(xml) or draft.booking_id
        window_start = parse_seconds(extract_field(xml, "SchEarly"))
        window_end = parse_seconds(extract_field(xml, "SchLate"))
        if not window_start:
            window_start, window_end = chosen.window_start, chosen.window_end

        log.info("Booking %s confirmed", booking_id)
        return ConfirmedBooking(
            booking_id=booking_id,
            confirmation_number=extract_field(xml, "CreationConfirmationNumber") or booking_id,
            pickup_window=_window(window_start, window_end),
            warning=warning,
            solutions=[_offer(s) for s in solutions],
        )

    # ------------------------------------------------------------------
    # Whole transaction
    # ------------------------------------------------------------------

    async def book(
        self,
        session_token: str,
        client_id: str,
        intent: BookingIntent,
        pickup: GeocodedAddress,
        destination: GeocodedAddress,
        *,
        pickup_date: date,
        pickup_seconds: int,
        warning: str | None = None,
    ) -> ConfirmedBooking:
        """Run create → schedule → save, stopping at the first failure.

        Raises:
            BookingError: tagged with ``step``; ``booking_id`` is set when a
                draft was left on the backend.
        """
        draft = await self.create_draft(
            session_token,
            client_id,
            pickup_date,
            pickup_seconds,
            intent,
            pickup,
            destination,
        )
        try:
            solutions = await self.schedule_draft(session_token, draft)
            return await self.confirm_solution(session_token, draft, solutions, warning)
        except BookingError as exc:
            log.warning(
                "Draft %s left on the backend after %s step failed (%s)",
                draft.booking_id,
                exc.step,
                exc.category.value,
            )
            raise
