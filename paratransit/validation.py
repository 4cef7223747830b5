"""Booking-window and cancellation-notice rules.

Operator rules, as of January 2026:

* Trips can be booked up to 3 days ahead.
* Day-ahead booking closes at noon on the day before the trip.  After
  that, the request is handled like a same-day booking.
* Same-day bookings need 2 hours notice and are not guaranteed.
* Cancellations need 2 hours notice.

Both validators are pure functions of their inputs.  "now" and the zone
are parameters, never read from the process, so every calendar comparison
happens in one explicit time reference.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from paratransit.config import settings
from paratransit.constants import BUSINESS_RULES
from paratransit.dates import localize, parse_iso_date, parse_trip_date
from paratransit.models.validation import ValidationResult
from paratransit.soap.convert import time_to_seconds

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def _parse_pickup(pickup_date: str, pickup_time: str, tz: ZoneInfo) -> datetime | None:
    day = parse_iso_date(pickup_date)
    match = _HHMM_RE.match(pickup_time or "")
    if day is None or match is None:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return datetime.combine(day, time(hours, minutes), tzinfo=tz)


def _minutes_between(start: datetime, end: datetime) -> float:
    # Same-tzinfo subtraction is wall-clock; go through UTC to get elapsed time.
    elapsed = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return elapsed.total_seconds() / 60


def validate_booking_window(
    pickup_date: str,
    pickup_time: str,
    now: datetime,
    tz: ZoneInfo | None = None,
) -> ValidationResult:
    """Check a requested pickup against the booking-window rules.

    Args:
        pickup_date: ``YYYY-MM-DD``.
        pickup_time: ``HH:MM`` (24-hour), in ``tz``.
        now: Reference instant; naive values are taken to be in ``tz``.
        tz: Zone for all calendar arithmetic (defaults to settings).
    """
    tz = tz or settings.tz
    now = localize(now, tz)
    pickup = _parse_pickup(pickup_date, pickup_time, tz)

    if pickup is None:
        return ValidationResult(
            valid=False,
            error=(
                "Could not parse the date or time. "
                "Please use YYYY-MM-DD for date and HH:MM for time."
            ),
        )

    minutes_until = _minutes_between(now, pickup)
    if minutes_until <= 0:
        return ValidationResult(
            valid=False,
            error="The pickup time has already passed. Please choose a future time.",
        )

    max_days = BUSINESS_RULES["advance_booking_max_days"]
    if minutes_until > max_days * 24 * 60:
        days_away = int(minutes_until // (24 * 60))
        return ValidationResult(
            valid=False,
            error=(
                f"Trips can only be booked up to {max_days} days in advance. "
                f"Your requested date is {days_away} days away."
            ),
        )

    min_notice = BUSINESS_RULES["same_day_min_minutes"]
    min_hours = min_notice // 60

    if pickup.date() == now.date():
        if minutes_until < min_notice:
            return ValidationResult(
                valid=False,
                error=(
                    f"Same-day bookings need at least {min_hours} hours notice. "
                    f"Your pickup is only {int(minutes_until)} minutes away."
                ),
            )
        return ValidationResult(
            valid=True,
            warning=(
                "Same-day bookings are not guaranteed. The service will try to fit "
                "you in, but it depends on availability."
            ),
        )

    cutoff = datetime.combine(
        pickup.date() - timedelta(days=1),
        time(BUSINESS_RULES["noon_cutoff_hour"]),
        tzinfo=tz,
    )
    if now >= cutoff:
        day_name = pickup.strftime("%A")
        if minutes_until < min_notice:
            return ValidationResult(
                valid=False,
                error=(
                    f"The noon cutoff has passed for booking {day_name}. Same-day rules "
                    f"apply, and you need at least {min_hours} hours notice."
                ),
            )
        return ValidationResult(
            valid=True,
            warning=(
                f"The noon cutoff has passed for {day_name}. This will be treated as a "
                "same-day booking and is not guaranteed."
            ),
        )

    return ValidationResult(valid=True)


def _parse_trip_start(trip_date: str, pickup_start: str, tz: ZoneInfo) -> datetime | None:
    day = parse_trip_date(trip_date)
    seconds = time_to_seconds(pickup_start)
    if day is None or seconds is None:
        return None
    return datetime.combine(day, time(), tzinfo=tz) + timedelta(seconds=seconds)


def validate_cancellation(
    trip_date: str,
    pickup_start: str,
    now: datetime,
    tz: ZoneInfo | None = None,
    office_phone: str | None = None,
) -> ValidationResult:
    """Check that a trip can still be cancelled online.

    If the trip's date or time can't be read, cancellation is allowed with a
    warning. A rider must never be blocked from cancelling by a parse
    problem on our side.
    """
    tz = tz or settings.tz
    office_phone = office_phone or settings.office_phone
    now = localize(now, tz)
    start = _parse_trip_start(trip_date, pickup_start, tz)

    if start is None:
        return ValidationResult(
            valid=True,
            warning=(
                "Could not verify the 2-hour notice requirement. "
                "Please make sure you have enough notice."
            ),
        )

    minutes_until = _minutes_between(now, start)
    whole_minutes = int(minutes_until // 1)

    if minutes_until < 0:
        return ValidationResult(
            valid=False,
            error="This trip has already started or passed. It cannot be cancelled.",
            minutes_until_trip=whole_minutes,
        )

    if minutes_until < BUSINESS_RULES["cancellation_min_minutes"]:
        return ValidationResult(
            valid=False,
            error=(
                f"Cancellations need 2 hours notice. Your trip starts in "
                f"{whole_minutes} minutes. Please call {office_phone} directly "
                "for late cancellations."
            ),
            minutes_until_trip=whole_minutes,
        )

    if minutes_until < BUSINESS_RULES["cancellation_warn_minutes"]:
        return ValidationResult(
            valid=True,
            warning=(
                f"Your trip is in {format_duration(whole_minutes)}. Cancellation is "
                "allowed, but please cancel early when possible."
            ),
            minutes_until_trip=whole_minutes,
        )

    return ValidationResult(valid=True, minutes_until_trip=whole_minutes)


def format_duration(minutes: int) -> str:
    """``45`` -> ``"45 minutes"``, ``150`` -> ``"2 hours and 30 minutes"``."""
    hours, remaining = divmod(minutes, 60)
    minute_text = "1 minute" if remaining == 1 else f"{remaining} minutes"
    if hours == 0:
        return minute_text
    hour_text = "1 hour" if hours == 1 else f"{hours} hours"
    if remaining == 0:
        return hour_text
    return f"{hour_text} and {minute_text}"
