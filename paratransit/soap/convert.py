"""Conversions between backend-native units and display values.

The backend expresses times as integer seconds since local midnight,
coordinates as integer microdegrees and dates as ``YYYYMMDD``.  Each
conversion lives here once so it can be tested once.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from paratransit.constants import MICRODEGREES_PER_DEGREE, MONTH_ABBREVIATIONS

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$")
_DAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def seconds_to_time(seconds: int | None) -> str:
    """Convert seconds since midnight to ``H:MM AM/PM``.

    Returns ``""`` for ``None`` or negative values.  A non-zero seconds
    component is kept (``H:MM:SS AM/PM``) so the conversion is reversible.
    """
    if seconds is None or seconds < 0:
        return ""
    hours = (seconds // 3600) % 24
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours - 12 if hours > 12 else (12 if hours == 0 else hours)
    if secs:
        return f"{display_hours}:{minutes:02d}:{secs:02d} {period}"
    return f"{display_hours}:{minutes:02d} {period}"


def time_to_seconds(text: str | None) -> int | None:
    """Convert ``"2:30 PM"`` or ``"14:30"`` to seconds since midnight.

    Returns ``None`` when the text is not a valid clock time.
    """
    if not text:
        return None
    match = _TIME_RE.match(text)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)
    period = (match.group(4) or "").upper()

    if minutes > 59 or seconds > 59:
        return None
    if period:
        if not 1 <= hours <= 12:
            return None
        if period == "PM" and hours != 12:
            hours += 12
        elif period == "AM" and hours == 12:
            hours = 0
    elif hours > 23:
        return None

    return hours * 3600 + minutes * 60 + seconds


def parse_seconds(text: str | None) -> int | None:
    """Parse an integer seconds field; ``None`` if absent or non-numeric."""
    text = (text or "").strip()
    if not text or not text.lstrip("-").isdigit():
        return None
    return int(text)


def degrees_to_microdegrees(degrees: float) -> int:
    return int(round(degrees * MICRODEGREES_PER_DEGREE))


def microdegrees_to_degrees(microdegrees: int) -> float:
    return microdegrees / MICRODEGREES_PER_DEGREE


def to_backend_date(value: date | str) -> str:
    """Format a date (or ``YYYY-MM-DD`` string) as ``YYYYMMDD``."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return value.strip().replace("-", "")


def parse_backend_date(yyyymmdd: str) -> date | None:
    """Parse ``YYYYMMDD``; ``None`` if malformed or not a real date."""
    yyyymmdd = (yyyymmdd or "").strip()
    if len(yyyymmdd) != 8 or not yyyymmdd.isdigit():
        return None
    try:
        return datetime.strptime(yyyymmdd, "%Y%m%d").date()
    except ValueError:
        return None


def format_date_display(yyyymmdd: str) -> str:
    """``"20260113"`` -> ``"Tue, Jan 13, 2026"``; other input is returned as-is."""
    parsed = parse_backend_date(yyyymmdd)
    if parsed is None:
        return yyyymmdd
    return (
        f"{_DAY_ABBREVIATIONS[parsed.weekday()]}, "
        f"{MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}, {parsed.year}"
    )
