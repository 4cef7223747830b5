"""Date helpers: explicit-timezone "now", relative dates, backend date forms.

Nothing here reads the process's local clock or zone.  Callers pass the
reference instant and the zone, so tests can pin both.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from paratransit.constants import DAY_NAMES, MONTH_ABBREVIATIONS
from paratransit.soap.convert import parse_backend_date

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_COMPACT_DATE_RE = re.compile(r"^\d{8}$")
# "Tuesday, January 13, 2026", "Tue, Jan 13, 2026", "Jan 13, 2026", "January 13 2026"
_TEXT_DATE_RE = re.compile(r"([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})")
_MONTHS = {name.lower(): i + 1 for i, name in enumerate(MONTH_ABBREVIATIONS)}


def localize(moment: datetime, tz: ZoneInfo) -> datetime:
    """Express ``moment`` in ``tz``; a naive value is taken to already be in ``tz``."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def now_in(tz: ZoneInfo) -> datetime:
    return datetime.now(tz=tz)


def today_in(tz: ZoneInfo, now: datetime | None = None) -> date:
    return localize(now, tz).date() if now is not None else now_in(tz).date()


def parse_iso_date(text: str) -> date | None:
    """Parse ``YYYY-MM-DD``; ``None`` if malformed or impossible (Feb 30)."""
    text = (text or "").strip()
    if not _ISO_DATE_RE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_trip_date(text: str) -> date | None:
    """Parse any date form the backend or a rider may hand us.

    Accepts ``YYYY-MM-DD``, ``YYYYMMDD`` and free text such as
    ``"Tuesday, January 13, 2026"`` or ``"Jan 13, 2026"``.
    """
    text = (text or "").strip()
    if not text:
        return None
    if _ISO_DATE_RE.match(text):
        return parse_iso_date(text)
    if _COMPACT_DATE_RE.match(text):
        return parse_backend_date(text)

    # The month word is the one followed by the day number; a leading
    # weekday ("Tuesday,") is skipped because it isn't followed by digits.
    match = _TEXT_DATE_RE.search(text)
    if not match:
        return None
    month = _MONTHS.get(match.group(1).lower()[:3])
    if month is None:
        return None
    try:
        return date(int(match.group(3)), month, int(match.group(2)))
    except ValueError:
        return None


def normalize_trip_date(text: str) -> str:
    """Backend display date -> ``YYYY-MM-DD``, or ``""`` if unparseable."""
    parsed = parse_trip_date(text)
    return parsed.isoformat() if parsed else ""


def parse_flexible_date(text: str, today: date) -> str:
    """Resolve rider-friendly dates to ``YYYY-MM-DD`` relative to ``today``.

    Understands ``today``, ``tomorrow``, ``yesterday``, weekday names (the
    next occurrence, never today) and ``next <weekday>``.  Anything else is
    returned unchanged so the booking validator can reject it.
    """
    raw = text or ""
    if _ISO_DATE_RE.match(raw.strip()):
        return raw.strip()

    value = raw.strip().lower()
    if value == "today":
        return today.isoformat()
    if value == "tomorrow":
        return (today + timedelta(days=1)).isoformat()
    if value == "yesterday":
        return (today - timedelta(days=1)).isoformat()

    if value.startswith("next "):
        value = value[5:].strip()
    if value in DAY_NAMES:
        days_until = DAY_NAMES.index(value) - today.weekday()
        if days_until <= 0:
            days_until += 7
        return (today + timedelta(days=days_until)).isoformat()

    return raw
