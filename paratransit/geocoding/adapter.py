"""Resolve rider-entered addresses into backend-ready :class:`GeocodedAddress`."""

from __future__ import annotations

import logging
import re

from paratransit.errors import BookingError, ErrorCategory
from paratransit.models.booking import GeocodedAddress
from paratransit.soap.convert import degrees_to_microdegrees

from .base import Geocoder

log = logging.getLogger("paratransit.geocoding")

# "10232 105 Ave", "12-4567 Main St" -> leading civic number
_LEADING_NUMBER_RE = re.compile(r"^\s*(?:\d+\s*-\s*)?(\d+[A-Za-z]?)\b")


def leading_street_number(text: str) -> str:
    """Return the civic number the address text starts with, or ``""``.

    A unit prefix such as ``"12-4567 Main St"`` yields the civic part
    (``"4567"``).
    """
    match = _LEADING_NUMBER_RE.match(text or "")
    return match.group(1) if match else ""


async def resolve_address(geocoder: Geocoder, text: str) -> GeocodedAddress:
    """Geocode ``text`` for a booking.

    Always queries the provider: results are never cached across calls.

    Raises:
        BookingError: ``VALIDATION_ERROR`` when the address is empty or not
            found; ``NETWORK_ERROR`` if the provider is unreachable.
    """
    text = (text or "").strip()
    if not text:
        raise BookingError(
            ErrorCategory.VALIDATION_ERROR, "An address is required."
        )

    candidate = await geocoder.geocode(text)
    if candidate is None:
        log.info("Geocoder found no match for address")
        raise BookingError(
            ErrorCategory.VALIDATION_ERROR,
            f"Could not find the address '{text}'. "
            "Please check the street number and name.",
        )

    street_number = candidate.house_number or leading_street_number(text)

    return GeocodedAddress(
        text=text,
        latitude=degrees_to_microdegrees(candidate.latitude),
        longitude=degrees_to_microdegrees(candidate.longitude),
        street_number=street_number,
        street_name=candidate.road,
        city=candidate.city,
        state=candidate.state,
        postal_code=candidate.postcode,
    )
