"""Abstract base class for geocoding providers.

A provider turns free-text into at most one candidate with decimal-degree
coordinates and structured address parts.  The adapter in
:mod:`paratransit.geocoding.adapter` converts that into the backend's
conventions, so providers never need to know about microdegrees.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GeocodeCandidate:
    """Best match for an address, as reported by the provider."""

    latitude: float
    longitude: float
    house_number: str = ""
    road: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    display_name: str = ""


class Geocoder(ABC):
    """Abstract geocoding provider."""

    @abstractmethod
    async def geocode(self, address: str) -> GeocodeCandidate | None:
        """Resolve ``address`` to its best candidate.

        Returns:
            The top candidate, or ``None`` if the provider found nothing.

        Raises:
            BookingError: ``NETWORK_ERROR`` if the provider is unreachable.
        """

    async def aclose(self) -> None:
        """Release provider resources. Safe to call more than once."""
