"""OpenStreetMap Nominatim geocoding provider."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from paratransit.config import Settings, settings as default_settings
from paratransit.errors import BookingError, ErrorCategory

from .base import GeocodeCandidate, Geocoder

log = logging.getLogger("paratransit.geocoding")

# Nominatim reports the locality under different keys depending on size.
_CITY_KEYS = ("city", "town", "village", "municipality", "hamlet")


class NominatimGeocoder(Geocoder):
    """Geocoder backed by the Nominatim ``/search`` API.

    The public instance requires an identifying User-Agent and allows about
    one request per second, which suits a booking flow that resolves two
    addresses per attempt.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.request_timeout_seconds
            )
        return self._client

    async def geocode(self, address: str) -> GeocodeCandidate | None:
        params = {
            "q": address,
            "format": "jsonv2",
            "addressdetails": "1",
            "limit": "1",
        }
        if self._settings.geocoder_country_codes:
            params["countrycodes"] = self._settings.geocoder_country_codes

        try:
            resp = await self._get_client().get(
                self._settings.geocoder_url,
                params=params,
                headers={"User-Agent": self._settings.geocoder_user_agent},
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            log.error("Geocoder returned status %d", exc.response.status_code)
            raise BookingError(
                ErrorCategory.NETWORK_ERROR,
                f"The address lookup service returned an error "
                f"(status {exc.response.status_code}).",
            ) from exc
        except httpx.HTTPError as exc:
            log.error("Geocoder request failed: %s", exc)
            raise BookingError(
                ErrorCategory.NETWORK_ERROR,
                "Could not reach the address lookup service.",
            ) from exc
        except ValueError as exc:
            log.error("Geocoder returned a non-JSON body")
            raise BookingError(
                ErrorCategory.NETWORK_ERROR,
                "The address lookup service sent an unreadable reply.",
            ) from exc

        if not data:
            return None
        return self._to_candidate(data[0])

    @staticmethod
    def _to_candidate(result: dict[str, Any]) -> GeocodeCandidate:
        parts: dict[str, str] = result.get("address", {}) or {}
        city = next((parts[k] for k in _CITY_KEYS if parts.get(k)), "")
        return GeocodeCandidate(
            latitude=float(result["lat"]),
            longitude=float(result["lon"]),
            house_number=parts.get("house_number", ""),
            road=parts.get("road", ""),
            city=city,
            state=parts.get("state", ""),
            postcode=parts.get("postcode", ""),
            display_name=result.get("display_name", ""),
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
