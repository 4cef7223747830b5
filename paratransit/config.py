"""Application configuration via environment variables."""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings

log = logging.getLogger("paratransit.config")


class Settings(BaseSettings):
    # Booking backend
    api_url: str = "https://datsonlinebooking.edmonton.ca/PassInfoServer"
    api_async_url: str = "https://datsonlinebooking.edmonton.ca/PassInfoServerAsync"
    request_timeout_seconds: float = 30.0

    # Calendar arithmetic for booking rules happens in this zone
    timezone: str = "America/Edmonton"

    # Geocoding
    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    geocoder_user_agent: str = "paratransit-booking/0.1"
    geocoder_country_codes: str = "ca"

    # Shown to riders who must cancel by phone
    office_phone: str = "780-986-6010"

    # Default trip query range when no end date is given
    trip_lookahead_days: int = 60

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "PARATRANSIT_",
        "extra": "ignore",
    }

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(
                f"PARATRANSIT_TIMEZONE={self.timezone!r} is not a known IANA zone."
            ) from exc

        if not self.api_url.startswith("https://"):
            warnings.append(
                "PARATRANSIT_API_URL is not HTTPS. Session cookies will be sent in clear text."
            )

        if "nominatim.openstreetmap.org" in self.geocoder_url and (
            not self.geocoder_user_agent or "paratransit-booking" in self.geocoder_user_agent
        ):
            warnings.append(
                "Using the public Nominatim service with the default User-Agent. "
                "Set PARATRANSIT_GEOCODER_USER_AGENT to identify your deployment."
            )

        if self.request_timeout_seconds <= 0:
            raise ValueError("PARATRANSIT_REQUEST_TIMEOUT_SECONDS must be positive.")

        return warnings


settings = Settings()
