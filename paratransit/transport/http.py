"""httpx-backed transport for the PassInfoServer endpoints."""

from __future__ import annotations

import logging

import httpx

from paratransit.config import Settings, settings as default_settings
from paratransit.constants import DEBUG_LOG_MAX_LENGTH
from paratransit.errors import BookingError, ErrorCategory

from .base import Transport

log = logging.getLogger("paratransit.transport")

_HEADERS = {
    "Content-Type": "text/xml;charset=UTF-8",
    "Accept": "application/json, text/plain, */*",
}


class HttpTransport(Transport):
    """Transport that POSTs envelopes over HTTPS with the session cookie.

    Pass ``client`` to share an ``httpx.AsyncClient`` (or inject one built
    on ``httpx.MockTransport`` in tests); otherwise one is created lazily
    and owned by this transport.
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

    async def post(
        self,
        body: str,
        session_token: str,
        *,
        use_async_endpoint: bool = False,
    ) -> str:
        url = (
            self._settings.api_async_url
            if use_async_endpoint
            else self._settings.api_url
        )
        headers = dict(_HEADERS)
        if session_token:
            headers["Cookie"] = session_token

        try:
            resp = await self._get_client().post(
                url, content=body.encode("utf-8"), headers=headers
            )
        except httpx.TimeoutException as exc:
            log.error("Backend request to %s timed out", url)
            raise BookingError(
                ErrorCategory.NETWORK_ERROR,
                "The booking service did not respond in time.",
            ) from exc
        except httpx.TransportError as exc:
            log.error("Backend request to %s failed: %s", url, exc)
            raise BookingError(
                ErrorCategory.NETWORK_ERROR,
                "Could not connect to the booking service.",
            ) from exc

        if resp.status_code in (401, 403):
            log.warning("Backend rejected session (status %d)", resp.status_code)
            raise BookingError(
                ErrorCategory.AUTH_FAILURE,
                "The booking service rejected the session. Please log in again.",
            )
        if resp.status_code >= 400:
            log.error(
                "Backend error %d: %s",
                resp.status_code,
                resp.text[:DEBUG_LOG_MAX_LENGTH],
            )
            raise BookingError(
                ErrorCategory.NETWORK_ERROR,
                f"The booking service returned an error (status {resp.status_code}).",
            )

        text = resp.text
        log.debug("Backend response: %s", text[:DEBUG_LOG_MAX_LENGTH])
        return text

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
