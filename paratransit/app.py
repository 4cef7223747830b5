"""FastAPI application: HTTP endpoints over :class:`BookingService`.

Endpoints:

  GET    /health                                       Health check
  POST   /api/bookings/validate                        Booking-window check
  POST   /api/cancellations/validate                   Cancellation-notice check
  POST   /api/clients/{client_id}/bookings             Book a trip
  GET    /api/clients/{client_id}/trips                List trips
  DELETE /api/clients/{client_id}/trips/{booking_id}   Cancel a trip
  GET    /api/clients/{client_id}/locations            Saved locations
  GET    /api/clients/{client_id}/booking-days         Open booking dates
  GET    /api/clients/{client_id}/booking-times        Bookable hours on a date
  GET    /api/clients/{client_id}/frequent-trips       Most frequent trips
  GET    /api/clients/{client_id}/profile              Client account record
  GET    /api/mobility-aids                            Mobility aid codes

Routes under ``/api/clients`` and ``/api/mobility-aids`` need the backend
session as a Bearer token.
"""

from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlsplit

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
)

from fastapi import Depends, FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from paratransit import __version__
from paratransit.auth import require_session
from paratransit.config import settings
from paratransit.errors import BookingFailure, ErrorCategory
from paratransit.models.booking import BookingIntent
from paratransit.models.status import TripStatusCode
from paratransit.service import BookingService

log = logging.getLogger("paratransit.app")

_START_TIME = time.time()

# HTTP status for each failure category
_FAILURE_STATUS = {
    ErrorCategory.VALIDATION_ERROR: 422,
    ErrorCategory.BUSINESS_RULE_VIOLATION: 422,
    ErrorCategory.BOOKING_CONFLICT: 409,
    ErrorCategory.AUTH_FAILURE: 401,
    ErrorCategory.SESSION_EXPIRED: 401,
    ErrorCategory.NETWORK_ERROR: 502,
    ErrorCategory.SYSTEM_ERROR: 502,
}


class CancellationCheck(BaseModel):
    trip_date: str
    pickup_start: str


def _failure_response(failure: BookingFailure) -> JSONResponse:
    body = failure.model_dump(mode="json")
    body["plain_language_message"] = failure.plain_language_message
    return JSONResponse(body, status_code=_FAILURE_STATUS[failure.category])


def _default_service() -> BookingService:
    from paratransit.geocoding.nominatim import NominatimGeocoder
    from paratransit.transport.http import HttpTransport

    return BookingService(HttpTransport(settings), NominatimGeocoder(settings), settings)


def create_app(service: BookingService | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    service = service or _default_service()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await service.aclose()

    app = FastAPI(
        title="Paratransit Booking",
        description="Book, list and cancel paratransit trips",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health():
        config = service.settings
        return {
            "status": "ok",
            "version": __version__,
            "backend_host": urlsplit(config.api_url).hostname,
            "timezone": config.timezone,
            "uptime": round(time.time() - _START_TIME, 1),
        }

    # ── Local rule checks ──────────────────────────────────────

    @app.post("/api/bookings/validate")
    async def validate_booking(intent: BookingIntent):
        return service.validate_booking(intent)

    @app.post("/api/cancellations/validate")
    async def validate_cancellation(check: CancellationCheck):
        return service.validate_cancellation(check.trip_date, check.pickup_start)

    # ── Client-scoped operations ───────────────────────────────

    @app.post("/api/clients/{client_id}/bookings")
    async def book_trip(
        client_id: str,
        intent: BookingIntent,
        session_token: str = Depends(require_session),
    ):
        result = await service.book_trip(session_token, client_id, intent)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    @app.get("/api/clients/{client_id}/trips")
    async def get_trips(
        client_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        include_all: bool = False,
        status: Optional[list[TripStatusCode]] = Query(default=None),
        session_token: str = Depends(require_session),
    ):
        result = await service.get_trips(
            session_token,
            client_id,
            from_date,
            to_date,
            include_all=include_all,
            statuses=status,
        )
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    @app.delete("/api/clients/{client_id}/trips/{booking_id}")
    async def cancel_trip(
        client_id: str,
        booking_id: str,
        session_token: str = Depends(require_session),
    ):
        outcome = await service.cancel_trip(session_token, client_id, booking_id)
        if not outcome.success and outcome.category is not None:
            return JSONResponse(
                outcome.model_dump(mode="json"),
                status_code=_FAILURE_STATUS[outcome.category],
            )
        return outcome

    @app.get("/api/clients/{client_id}/locations")
    async def get_saved_locations(
        client_id: str, session_token: str = Depends(require_session)
    ):
        result = await service.get_saved_locations(session_token, client_id)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    @app.get("/api/clients/{client_id}/booking-days")
    async def get_booking_days(
        client_id: str, session_token: str = Depends(require_session)
    ):
        result = await service.get_booking_days(session_token, client_id)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return {"dates": result}

    @app.get("/api/clients/{client_id}/booking-times")
    async def get_booking_times(
        client_id: str,
        date: Optional[str] = None,
        session_token: str = Depends(require_session),
    ):
        result = await service.get_booking_times(session_token, client_id, date)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    @app.get("/api/clients/{client_id}/frequent-trips")
    async def get_frequent_trips(
        client_id: str, session_token: str = Depends(require_session)
    ):
        result = await service.get_frequent_trips(session_token, client_id)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    @app.get("/api/clients/{client_id}/profile")
    async def get_client_profile(
        client_id: str, session_token: str = Depends(require_session)
    ):
        result = await service.get_client_profile(session_token, client_id)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    @app.get("/api/mobility-aids")
    async def get_mobility_aids(session_token: str = Depends(require_session)):
        result = await service.get_mobility_aids(session_token)
        if isinstance(result, BookingFailure):
            return _failure_response(result)
        return result

    return app


def main() -> None:
    import uvicorn

    for warning in settings.validate_startup():
        log.warning(warning)

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "paratransit.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=log_config,
    )


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    main()
