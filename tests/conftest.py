"""Shared fakes and fixtures."""

import os
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from paratransit.geocoding.base import GeocodeCandidate, Geocoder
from paratransit.transport.base import Transport

EDMONTON = ZoneInfo("America/Edmonton")


def at(year, month, day, hour=0, minute=0):
    """An aware datetime in Edmonton."""
    return datetime(year, month, day, hour, minute, tzinfo=EDMONTON)


def soap_response(operation: str, inner: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">'
        f"<SOAP-ENV:Body><{operation}Response>{inner}</{operation}Response>"
        "</SOAP-ENV:Body></SOAP-ENV:Envelope>"
    )


class FakeTransport(Transport):
    """Replays canned responses keyed by operation name and records requests."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str, bool]] = []
        self.closed = False

    @staticmethod
    def operation_of(body: str) -> str:
        start = body.index("<SOAP-ENV:Body>") + len("<SOAP-ENV:Body>")
        rest = body[start:].lstrip()
        return rest[1:rest.index(">")]

    async def post(self, body, session_token, *, use_async_endpoint=False):
        operation = self.operation_of(body)
        self.calls.append((operation, body, use_async_endpoint))
        response = self.responses[operation]
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self):
        self.closed = True

    @property
    def operations(self) -> list[str]:
        return [op for op, _, _ in self.calls]


class FakeGeocoder(Geocoder):
    def __init__(self, results=None):
        self.results = dict(results or {})
        self.queries: list[str] = []
        self.closed = False

    async def geocode(self, address):
        self.queries.append(address)
        return self.results.get(address)

    async def aclose(self):
        self.closed = True


CITY_HALL = GeocodeCandidate(
    latitude=53.544389,
    longitude=-113.490927,
    house_number="1",
    road="Sir Winston Churchill Square",
    city="Edmonton",
    state="Alberta",
    postcode="T5J 2R7",
    display_name="City Hall, Edmonton",
)

HOSPITAL = GeocodeCandidate(
    latitude=53.520729,
    longitude=-113.524233,
    house_number="",
    road="112 Street NW",
    city="Edmonton",
    state="Alberta",
    postcode="T6G 2B7",
    display_name="University Hospital, Edmonton",
)


@pytest.fixture
def geocoder():
    return FakeGeocoder(
        {
            "1 Sir Winston Churchill Sq": CITY_HALL,
            "8440 112 St NW": HOSPITAL,
        }
    )
