"""Tests for the geocoding provider and address adapter."""

import httpx
import pytest

from conftest import CITY_HALL, HOSPITAL, FakeGeocoder
from paratransit.config import Settings
from paratransit.errors import BookingError, ErrorCategory
from paratransit.geocoding import Geocoder, leading_street_number, resolve_address
from paratransit.geocoding.nominatim import NominatimGeocoder

NOMINATIM_RESULT = [
    {
        "lat": "53.5443890",
        "lon": "-113.4909270",
        "display_name": "1, Sir Winston Churchill Square, Edmonton, Alberta, T5J 2R7, Canada",
        "address": {
            "house_number": "1",
            "road": "Sir Winston Churchill Square",
            "town": "Edmonton",
            "state": "Alberta",
            "postcode": "T5J 2R7",
        },
    }
]


def _geocoder(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NominatimGeocoder(Settings(geocoder_user_agent="test-agent/1.0"), client)


# ── ABC contract ───────────────────────────────────────────────────


class TestGeocoderABC:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            Geocoder()


# ── Nominatim provider ─────────────────────────────────────────────


class TestNominatimGeocoder:
    async def test_request_and_parse(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            seen["agent"] = request.headers["user-agent"]
            return httpx.Response(200, json=NOMINATIM_RESULT)

        candidate = await _geocoder(handler).geocode("1 Sir Winston Churchill Sq")

        assert seen["params"]["q"] == "1 Sir Winston Churchill Sq"
        assert seen["params"]["format"] == "jsonv2"
        assert seen["params"]["addressdetails"] == "1"
        assert seen["params"]["limit"] == "1"
        assert seen["params"]["countrycodes"] == "ca"
        assert seen["agent"] == "test-agent/1.0"

        assert candidate.latitude == pytest.approx(53.544389)
        assert candidate.house_number == "1"
        assert candidate.city == "Edmonton"  # from "town"
        assert candidate.postcode == "T5J 2R7"

    async def test_no_match(self):
        candidate = await _geocoder(lambda r: httpx.Response(200, json=[])).geocode("nowhere")
        assert candidate is None

    async def test_http_error_is_network_error(self):
        with pytest.raises(BookingError) as exc_info:
            await _geocoder(lambda r: httpx.Response(503)).geocode("x")
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR

    async def test_connection_failure_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BookingError) as exc_info:
            await _geocoder(handler).geocode("x")
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR

    async def test_non_json_is_network_error(self):
        with pytest.raises(BookingError) as exc_info:
            await _geocoder(lambda r: httpx.Response(200, text="<html>")).geocode("x")
        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR

    async def test_does_not_close_injected_client(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))
        geocoder = NominatimGeocoder(Settings(), client)
        await geocoder.aclose()
        assert not client.is_closed
        await client.aclose()


# ── Adapter ────────────────────────────────────────────────────────


class TestLeadingStreetNumber:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("8440 112 St NW", "8440"),
            ("12-4567 Main St", "4567"),
            ("10B Elm Ave", "10B"),
            ("City Hall", ""),
            ("", ""),
        ],
    )
    def test_extract(self, text, expected):
        assert leading_street_number(text) == expected


class TestResolveAddress:
    async def test_converts_to_microdegrees(self, geocoder):
        address = await resolve_address(geocoder, "1 Sir Winston Churchill Sq")
        assert address.latitude == 53544389
        assert address.longitude == -113490927
        assert address.street_number == "1"
        assert address.street_name == "Sir Winston Churchill Square"
        assert address.postal_code == "T5J 2R7"
        assert address.text == "1 Sir Winston Churchill Sq"

    async def test_falls_back_to_text_street_number(self, geocoder):
        address = await resolve_address(geocoder, "8440 112 St NW")
        assert HOSPITAL.house_number == ""
        assert address.street_number == "8440"

    async def test_miss_is_validation_error(self):
        with pytest.raises(BookingError) as exc_info:
            await resolve_address(FakeGeocoder(), "999 Nowhere Rd")
        assert exc_info.value.category == ErrorCategory.VALIDATION_ERROR
        assert "999 Nowhere Rd" in exc_info.value.message

    async def test_empty_address_is_validation_error_without_lookup(self):
        geocoder = FakeGeocoder({"": CITY_HALL})
        with pytest.raises(BookingError) as exc_info:
            await resolve_address(geocoder, "   ")
        assert exc_info.value.category == ErrorCategory.VALIDATION_ERROR
        assert geocoder.queries == []

    async def test_never_cached(self, geocoder):
        await resolve_address(geocoder, "1 Sir Winston Churchill Sq")
        await resolve_address(geocoder, "1 Sir Winston Churchill Sq")
        assert len(geocoder.queries) == 2
