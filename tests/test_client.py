"""Tests for backend operations and response parsers."""

from datetime import date

import pytest

from conftest import FakeTransport, soap_response
from paratransit.client import (
    GENERIC_BACKEND_ERROR,
    PassInfoClient,
    backend_error,
    create_trip_params,
    parse_booking_days,
    parse_booking_times,
    parse_client_profile,
    parse_mobility_aids,
    parse_saved_locations,
    parse_solutions,
    redact,
)
from paratransit.errors import BookingError, ErrorCategory
from paratransit.models.booking import AdditionalPassenger, BookingIntent, GeocodedAddress
from paratransit.soap.envelope import build_request

PICKUP = GeocodedAddress(
    text="1 Sir Winston Churchill Sq",
    latitude=53544389,
    longitude=-113490927,
    street_number="1",
    street_name="Sir Winston Churchill Square",
    city="Edmonton",
    state="Alberta",
    postal_code="T5J 2R7",
)
DROPOFF = GeocodedAddress(text="8440 112 St NW", latitude=53520729, longitude=-113524233, street_number="8440")


# ── Error detection ────────────────────────────────────────────────


class TestBackendError:
    def test_clean_response(self):
        assert backend_error(soap_response("PassCreateTrip", "<BookingId>1</BookingId>")) is None
        assert backend_error("") is None

    def test_result_error_with_message(self):
        xml = "<Result>RESULTERROR</Result><Message>Client is suspended</Message>"
        assert backend_error(xml) == "Client is suspended"

    def test_error_message_preferred(self):
        xml = "<Error><ErrorMessage>Time not available</ErrorMessage></Error><Message>other</Message>"
        assert backend_error(xml) == "Time not available"

    def test_soap_fault(self):
        xml = "<SOAP-ENV:Fault><faultcode>Server</faultcode><faultstring>Session expired</faultstring></SOAP-ENV:Fault>"
        assert backend_error(xml) == "Session expired"

    def test_plain_error_element(self):
        assert backend_error("<Error>Bad date</Error>") == "Bad date"

    def test_marker_without_text(self):
        assert backend_error("<Result>RESULTERROR</Result>") == GENERIC_BACKEND_ERROR

    def test_empty_error_elements_are_not_errors(self):
        assert backend_error("<Result>RESULTOK</Result><ErrorMessage></ErrorMessage><Error/>") is None


# ── Response parsers ───────────────────────────────────────────────


class TestParseSolutions:
    def test_in_backend_order(self):
        xml = soap_response(
            "PassScheduleTrip",
            "<Solution><ScheduleId>S1</ScheduleId><SolutionSetNum>1</SolutionSetNum><SolutionNum>1</SolutionNum>"
            "<SchEarly>28200</SchEarly><SchLate>30000</SchLate><EstDropoff>31500</EstDropoff><Fare>3.50</Fare></Solution>"
            "<Solution><ScheduleId>S1</ScheduleId><SolutionSetNum>1</SolutionSetNum><SolutionNum>2</SolutionNum></Solution>",
        )
        first, second = parse_solutions(xml)
        assert first.key == ("S1", "1", "1")
        assert (first.window_start, first.window_end, first.estimated_dropoff) == (28200, 30000, 31500)
        assert first.fare == 3.5
        assert second.key == ("S1", "1", "2")
        assert second.window_start is None
        assert second.fare is None

    def test_incomplete_key_dropped(self):
        xml = "<Solution><ScheduleId>S1</ScheduleId><SolutionNum>1</SolutionNum></Solution>"
        assert parse_solutions(xml) == []

    def test_none(self):
        assert parse_solutions(soap_response("PassScheduleTrip", "")) == []


class TestOtherParsers:
    def test_saved_locations(self):
        xml = (
            "<Location><LocationId>10</LocationId><AddrName>Home</AddrName><StreetNo>123</StreetNo>"
            "<OnStreet>Main St</OnStreet><City>Edmonton</City><State>AB</State><ZipCode>T5A 0A1</ZipCode></Location>"
            "<Location><LocationId>11</LocationId><SiteName>Clinic</SiteName><OnStreet>Jasper Ave</OnStreet></Location>"
        )
        home, clinic = parse_saved_locations(xml)
        assert (home.location_id, home.name, home.address, home.postal_code) == ("10", "Home", "123 Main St", "T5A 0A1")
        assert (clinic.name, clinic.address) == ("Clinic", "Jasper Ave")

    def test_booking_days(self):
        xml = "<Date>20260113</Date><Date>20260114</Date>"
        assert parse_booking_days(xml) == ["Tue, Jan 13, 2026", "Wed, Jan 14, 2026"]

    def test_booking_times_fall_back_to_service_hours(self):
        window = parse_booking_times("<EarliestTime>0</EarliestTime>", "20260114")
        assert (window.earliest, window.latest) == ("6:00 AM", "11:00 PM")
        window = parse_booking_times("<EarliestTime>27000</EarliestTime><LatestTime>81000</LatestTime>", "20260114")
        assert (window.earliest, window.latest) == ("7:30 AM", "10:30 PM")

    def test_client_profile_without_record(self):
        assert parse_client_profile(soap_response("PassGetClientInfo", "")) is None

    def test_client_profile_outside_result_wrapper(self):
        profile = parse_client_profile("<ClientId>12345</ClientId><FirstName>Pat</FirstName>")
        assert (profile.client_id, profile.first_name, profile.last_name) == ("12345", "Pat", "")

    def test_mobility_aid_without_code_dropped(self):
        xml = "<MobilityAid><Description>Unknown</Description></MobilityAid><MobilityAid><MobAidCode>WA</MobAidCode></MobilityAid>"
        assert [a.code for a in parse_mobility_aids(xml)] == ["WA"]


# ── Request parameters ─────────────────────────────────────────────


class TestCreateTripParams:
    def test_full_intent(self):
        intent = BookingIntent(
            pickup_date="2026-01-14",
            pickup_time="14:30",
            pickup_address=PICKUP.text,
            destination_address=DROPOFF.text,
            mobility_device="scooter",
            additional_passenger=AdditionalPassenger(type="pca"),
            pickup_phone="780-555-0101",
            dropoff_comments="Main entrance",
            purpose="medical",
        )
        body = build_request(
            "PassCreateTrip",
            create_trip_params("12345", date(2026, 1, 14), 52200, intent, PICKUP, DROPOFF),
        )
        assert "<ClientId>12345</ClientId>" in body
        assert "<Date>20260114</Date>" in body
        assert "<ReqTime>52200</ReqTime>" in body
        assert "<Lat>53544389</Lat>" in body
        assert "<Lon>-113490927</Lon>" in body
        assert "<MobAidCode>SC</MobAidCode>" in body
        assert "<PassengerType>PCA</PassengerType>" in body
        assert "<NumPassengers>1</NumPassengers>" in body
        assert "<Comments>Main entrance</Comments>" in body
        assert "<Purpose>medical</Purpose>" in body
        assert body.count("<ReqTime>") == 1

    def test_minimal_intent_omits_optional_parts(self):
        intent = BookingIntent(
            pickup_date="2026-01-14",
            pickup_time="09:00",
            pickup_address=PICKUP.text,
            destination_address=DROPOFF.text,
            mobility_device="none",
        )
        params = create_trip_params("12345", date(2026, 1, 14), 32400, intent, PICKUP, DROPOFF)
        assert "MobAids" not in params
        assert "Passengers" not in params
        assert "Purpose" not in params
        body = build_request("PassCreateTrip", params)
        assert "<Phone>" not in body
        assert "<AddrOn>" in body  # pickup street
        assert body.count("<AddrOn>") == 1  # dropoff has no street name


# ── Client ─────────────────────────────────────────────────────────


class TestPassInfoClient:
    async def test_schedule_uses_async_endpoint(self):
        transport = FakeTransport({"PassScheduleTrip": soap_response("PassScheduleTrip", "")})
        await PassInfoClient(transport).schedule_trip("cookie", "B1")
        operation, body, use_async = transport.calls[0]
        assert operation == "PassScheduleTrip"
        assert use_async is True
        assert "<BookingId>B1</BookingId>" in body

    async def test_get_client_trips_request(self):
        transport = FakeTransport({"PassGetClientTrips": soap_response("PassGetClientTrips", "")})
        await PassInfoClient(transport).get_client_trips(
            "cookie", "12345", date(2026, 1, 13), date(2026, 3, 14)
        )
        _, body, use_async = transport.calls[0]
        assert use_async is False
        assert "<FromDate>20260113</FromDate>" in body
        assert "<ToDate>20260314</ToDate>" in body
        assert "<SchTypeId>1</SchTypeId>" in body

    async def test_read_operations_request_shape(self):
        empty = {
            op: soap_response(op, "")
            for op in (
                "PassBookingTimesWindow",
                "PassGetMostFrequentClientTrips",
                "PassGetClientInfo",
                "PassGetAllMobilityAids",
            )
        }
        transport = FakeTransport(empty)
        client = PassInfoClient(transport)
        await client.get_booking_times_window("cookie", "12345", date(2026, 1, 14))
        await client.get_frequent_trips("cookie", "12345")
        await client.get_client_info("cookie", "12345")
        await client.get_mobility_aids("cookie")

        times, frequent, info, aids = (body for _, body, _ in transport.calls)
        assert "<ClientId>12345</ClientId>" in times
        assert "<Date>20260114</Date>" in times
        assert "<ClientId>12345</ClientId>" in frequent
        assert "<ClientId>12345</ClientId>" in info
        assert "<PassGetAllMobilityAids>" in aids
        assert "ClientId" not in aids
        assert not any(use_async for _, _, use_async in transport.calls)

    async def test_query_backend_error_raises(self):
        transport = FakeTransport(
            {"PassGetClientLocationsMerged": "<Result>RESULTERROR</Result><Message>No such client</Message>"}
        )
        with pytest.raises(BookingError) as exc_info:
            await PassInfoClient(transport).get_client_locations("cookie", "12345")
        assert exc_info.value.message == "No such client"
        assert exc_info.value.category == ErrorCategory.SYSTEM_ERROR


class TestRedact:
    def test_masks_middle(self):
        assert redact("1234567890") == "123***90"

    @pytest.mark.parametrize("value", ["", None, "12345"])
    def test_short_values_fully_masked(self, value):
        assert redact(value) == "***"
