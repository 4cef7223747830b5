"""Tests for backend unit conversions."""

from datetime import date, datetime

import pytest

from paratransit.soap.convert import (
    degrees_to_microdegrees,
    format_date_display,
    microdegrees_to_degrees,
    parse_backend_date,
    parse_seconds,
    seconds_to_time,
    time_to_seconds,
    to_backend_date,
)


# ── Clock times ────────────────────────────────────────────────────


class TestSecondsToTime:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "12:00 AM"),
            (28200, "7:50 AM"),
            (43200, "12:00 PM"),
            (45000, "12:30 PM"),
            (52200, "2:30 PM"),
            (86340, "11:59 PM"),
            (28230, "7:50:30 AM"),
        ],
    )
    def test_format(self, seconds, expected):
        assert seconds_to_time(seconds) == expected

    def test_negative_and_none(self):
        assert seconds_to_time(-1) == ""
        assert seconds_to_time(None) == ""


class TestTimeToSeconds:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2:30 PM", 52200),
            ("2:30pm", 52200),
            ("12:00 AM", 0),
            ("12:15 PM", 44100),
            ("14:30", 52200),
            ("07:05", 25500),
            ("7:50:30 AM", 28230),
        ],
    )
    def test_parse(self, text, expected):
        assert time_to_seconds(text) == expected

    @pytest.mark.parametrize("text", ["", None, "noon", "25:00", "13:00 PM", "0:30 AM", "9:75"])
    def test_invalid(self, text):
        assert time_to_seconds(text) is None

    def test_round_trip_every_second_of_the_day(self):
        for seconds in range(0, 86400):
            assert time_to_seconds(seconds_to_time(seconds)) == seconds


# ── Numbers and coordinates ─────────────────────────────────────────


class TestNumbers:
    def test_parse_seconds(self):
        assert parse_seconds("28800") == 28800
        assert parse_seconds(" 60 ") == 60
        assert parse_seconds("") is None
        assert parse_seconds("abc") is None
        assert parse_seconds(None) is None

    def test_microdegrees(self):
        assert degrees_to_microdegrees(53.544389) == 53544389
        assert degrees_to_microdegrees(-113.490927) == -113490927
        assert degrees_to_microdegrees(53.5) == 53500000
        assert microdegrees_to_degrees(53544389) == pytest.approx(53.544389)


# ── Dates ──────────────────────────────────────────────────────────


class TestDates:
    def test_to_backend_date(self):
        assert to_backend_date(date(2026, 1, 13)) == "20260113"
        assert to_backend_date(datetime(2026, 1, 13, 9, 0)) == "20260113"
        assert to_backend_date("2026-01-13") == "20260113"

    def test_parse_backend_date(self):
        assert parse_backend_date("20260113") == date(2026, 1, 13)
        assert parse_backend_date("20260230") is None
        assert parse_backend_date("2026-01-13") is None
        assert parse_backend_date("") is None

    def test_format_date_display(self):
        assert format_date_display("20260113") == "Tue, Jan 13, 2026"
        assert format_date_display("garbage") == "garbage"
