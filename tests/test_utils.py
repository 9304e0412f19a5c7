"""Tests for shared time helpers."""

from datetime import date, datetime

import pytest

from booking_chain.exceptions import InvalidTimeError
from booking_chain.utils import add_minutes, at_time, format_hhmm, parse_date, parse_hhmm


class TestParseHhmm:
    def test_basic(self):
        assert parse_hhmm("09:30") == 570

    def test_single_digit_hour(self):
        assert parse_hhmm("9:05") == 545

    def test_strips_whitespace(self):
        assert parse_hhmm(" 13:00 ") == 780

    def test_end_of_day(self):
        assert parse_hhmm("24:00") == 1440

    @pytest.mark.parametrize("value", ["", "9", "9am", "10:5", "10:60", "24:01", "-1:00", "ab:cd"])
    def test_invalid(self, value):
        with pytest.raises(InvalidTimeError):
            parse_hhmm(value)


class TestFormatHhmm:
    def test_pads(self):
        assert format_hhmm(545) == "09:05"

    def test_round_trip_of_day_end(self):
        assert format_hhmm(1440) == "24:00"


class TestDates:
    def test_parse_string(self):
        assert parse_date("2025-03-10") == date(2025, 3, 10)

    def test_datetime_passes_through_as_date(self):
        assert parse_date(datetime(2025, 3, 10, 9, 0)) == date(2025, 3, 10)

    def test_invalid_date(self):
        with pytest.raises(InvalidTimeError):
            parse_date("2025-02-30")

    def test_at_time_and_add_minutes(self):
        moment = at_time(date(2025, 3, 10), "23:30")
        assert moment == datetime(2025, 3, 10, 23, 30)
        assert add_minutes(moment, 45) == datetime(2025, 3, 11, 0, 15)
