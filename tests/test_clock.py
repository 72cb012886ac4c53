"""Tests for civil-time helpers."""

from datetime import date, datetime, time, timedelta, timezone

import pytest
import pytz

from timekeeping.calculators.clock import (
    NO_PUNCH_DISPLAY,
    civil_date,
    civil_datetime,
    format_clock,
    format_time_of_day,
    get_zone,
    local_date,
    local_now,
    minutes_of_day,
    parse_civil_date,
    parse_instant,
    parse_time_of_day,
    to_civil,
)
from timekeeping.exceptions import ValidationError


class TestCivilDates:
    """Test conversion of instants to Manila wall-clock values."""

    def test_local_date_crosses_midnight(self):
        """16:30 UTC is already the next day in Manila."""
        instant = datetime(2024, 3, 1, 16, 30, tzinfo=timezone.utc)
        assert local_date(instant) == "2024-03-02"
        assert civil_date(instant) == date(2024, 3, 2)

    def test_local_date_same_day(self):
        instant = datetime(2024, 3, 1, 15, 59, tzinfo=timezone.utc)
        assert local_date(instant) == "2024-03-01"

    def test_other_timezone_can_be_substituted(self):
        """The civil zone is a parameter, not a constant."""
        instant = datetime(2024, 3, 1, 16, 30, tzinfo=timezone.utc)
        assert local_date(instant, "UTC") == "2024-03-01"

    def test_naive_instant_rejected(self):
        with pytest.raises(ValidationError):
            to_civil(datetime(2024, 3, 1, 8, 0))

    def test_local_now_uses_given_instant(self):
        instant = datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)
        now = local_now(now=instant)
        assert (now.hour, now.minute) == (8, 0)
        assert now == instant

    def test_civil_datetime_has_manila_offset(self):
        value = civil_datetime(date(2024, 3, 4), time(8, 0))
        assert value.utcoffset() == timedelta(hours=8)
        assert value.astimezone(timezone.utc).hour == 0

    def test_unknown_zone_rejected(self):
        with pytest.raises(ValidationError):
            get_zone("Mars/Olympus_Mons")

    def test_tzinfo_passes_through(self):
        zone = pytz.timezone("Asia/Tokyo")
        assert get_zone(zone) is zone

    def test_minutes_of_day(self):
        assert minutes_of_day(time(13, 45, 59)) == 13 * 60 + 45


class TestFormatting:
    """Test 12-hour display formatting."""

    def test_format_clock_afternoon(self):
        instant = datetime(2024, 3, 1, 5, 5, tzinfo=timezone.utc)
        assert format_clock(instant) == "1:05 PM"

    def test_format_clock_midnight(self):
        instant = datetime(2024, 3, 1, 16, 0, tzinfo=timezone.utc)
        assert format_clock(instant) == "12:00 AM"

    def test_format_clock_missing_punch(self):
        assert format_clock(None) == NO_PUNCH_DISPLAY == "--:--"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("13:00", "1:00 PM"),
            ("00:05", "12:05 AM"),
            ("12:00", "12:00 PM"),
            ("08:30", "8:30 AM"),
            ("", ""),
        ],
    )
    def test_format_time_of_day(self, value, expected):
        assert format_time_of_day(value) == expected

    @pytest.mark.parametrize("value", ["25:00", "abc", "8:30", "12:60"])
    def test_format_time_of_day_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            format_time_of_day(value)


class TestParsing:
    """Test strict parsing of date and time strings."""

    def test_parse_time_of_day(self):
        assert parse_time_of_day("08:30") == time(8, 30)

    def test_parse_time_of_day_with_seconds(self):
        assert parse_time_of_day("17:00:15") == time(17, 0, 15)

    @pytest.mark.parametrize("value", ["24:00", "0830", "", None, "08:30 PM"])
    def test_parse_time_of_day_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_time_of_day(value)

    def test_parse_civil_date(self):
        assert parse_civil_date("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024/02/01", "24-02-01", "2024-2-1"])
    def test_parse_civil_date_rejects(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_civil_date(value)
        assert exc_info.value.field == "date"

    def test_parse_instant_accepts_z_suffix(self):
        parsed = parse_instant("2024-03-01T00:00:00Z")
        assert parsed == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_parse_instant_with_offset(self):
        parsed = parse_instant("2024-03-01T08:00:00+08:00")
        assert parsed == datetime(2024, 3, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["2024-03-01T00:00:00", "yesterday"])
    def test_parse_instant_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_instant(value)
