"""Unit tests for time range helpers."""
import time
from datetime import datetime, timedelta, timezone

import pytest

from processor.models import TimeRange
from processor.time_range import (
    current_day_range,
    custom_range,
    format_date_local,
    format_time_local,
    parse_instant,
    to_api_string,
)


@pytest.fixture
def new_york_tz(monkeypatch):
    """Pin the process time zone to one that observes daylight saving."""
    if not hasattr(time, 'tzset'):
        pytest.skip('time.tzset is not available on this platform')
    monkeypatch.setenv('TZ', 'America/New_York')
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestCurrentDayRange:
    """Test cases for current_day_range."""

    def test_starts_at_local_midnight(self):
        """Test that the range starts at 00:00:00.000 local time."""
        time_range = current_day_range(datetime(2024, 3, 15, 14, 30))

        assert time_range.start.hour == 0
        assert time_range.start.minute == 0
        assert time_range.start.second == 0
        assert time_range.start.microsecond == 0
        assert time_range.start.date() == datetime(2024, 3, 15).date()

    def test_ends_at_last_millisecond(self):
        """Test that the range ends at 23:59:59.999 local time."""
        time_range = current_day_range(datetime(2024, 3, 15, 14, 30))

        assert time_range.end.hour == 23
        assert time_range.end.minute == 59
        assert time_range.end.second == 59
        assert time_range.end.microsecond == 999000
        assert time_range.end.date() == datetime(2024, 3, 15).date()

    def test_defaults_to_now(self):
        """Test that the range covers the current moment."""
        time_range = current_day_range()
        now = datetime.now().astimezone()

        assert time_range.start <= now <= time_range.end + timedelta(seconds=1)
        assert time_range.start.tzinfo is not None

    def test_spring_forward_day(self, new_york_tz):
        """Test that midnight keeps standard time on the day clocks go forward."""
        time_range = current_day_range(datetime(2024, 3, 10, 16, 0, tzinfo=timezone.utc))

        assert time_range.start.astimezone(timezone.utc) == datetime(
            2024, 3, 10, 5, 0, tzinfo=timezone.utc
        )
        assert time_range.end.astimezone(timezone.utc) == datetime(
            2024, 3, 11, 3, 59, 59, 999000, tzinfo=timezone.utc
        )

    def test_fall_back_day(self, new_york_tz):
        time_range = current_day_range(datetime(2024, 11, 3, 16, 0, tzinfo=timezone.utc))

        assert time_range.start.astimezone(timezone.utc) == datetime(
            2024, 11, 3, 4, 0, tzinfo=timezone.utc
        )
        assert time_range.end.astimezone(timezone.utc) == datetime(
            2024, 11, 4, 4, 59, 59, 999000, tzinfo=timezone.utc
        )


class TestCustomRange:
    """Test cases for custom_range."""

    def test_passes_through(self):
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        end = datetime(2024, 3, 7, tzinfo=timezone.utc)

        assert custom_range(start, end) == TimeRange(start=start, end=end)

    def test_does_not_enforce_order(self):
        """Test that a reversed range is returned as given."""
        start = datetime(2024, 3, 7, tzinfo=timezone.utc)
        end = datetime(2024, 3, 1, tzinfo=timezone.utc)

        time_range = custom_range(start, end)

        assert time_range.start == start
        assert time_range.end == end

    def test_rejects_non_datetime(self):
        with pytest.raises(TypeError):
            custom_range('2024-03-01', datetime(2024, 3, 7))


class TestFormatting:
    """Test cases for instant parsing and formatting."""

    def test_parse_instant_with_z_suffix(self):
        instant = parse_instant('2024-03-15T09:00:00Z')

        assert instant == datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc)

    def test_parse_instant_with_offset(self):
        instant = parse_instant('2024-03-15T09:00:00-05:00')

        assert instant.astimezone(timezone.utc).hour == 14

    def test_parse_instant_invalid(self):
        with pytest.raises(ValueError):
            parse_instant('not a date')

    def test_to_api_string_is_utc_with_milliseconds(self):
        instant = datetime(2024, 3, 15, 9, 0, tzinfo=timezone(timedelta(hours=2)))

        assert to_api_string(instant) == '2024-03-15T07:00:00.000Z'

    def test_format_local_zero_padded(self):
        """Test zero padding of local date and time."""
        instant = datetime(2024, 1, 5, 7, 3).astimezone()

        assert format_date_local(instant) == '2024-01-05'
        assert format_time_local(instant) == '07:03'

    def test_format_uses_local_time_zone(self):
        """Test that formatting converts to local time, not UTC."""
        instant = datetime(2024, 3, 15, 23, 30, tzinfo=timezone.utc)
        local = instant.astimezone()

        assert format_date_local(instant) == local.strftime('%Y-%m-%d')
        assert format_time_local(instant) == local.strftime('%H:%M')
