"""Tests for backend date parsing and dashboard date ranges."""

import pytest
from datetime import date

from focusfi.dates import (
    QuickDateRange,
    first_available,
    format_api_date,
    month_range,
    parse_api_date,
    parse_api_date_or_now,
    resolve_quick_range,
    week_start,
)


class TestParseApiDate:
    """Tests for lenient backend date parsing."""

    def test_fractional_seconds_with_z(self):
        """Test extended ISO with fractional seconds."""
        assert parse_api_date("2024-01-15T10:30:00.123Z") == date(2024, 1, 15)

    def test_whole_seconds_with_z(self):
        """Test extended ISO without fractional seconds."""
        assert parse_api_date("2024-01-15T10:30:00Z") == date(2024, 1, 15)

    def test_plain_calendar_date(self):
        """Test `YYYY-MM-DD`."""
        assert parse_api_date("2024-01-15") == date(2024, 1, 15)

    def test_offset_is_converted_to_utc(self):
        """Test that timestamps with an offset take the UTC calendar day."""
        assert parse_api_date("2024-01-15T23:30:00-05:00") == date(2024, 1, 16)

    @pytest.mark.parametrize("value", [None, "", "01/15/2024", "not a date", "2024-13-01"])
    def test_unparseable_returns_none(self, value):
        """Test that unknown shapes are rejected."""
        assert parse_api_date(value) is None

    def test_fallback_to_today(self):
        """Test that callers can fall back to today."""
        assert parse_api_date_or_now("garbage") == date.today()
        assert parse_api_date_or_now("2023-06-30") == date(2023, 6, 30)

    def test_format_api_date(self):
        """Test outgoing date format."""
        assert format_api_date(date(2024, 3, 5)) == "2024-03-05"


class TestFirstAvailable:
    """Tests for the first-available helper."""

    def test_skips_only_none(self):
        """Test that None is skipped but an empty string is a value."""
        assert first_available(None, "Vendor", "Notes") == "Vendor"
        assert first_available(None, "", "Notes") == ""
        assert first_available(None, "  ", "Notes") == "  "

    def test_all_missing(self):
        """Test that all-None gives None."""
        assert first_available(None, None) is None
        assert first_available() is None


class TestDateRanges:
    """Tests for the dashboard's quick ranges."""

    # Wednesday
    TODAY = date(2024, 1, 17)

    def test_week_starts_on_sunday(self):
        """Test the start of the week."""
        assert week_start(self.TODAY) == date(2024, 1, 14)
        assert week_start(date(2024, 1, 14)) == date(2024, 1, 14)

    def test_month_range_handles_december(self):
        """Test that December ends on the 31st."""
        assert month_range(date(2024, 12, 10)) == (date(2024, 12, 1), date(2024, 12, 31))

    @pytest.mark.parametrize(
        "quick_range,expected",
        [
            (QuickDateRange.TODAY, (date(2024, 1, 17), date(2024, 1, 17))),
            (QuickDateRange.TOMORROW, (date(2024, 1, 17), date(2024, 1, 18))),
            (QuickDateRange.NEXT_7_DAYS, (date(2024, 1, 17), date(2024, 1, 23))),
            (QuickDateRange.NEXT_30_DAYS, (date(2024, 1, 17), date(2024, 2, 15))),
            (QuickDateRange.THIS_WEEK, (date(2024, 1, 14), date(2024, 1, 20))),
            (QuickDateRange.NEXT_WEEK, (date(2024, 1, 21), date(2024, 1, 27))),
            (QuickDateRange.THIS_MONTH, (date(2024, 1, 1), date(2024, 1, 31))),
            (QuickDateRange.NEXT_MONTH, (date(2024, 2, 1), date(2024, 2, 29))),
        ],
    )
    def test_quick_ranges(self, quick_range, expected):
        """Test each preset against a fixed day."""
        assert resolve_quick_range(quick_range, today=self.TODAY) == expected

    def test_next_month_crosses_year(self):
        """Test that next month from December is January."""
        start, end = resolve_quick_range(QuickDateRange.NEXT_MONTH, today=date(2024, 12, 5))
        assert (start, end) == (date(2025, 1, 1), date(2025, 1, 31))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
