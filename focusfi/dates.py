"""
Date Handling

The backend is not consistent about how it writes dates: timestamps
arrive with or without fractional seconds, and plain calendar dates
arrive as `YYYY-MM-DD`. Parsing tries each shape in a fixed order and
the first one that fits wins.

Outgoing dates are always written as `YYYY-MM-DD`.

This module also holds the dashboard's date-range helpers.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional

import structlog


logger = structlog.get_logger(__name__)

# Strategies in priority order: fractional ISO, plain ISO, calendar date
_DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)
_DATE_FORMAT = "%Y-%m-%d"


def parse_api_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a backend date string into a calendar date.

    Timestamps are converted to UTC before the date is taken.
    Returns None when no strategy matches.
    """
    if not value:
        return None

    for fmt in _DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return parsed.astimezone(timezone.utc).date()

    try:
        return datetime.strptime(value, _DATE_FORMAT).date()
    except ValueError:
        return None


def parse_api_date_or_now(value: Optional[str], field: str = "date") -> date:
    """
    Parse a backend date, substituting today when it cannot be read.

    The substitution is logged so bad backend data shows up in the logs
    instead of silently landing on today's date.
    """
    parsed = parse_api_date(value)
    if parsed is None:
        logger.warning("unparseable_date", field=field, value=value)
        return date.today()
    return parsed


def format_api_date(value: date) -> str:
    """Render a date the way the backend expects it."""
    return value.strftime(_DATE_FORMAT)


def first_available(*values: Optional[str]) -> Optional[str]:
    """Return the first value that is not None. Empty strings count as present."""
    for value in values:
        if value is not None:
            return value
    return None


# =============================================================================
# DATE RANGES
# =============================================================================

class QuickDateRange(str, Enum):
    """Preset ranges offered by the dashboard's date picker."""
    TODAY = "Today"
    TOMORROW = "Tomorrow"
    NEXT_7_DAYS = "Next 7 Days"
    NEXT_10_DAYS = "Next 10 Days"
    NEXT_30_DAYS = "Next 30 Days"
    NEXT_60_DAYS = "Next 60 Days"
    THIS_WEEK = "This Week"
    NEXT_WEEK = "Next Week"
    THIS_MONTH = "This Month"
    NEXT_MONTH = "Next Month"


_ROLLING_DAYS = {
    QuickDateRange.NEXT_7_DAYS: 7,
    QuickDateRange.NEXT_10_DAYS: 10,
    QuickDateRange.NEXT_30_DAYS: 30,
    QuickDateRange.NEXT_60_DAYS: 60,
}


def month_range(day: date) -> tuple[date, date]:
    """First and last day of the month containing `day`."""
    first = day.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return first, next_first - timedelta(days=1)


def week_start(day: date) -> date:
    """Sunday on or before `day` (weeks start on Sunday)."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def resolve_quick_range(
    quick_range: QuickDateRange,
    today: Optional[date] = None,
) -> tuple[date, date]:
    """
    Turn a preset into an inclusive (start, end) pair.

    Args:
        quick_range: The preset selected by the user
        today: Reference day (defaults to date.today())
    """
    today = today or date.today()

    if quick_range == QuickDateRange.TODAY:
        return today, today
    if quick_range == QuickDateRange.TOMORROW:
        return today, today + timedelta(days=1)
    if quick_range in _ROLLING_DAYS:
        return today, today + timedelta(days=_ROLLING_DAYS[quick_range] - 1)
    if quick_range == QuickDateRange.THIS_WEEK:
        start = week_start(today)
        return start, start + timedelta(days=6)
    if quick_range == QuickDateRange.NEXT_WEEK:
        start = week_start(today) + timedelta(days=7)
        return start, start + timedelta(days=6)
    if quick_range == QuickDateRange.THIS_MONTH:
        return month_range(today)
    if quick_range == QuickDateRange.NEXT_MONTH:
        _, last = month_range(today)
        return month_range(last + timedelta(days=1))

    raise ValueError(f"Unknown date range: {quick_range}")
