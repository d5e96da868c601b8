"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from timebill.domain.calendar_range import (
    canonical_weekday,
    month_bounds,
    parse_weekday,
    previous_month_bounds,
    week_bounds,
)
from timebill.domain.errors import InvalidWeekdayError

PERIODS = ("this-week", "last-week", "this-month", "last-month", "this-year", "last-year")


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative words: "today", "yesterday", "tomorrow"
    - "last/this/next" + week, month or year (start of that period)
    - "last" + weekday name in any supported language ("last friday", "last viernes")

    Args:
        date_str: Date string in various formats
        today: Reference date (defaults to the current date)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    prefix, _, period = date_str.partition(" ")
    if prefix in ("last", "this", "next") and period:
        if period == "week":
            monday = week_bounds(today)[0]
            return monday + timedelta(days={"last": -7, "this": 0, "next": 7}[prefix])
        if period == "month":
            first = today.replace(day=1)
            return first + relativedelta(months={"last": -1, "this": 0, "next": 1}[prefix])
        if period == "year":
            first = today.replace(month=1, day=1)
            return first + relativedelta(years={"last": -1, "this": 0, "next": 1}[prefix])
        if prefix == "last":
            try:
                target = parse_weekday(period)
            except InvalidWeekdayError:
                pass
            else:
                days_ago = (canonical_weekday(today) - target) % 7 or 7
                return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: date | None = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    week, month or year.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower().replace("_", "-")
    today = today or date.today()

    if period == "this-week":
        return week_bounds(today)[0], today
    if period == "last-week":
        return week_bounds(today - timedelta(days=7))
    if period == "this-month":
        return month_bounds(today)[0], today
    if period == "last-month":
        return previous_month_bounds(today)
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
