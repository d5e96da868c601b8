"""Calendar range expansion and weekday normalization.

All weekday numbers in timebill are canonical: Monday = 0 ... Sunday = 6.
Derive them from dates only through :func:`canonical_weekday`. Every
aggregation in timebill groups by date in Python, so no Sunday-based index
(SQL ``strftime('%w')``) enters the system today; a query that produces one
must convert it with :func:`sunday_based_to_canonical`.
"""

import calendar
import re
import unicodedata
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from timebill.domain.errors import (
    InvalidRangeError,
    InvalidWeekdayError,
    invalid_date,
    start_after_end,
)

DateLike = Union[date, str]

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

# Keys are lower-case and accent-free; see _fold().
WEEKDAY_ALIASES: dict[str, int] = {
    # English
    "mon": 0, "monday": 0,
    "tue": 1, "tues": 1, "tuesday": 1,
    "wed": 2, "weds": 2, "wednesday": 2,
    "thu": 3, "thur": 3, "thurs": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
    # Spanish
    "lun": 0, "lunes": 0,
    "mar": 1, "martes": 1,
    "mie": 2, "miercoles": 2,
    "jue": 3, "jueves": 3,
    "vie": 4, "viernes": 4,
    "sab": 5, "sabado": 5,
    "dom": 6, "domingo": 6,
    # Portuguese
    "segunda": 0, "segunda-feira": 0,
    "terca": 1, "terca-feira": 1,
    "quarta": 2, "quarta-feira": 2,
    "quinta": 3, "quinta-feira": 3,
    "sexta": 4, "sexta-feira": 4,
    # French
    "lundi": 0,
    "mardi": 1,
    "mercredi": 2,
    "jeudi": 3,
    "vendredi": 4,
    "samedi": 5,
    "dimanche": 6,
    # German
    "mo": 0, "montag": 0,
    "di": 1, "dienstag": 1,
    "mi": 2, "mittwoch": 2,
    "do": 3, "donnerstag": 3,
    "fr": 4, "freitag": 4,
    "sa": 5, "samstag": 5,
    "so": 6, "sonntag": 6,
}


def _fold(token: str) -> str:
    """Lower-case, trim and strip diacritics ("Miércoles" -> "miercoles")."""
    decomposed = unicodedata.normalize("NFKD", token.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).rstrip(".")


def canonical_weekday(day: date) -> int:
    """Return the canonical weekday index of a date (Monday = 0)."""
    return day.weekday()


def sunday_based_to_canonical(index: int) -> int:
    """Convert a Sunday = 0 weekday index to the canonical Monday = 0 index."""
    if not 0 <= index <= 6:
        raise ValueError(f"Weekday index must be between 0 and 6, got {index}")
    return 6 if index == 0 else index - 1


def weekday_name(index: int) -> str:
    """Return the English name of a canonical weekday index."""
    return WEEKDAY_NAMES[index]


def parse_weekday(token: str) -> int:
    """Parse a single weekday token into its canonical index.

    Raises:
        InvalidWeekdayError: If the token is not a known alias
    """
    index = WEEKDAY_ALIASES.get(_fold(token))
    if index is None:
        raise InvalidWeekdayError(token)
    return index


def parse_weekdays(tokens: Iterable[Union[str, int]]) -> frozenset[int]:
    """Parse weekday tokens into a set of canonical indexes.

    Tokens are case-insensitive names or abbreviations in any language of
    the alias table. Integers are taken as canonical indexes. Duplicates
    collapse.

    Raises:
        InvalidWeekdayError: Naming the first unrecognized token
    """
    weekdays = set()
    for token in tokens:
        if isinstance(token, int) and not isinstance(token, bool):
            if not 0 <= token <= 6:
                raise InvalidWeekdayError(str(token))
            weekdays.add(token)
        else:
            weekdays.add(parse_weekday(str(token)))
    return frozenset(weekdays)


def parse_iso_date(value: DateLike) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises:
        InvalidRangeError: If the value is not a well-formed calendar date
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value.strip()):
        raise InvalidRangeError(invalid_date(value))
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidRangeError(invalid_date(value)) from None


def validate_range(start: DateLike, end: DateLike) -> tuple[date, date]:
    """Parse both endpoints and check that start <= end."""
    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    if start_date > end_date:
        raise InvalidRangeError(start_after_end(start_date, end_date))
    return start_date, end_date


def expand_range(
    start: DateLike,
    end: DateLike,
    weekdays: Optional[Iterable[Union[str, int]]] = None,
) -> list[date]:
    """Expand an inclusive date range into an ascending list of dates.

    Args:
        start: First date (date or ``YYYY-MM-DD``)
        end: Last date, inclusive
        weekdays: Optional weekday filter as tokens or canonical indexes.
            An empty filter is treated as no filter.

    Returns:
        Dates in the range whose weekday passes the filter

    Raises:
        InvalidRangeError: If a date is malformed or start > end
        InvalidWeekdayError: If a weekday token is not recognized
    """
    start_date, end_date = validate_range(start, end)
    allowed = parse_weekdays(weekdays) if weekdays else None

    dates = []
    current = start_date
    while current <= end_date:
        if allowed is None or canonical_weekday(current) in allowed:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def range_length(start: date, end: date) -> int:
    """Number of days in an inclusive range."""
    return (end - start).days + 1


def week_bounds(day: date) -> tuple[date, date]:
    """Return Monday and Sunday of the week containing ``day``."""
    monday = day - timedelta(days=canonical_weekday(day))
    return monday, monday + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    """Return first and last day of the month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def previous_month_bounds(day: date) -> tuple[date, date]:
    """Return first and last day of the month before the one containing ``day``."""
    return month_bounds(day.replace(day=1) - relativedelta(months=1))


def _clamped(year: int, month: int, cycle_day: int) -> date:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(cycle_day, last))


def billing_cycle_bounds(day: date, cycle_day: int) -> tuple[date, date]:
    """Return the billing cycle containing ``day``.

    A cycle starts on ``cycle_day`` of a month (clamped to the month length,
    so 31 means the last day in shorter months) and ends the day before the
    next cycle starts.
    """
    if not 1 <= cycle_day <= 31:
        raise ValueError(f"Billing cycle day must be between 1 and 31, got {cycle_day}")

    start = _clamped(day.year, day.month, cycle_day)
    if day < start:
        previous = day.replace(day=1) - relativedelta(months=1)
        start = _clamped(previous.year, previous.month, cycle_day)

    following = start.replace(day=1) + relativedelta(months=1)
    next_start = _clamped(following.year, following.month, cycle_day)
    return start, next_start - timedelta(days=1)
