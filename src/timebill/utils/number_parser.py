"""Hours and rate parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_CLOCK = re.compile(r"^(\d+):([0-5]\d)$")
_UNITS = re.compile(r"^(?:(\d+(?:\.\d+)?)\s*h)?\s*(?:(\d+)\s*m(?:in)?)?$")


def parse_hours(hours_str: str) -> Decimal:
    """Parse an hours string into a Decimal.

    Handles:
    - "7.5" or "7,5"
    - "7:30" (hours:minutes)
    - "7h30m", "7h", "45m", "1h 15min"

    Raises:
        ValueError: If hours string cannot be parsed
    """
    if not hours_str or not hours_str.strip():
        raise ValueError("Empty hours string")

    value = hours_str.strip().lower()

    match = _CLOCK.match(value)
    if match:
        return Decimal(match.group(1)) + Decimal(match.group(2)) / 60

    if any(unit in value for unit in ("h", "m")):
        match = _UNITS.match(value)
        if match and (match.group(1) or match.group(2)):
            hours = Decimal(match.group(1) or "0")
            minutes = Decimal(match.group(2) or "0")
            return hours + minutes / 60
        raise ValueError(f"Could not parse hours '{hours_str}'")

    try:
        return Decimal(value.replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"Could not parse hours '{hours_str}'") from None


def parse_rate(rate_str: str) -> Decimal:
    """Parse an hourly rate string into a Decimal.

    Handles "50000", "$50,000", "50,000.50", "€ 80".

    Raises:
        ValueError: If rate string cannot be parsed
    """
    if not rate_str or not rate_str.strip():
        raise ValueError("Empty rate string")

    cleaned = re.sub(r"[$€£¥\s]", "", rate_str.strip())
    cleaned = cleaned.replace(",", "")

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse rate '{rate_str}'") from None
