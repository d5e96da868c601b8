"""Tests for hours and rate parsing."""

from decimal import Decimal

import pytest

from timebill.utils.number_parser import parse_hours, parse_rate


@pytest.mark.parametrize(
    "text,expected",
    [
        ("8", Decimal("8")),
        ("7.5", Decimal("7.5")),
        ("7,5", Decimal("7.5")),
        ("7:30", Decimal("7.5")),
        ("0:45", Decimal("0.75")),
        ("7h30m", Decimal("7.5")),
        ("7h", Decimal("7")),
        ("45m", Decimal("0.75")),
        ("1h 15min", Decimal("1.25")),
        (" 2.25 ", Decimal("2.25")),
    ],
)
def test_parse_hours(text, expected):
    assert parse_hours(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "7:75", "h", "7x"])
def test_parse_hours_invalid(text):
    with pytest.raises(ValueError):
        parse_hours(text)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("50000", Decimal("50000")),
        ("$50,000", Decimal("50000")),
        ("50,000.50", Decimal("50000.50")),
        ("€ 80", Decimal("80")),
    ],
)
def test_parse_rate(text, expected):
    assert parse_rate(text) == expected


def test_parse_rate_invalid():
    with pytest.raises(ValueError, match="Could not parse rate"):
        parse_rate("fifty")
