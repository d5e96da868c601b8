"""Tests for calendar range expansion and weekday parsing."""

from datetime import date

import pytest

from timebill.domain.calendar_range import (
    billing_cycle_bounds,
    canonical_weekday,
    expand_range,
    month_bounds,
    parse_iso_date,
    parse_weekdays,
    previous_month_bounds,
    sunday_based_to_canonical,
    week_bounds,
)
from timebill.domain.errors import InvalidRangeError, InvalidWeekdayError


def test_expand_range_without_filter_returns_every_date():
    dates = expand_range("2024-02-26", "2024-03-03")

    assert len(dates) == 7
    assert dates[0] == date(2024, 2, 26)
    assert dates[-1] == date(2024, 3, 3)
    assert dates == sorted(set(dates))
    assert date(2024, 2, 29) in dates


def test_expand_range_single_day():
    assert expand_range("2024-05-10", "2024-05-10") == [date(2024, 5, 10)]


def test_expand_range_with_weekday_filter():
    # March 2024 has 4 Mondays and 4 Tuesdays
    dates = expand_range("2024-03-01", "2024-03-31", ["mon", "tue"])

    assert len(dates) == 8
    assert all(canonical_weekday(d) in (0, 1) for d in dates)


def test_expand_range_empty_filter_means_no_filter():
    assert len(expand_range("2024-03-01", "2024-03-07", [])) == 7


def test_expand_range_filter_may_match_nothing():
    # Wednesday to Friday contains no Sunday
    assert expand_range("2024-03-06", "2024-03-08", ["sun"]) == []


def test_expand_range_rejects_reversed_range():
    with pytest.raises(InvalidRangeError, match="after"):
        expand_range("2024-03-10", "2024-03-01")


@pytest.mark.parametrize("value", ["2024-02-30", "2024-13-01", "03/01/2024", "2024-3-1", ""])
def test_parse_iso_date_rejects_malformed(value):
    with pytest.raises(InvalidRangeError, match="Invalid date"):
        parse_iso_date(value)


def test_parse_iso_date_accepts_date_objects():
    assert parse_iso_date(date(2024, 1, 1)) == date(2024, 1, 1)


def test_parse_weekdays_is_multilingual_and_case_insensitive():
    assert parse_weekdays(["mon", "Lunes", "MONDAY"]) == frozenset({0})
    assert parse_weekdays(["Miércoles", "mittwoch", "mercredi"]) == frozenset({2})
    assert parse_weekdays(["sábado", "Sat.", "samstag"]) == frozenset({5})


def test_parse_weekdays_accepts_canonical_indexes():
    assert parse_weekdays([0, 6]) == frozenset({0, 6})


def test_parse_weekdays_reports_offending_token():
    with pytest.raises(InvalidWeekdayError) as excinfo:
        parse_weekdays(["mon", "funday"])

    assert excinfo.value.token == "funday"
    assert "funday" in str(excinfo.value)


def test_parse_weekdays_rejects_out_of_range_index():
    with pytest.raises(InvalidWeekdayError):
        parse_weekdays([7])


def test_canonical_weekday_is_monday_based():
    assert canonical_weekday(date(2024, 3, 4)) == 0  # Monday
    assert canonical_weekday(date(2024, 3, 10)) == 6  # Sunday


def test_sunday_based_conversion():
    assert sunday_based_to_canonical(0) == 6
    assert sunday_based_to_canonical(1) == 0
    assert sunday_based_to_canonical(6) == 5


def test_week_and_month_bounds():
    assert week_bounds(date(2024, 3, 6)) == (date(2024, 3, 4), date(2024, 3, 10))
    assert month_bounds(date(2024, 2, 15)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert previous_month_bounds(date(2024, 1, 15)) == (date(2023, 12, 1), date(2023, 12, 31))


def test_billing_cycle_bounds_mid_month():
    assert billing_cycle_bounds(date(2024, 3, 20), 15) == (date(2024, 3, 15), date(2024, 4, 14))
    assert billing_cycle_bounds(date(2024, 3, 10), 15) == (date(2024, 2, 15), date(2024, 3, 14))


def test_billing_cycle_bounds_clamps_to_short_months():
    assert billing_cycle_bounds(date(2024, 2, 29), 31) == (date(2024, 2, 29), date(2024, 3, 30))
    assert billing_cycle_bounds(date(2024, 3, 5), 1) == (date(2024, 3, 1), date(2024, 3, 31))
