"""Read-side trend statistics over hour entries.

Everything here is a pure function of the entries passed in; nothing reads
from or writes to the database.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from timebill.domain.calendar_range import (
    canonical_weekday,
    month_bounds,
    previous_month_bounds,
    week_bounds,
)
from timebill.domain.entities import (
    HourEntry,
    PeriodStats,
    Trend,
    TrendAnalysis,
    WeekdayProductivity,
    WeeklyStats,
)

# Hour deltas below these are noise, not a trend.
WEEKLY_TREND_THRESHOLD = Decimal("1")
MONTHLY_TREND_THRESHOLD = Decimal("2")

_PRECISION = Decimal("0.01")
_ZERO = Decimal("0")


def _ratio(numerator: Decimal, denominator: int) -> Decimal:
    if denominator == 0:
        return _ZERO
    return (numerator / denominator).quantize(_PRECISION, ROUND_HALF_UP)


def filter_entries(entries: Iterable[HourEntry], start: date, end: date) -> list[HourEntry]:
    """Return entries dated within [start, end]."""
    return [entry for entry in entries if start <= entry.date <= end]


def calculate_period_stats(entries: Sequence[HourEntry], hourly_rate: Decimal) -> PeriodStats:
    """Aggregate a set of entries.

    ``working_days`` counts entries, not distinct dates; entries on the same
    date in different project buckets count separately. ``avg_hours_per_day``
    divides by distinct dates instead.
    """
    total_hours = sum((entry.hours for entry in entries), _ZERO)
    working_days = len(entries)
    distinct_days = len({entry.date for entry in entries})
    return PeriodStats(
        total_hours=total_hours,
        working_days=working_days,
        avg_hours_per_day=_ratio(total_hours, distinct_days),
        avg_hours_per_working_day=_ratio(total_hours, working_days),
        total_earnings=(total_hours * hourly_rate).quantize(_PRECISION, ROUND_HALF_UP),
    )


def calculate_week_stats(entries: Sequence[HourEntry], day: date, hourly_rate: Decimal) -> WeeklyStats:
    """Stats for the Monday to Sunday week containing ``day``."""
    start, end = week_bounds(day)
    stats = calculate_period_stats(filter_entries(entries, start, end), hourly_rate)
    return WeeklyStats(
        total_hours=stats.total_hours,
        working_days=stats.working_days,
        avg_hours_per_day=stats.avg_hours_per_day,
        avg_hours_per_working_day=stats.avg_hours_per_working_day,
        total_earnings=stats.total_earnings,
        week_number=day.isocalendar()[1],
        start_date=start,
        end_date=end,
    )


def classify_trend(delta: Decimal, threshold: Decimal) -> Trend:
    """Stable if |delta| < threshold, otherwise up or down by sign."""
    if abs(delta) < threshold:
        return Trend.STABLE
    return Trend.UP if delta > 0 else Trend.DOWN


def analyze_trends(
    entries: Sequence[HourEntry],
    hourly_rate: Decimal,
    as_of: date,
    weekly_threshold: Decimal = WEEKLY_TREND_THRESHOLD,
    monthly_threshold: Decimal = MONTHLY_TREND_THRESHOLD,
) -> TrendAnalysis:
    """Compare this week with last week and this month with last month.

    Args:
        entries: Entries to analyze (any period; filtered here)
        hourly_rate: Rate used for earnings
        as_of: Reference date for "this" week and month
        weekly_threshold: Minimum absolute hour delta for a weekly trend
        monthly_threshold: Minimum absolute hour delta for a monthly trend
    """
    this_week = calculate_week_stats(entries, as_of, hourly_rate)
    last_week = calculate_week_stats(entries, as_of - timedelta(days=7), hourly_rate)

    this_month = calculate_period_stats(filter_entries(entries, *month_bounds(as_of)), hourly_rate)
    last_month = calculate_period_stats(filter_entries(entries, *previous_month_bounds(as_of)), hourly_rate)

    weekly_delta = this_week.total_hours - last_week.total_hours
    monthly_delta = this_month.total_hours - last_month.total_hours

    return TrendAnalysis(
        this_week=this_week,
        last_week=last_week,
        this_month=this_month,
        last_month=last_month,
        weekly_hours_delta=weekly_delta,
        weekly_earnings_delta=this_week.total_earnings - last_week.total_earnings,
        monthly_hours_delta=monthly_delta,
        monthly_earnings_delta=this_month.total_earnings - last_month.total_earnings,
        weekly_trend=classify_trend(weekly_delta, weekly_threshold),
        monthly_trend=classify_trend(monthly_delta, monthly_threshold),
    )


def productivity_by_weekday(entries: Iterable[HourEntry]) -> list[WeekdayProductivity]:
    """Total and average hours for each canonical weekday, Monday first."""
    totals = [_ZERO] * 7
    counts = [0] * 7
    for entry in entries:
        weekday = canonical_weekday(entry.date)
        totals[weekday] += entry.hours
        counts[weekday] += 1

    return [
        WeekdayProductivity(
            weekday=weekday,
            total_hours=totals[weekday],
            entry_count=counts[weekday],
            avg_hours=_ratio(totals[weekday], counts[weekday]),
        )
        for weekday in range(7)
    ]


def missing_days_this_week(entries: Iterable[HourEntry], as_of: date) -> list[date]:
    """Days from Monday up to ``as_of`` in its week with no entry."""
    start, _ = week_bounds(as_of)
    logged = {entry.date for entry in entries}
    missing = []
    current = start
    while current <= as_of:
        if current not in logged:
            missing.append(current)
        current += timedelta(days=1)
    return missing


def percentage_change(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """Percent change from ``previous`` to ``current``; None when previous is zero and current is not."""
    if previous == 0:
        return _ZERO if current == 0 else None
    return ((current - previous) / previous * 100).quantize(Decimal("0.1"), ROUND_HALF_UP)
