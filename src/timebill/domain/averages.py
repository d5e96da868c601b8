"""Weekday average domain service."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from timebill.database.base import Database
from timebill.domain.calendar_range import (
    DateLike,
    canonical_weekday,
    expand_range,
    month_bounds,
    range_length,
    validate_range,
)
from timebill.domain.entities import BulkResult, ReconcileMode, WeekdayAverage
from timebill.domain.errors import InvalidRangeError
from timebill.domain.ownership import OwnershipResolver
from timebill.domain.reconciliation import ReconciliationService

logger = logging.getLogger(__name__)

MAX_FILL_RANGE_DAYS = 31
AVERAGE_PRECISION = Decimal("0.01")
FILL_DESCRIPTION = "Weekday average"


class WeekdayAverageService:
    """Service for per-weekday historical averages and gap filling."""

    def __init__(self, db: Database):
        """Initialize weekday average service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ownership = OwnershipResolver(db)
        self.reconciliation = ReconciliationService(db)

    def compute_averages(
        self, user_id: int, company_id: int, exclude_month: Optional[date] = None
    ) -> dict[int, WeekdayAverage]:
        """Average hours per canonical weekday over a company's history.

        Args:
            user_id: Acting user
            company_id: Company ID
            exclude_month: Any date inside a calendar month whose entries are
                left out (typically the month being billed)

        Returns:
            Mapping of weekday index (Monday = 0) to its average. Weekdays
            without entries are absent.
        """
        self.ownership.resolve_company(user_id, company_id)
        entries = self.db.list_entries(company_id)

        if exclude_month is not None:
            first, last = month_bounds(exclude_month)
            entries = [e for e in entries if not first <= e.date <= last]

        totals: dict[int, Decimal] = defaultdict(Decimal)
        counts: dict[int, int] = defaultdict(int)
        for entry in entries:
            weekday = canonical_weekday(entry.date)
            totals[weekday] += entry.hours
            counts[weekday] += 1

        return {
            weekday: WeekdayAverage(
                weekday=weekday,
                average=(totals[weekday] / counts[weekday]).quantize(AVERAGE_PRECISION, ROUND_HALF_UP),
                total_hours=totals[weekday],
                entry_count=counts[weekday],
            )
            for weekday in sorted(counts)
        }

    def fill_with_averages(
        self,
        user_id: int,
        company_id: int,
        start_date: DateLike,
        end_date: DateLike,
        overwrite: bool = False,
        project_id: Optional[int] = None,
        exclude_month: Optional[date] = None,
    ) -> BulkResult:
        """Fill the dates of a range with their weekday average.

        Dates whose weekday has no history are skipped. Existing entries are
        left alone unless ``overwrite`` is True. Dates that cannot be written,
        such as dates locked by a sent invoice, come back as failures in the
        result.

        Raises:
            InvalidRangeError: Malformed range or longer than MAX_FILL_RANGE_DAYS
            NotFoundError: Company or project not owned by the user
        """
        start, end = validate_range(start_date, end_date)
        if range_length(start, end) > MAX_FILL_RANGE_DAYS:
            raise InvalidRangeError(f"Date range cannot exceed {MAX_FILL_RANGE_DAYS} days")

        averages = self.compute_averages(user_id, company_id, exclude_month=exclude_month)
        plan = {
            day: averages[canonical_weekday(day)].average
            for day in expand_range(start, end)
            if canonical_weekday(day) in averages
        }
        if not plan:
            logger.info("No weekday history for company %s; nothing to fill", company_id)
            return BulkResult()

        if overwrite:
            result = self.reconciliation.reconcile_many(
                user_id,
                company_id,
                plan,
                mode=ReconcileMode.SET,
                project_id=project_id,
                description=FILL_DESCRIPTION,
            )
        else:
            result = self.reconciliation.reconcile_many(
                user_id,
                company_id,
                plan,
                mode=ReconcileMode.ERROR,
                skip_existing=True,
                project_id=project_id,
                description=FILL_DESCRIPTION,
            )

        for failure in result.failures:
            logger.warning("Could not fill %s: %s", failure.date, failure.reason)
        return result
