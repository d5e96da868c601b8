"""Report domain service: per-project breakdowns, billing cycles and trends."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from timebill.database.base import Database
from timebill.domain.analytics import analyze_trends, calculate_period_stats
from timebill.domain.calendar_range import DateLike, billing_cycle_bounds, validate_range
from timebill.domain.entities import (
    BillingCycleStats,
    CompanyReport,
    HourEntry,
    ProjectSummary,
    TrendAnalysis,
)
from timebill.domain.ownership import OwnershipResolver

UNASSIGNED_PROJECT_NAME = "Unassigned"
_CENTS = Decimal("0.01")


def _summarize(
    project_id: Optional[int], name: str, entries: list[HourEntry], rate: Decimal
) -> ProjectSummary:
    hours = sum((entry.hours for entry in entries), Decimal("0"))
    return ProjectSummary(
        project_id=project_id,
        project_name=name,
        hours=hours,
        amount=(hours * rate).quantize(_CENTS, ROUND_HALF_UP),
        descriptions=tuple(
            f"{entry.date.isoformat()}: {entry.description.strip()}"
            for entry in entries
            if entry.description and entry.description.strip()
        ),
    )


class ReportService:
    """Service for read-only reports over a company's entries."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ownership = OwnershipResolver(db)

    def company_report(
        self, user_id: int, company_id: int, start_date: DateLike, end_date: DateLike
    ) -> CompanyReport:
        """Hours and amounts per project bucket for a period.

        The unassigned bucket comes first, then projects by name; buckets
        without hours are left out.
        """
        start, end = validate_range(start_date, end_date)
        company = self.ownership.resolve_company(user_id, company_id)
        entries = self.db.list_entries(company_id, start_date=start, end_date=end)
        rate = company.hourly_rate

        summaries = []
        unassigned = [e for e in entries if e.project_id is None]
        if unassigned:
            summaries.append(_summarize(None, UNASSIGNED_PROJECT_NAME, unassigned, rate))

        for project in self.db.list_projects(company_id):
            project_entries = [e for e in entries if e.project_id == project.id]
            if project_entries:
                summaries.append(_summarize(project.id, project.name, project_entries, rate))

        return CompanyReport(
            company_id=company.id,
            company_name=company.name,
            start_date=start,
            end_date=end,
            hourly_rate=rate,
            projects=tuple(summaries),
            total_hours=sum((s.hours for s in summaries), Decimal("0")),
            total_amount=sum((s.amount for s in summaries), Decimal("0.00")),
        )

    def billing_cycle_stats(self, user_id: int, company_id: int, as_of: date) -> BillingCycleStats:
        """Stats for the billing cycle of the company that contains ``as_of``."""
        company = self.ownership.resolve_company(user_id, company_id)
        start, end = billing_cycle_bounds(as_of, company.billing_cycle_day)
        entries = self.db.list_entries(company_id, start_date=start, end_date=end)
        stats = calculate_period_stats(entries, company.hourly_rate)
        return BillingCycleStats(
            cycle_start=start,
            cycle_end=end,
            total_hours=stats.total_hours,
            total_earnings=stats.total_earnings,
            days_worked=len({entry.date for entry in entries}),
            average_hours_per_day=stats.avg_hours_per_day,
            entries=tuple(entries),
        )

    def trends(self, user_id: int, company_id: int, as_of: date) -> TrendAnalysis:
        """Week-over-week and month-over-month trends for a company."""
        company = self.ownership.resolve_company(user_id, company_id)
        entries = self.db.list_entries(company_id)
        return analyze_trends(entries, company.hourly_rate, as_of)
