"""Domain model entities for timebill.

These are pure data classes representing business concepts, independent of
database schema. Services exchange these with the storage layer so that the
reconciliation and billing rules never depend on ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class ReconcileMode(str, Enum):
    """Policy for writing hours onto a date that may already have an entry."""

    SET = "set"
    ACCUMULATE = "accumulate"
    ERROR = "error"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class Trend(str, Enum):
    """Direction of a period-over-period change."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class User:
    """User domain entity; the root of a tenant."""

    id: int
    email: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class BillingProfile:
    """Issuer identity attached to a user, copied onto every invoice."""

    user_id: int
    name: str
    id_type: str
    id_number: str
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    bank_name: Optional[str] = None
    account_type: Optional[str] = None
    account_number: Optional[str] = None
    signature_image: Optional[str] = None
    declaration: Optional[str] = None


BILLING_PROFILE_FIELDS = (
    "name",
    "id_type",
    "id_number",
    "address",
    "city",
    "phone",
    "bank_name",
    "account_type",
    "account_number",
    "signature_image",
    "declaration",
)


@dataclass(frozen=True)
class Company:
    """Billing client of a user."""

    id: int
    user_id: int
    name: str
    hourly_rate: Decimal
    billing_cycle_day: int
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class CompanyBillingProfile:
    """Bill-to data for a company."""

    company_id: int
    legal_name: Optional[str] = None
    tax_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None


COMPANY_BILLING_PROFILE_FIELDS = (
    "legal_name",
    "tax_id",
    "address",
    "city",
    "contact_name",
    "contact_email",
)


@dataclass(frozen=True)
class Project:
    """Optional subdivision of work under a company."""

    id: int
    user_id: int
    company_id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class HourEntry:
    """Hours worked on one date for a company and project bucket.

    ``version`` is bumped by the storage layer on every update and is used
    for compare-and-set writes.
    """

    id: int
    company_id: int
    project_id: Optional[int]
    date: date
    hours: Decimal
    description: Optional[str]
    version: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class WeekdayAverage:
    """Historical hours for one canonical weekday (Monday = 0)."""

    weekday: int
    average: Decimal
    total_hours: Decimal
    entry_count: int


@dataclass(frozen=True)
class InvoiceItem:
    """Line item of an invoice. ``total`` is frozen at creation."""

    id: int
    invoice_id: int
    concept: str
    hours: Decimal
    rate: Decimal
    total: Decimal
    project_id: Optional[int]


@dataclass(frozen=True)
class Invoice:
    """Invoice snapshot with denormalized issuer and client data."""

    id: int
    user_id: int
    company_id: int
    number: str
    issue_date: date
    period_start: date
    period_end: date
    project_id: Optional[int]
    project_name: Optional[str]
    status: InvoiceStatus
    issuer_name: str
    issuer_id_type: str
    issuer_id_number: str
    issuer_address: Optional[str]
    issuer_city: Optional[str]
    issuer_phone: Optional[str]
    issuer_bank_name: Optional[str]
    issuer_account_type: Optional[str]
    issuer_account_number: Optional[str]
    issuer_signature_image: Optional[str]
    issuer_declaration: Optional[str]
    client_name: str
    client_tax_id: Optional[str]
    client_address: Optional[str]
    client_city: Optional[str]
    total_hours: Decimal
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    items: tuple[InvoiceItem, ...] = ()


@dataclass(frozen=True)
class EntryChange:
    """Outcome of a write to one date. ``old_value`` is None if no entry existed."""

    date: date
    old_value: Optional[Decimal]
    new_value: Optional[Decimal]


@dataclass(frozen=True)
class DateFailure:
    """A date that could not be reconciled in a bulk operation."""

    date: date
    reason: str
    error: Optional[Exception] = None


@dataclass(frozen=True)
class BulkResult:
    """Per-date outcomes of a bulk reconciliation."""

    changes: tuple[EntryChange, ...] = ()
    failures: tuple[DateFailure, ...] = ()
    skipped: tuple[date, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class PeriodStats:
    """Aggregated hours and earnings for a period."""

    total_hours: Decimal
    working_days: int
    avg_hours_per_day: Decimal
    avg_hours_per_working_day: Decimal
    total_earnings: Decimal


@dataclass(frozen=True)
class WeeklyStats(PeriodStats):
    """Period stats for a Monday to Sunday week."""

    week_number: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class TrendAnalysis:
    """Week-over-week and month-over-month comparison."""

    this_week: WeeklyStats
    last_week: WeeklyStats
    this_month: PeriodStats
    last_month: PeriodStats
    weekly_hours_delta: Decimal
    weekly_earnings_delta: Decimal
    monthly_hours_delta: Decimal
    monthly_earnings_delta: Decimal
    weekly_trend: Trend
    monthly_trend: Trend


@dataclass(frozen=True)
class WeekdayProductivity:
    """Hours logged on one weekday across a set of entries."""

    weekday: int
    total_hours: Decimal
    entry_count: int
    avg_hours: Decimal


@dataclass(frozen=True)
class ProjectSummary:
    """Hours and amount for one project bucket in a report."""

    project_id: Optional[int]
    project_name: str
    hours: Decimal
    amount: Decimal
    descriptions: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompanyReport:
    """Per-project breakdown of a company's hours in a period."""

    company_id: int
    company_name: str
    start_date: date
    end_date: date
    hourly_rate: Decimal
    projects: tuple[ProjectSummary, ...]
    total_hours: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class BillingCycleStats:
    """Hours and earnings inside one billing cycle of a company."""

    cycle_start: date
    cycle_end: date
    total_hours: Decimal
    total_earnings: Decimal
    days_worked: int
    average_hours_per_day: Decimal
    entries: tuple[HourEntry, ...] = field(default=(), repr=False)
