"""Invoice aggregation domain service."""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from timebill.database.base import Database
from timebill.domain.calendar_range import DateLike, parse_iso_date, validate_range
from timebill.domain.entities import (
    BillingProfile,
    Company,
    CompanyBillingProfile,
    Invoice,
    InvoiceStatus,
    Project,
)
from timebill.domain.errors import (
    ConflictError,
    EmptyPeriodError,
    InvalidTransitionError,
    NotFoundError,
    PreconditionFailedError,
    billing_profile_missing,
    empty_period,
    invalid_transition,
    invoice_delete_blocked,
    invoice_not_found,
)
from timebill.domain.ownership import OwnershipResolver

logger = logging.getLogger(__name__)

DEFAULT_CONCEPT = "Development services"
INVOICE_NUMBER_WIDTH = 3
MAX_NUMBER_ATTEMPTS = 5
CENTS = Decimal("0.01")

# Legal (from, to) status changes. Paid and cancelled are terminal.
STATUS_TRANSITIONS: frozenset[tuple[InvoiceStatus, InvoiceStatus]] = frozenset(
    {
        (InvoiceStatus.DRAFT, InvoiceStatus.SENT),
        (InvoiceStatus.SENT, InvoiceStatus.PAID),
        (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED),
        (InvoiceStatus.SENT, InvoiceStatus.CANCELLED),
    }
)


def format_invoice_number(value: int) -> str:
    """Zero-pad an invoice sequence number ("001"); wider numbers are kept whole."""
    return str(value).zfill(INVOICE_NUMBER_WIDTH)


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    """Return True if the status change is in the transition table."""
    return (InvoiceStatus(current), InvoiceStatus(target)) in STATUS_TRANSITIONS


def line_total(hours: Decimal, rate: Decimal) -> Decimal:
    """Hours times rate, rounded to cents."""
    return (hours * rate).quantize(CENTS, ROUND_HALF_UP)


class InvoiceService:
    """Service for turning hour entries into invoices."""

    def __init__(self, db: Database):
        """Initialize invoice service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ownership = OwnershipResolver(db)

    def next_invoice_number(self, user_id: int) -> str:
        """Return the next invoice number for a user ("001" for the first one)."""
        current = self.db.get_max_invoice_number(user_id)
        return format_invoice_number((current or 0) + 1)

    def create_invoice(
        self,
        user_id: int,
        company_id: int,
        period_start: DateLike,
        period_end: DateLike,
        project_id: Optional[int] = None,
        concept: Optional[str] = None,
        issue_date: Optional[DateLike] = None,
    ) -> Invoice:
        """Aggregate a period's entries into a draft invoice with one line item.

        Args:
            user_id: Acting user
            company_id: Company to bill
            period_start: First day of the period
            period_end: Last day of the period, inclusive
            project_id: Optional project filter; None bills every project bucket
            concept: Line item concept (defaults to DEFAULT_CONCEPT)
            issue_date: Defaults to today

        Returns:
            The persisted invoice with its items

        Raises:
            NotFoundError: Company or project not owned by the user
            PreconditionFailedError: Issuer billing profile not configured
            EmptyPeriodError: No entries in the period
            InvalidRangeError: Malformed or reversed period
        """
        start, end = validate_range(period_start, period_end)
        company, project = self.ownership.resolve_optional_project(user_id, company_id, project_id)

        issuer = self.db.get_billing_profile(user_id)
        if issuer is None:
            raise PreconditionFailedError(billing_profile_missing())

        entries = self.db.list_entries(company_id, start_date=start, end_date=end, project_id=project_id)
        if not entries:
            raise EmptyPeriodError(empty_period(start, end))

        total_hours = sum((entry.hours for entry in entries), Decimal("0"))
        total_amount = line_total(total_hours, company.hourly_rate)
        client = self.db.get_company_billing_profile(company_id)
        issued = parse_iso_date(issue_date) if issue_date is not None else date.today()

        fields = self._invoice_fields(user_id, company, project, issuer, client, start, end, issued)
        fields["total_hours"] = total_hours
        fields["total_amount"] = total_amount
        item = {
            "concept": concept or DEFAULT_CONCEPT,
            "hours": total_hours,
            "rate": company.hourly_rate,
            "total": total_amount,
            "project_id": project_id,
        }

        # Optimistic allocation: the unique (user_id, number) constraint
        # rejects a number taken by a concurrent creation, then we re-read.
        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            fields["number"] = self.next_invoice_number(user_id)
            try:
                invoice_id = self.db.create_invoice(dict(fields), [item])
            except ConflictError:
                logger.warning(
                    "Invoice number %s taken for user %s (attempt %d)", fields["number"], user_id, attempt
                )
                continue
            logger.info(
                "Created invoice %s for company %s: %s h, %s",
                fields["number"],
                company_id,
                total_hours,
                total_amount,
            )
            return self.db.get_invoice(invoice_id)

        raise ConflictError(f"Could not allocate an invoice number for user {user_id}")

    def _invoice_fields(
        self,
        user_id: int,
        company: Company,
        project: Optional[Project],
        issuer: BillingProfile,
        client: Optional[CompanyBillingProfile],
        start: date,
        end: date,
        issued: date,
    ) -> dict[str, Any]:
        """Snapshot issuer and client data as they are right now."""
        return {
            "user_id": user_id,
            "company_id": company.id,
            "issue_date": issued,
            "period_start": start,
            "period_end": end,
            "project_id": project.id if project else None,
            "project_name": project.name if project else None,
            "status": InvoiceStatus.DRAFT.value,
            "issuer_name": issuer.name,
            "issuer_id_type": issuer.id_type,
            "issuer_id_number": issuer.id_number,
            "issuer_address": issuer.address,
            "issuer_city": issuer.city,
            "issuer_phone": issuer.phone,
            "issuer_bank_name": issuer.bank_name,
            "issuer_account_type": issuer.account_type,
            "issuer_account_number": issuer.account_number,
            "issuer_signature_image": issuer.signature_image,
            "issuer_declaration": issuer.declaration,
            "client_name": (client.legal_name if client and client.legal_name else company.name),
            "client_tax_id": client.tax_id if client else None,
            "client_address": client.address if client else None,
            "client_city": client.city if client else None,
        }

    def get_invoice(self, user_id: int, invoice_id: int) -> Invoice:
        """Get an invoice owned by the user.

        Raises:
            NotFoundError: If missing or owned by another user
        """
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None or invoice.user_id != user_id:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def list_invoices(self, user_id: int, company_id: Optional[int] = None) -> list[Invoice]:
        """List a user's invoices, optionally for one company."""
        if company_id is not None:
            self.ownership.resolve_company(user_id, company_id)
        return self.db.list_invoices(user_id, company_id=company_id)

    def change_status(self, user_id: int, invoice_id: int, status: InvoiceStatus) -> Invoice:
        """Move an invoice to a new status.

        Raises:
            NotFoundError: If the invoice is not owned by the user
            InvalidTransitionError: If (current, target) is not a legal transition
        """
        target = InvoiceStatus(status)
        invoice = self.get_invoice(user_id, invoice_id)
        if not can_transition(invoice.status, target):
            raise InvalidTransitionError(invalid_transition(invoice.status.value, target.value))

        self.db.update_invoice_status(invoice_id, target)
        logger.info("Invoice %s: %s -> %s", invoice.number, invoice.status.value, target.value)
        return self.db.get_invoice(invoice_id)

    def mark_sent(self, user_id: int, invoice_id: int) -> Invoice:
        """Mark a draft invoice as sent."""
        return self.change_status(user_id, invoice_id, InvoiceStatus.SENT)

    def mark_paid(self, user_id: int, invoice_id: int) -> Invoice:
        """Mark a sent invoice as paid."""
        return self.change_status(user_id, invoice_id, InvoiceStatus.PAID)

    def cancel(self, user_id: int, invoice_id: int) -> Invoice:
        """Cancel a draft or sent invoice."""
        return self.change_status(user_id, invoice_id, InvoiceStatus.CANCELLED)

    def delete_invoice(self, user_id: int, invoice_id: int) -> None:
        """Delete a draft invoice.

        Raises:
            NotFoundError: If the invoice is not owned by the user
            InvalidTransitionError: If the invoice is not a draft
        """
        invoice = self.get_invoice(user_id, invoice_id)
        if invoice.status is not InvoiceStatus.DRAFT:
            raise InvalidTransitionError(invoice_delete_blocked(invoice.number, invoice.status.value))
        self.db.delete_invoice(invoice_id)
        logger.info("Deleted draft invoice %s", invoice.number)
