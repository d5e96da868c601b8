"""Tests for database mappers."""

from dataclasses import fields
from datetime import datetime, date, UTC
from decimal import Decimal

from timebill.database.models import (
    CompanyBillingProfile as ORMCompanyBillingProfile,
    HourEntry as ORMHourEntry,
    Invoice as ORMInvoice,
    InvoiceItem as ORMInvoiceItem,
    UserBillingProfile as ORMUserBillingProfile,
)
from timebill.database.mappers import hour_entry_to_domain, invoice_to_domain, to_decimal, to_money
from timebill.domain.entities import (
    BILLING_PROFILE_FIELDS,
    COMPANY_BILLING_PROFILE_FIELDS,
    BillingProfile,
    CompanyBillingProfile,
    HourEntry,
    Invoice,
    InvoiceStatus,
)


def test_to_decimal_strips_storage_scale():
    assert str(to_decimal(Decimal("8.0000"))) == "8"
    assert str(to_decimal(Decimal("7.5000"))) == "7.5"
    assert str(to_decimal(Decimal("100.0000"))) == "100"
    assert to_decimal(None) == 0


def test_to_money_has_two_places():
    assert str(to_money(Decimal("700000"))) == "700000.00"
    assert str(to_money(None)) == "0.00"


class TestHourEntryMapper:
    """Tests for HourEntry mapper."""

    def test_hour_entry_to_domain(self):
        """Test converting ORM HourEntry to domain HourEntry."""
        now = datetime.now(UTC)
        orm_entry = ORMHourEntry(
            id=3,
            company_id=1,
            project_id=None,
            date=date(2024, 3, 4),
            hours=Decimal("7.2500"),
            description="Review",
            version=2,
            created_at=now,
            updated_at=now,
        )

        entry = hour_entry_to_domain(orm_entry)

        assert isinstance(entry, HourEntry)
        assert entry.hours == Decimal("7.25")
        assert entry.version == 2
        assert entry.project_id is None


class TestInvoiceMapper:
    """Tests for Invoice mapper."""

    def test_invoice_to_domain(self):
        """Test converting ORM Invoice with items to a domain Invoice."""
        now = datetime.now(UTC)
        orm_invoice = ORMInvoice(
            id=1,
            user_id=1,
            company_id=1,
            number="007",
            issue_date=date(2024, 4, 1),
            period_start=date(2024, 3, 1),
            period_end=date(2024, 3, 31),
            status="sent",
            issuer_name="Ana",
            issuer_id_type="CC",
            issuer_id_number="1",
            client_name="Acme",
            total_hours=Decimal("14.0000"),
            total_amount=Decimal("700000"),
            created_at=now,
            updated_at=now,
        )
        orm_invoice.items = [
            ORMInvoiceItem(
                id=1, invoice_id=1, concept="Work", hours=Decimal("14"), rate=Decimal("50000"), total=Decimal("700000")
            )
        ]

        invoice = invoice_to_domain(orm_invoice)

        assert isinstance(invoice, Invoice)
        assert invoice.status is InvoiceStatus.SENT
        assert invoice.total_hours == Decimal("14")
        assert str(invoice.total_amount) == "700000.00"
        assert len(invoice.items) == 1
        assert invoice.items[0].total == Decimal("700000")


def test_billing_profile_fields_cover_entity_and_columns():
    assert set(BILLING_PROFILE_FIELDS) == {f.name for f in fields(BillingProfile)} - {"user_id"}
    assert set(COMPANY_BILLING_PROFILE_FIELDS) == {f.name for f in fields(CompanyBillingProfile)} - {"company_id"}
    assert set(BILLING_PROFILE_FIELDS) <= set(ORMUserBillingProfile.__table__.columns.keys())
    assert set(COMPANY_BILLING_PROFILE_FIELDS) <= set(ORMCompanyBillingProfile.__table__.columns.keys())
