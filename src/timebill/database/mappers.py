"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so that the domain services never
see ORM instances.
"""

from decimal import Decimal
from typing import Any, Optional

from timebill.domain import entities as domain
from timebill.domain.entities import BILLING_PROFILE_FIELDS, COMPANY_BILLING_PROFILE_FIELDS
from timebill.database.models import (
    User as ORMUser,
    UserBillingProfile as ORMUserBillingProfile,
    Company as ORMCompany,
    CompanyBillingProfile as ORMCompanyBillingProfile,
    Project as ORMProject,
    HourEntry as ORMHourEntry,
    Invoice as ORMInvoice,
    InvoiceItem as ORMInvoiceItem,
)


def to_decimal(value: Any) -> Decimal:
    """Convert a stored numeric to Decimal without trailing zeros ("8.0000" -> "8")."""
    if value is None:
        return Decimal("0")
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    if number == number.to_integral_value():
        return number.quantize(Decimal("1"))
    return number.normalize()


def to_money(value: Any) -> Decimal:
    """Convert a stored amount to a two-decimal Decimal."""
    if value is None:
        return Decimal("0.00")
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    return number.quantize(Decimal("0.01"))


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        email=orm_user.email,
        name=orm_user.name,
        created_at=orm_user.created_at,
    )


def billing_profile_to_domain(orm_profile: ORMUserBillingProfile) -> domain.BillingProfile:
    """Convert SQLAlchemy UserBillingProfile model to domain BillingProfile entity."""
    return domain.BillingProfile(
        user_id=orm_profile.user_id,
        **{name: getattr(orm_profile, name) for name in BILLING_PROFILE_FIELDS},
    )


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        user_id=orm_company.user_id,
        name=orm_company.name,
        hourly_rate=to_money(orm_company.hourly_rate),
        billing_cycle_day=orm_company.billing_cycle_day,
        description=orm_company.description,
        created_at=orm_company.created_at,
    )


def company_billing_profile_to_domain(
    orm_profile: ORMCompanyBillingProfile,
) -> domain.CompanyBillingProfile:
    """Convert SQLAlchemy CompanyBillingProfile model to domain entity."""
    return domain.CompanyBillingProfile(
        company_id=orm_profile.company_id,
        **{name: getattr(orm_profile, name) for name in COMPANY_BILLING_PROFILE_FIELDS},
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        user_id=orm_project.user_id,
        company_id=orm_project.company_id,
        name=orm_project.name,
        created_at=orm_project.created_at,
    )


def hour_entry_to_domain(orm_entry: ORMHourEntry) -> domain.HourEntry:
    """Convert SQLAlchemy HourEntry model to domain HourEntry entity."""
    return domain.HourEntry(
        id=orm_entry.id,
        company_id=orm_entry.company_id,
        project_id=orm_entry.project_id,
        date=orm_entry.date,
        hours=to_decimal(orm_entry.hours),
        description=orm_entry.description,
        version=orm_entry.version,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
    )


def invoice_item_to_domain(orm_item: ORMInvoiceItem) -> domain.InvoiceItem:
    """Convert SQLAlchemy InvoiceItem model to domain InvoiceItem entity."""
    return domain.InvoiceItem(
        id=orm_item.id,
        invoice_id=orm_item.invoice_id,
        concept=orm_item.concept,
        hours=to_decimal(orm_item.hours),
        rate=to_money(orm_item.rate),
        total=to_money(orm_item.total),
        project_id=orm_item.project_id,
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    return domain.Invoice(
        id=orm_invoice.id,
        user_id=orm_invoice.user_id,
        company_id=orm_invoice.company_id,
        number=orm_invoice.number,
        issue_date=orm_invoice.issue_date,
        period_start=orm_invoice.period_start,
        period_end=orm_invoice.period_end,
        project_id=orm_invoice.project_id,
        project_name=orm_invoice.project_name,
        status=domain.InvoiceStatus(orm_invoice.status),
        issuer_name=orm_invoice.issuer_name,
        issuer_id_type=orm_invoice.issuer_id_type,
        issuer_id_number=orm_invoice.issuer_id_number,
        issuer_address=orm_invoice.issuer_address,
        issuer_city=orm_invoice.issuer_city,
        issuer_phone=orm_invoice.issuer_phone,
        issuer_bank_name=orm_invoice.issuer_bank_name,
        issuer_account_type=orm_invoice.issuer_account_type,
        issuer_account_number=orm_invoice.issuer_account_number,
        issuer_signature_image=orm_invoice.issuer_signature_image,
        issuer_declaration=orm_invoice.issuer_declaration,
        client_name=orm_invoice.client_name,
        client_tax_id=orm_invoice.client_tax_id,
        client_address=orm_invoice.client_address,
        client_city=orm_invoice.client_city,
        total_hours=to_decimal(orm_invoice.total_hours),
        total_amount=to_money(orm_invoice.total_amount),
        created_at=orm_invoice.created_at,
        updated_at=orm_invoice.updated_at,
        items=tuple(invoice_item_to_domain(item) for item in orm_invoice.items),
    )


def optional_text(value: Optional[str]) -> Optional[str]:
    """Normalize blank strings to None before storing."""
    if value is None:
        return None
    value = value.strip()
    return value or None
