"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from timebill.domain.entities import (
    User,
    BillingProfile,
    Company,
    CompanyBillingProfile,
    Project,
    HourEntry,
    Invoice,
    InvoiceStatus,
)


class Database(ABC):
    """Abstract database interface for timebill.

    Entry and invoice writes carry the atomicity guarantees the domain
    services rely on:

    - ``insert_entry`` raises ConflictError when the
      (company_id, project_id, date) key is already taken.
    - ``update_entry_if_version`` and ``delete_entry_if_version`` only apply
      when the stored version still matches.
    - ``create_invoice`` inserts the invoice and its items in one
      transaction and raises ConflictError on a duplicate (user_id, number).
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, email: str, name: str) -> int:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    @abstractmethod
    def get_billing_profile(self, user_id: int) -> Optional[BillingProfile]:
        """Get the issuer billing profile of a user."""
        pass

    @abstractmethod
    def upsert_billing_profile(self, user_id: int, fields: dict[str, Any]) -> None:
        """Create or replace the issuer billing profile of a user."""
        pass

    # Company operations
    @abstractmethod
    def create_company(
        self,
        user_id: int,
        name: str,
        hourly_rate: Decimal,
        billing_cycle_day: int = 1,
        description: Optional[str] = None,
    ) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID, regardless of owner."""
        pass

    @abstractmethod
    def list_companies(self, user_id: int) -> list[Company]:
        """List companies owned by a user."""
        pass

    @abstractmethod
    def update_company(
        self,
        company_id: int,
        name: Optional[str] = None,
        hourly_rate: Optional[Decimal] = None,
        billing_cycle_day: Optional[int] = None,
        description: Optional[str] = None,
    ) -> None:
        """Update company fields that are not None."""
        pass

    @abstractmethod
    def get_company_billing_profile(self, company_id: int) -> Optional[CompanyBillingProfile]:
        """Get the bill-to profile of a company."""
        pass

    @abstractmethod
    def upsert_company_billing_profile(self, company_id: int, fields: dict[str, Any]) -> None:
        """Create or replace the bill-to profile of a company."""
        pass

    # Project operations
    @abstractmethod
    def create_project(self, user_id: int, company_id: int, name: str) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID, regardless of owner."""
        pass

    @abstractmethod
    def list_projects(self, company_id: int) -> list[Project]:
        """List projects of a company."""
        pass

    # Hour entry operations
    @abstractmethod
    def get_entry(self, company_id: int, project_id: Optional[int], entry_date: date) -> Optional[HourEntry]:
        """Get the entry for a (company, project bucket, date) key."""
        pass

    @abstractmethod
    def insert_entry(
        self,
        company_id: int,
        project_id: Optional[int],
        entry_date: date,
        hours: Decimal,
        description: Optional[str] = None,
    ) -> HourEntry:
        """Insert an entry. Raises ConflictError if the key already exists."""
        pass

    @abstractmethod
    def update_entry_if_version(
        self,
        entry_id: int,
        expected_version: int,
        hours: Decimal,
        description: Optional[str] = None,
    ) -> bool:
        """Update hours if the entry is still at ``expected_version``.

        Returns False when the entry changed or vanished in the meantime.
        """
        pass

    @abstractmethod
    def delete_entry_if_version(self, entry_id: int, expected_version: int) -> bool:
        """Delete an entry if it is still at ``expected_version``."""
        pass

    @abstractmethod
    def list_entries(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        project_id: Optional[int] = None,
        unassigned: bool = False,
    ) -> list[HourEntry]:
        """List entries of a company ordered by date.

        Args:
            company_id: Company ID
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            project_id: Optional project filter
            unassigned: If True, only return entries without a project
        """
        pass

    # Invoice operations
    @abstractmethod
    def get_max_invoice_number(self, user_id: int) -> Optional[int]:
        """Return the highest numeric invoice number of a user, or None."""
        pass

    @abstractmethod
    def create_invoice(self, fields: dict[str, Any], items: list[dict[str, Any]]) -> int:
        """Insert an invoice and its items atomically. Returns invoice ID.

        Raises ConflictError if (user_id, number) is already taken.
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice with items by ID, regardless of owner."""
        pass

    @abstractmethod
    def list_invoices(self, user_id: int, company_id: Optional[int] = None) -> list[Invoice]:
        """List invoices of a user, newest number first."""
        pass

    @abstractmethod
    def update_invoice_status(self, invoice_id: int, status: InvoiceStatus) -> None:
        """Set invoice status."""
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: int) -> None:
        """Delete an invoice and its items."""
        pass

    @abstractmethod
    def find_locking_invoice(
        self, company_id: int, project_id: Optional[int], entry_date: date
    ) -> Optional[Invoice]:
        """Find a sent or paid invoice whose period and project filter cover the entry key."""
        pass
