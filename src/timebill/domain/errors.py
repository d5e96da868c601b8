"""Shared domain error messages and error types."""

from datetime import date
from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested entity does not exist or is not owned by the caller."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidRangeError(ValidationError):
    """Malformed date or a start date after the end date."""


class InvalidWeekdayError(ValidationError):
    """Weekday token that is not in the alias table."""

    def __init__(self, token: str):
        super().__init__(invalid_weekday(token))
        self.token = token


class AlreadyExistsError(ConflictError):
    """An entry already exists for the date under the ``error`` mode."""

    def __init__(self, entry_date: date, current_hours: Decimal):
        super().__init__(entry_already_exists(entry_date, current_hours))
        self.date = entry_date
        self.current_hours = current_hours


class OutOfBoundsError(ValidationError):
    """Resulting hours fall outside the allowed range."""


class EmptyPeriodError(DomainError):
    """No entries matched the invoice period."""


class PreconditionFailedError(DomainError):
    """Operation blocked because required data is missing or locked."""


class InvalidTransitionError(DomainError):
    """Illegal invoice status change or deletion."""


def company_not_found(company_id: int) -> str:
    """Return message for a missing or foreign company."""
    return f"Company {company_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for a missing or foreign project."""
    return f"Project {project_id} not found"


def user_not_found(user: int | str) -> str:
    """Return message for a missing user."""
    return f"User {user} not found"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for a missing or foreign invoice."""
    return f"Invoice {invoice_id} not found"


def invalid_date(value: object) -> str:
    """Return message for a malformed calendar date."""
    return f"Invalid date '{value}', expected YYYY-MM-DD"


def start_after_end(start: date, end: date) -> str:
    """Return message when a range is reversed."""
    return f"Start date {start.isoformat()} is after end date {end.isoformat()}"


def invalid_weekday(token: str) -> str:
    """Return message for an unknown weekday token."""
    return f"Invalid weekday: '{token}'"


def entry_already_exists(entry_date: date, current_hours: Decimal) -> str:
    """Return message for a conflicting entry under the ``error`` mode."""
    return (
        f"An entry already exists for {entry_date.isoformat()} ({current_hours} h). "
        "Use mode 'set' or 'accumulate'."
    )


def hours_out_of_bounds(hours: Decimal, low: Decimal, high: Decimal) -> str:
    """Return message when hours fall outside the allowed range."""
    return f"Hours must be between {low} and {high}, got {hours}"


def entry_locked(entry_date: date, invoice_number: str) -> str:
    """Return message when an entry is covered by a sent or paid invoice."""
    return f"Entry for {entry_date.isoformat()} is locked by invoice {invoice_number}"


def billing_profile_missing() -> str:
    """Return message when the issuer billing profile is not configured."""
    return "Billing profile not configured"


def empty_period(start: date, end: date) -> str:
    """Return message when an invoice period has no entries."""
    return f"No hours recorded between {start.isoformat()} and {end.isoformat()}"


def invalid_transition(current: str, target: str) -> str:
    """Return message for an illegal status change."""
    return f"Cannot change invoice status from '{current}' to '{target}'"


def invoice_delete_blocked(number: str, status: str) -> str:
    """Return message when deleting a non-draft invoice."""
    return f"Cannot delete invoice {number}: only draft invoices can be deleted (status is '{status}')"
