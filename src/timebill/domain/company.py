"""Company and project domain service."""

from decimal import Decimal, InvalidOperation
from typing import Optional

from timebill.database.base import Database
from timebill.domain.entities import COMPANY_BILLING_PROFILE_FIELDS, Company, CompanyBillingProfile, Project
from timebill.domain.errors import ConflictError, ValidationError
from timebill.domain.ownership import OwnershipResolver
from timebill.domain.user import UserService


def validate_rate(hourly_rate: Decimal) -> Decimal:
    """Return the rate as Decimal, rejecting negatives."""
    try:
        rate = Decimal(str(hourly_rate))
    except InvalidOperation:
        raise ValidationError(f"Invalid hourly rate: {hourly_rate!r}") from None
    if not rate.is_finite() or rate < 0:
        raise ValidationError(f"Hourly rate must be a non-negative number, got {hourly_rate}")
    return rate


def validate_cycle_day(billing_cycle_day: int) -> int:
    """Return the billing cycle day, rejecting values outside 1..31."""
    if not 1 <= billing_cycle_day <= 31:
        raise ValidationError(f"Billing cycle day must be between 1 and 31, got {billing_cycle_day}")
    return billing_cycle_day


class CompanyService:
    """Service for managing a user's companies and projects."""

    def __init__(self, db: Database):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ownership = OwnershipResolver(db)
        self.users = UserService(db)

    def create_company(
        self,
        user_id: int,
        name: str,
        hourly_rate: Decimal = Decimal("0"),
        billing_cycle_day: int = 1,
        description: Optional[str] = None,
    ) -> int:
        """Create a company for a user.

        Returns:
            Company ID

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: On blank name, negative rate or bad cycle day
            ConflictError: If the user already has a company with that name
        """
        self.users.require_user(user_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Company name is required")

        for company in self.db.list_companies(user_id):
            if company.name == name:
                raise ConflictError(f"Company with name '{name}' already exists")

        return self.db.create_company(
            user_id=user_id,
            name=name,
            hourly_rate=validate_rate(hourly_rate),
            billing_cycle_day=validate_cycle_day(billing_cycle_day),
            description=description,
        )

    def get_company(self, user_id: int, company_id: int) -> Company:
        """Get a company owned by the user."""
        return self.ownership.resolve_company(user_id, company_id)

    def list_companies(self, user_id: int) -> list[Company]:
        """List a user's companies."""
        return self.db.list_companies(user_id)

    def update_company(
        self,
        user_id: int,
        company_id: int,
        hourly_rate: Optional[Decimal] = None,
        billing_cycle_day: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Company:
        """Update rate, billing cycle day or description.

        Existing invoices keep the rate they were created with.
        """
        self.ownership.resolve_company(user_id, company_id)
        self.db.update_company(
            company_id,
            hourly_rate=validate_rate(hourly_rate) if hourly_rate is not None else None,
            billing_cycle_day=validate_cycle_day(billing_cycle_day) if billing_cycle_day is not None else None,
            description=description,
        )
        return self.db.get_company(company_id)

    def create_project(self, user_id: int, company_id: int, name: str) -> int:
        """Create a project under a company.

        Raises:
            NotFoundError: If the company is not owned by the user
            ConflictError: If the company already has a project with that name
        """
        self.ownership.resolve_company(user_id, company_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name is required")

        for project in self.db.list_projects(company_id):
            if project.name == name:
                raise ConflictError(f"Project with name '{name}' already exists for company {company_id}")

        return self.db.create_project(user_id=user_id, company_id=company_id, name=name)

    def list_projects(self, user_id: int, company_id: int) -> list[Project]:
        """List a company's projects."""
        self.ownership.resolve_company(user_id, company_id)
        return self.db.list_projects(company_id)

    def get_billing_profile(self, user_id: int, company_id: int) -> Optional[CompanyBillingProfile]:
        """Get the company's bill-to profile, or None."""
        self.ownership.resolve_company(user_id, company_id)
        return self.db.get_company_billing_profile(company_id)

    def update_billing_profile(
        self, user_id: int, company_id: int, **fields: Optional[str]
    ) -> CompanyBillingProfile:
        """Create or replace the company's bill-to profile."""
        self.ownership.resolve_company(user_id, company_id)
        unknown = set(fields) - set(COMPANY_BILLING_PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown billing profile field(s): {', '.join(sorted(unknown))}")
        self.db.upsert_company_billing_profile(company_id, fields)
        return self.db.get_company_billing_profile(company_id)
