"""User domain service."""

from typing import Optional

from timebill.database.base import Database
from timebill.domain.entities import BILLING_PROFILE_FIELDS, BillingProfile, User
from timebill.domain.errors import ConflictError, NotFoundError, ValidationError, user_not_found

REQUIRED_BILLING_FIELDS = ("name", "id_type", "id_number")


class UserService:
    """Service for users and their issuer billing profile."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, email: str, name: str) -> int:
        """Register a user.

        Raises:
            ValidationError: If email or name is blank
            ConflictError: If the email is already registered
        """
        email = (email or "").strip().lower()
        name = (name or "").strip()
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email '{email}'")
        if not name:
            raise ValidationError("Name is required")
        if self.db.get_user_by_email(email) is not None:
            raise ConflictError(f"User with email '{email}' already exists")
        return self.db.create_user(email=email, name=name)

    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        return self.db.get_user_by_email(email.strip().lower())

    def require_user(self, user_id: int) -> User:
        """Get user by ID or raise NotFoundError."""
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return user

    def get_billing_profile(self, user_id: int) -> Optional[BillingProfile]:
        """Get the issuer billing profile, or None if not configured."""
        return self.db.get_billing_profile(user_id)

    def update_billing_profile(self, user_id: int, **fields: Optional[str]) -> BillingProfile:
        """Create or replace the issuer billing profile.

        Later edits never change existing invoices; they carry their own copy.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: On unknown fields or missing name/id_type/id_number
        """
        self.require_user(user_id)
        unknown = set(fields) - set(BILLING_PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown billing profile field(s): {', '.join(sorted(unknown))}")
        missing = [name for name in REQUIRED_BILLING_FIELDS if not (fields.get(name) or "").strip()]
        if missing:
            raise ValidationError(f"Billing profile requires: {', '.join(missing)}")

        self.db.upsert_billing_profile(user_id, fields)
        return self.db.get_billing_profile(user_id)
