"""SQLAlchemy models for timebill database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    billing_profile = relationship(
        "UserBillingProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    companies = relationship("Company", back_populates="user", cascade="all, delete-orphan")


class UserBillingProfile(Base):
    """Issuer billing data, one row per user."""

    __tablename__ = "user_billing_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    name = Column(String, nullable=False)
    id_type = Column(String, nullable=False)
    id_number = Column(String, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    account_type = Column(String, nullable=True)
    account_number = Column(String, nullable=True)
    signature_image = Column(Text, nullable=True)
    declaration = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    user = relationship("User", back_populates="billing_profile")


class Company(Base):
    """Billing client model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    hourly_rate = Column(Numeric(14, 2), default=0, nullable=False)
    billing_cycle_day = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_company_user_name"),)

    # Relationships
    user = relationship("User", back_populates="companies")
    billing_profile = relationship(
        "CompanyBillingProfile", back_populates="company", uselist=False, cascade="all, delete-orphan"
    )
    projects = relationship("Project", back_populates="company", cascade="all, delete-orphan")
    entries = relationship("HourEntry", back_populates="company", cascade="all, delete-orphan")


class CompanyBillingProfile(Base):
    """Bill-to data, one row per company."""

    __tablename__ = "company_billing_profiles"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), unique=True, nullable=False)
    legal_name = Column(String, nullable=True)
    tax_id = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    contact_name = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    company = relationship("Company", back_populates="billing_profile")


class Project(Base):
    """Project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_project_company_name"),)

    company = relationship("Company", back_populates="projects")


class HourEntry(Base):
    """Hours logged on one date for a company and project bucket."""

    __tablename__ = "hour_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    date = Column(Date, nullable=False)
    hours = Column(Numeric(10, 4), nullable=False)
    description = Column(String, nullable=True)
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, nullable=False)

    company = relationship("Company", back_populates="entries")


# NULL never collides in a plain unique constraint, so the unassigned bucket
# gets its own partial index.
Index(
    "uq_entry_project_date",
    HourEntry.company_id,
    HourEntry.project_id,
    HourEntry.date,
    unique=True,
    sqlite_where=HourEntry.project_id.isnot(None),
    postgresql_where=HourEntry.project_id.isnot(None),
)
Index(
    "uq_entry_unassigned_date",
    HourEntry.company_id,
    HourEntry.date,
    unique=True,
    sqlite_where=HourEntry.project_id.is_(None),
    postgresql_where=HourEntry.project_id.is_(None),
)


class Invoice(Base):
    """Invoice model with denormalized issuer and client columns."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    number = Column(String, nullable=False)
    issue_date = Column(Date, nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    project_name = Column(String, nullable=True)
    status = Column(String, default="draft", nullable=False)

    issuer_name = Column(String, nullable=False)
    issuer_id_type = Column(String, nullable=False)
    issuer_id_number = Column(String, nullable=False)
    issuer_address = Column(String, nullable=True)
    issuer_city = Column(String, nullable=True)
    issuer_phone = Column(String, nullable=True)
    issuer_bank_name = Column(String, nullable=True)
    issuer_account_type = Column(String, nullable=True)
    issuer_account_number = Column(String, nullable=True)
    issuer_signature_image = Column(Text, nullable=True)
    issuer_declaration = Column(Text, nullable=True)

    client_name = Column(String, nullable=False)
    client_tax_id = Column(String, nullable=True)
    client_address = Column(String, nullable=True)
    client_city = Column(String, nullable=True)

    total_hours = Column(Numeric(12, 4), nullable=False)
    total_amount = Column(Numeric(16, 2), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "number", name="uq_invoice_user_number"),)

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )


class InvoiceItem(Base):
    """Invoice line item."""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    concept = Column(String, nullable=False)
    hours = Column(Numeric(12, 4), nullable=False)
    rate = Column(Numeric(14, 2), nullable=False)
    total = Column(Numeric(16, 2), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)

    invoice = relationship("Invoice", back_populates="items")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
