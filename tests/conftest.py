"""Shared pytest fixtures for timebill tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from timebill.database.factories import create_sqlite_database
from timebill.domain.averages import WeekdayAverageService
from timebill.domain.company import CompanyService
from timebill.domain.invoice import InvoiceService
from timebill.domain.ownership import OwnershipResolver
from timebill.domain.reconciliation import ReconciliationService
from timebill.domain.report import ReportService
from timebill.domain.user import UserService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def company_service(temp_db):
    """Create a CompanyService with a temporary database."""
    return CompanyService(temp_db)


@pytest.fixture
def ownership(temp_db):
    """Create an OwnershipResolver with a temporary database."""
    return OwnershipResolver(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def average_service(temp_db):
    """Create a WeekdayAverageService with a temporary database."""
    return WeekdayAverageService(temp_db)


@pytest.fixture
def invoice_service(temp_db):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def sample_user(user_service):
    """Create a user with a configured billing profile."""
    user_id = user_service.create_user(email="ana@example.com", name="Ana Gómez")
    user_service.update_billing_profile(
        user_id,
        name="Ana Gómez",
        id_type="CC",
        id_number="1020304050",
        city="Medellín",
        bank_name="Bancolombia",
        account_type="Savings",
        account_number="000-111-222",
    )
    return user_service.get_user(user_id)


@pytest.fixture
def other_user(user_service):
    """Create a second user without billing profile."""
    user_id = user_service.create_user(email="bob@example.com", name="Bob")
    return user_service.get_user(user_id)


@pytest.fixture
def sample_company(company_service, sample_user):
    """Create a company billed at 50000 per hour."""
    company_id = company_service.create_company(
        sample_user.id, "Acme", hourly_rate=Decimal("50000"), billing_cycle_day=1
    )
    return company_service.get_company(sample_user.id, company_id)


@pytest.fixture
def sample_project(company_service, sample_user, sample_company):
    """Create a project under the sample company."""
    project_id = company_service.create_project(sample_user.id, sample_company.id, "Website")
    return next(p for p in company_service.list_projects(sample_user.id, sample_company.id) if p.id == project_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
