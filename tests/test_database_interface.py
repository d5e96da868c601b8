"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from timebill.domain import entities
from timebill.domain.errors import ConflictError


@pytest.fixture
def company_id(temp_db):
    user_id = temp_db.create_user(email="ana@example.com", name="Ana")
    return temp_db.create_company(user_id=user_id, name="Acme", hourly_rate=Decimal("50000"))


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_user_returns_domain_model(self, temp_db):
        """Test that get_user returns a domain User entity."""
        user_id = temp_db.create_user(email="ana@example.com", name="Ana")

        user = temp_db.get_user(user_id)

        assert isinstance(user, entities.User)
        assert user.email == "ana@example.com"
        assert isinstance(user.created_at, datetime)
        assert temp_db.get_user_by_email("ana@example.com").id == user_id

    def test_get_company_returns_domain_model(self, temp_db, company_id):
        """Test that get_company returns a domain Company entity with Decimal rate."""
        company = temp_db.get_company(company_id)

        assert isinstance(company, entities.Company)
        assert company.name == "Acme"
        assert company.hourly_rate == Decimal("50000")
        assert isinstance(company.hourly_rate, Decimal)
        assert company.billing_cycle_day == 1

    def test_duplicate_company_name_conflicts(self, temp_db, company_id):
        """Test that the (user, name) constraint surfaces as ConflictError."""
        user_id = temp_db.get_company(company_id).user_id

        with pytest.raises(ConflictError):
            temp_db.create_company(user_id=user_id, name="Acme", hourly_rate=Decimal("1"))

    def test_insert_entry_returns_domain_model(self, temp_db, company_id):
        """Test that insert_entry returns a domain HourEntry at version 1."""
        entry = temp_db.insert_entry(company_id, None, date(2024, 3, 4), Decimal("7.5"), "Work")

        assert isinstance(entry, entities.HourEntry)
        assert entry.hours == Decimal("7.5")
        assert entry.version == 1
        assert entry.project_id is None

    def test_unassigned_key_is_unique(self, temp_db, company_id):
        """Test that two NULL-project entries for one date are rejected."""
        temp_db.insert_entry(company_id, None, date(2024, 3, 4), Decimal("1"))

        with pytest.raises(ConflictError):
            temp_db.insert_entry(company_id, None, date(2024, 3, 4), Decimal("2"))

    def test_project_key_is_unique(self, temp_db, company_id):
        """Test that two entries for one project and date are rejected."""
        user_id = temp_db.get_company(company_id).user_id
        project_id = temp_db.create_project(user_id=user_id, company_id=company_id, name="Web")
        temp_db.insert_entry(company_id, project_id, date(2024, 3, 4), Decimal("1"))
        temp_db.insert_entry(company_id, None, date(2024, 3, 4), Decimal("1"))

        with pytest.raises(ConflictError):
            temp_db.insert_entry(company_id, project_id, date(2024, 3, 4), Decimal("2"))

    def test_update_entry_if_version(self, temp_db, company_id):
        """Test compare-and-set updates."""
        entry = temp_db.insert_entry(company_id, None, date(2024, 3, 4), Decimal("1"))

        assert temp_db.update_entry_if_version(entry.id, 1, Decimal("2")) is True
        assert temp_db.update_entry_if_version(entry.id, 1, Decimal("3")) is False

        current = temp_db.get_entry(company_id, None, date(2024, 3, 4))
        assert current.hours == Decimal("2")
        assert current.version == 2

    def test_delete_entry_if_version(self, temp_db, company_id):
        """Test compare-and-set deletes."""
        entry = temp_db.insert_entry(company_id, None, date(2024, 3, 4), Decimal("1"))

        assert temp_db.delete_entry_if_version(entry.id, 5) is False
        assert temp_db.delete_entry_if_version(entry.id, 1) is True
        assert temp_db.get_entry(company_id, None, date(2024, 3, 4)) is None

    def test_max_invoice_number_is_numeric(self, temp_db, company_id):
        """Test that "1000" counts as higher than "999"."""
        company = temp_db.get_company(company_id)
        base = {
            "user_id": company.user_id,
            "company_id": company_id,
            "issue_date": date(2024, 4, 1),
            "period_start": date(2024, 3, 1),
            "period_end": date(2024, 3, 31),
            "status": "draft",
            "issuer_name": "Ana",
            "issuer_id_type": "CC",
            "issuer_id_number": "1",
            "client_name": "Acme",
            "total_hours": Decimal("1"),
            "total_amount": Decimal("1"),
        }
        item = {"concept": "Work", "hours": Decimal("1"), "rate": Decimal("1"), "total": Decimal("1")}
        for number in ("999", "1000"):
            temp_db.create_invoice(dict(base, number=number), [item])

        assert temp_db.get_max_invoice_number(company.user_id) == 1000
        assert [inv.number for inv in temp_db.list_invoices(company.user_id)] == ["1000", "999"]
        with pytest.raises(ConflictError):
            temp_db.create_invoice(dict(base, number="999"), [item])
