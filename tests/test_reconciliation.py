"""Tests for entry reconciliation."""

from datetime import date
from decimal import Decimal

import pytest

from timebill.domain.entities import ReconcileMode
from timebill.domain.errors import (
    AlreadyExistsError,
    ConflictError,
    InvalidRangeError,
    InvalidWeekdayError,
    NotFoundError,
    OutOfBoundsError,
    ValidationError,
)
from timebill.domain.reconciliation import plan_hours, to_hours


def _hours(db, company_id, day, project_id=None):
    entry = db.get_entry(company_id, project_id, day)
    return None if entry is None else entry.hours


class TestReconcile:
    """Tests for single-date reconciliation."""

    def test_set_creates_entry(self, reconciliation_service, temp_db, sample_user, sample_company):
        change = reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 8)

        assert change.date == date(2024, 3, 4)
        assert change.old_value is None
        assert change.new_value == Decimal("8")
        assert _hours(temp_db, sample_company.id, date(2024, 3, 4)) == Decimal("8")

    def test_set_overwrites_and_is_idempotent(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 8)
        first = reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 5)
        second = reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 5)

        assert first.old_value == Decimal("8")
        assert first.new_value == Decimal("5")
        assert second.old_value == second.new_value == Decimal("5")
        assert len(temp_db.list_entries(sample_company.id)) == 1

    def test_accumulate_adds(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3, mode=ReconcileMode.ACCUMULATE)
        change = reconciliation_service.reconcile(
            sample_user.id, sample_company.id, "2024-03-04", "2.5", mode=ReconcileMode.ACCUMULATE
        )

        assert change.old_value == Decimal("3")
        assert change.new_value == Decimal("5.5")

    def test_fine_hours_are_rounded_to_stored_scale(self, reconciliation_service, temp_db, sample_user, sample_company):
        change = reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", "0.333333")

        assert change.new_value == Decimal("0.3333")
        assert _hours(temp_db, sample_company.id, date(2024, 3, 4)) == change.new_value

    def test_accumulate_uses_stored_value(self, reconciliation_service, temp_db, sample_user, sample_company):
        for _ in range(3):
            change = reconciliation_service.reconcile(
                sample_user.id, sample_company.id, "2024-03-04", "0.33335", mode=ReconcileMode.ACCUMULATE
            )

        assert change.old_value == Decimal("0.6668")
        assert change.new_value == Decimal("1.0002")
        assert _hours(temp_db, sample_company.id, date(2024, 3, 4)) == Decimal("1.0002")

    def test_accumulate_past_bound_does_not_mutate(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 20)

        with pytest.raises(OutOfBoundsError):
            reconciliation_service.reconcile(
                sample_user.id, sample_company.id, "2024-03-04", 5, mode=ReconcileMode.ACCUMULATE
            )

        assert _hours(temp_db, sample_company.id, date(2024, 3, 4)) == Decimal("20")

    def test_error_mode_never_mutates(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 8)

        with pytest.raises(AlreadyExistsError) as excinfo:
            reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 4, mode="error")

        assert excinfo.value.current_hours == Decimal("8")
        assert "2024-03-04" in str(excinfo.value)
        assert _hours(temp_db, sample_company.id, date(2024, 3, 4)) == Decimal("8")

    def test_error_mode_inserts_when_absent(self, reconciliation_service, sample_user, sample_company):
        change = reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 4, mode="error")

        assert change.new_value == Decimal("4")

    @pytest.mark.parametrize("hours", [-1, "24.5", 25])
    def test_rejects_out_of_bounds(self, reconciliation_service, temp_db, sample_user, sample_company, hours):
        with pytest.raises(OutOfBoundsError):
            reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", hours)

        assert temp_db.list_entries(sample_company.id) == []

    def test_bounds_are_inclusive(self, reconciliation_service, sample_user, sample_company):
        assert reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 0).new_value == 0
        assert reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-05", 24).new_value == 24

    def test_project_buckets_are_independent(
        self, reconciliation_service, temp_db, sample_user, sample_company, sample_project
    ):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3)
        reconciliation_service.reconcile(
            sample_user.id, sample_company.id, "2024-03-04", 5, project_id=sample_project.id
        )

        assert _hours(temp_db, sample_company.id, date(2024, 3, 4)) == Decimal("3")
        assert _hours(temp_db, sample_company.id, date(2024, 3, 4), sample_project.id) == Decimal("5")

    def test_description_is_kept_when_not_given(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3, description="Code review")
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 4)

        assert temp_db.get_entry(sample_company.id, None, date(2024, 3, 4)).description == "Code review"

    def test_update_bumps_version(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3)
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 4)

        assert temp_db.get_entry(sample_company.id, None, date(2024, 3, 4)).version == 2

    def test_rejects_malformed_date(self, reconciliation_service, sample_user, sample_company):
        with pytest.raises(InvalidRangeError):
            reconciliation_service.reconcile(sample_user.id, sample_company.id, "04/03/2024", 3)


class TestConcurrentWrites:
    """Write races are simulated by making the first read stale."""

    def test_insert_race_falls_back_to_update(
        self, reconciliation_service, temp_db, sample_user, sample_company, monkeypatch
    ):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3)
        real_get_entry = temp_db.get_entry
        calls = []

        def stale_get_entry(*args):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real_get_entry(*args)

        monkeypatch.setattr(temp_db, "get_entry", stale_get_entry)
        change = reconciliation_service.reconcile(
            sample_user.id, sample_company.id, "2024-03-04", 2, mode=ReconcileMode.ACCUMULATE
        )

        assert change.old_value == Decimal("3")
        assert change.new_value == Decimal("5")
        assert len(temp_db.list_entries(sample_company.id)) == 1

    def test_lost_update_is_retried(self, reconciliation_service, temp_db, sample_user, sample_company, monkeypatch):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3)
        real_update = temp_db.update_entry_if_version
        attempts = []

        def racing_update(entry_id, expected_version, hours, description=None):
            attempts.append(expected_version)
            if len(attempts) == 1:
                # Another writer accumulates 1 hour first
                real_update(entry_id, expected_version, Decimal("4"))
            return real_update(entry_id, expected_version, hours, description)

        monkeypatch.setattr(temp_db, "update_entry_if_version", racing_update)
        change = reconciliation_service.reconcile(
            sample_user.id, sample_company.id, "2024-03-04", 2, mode=ReconcileMode.ACCUMULATE
        )

        assert attempts == [1, 2]
        assert change.old_value == Decimal("4")
        assert change.new_value == Decimal("6")

    def test_gives_up_after_max_attempts(self, reconciliation_service, temp_db, sample_user, sample_company, monkeypatch):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3)
        monkeypatch.setattr(temp_db, "update_entry_if_version", lambda *args, **kwargs: False)

        with pytest.raises(ConflictError, match="concurrent"):
            reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 4)


class TestReconcileRange:
    """Tests for bulk reconciliation over a date range."""

    def test_writes_filtered_dates(self, reconciliation_service, temp_db, sample_user, sample_company):
        result = reconciliation_service.reconcile_range(
            sample_user.id, sample_company.id, "2024-03-01", "2024-03-31", 8, weekdays=["lunes", "Tue"]
        )

        assert result.ok
        assert len(result.changes) == 8
        assert [c.date for c in result.changes] == sorted(c.date for c in result.changes)
        assert len(temp_db.list_entries(sample_company.id)) == 8

    def test_failures_are_per_date(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-05", 8)

        result = reconciliation_service.reconcile_range(
            sample_user.id, sample_company.id, "2024-03-04", "2024-03-06", 4, mode="error"
        )

        assert [c.date for c in result.changes] == [date(2024, 3, 4), date(2024, 3, 6)]
        assert len(result.failures) == 1
        assert result.failures[0].date == date(2024, 3, 5)
        assert isinstance(result.failures[0].error, AlreadyExistsError)
        assert not result.ok

    def test_skip_existing(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-05", 8)

        result = reconciliation_service.reconcile_range(
            sample_user.id, sample_company.id, "2024-03-04", "2024-03-06", 4, mode="error", skip_existing=True
        )

        assert result.ok
        assert result.skipped == (date(2024, 3, 5),)
        assert _hours(temp_db, sample_company.id, date(2024, 3, 5)) == Decimal("8")

    def test_fail_fast_writes_nothing(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-06", 20)

        with pytest.raises(OutOfBoundsError):
            reconciliation_service.reconcile_range(
                sample_user.id, sample_company.id, "2024-03-04", "2024-03-08", 6,
                mode=ReconcileMode.ACCUMULATE, fail_fast=True,
            )

        entries = temp_db.list_entries(sample_company.id)
        assert len(entries) == 1
        assert entries[0].hours == Decimal("20")

    def test_invalid_weekday_writes_nothing(self, reconciliation_service, temp_db, sample_user, sample_company):
        with pytest.raises(InvalidWeekdayError):
            reconciliation_service.reconcile_range(
                sample_user.id, sample_company.id, "2024-03-01", "2024-03-31", 8, weekdays=["mon", "xyz"]
            )

        assert temp_db.list_entries(sample_company.id) == []

    def test_out_of_bounds_hours_rejected_upfront(self, reconciliation_service, temp_db, sample_user, sample_company):
        with pytest.raises(OutOfBoundsError):
            reconciliation_service.reconcile_range(sample_user.id, sample_company.id, "2024-03-01", "2024-03-05", 30)

    def test_reconcile_many_uses_individual_values(self, reconciliation_service, sample_user, sample_company):
        result = reconciliation_service.reconcile_many(
            sample_user.id,
            sample_company.id,
            {date(2024, 3, 5): 6, date(2024, 3, 4): "7.5", date(2024, 3, 6): 30},
        )

        assert [(c.date, c.new_value) for c in result.changes] == [
            (date(2024, 3, 4), Decimal("7.5")),
            (date(2024, 3, 5), Decimal("6")),
        ]
        assert [f.date for f in result.failures] == [date(2024, 3, 6)]


class TestDeleteAndList:
    """Tests for deleting and listing entries."""

    def test_delete_entry(self, reconciliation_service, temp_db, sample_user, sample_company):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 8)

        change = reconciliation_service.delete_entry(sample_user.id, sample_company.id, "2024-03-04")

        assert change.old_value == Decimal("8")
        assert change.new_value is None
        assert temp_db.list_entries(sample_company.id) == []

    def test_delete_missing_entry(self, reconciliation_service, sample_user, sample_company):
        with pytest.raises(NotFoundError, match="No entry"):
            reconciliation_service.delete_entry(sample_user.id, sample_company.id, "2024-03-04")

    def test_list_entries_filters(self, reconciliation_service, sample_user, sample_company, sample_project):
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-04", 3)
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-03-05", 4, project_id=sample_project.id)
        reconciliation_service.reconcile(sample_user.id, sample_company.id, "2024-04-01", 5)

        march = reconciliation_service.list_entries(sample_user.id, sample_company.id, "2024-03-01", "2024-03-31")
        unassigned = reconciliation_service.list_entries(sample_user.id, sample_company.id, unassigned=True)
        project = reconciliation_service.list_entries(sample_user.id, sample_company.id, project_id=sample_project.id)

        assert [e.date for e in march] == [date(2024, 3, 4), date(2024, 3, 5)]
        assert [e.hours for e in unassigned] == [Decimal("3"), Decimal("5")]
        assert [e.hours for e in project] == [Decimal("4")]


def test_plan_hours_is_pure():
    assert plan_hours(None, Decimal("8"), ReconcileMode.ERROR, date(2024, 3, 4)) == Decimal("8")


@pytest.mark.parametrize("value", ["abc", "NaN", True, "inf"])
def test_to_hours_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        to_hours(value)


def test_to_hours_keeps_float_precision():
    assert to_hours(7.1) == Decimal("7.1")


def test_to_hours_rounds_to_four_places():
    assert to_hours("7.33333333") == Decimal("7.3333")
    assert to_hours("0.00005") == Decimal("0.0001")
    assert str(to_hours("7.5")) == "7.5"
