"""Entry reconciliation domain service.

Decides how a proposed hours value for a date interacts with the entry that
may already exist for the same (company, project bucket, date) key.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Mapping, Optional, Union

from timebill.database.base import Database
from timebill.domain.calendar_range import DateLike, expand_range, parse_iso_date
from timebill.domain.entities import (
    BulkResult,
    DateFailure,
    EntryChange,
    HourEntry,
    ReconcileMode,
)
from timebill.domain.errors import (
    AlreadyExistsError,
    ConflictError,
    DomainError,
    NotFoundError,
    OutOfBoundsError,
    PreconditionFailedError,
    ValidationError,
    entry_locked,
    hours_out_of_bounds,
)
from timebill.domain.ownership import OwnershipResolver

logger = logging.getLogger(__name__)

HOURS_MIN = Decimal("0")
HOURS_MAX = Decimal("24")
# Scale of HourEntry.hours; finer input is rounded to it before any write.
HOURS_MAX_PLACES = 4
HOURS_QUANTUM = Decimal("0.0001")
MAX_WRITE_ATTEMPTS = 5
BULK_DESCRIPTION = "Bulk entry"

HoursLike = Union[Decimal, int, float, str]


def to_hours(value: HoursLike) -> Decimal:
    """Convert a numeric value to Decimal hours.

    Floats go through ``str`` so that 7.1 stays 7.1 rather than its binary
    expansion. Values with more than HOURS_MAX_PLACES decimals are rounded
    half up to that scale, so what is reported is what gets stored
    ("0.333333" becomes 0.3333).

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid hours value: {value!r}")
    try:
        hours = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"Invalid hours value: {value!r}") from None
    if not hours.is_finite():
        raise ValidationError(f"Invalid hours value: {value!r}")
    if hours.as_tuple().exponent < -HOURS_MAX_PLACES:
        hours = hours.quantize(HOURS_QUANTUM, ROUND_HALF_UP)
    return hours


def check_bounds(hours: Decimal) -> Decimal:
    """Return hours unchanged, or raise OutOfBoundsError outside [HOURS_MIN, HOURS_MAX]."""
    if hours < HOURS_MIN or hours > HOURS_MAX:
        raise OutOfBoundsError(hours_out_of_bounds(hours, HOURS_MIN, HOURS_MAX))
    return hours


def plan_hours(
    existing: Optional[HourEntry], hours: Decimal, mode: ReconcileMode, entry_date: date
) -> Decimal:
    """Apply a reconciliation mode to an existing entry without writing anything.

    Args:
        existing: Current entry for the key, or None
        hours: Proposed hours
        mode: Merge policy
        entry_date: Date of the key, used in error messages

    Returns:
        Hours the entry should hold afterwards

    Raises:
        AlreadyExistsError: Existing entry under ``error`` mode
        OutOfBoundsError: Proposed or accumulated hours outside the bounds
    """
    check_bounds(hours)
    if existing is None:
        return hours
    if mode is ReconcileMode.ERROR:
        raise AlreadyExistsError(entry_date, existing.hours)
    if mode is ReconcileMode.ACCUMULATE:
        return check_bounds(existing.hours + hours)
    return hours


class ReconciliationService:
    """Service for writing hour entries under an explicit conflict policy."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ownership = OwnershipResolver(db)

    def reconcile(
        self,
        user_id: int,
        company_id: int,
        entry_date: DateLike,
        hours: HoursLike,
        mode: ReconcileMode = ReconcileMode.SET,
        project_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> EntryChange:
        """Write hours for one date.

        Args:
            user_id: Acting user
            company_id: Company the hours are billed to
            entry_date: Date (date or ``YYYY-MM-DD``)
            hours: Proposed hours in [0, 24]
            mode: ``set`` overwrites, ``accumulate`` adds, ``error`` only inserts
            project_id: Optional project; None is the unassigned bucket
            description: Optional description; existing text is kept when None

        Returns:
            EntryChange with the previous value (None if absent) and the new value

        Raises:
            NotFoundError: Company or project not owned by the user
            AlreadyExistsError: Existing entry under ``error`` mode
            OutOfBoundsError: Resulting hours outside [0, 24]
            PreconditionFailedError: Date locked by a sent or paid invoice
        """
        self.ownership.resolve_optional_project(user_id, company_id, project_id)
        day = parse_iso_date(entry_date)
        return self._apply(company_id, project_id, day, to_hours(hours), ReconcileMode(mode), description)

    def reconcile_range(
        self,
        user_id: int,
        company_id: int,
        start_date: DateLike,
        end_date: DateLike,
        hours: HoursLike,
        weekdays: Optional[Iterable[Union[str, int]]] = None,
        mode: ReconcileMode = ReconcileMode.SET,
        skip_existing: bool = False,
        fail_fast: bool = False,
        project_id: Optional[int] = None,
        description: Optional[str] = BULK_DESCRIPTION,
    ) -> BulkResult:
        """Write the same hours to every date of a range that passes the weekday filter.

        Raises:
            InvalidRangeError: Malformed or reversed range
            InvalidWeekdayError: Unknown weekday token
            OutOfBoundsError: Proposed hours outside [0, 24]
        """
        self.ownership.resolve_optional_project(user_id, company_id, project_id)
        dates = expand_range(start_date, end_date, weekdays)
        value = check_bounds(to_hours(hours))
        return self._apply_many(
            company_id,
            project_id,
            {day: value for day in dates},
            ReconcileMode(mode),
            skip_existing=skip_existing,
            fail_fast=fail_fast,
            description=description,
        )

    def reconcile_many(
        self,
        user_id: int,
        company_id: int,
        hours_by_date: Mapping[date, HoursLike],
        mode: ReconcileMode = ReconcileMode.SET,
        skip_existing: bool = False,
        fail_fast: bool = False,
        project_id: Optional[int] = None,
        description: Optional[str] = BULK_DESCRIPTION,
    ) -> BulkResult:
        """Write individual hours per date, processed in ascending date order.

        Each date is independent: failures are collected in the result unless
        ``fail_fast`` is set. With ``fail_fast`` every date is checked against
        current state before the first write and the first failure is raised,
        so a failure that is already visible writes nothing. This is a
        pre-check, not a transaction: a concurrent write landing after the
        check can still fail a later date after earlier ones were written.
        ``skip_existing`` turns AlreadyExistsError into a skipped date in both
        policies.
        """
        self.ownership.resolve_optional_project(user_id, company_id, project_id)
        plan = {parse_iso_date(day): to_hours(value) for day, value in hours_by_date.items()}
        return self._apply_many(
            company_id,
            project_id,
            plan,
            ReconcileMode(mode),
            skip_existing=skip_existing,
            fail_fast=fail_fast,
            description=description,
        )

    def delete_entry(
        self,
        user_id: int,
        company_id: int,
        entry_date: DateLike,
        project_id: Optional[int] = None,
    ) -> EntryChange:
        """Delete the entry for a date.

        Raises:
            NotFoundError: Company/project not owned, or no entry for the date
            PreconditionFailedError: Date locked by a sent or paid invoice
        """
        self.ownership.resolve_optional_project(user_id, company_id, project_id)
        day = parse_iso_date(entry_date)
        self._check_lock(company_id, project_id, day)

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            existing = self.db.get_entry(company_id, project_id, day)
            if existing is None:
                raise NotFoundError(f"No entry for {day.isoformat()}")
            if self.db.delete_entry_if_version(existing.id, existing.version):
                logger.debug("Deleted entry %s for company %s", day, company_id)
                return EntryChange(date=day, old_value=existing.hours, new_value=None)
            logger.warning("Entry for %s changed during delete (attempt %d)", day, attempt)
        raise ConflictError(f"Could not delete entry for {day.isoformat()}: concurrent updates")

    def list_entries(
        self,
        user_id: int,
        company_id: int,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        project_id: Optional[int] = None,
        unassigned: bool = False,
    ) -> list[HourEntry]:
        """List a company's entries, optionally narrowed to a period and project bucket."""
        self.ownership.resolve_optional_project(user_id, company_id, project_id)
        return self.db.list_entries(
            company_id,
            start_date=parse_iso_date(start_date) if start_date is not None else None,
            end_date=parse_iso_date(end_date) if end_date is not None else None,
            project_id=project_id,
            unassigned=unassigned,
        )

    def _check_lock(self, company_id: int, project_id: Optional[int], day: date) -> None:
        invoice = self.db.find_locking_invoice(company_id, project_id, day)
        if invoice is not None:
            raise PreconditionFailedError(entry_locked(day, invoice.number))

    def _apply(
        self,
        company_id: int,
        project_id: Optional[int],
        day: date,
        hours: Decimal,
        mode: ReconcileMode,
        description: Optional[str],
    ) -> EntryChange:
        """Read-modify-write one key, retrying when a concurrent writer wins."""
        self._check_lock(company_id, project_id, day)

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            existing = self.db.get_entry(company_id, project_id, day)
            new_hours = plan_hours(existing, hours, mode, day)

            if existing is None:
                try:
                    self.db.insert_entry(company_id, project_id, day, new_hours, description)
                except ConflictError:
                    logger.warning("Entry for %s inserted concurrently (attempt %d)", day, attempt)
                    continue
                logger.debug("Inserted %s h on %s for company %s", new_hours, day, company_id)
                return EntryChange(date=day, old_value=None, new_value=new_hours)

            if self.db.update_entry_if_version(existing.id, existing.version, new_hours, description):
                logger.debug(
                    "Updated %s from %s h to %s h (%s)", day, existing.hours, new_hours, mode.value
                )
                return EntryChange(date=day, old_value=existing.hours, new_value=new_hours)
            logger.warning("Entry for %s changed concurrently (attempt %d)", day, attempt)

        raise ConflictError(f"Could not write entry for {day.isoformat()}: concurrent updates")

    def _plan_all(
        self,
        company_id: int,
        project_id: Optional[int],
        plan: Mapping[date, Decimal],
        mode: ReconcileMode,
        skip_existing: bool,
    ) -> None:
        """Validate every date of a plan against current state; raise the first failure."""
        for day in sorted(plan):
            self._check_lock(company_id, project_id, day)
            existing = self.db.get_entry(company_id, project_id, day)
            try:
                plan_hours(existing, plan[day], mode, day)
            except AlreadyExistsError:
                if not skip_existing:
                    raise

    def _apply_many(
        self,
        company_id: int,
        project_id: Optional[int],
        plan: Mapping[date, Decimal],
        mode: ReconcileMode,
        skip_existing: bool,
        fail_fast: bool,
        description: Optional[str],
    ) -> BulkResult:
        if fail_fast:
            self._plan_all(company_id, project_id, plan, mode, skip_existing)

        changes: list[EntryChange] = []
        failures: list[DateFailure] = []
        skipped: list[date] = []

        for day in sorted(plan):
            try:
                changes.append(self._apply(company_id, project_id, day, plan[day], mode, description))
            except AlreadyExistsError as exc:
                if skip_existing:
                    skipped.append(day)
                elif fail_fast:
                    raise
                else:
                    failures.append(DateFailure(date=day, reason=str(exc), error=exc))
            except DomainError as exc:
                if fail_fast:
                    raise
                failures.append(DateFailure(date=day, reason=str(exc), error=exc))

        logger.info(
            "Reconciled %d date(s) for company %s (%s): %d changed, %d skipped, %d failed",
            len(plan),
            company_id,
            mode.value,
            len(changes),
            len(skipped),
            len(failures),
        )
        return BulkResult(changes=tuple(changes), failures=tuple(failures), skipped=tuple(skipped))
