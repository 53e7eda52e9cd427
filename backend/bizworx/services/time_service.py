import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from .. import models
from ..exceptions import ConflictError, ValidationError
from ..schemas import TimeEntryUpdate
from ..timeutils import ensure_utc, utcnow
from .storage import TenantStorage
from .totals import TWO_PLACES, ZERO

logger = logging.getLogger(__name__)

QUARTER_HOUR_SECONDS = Decimal("900")


def compute_total_hours(
    clock_in: datetime,
    clock_out: datetime,
    break_start: Optional[datetime] = None,
    break_end: Optional[datetime] = None,
) -> Decimal:
    """Worked time minus the break, rounded to the nearest quarter hour."""
    clock_in, clock_out = ensure_utc(clock_in), ensure_utc(clock_out)
    worked = (clock_out - clock_in).total_seconds()
    if break_start is not None and break_end is not None:
        worked -= (ensure_utc(break_end) - ensure_utc(break_start)).total_seconds()
    worked = max(worked, 0)

    quarters = (Decimal(str(worked)) / QUARTER_HOUR_SECONDS).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return (quarters / 4).quantize(TWO_PLACES)


def is_on_break(entry: Optional[models.TimeEntry]) -> bool:
    return entry is not None and entry.break_start is not None and entry.break_end is None


class TimeService:
    """Time clock for team members: one open shift per person."""

    @staticmethod
    def current_entry(storage: TenantStorage, user: models.User) -> Optional[models.TimeEntry]:
        return storage.get_open_time_entry(user.id)

    @staticmethod
    def clock_in(
        storage: TenantStorage,
        user: models.User,
        job_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> models.TimeEntry:
        if storage.get_open_time_entry(user.id, for_update=True) is not None:
            raise ConflictError("Already clocked in")
        if job_id is not None:
            storage.get_job(job_id)

        entry = models.TimeEntry(user_id=user.id, job_id=job_id, clock_in=utcnow(), notes=notes)
        try:
            entry = storage.save(entry)
        except IntegrityError:
            # the partial unique index caught a concurrent clock-in
            storage.rollback()
            raise ConflictError("Already clocked in")

        logger.info(f"User {user.id} clocked in (entry {entry.id})")
        return entry

    @staticmethod
    def clock_out(storage: TenantStorage, user: models.User, notes: Optional[str] = None) -> models.TimeEntry:
        entry = storage.get_open_time_entry(user.id, for_update=True)
        if entry is None:
            raise ValidationError("Not clocked in")

        now = utcnow()
        if is_on_break(entry):
            entry.break_end = now
        entry.clock_out = now
        entry.total_hours = compute_total_hours(entry.clock_in, now, entry.break_start, entry.break_end)
        if notes:
            entry.notes = notes
        entry = storage.save(entry)

        logger.info(f"User {user.id} clocked out (entry {entry.id}, {entry.total_hours} hours)")
        return entry

    @staticmethod
    def start_break(storage: TenantStorage, user: models.User) -> models.TimeEntry:
        entry = storage.get_open_time_entry(user.id, for_update=True)
        if entry is None:
            raise ValidationError("Not clocked in")
        if entry.break_start is not None:
            raise ValidationError("Break already taken for this shift")
        entry.break_start = utcnow()
        return storage.save(entry)

    @staticmethod
    def end_break(storage: TenantStorage, user: models.User) -> models.TimeEntry:
        entry = storage.get_open_time_entry(user.id, for_update=True)
        if entry is None:
            raise ValidationError("Not clocked in")
        if not is_on_break(entry):
            raise ValidationError("Not on break")
        entry.break_end = utcnow()
        return storage.save(entry)

    @staticmethod
    def list_entries(
        storage: TenantStorage,
        user_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[models.TimeEntry]:
        return storage.list_time_entries(user_id=user_id, start=start, end=end)

    @staticmethod
    def update_entry(storage: TenantStorage, entry_id: int, request: TimeEntryUpdate) -> models.TimeEntry:
        """Admin correction; total_hours follows the edited times."""
        entry = storage.get_time_entry(entry_id)
        data = request.model_dump(exclude_unset=True)
        if data.get("job_id") is not None:
            storage.get_job(data["job_id"])

        for field, value in data.items():
            if field == "clock_in" and value is None:
                continue
            setattr(entry, field, value)

        clock_in, clock_out = ensure_utc(entry.clock_in), ensure_utc(entry.clock_out)
        if clock_out is not None and clock_out < clock_in:
            raise ValidationError("clock_out must be after clock_in")
        if (entry.break_start is None) != (entry.break_end is None) and clock_out is not None:
            raise ValidationError("A closed shift needs both break_start and break_end, or neither")

        entry.total_hours = (
            compute_total_hours(entry.clock_in, entry.clock_out, entry.break_start, entry.break_end)
            if clock_out is not None
            else None
        )
        try:
            entry = storage.save(entry)
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Team member already has an open time entry")

        logger.info(f"Time entry {entry.id} edited ({entry.total_hours} hours)")
        return entry

    @staticmethod
    def team_hours(storage: TenantStorage, start: datetime, end: datetime) -> List[Dict]:
        """Closed hours per active team member for shifts starting in [start, end)."""
        totals = {user.id: {"user_id": user.id, "name": user.full_name, "total_hours": ZERO, "entry_count": 0}
                  for user in storage.list_users()}
        for entry in storage.list_time_entries(start=start, end=end):
            row = totals.get(entry.user_id)
            if row is None or entry.total_hours is None:
                continue
            row["total_hours"] += Decimal(entry.total_hours)
            row["entry_count"] += 1
        return list(totals.values())
