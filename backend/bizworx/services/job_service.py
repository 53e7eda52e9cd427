import calendar
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..enums import JobStatus, RecurringFrequency
from ..exceptions import ConflictError, ValidationError
from ..schemas import JobCreate, JobUpdate
from ..timeutils import ensure_utc, utcnow
from .storage import TenantStorage, day_bounds

logger = logging.getLogger(__name__)

MAX_RECURRING_INSTANCES = 52
WORKDAY_START_HOUR = 8
WORKDAY_END_HOUR = 18
RESCHEDULE_SEARCH_DAYS = 7
DEFAULT_JOB_DURATION = timedelta(hours=1)


def add_months(value: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` later, clamped to the end of shorter months."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def occurrence(start: datetime, frequency: RecurringFrequency, n: int) -> datetime:
    """The n-th repetition after ``start`` (n=1 is the first generated instance)."""
    if frequency == RecurringFrequency.WEEKLY:
        return start + timedelta(weeks=n)
    if frequency == RecurringFrequency.BIWEEKLY:
        return start + timedelta(weeks=2 * n)
    if frequency == RecurringFrequency.MONTHLY:
        return add_months(start, n)
    return add_months(start, 3 * n)


def job_duration(job: models.Job) -> timedelta:
    start = ensure_utc(job.scheduled_start)
    end = ensure_utc(job.scheduled_end)
    if start is None or end is None or end <= start:
        return DEFAULT_JOB_DURATION
    return end - start


class JobService:
    """Scheduling: job CRUD, recurring series and the daily rescheduler."""

    @staticmethod
    def list_jobs(
        storage: TenantStorage,
        client_id: Optional[int] = None,
        status: Optional[JobStatus] = None,
        on_date: Optional[date] = None,
    ) -> List[models.Job]:
        return storage.list_jobs(client_id=client_id, status=status, on_date=on_date)

    @staticmethod
    def get_job(storage: TenantStorage, job_id: int) -> models.Job:
        return storage.get_job(job_id)

    @staticmethod
    def _check_references(storage: TenantStorage, data: dict) -> None:
        if data.get("client_id") is not None:
            storage.get_client(data["client_id"])
        if data.get("assigned_user_id") is not None:
            storage.get_user(data["assigned_user_id"])

    @staticmethod
    def _check_schedule(job: models.Job) -> None:
        start = ensure_utc(job.scheduled_start)
        end = ensure_utc(job.scheduled_end)
        if start is not None and end is not None and end < start:
            raise ValidationError("scheduled_end must be after scheduled_start")

    @staticmethod
    def create_job(storage: TenantStorage, request: JobCreate) -> models.Job:
        data = request.model_dump()
        JobService._check_references(storage, data)

        if data["is_recurring"]:
            if data["recurring_frequency"] is None or data["recurring_end_date"] is None:
                raise ValidationError("Recurring jobs need recurring_frequency and recurring_end_date")
            if data["scheduled_start"] is None:
                raise ValidationError("Recurring jobs need a scheduled_start")

        job = models.Job(**data)
        JobService._check_schedule(job)
        storage.add(job)

        instances = []
        if job.is_recurring:
            instances = JobService.generate_recurring_instances(storage, job)

        storage.commit()
        storage.db.refresh(job)
        logger.info(
            f"Created job {job.id} for business {storage.business_id}"
            + (f" with {len(instances)} recurring instances" if instances else "")
        )
        return job

    @staticmethod
    def generate_recurring_instances(storage: TenantStorage, job: models.Job) -> List[models.Job]:
        """
        Stage one child job per repetition up to ``recurring_end_date``
        (inclusive), at most MAX_RECURRING_INSTANCES. Not committed.
        """
        start = ensure_utc(job.scheduled_start)
        end_date = ensure_utc(job.recurring_end_date)
        duration = job_duration(job) if job.scheduled_end is not None else None

        instances = []
        n = 1
        while len(instances) < MAX_RECURRING_INSTANCES:
            instance_start = occurrence(start, job.recurring_frequency, n)
            if instance_start > end_date:
                break
            instance = models.Job(
                client_id=job.client_id,
                assigned_user_id=job.assigned_user_id,
                title=job.title,
                description=job.description,
                address=job.address,
                scheduled_start=instance_start,
                scheduled_end=instance_start + duration if duration is not None else None,
                status=JobStatus.SCHEDULED,
                priority=job.priority,
                job_type=job.job_type,
                estimated_amount=job.estimated_amount,
                notes=job.notes,
                is_recurring=False,
                parent_job_id=job.id,
            )
            instances.append(storage.add(instance))
            n += 1
        return instances

    @staticmethod
    def update_job(storage: TenantStorage, job_id: int, request: JobUpdate) -> models.Job:
        job = storage.get_job(job_id)
        data = request.model_dump(exclude_unset=True)
        JobService._check_references(storage, data)

        for field, value in data.items():
            if value is None and field in ("client_id", "title", "status", "priority"):
                continue
            setattr(job, field, value)
        JobService._check_schedule(job)
        return storage.save(job)

    @staticmethod
    def delete_job(storage: TenantStorage, job_id: int) -> None:
        job = storage.get_job(job_id)
        # generated instances outlive their template
        for instance in list(job.instances):
            instance.parent_job_id = None
        try:
            storage.delete(job)
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Job is referenced by invoices or time entries and cannot be deleted")
        logger.info(f"Deleted job {job_id}")

    @staticmethod
    def find_next_available_slot(
        storage: TenantStorage,
        job: models.Job,
        from_day: date,
    ) -> Optional[Tuple[datetime, datetime]]:
        """
        First hourly slot between 08:00 and 18:00 over the next seven days that
        fits the job's duration without overlapping the day's other jobs.
        """
        duration = job_duration(job)
        for offset in range(RESCHEDULE_SEARCH_DAYS):
            day = from_day + timedelta(days=offset)
            day_start, day_end = day_bounds(day)
            closing = day_start + timedelta(hours=WORKDAY_END_HOUR)
            busy = []
            for other in storage.jobs_between(day_start, day_end):
                if other.id == job.id or other.status == JobStatus.CANCELLED:
                    continue
                other_start = ensure_utc(other.scheduled_start)
                busy.append((other_start, other_start + job_duration(other)))
            for hour in range(WORKDAY_START_HOUR, WORKDAY_END_HOUR):
                slot_start = day_start + timedelta(hours=hour)
                slot_end = slot_start + duration
                if slot_end > closing:
                    break
                if all(not (slot_start < busy_end and slot_end > busy_start) for busy_start, busy_end in busy):
                    return slot_start, slot_end
        return None

    @staticmethod
    def reschedule_incomplete_jobs(db: Session, now: Optional[datetime] = None) -> int:
        """
        Move every job scheduled yesterday and still ``scheduled`` to the next
        free slot from today on. Runs across all businesses; returns how many
        jobs moved.
        """
        now = ensure_utc(now) or utcnow()
        today = now.date()
        yesterday_start, yesterday_end = day_bounds(today - timedelta(days=1))

        moved = 0
        for business_id, in db.query(models.Business.id).all():
            storage = TenantStorage(db, business_id)
            for job in storage.jobs_between(yesterday_start, yesterday_end, status=JobStatus.SCHEDULED):
                slot = JobService.find_next_available_slot(storage, job, today)
                if slot is None:
                    logger.warning(f"No free slot found for job {job.id} in the next {RESCHEDULE_SEARCH_DAYS} days")
                    continue
                old_start = job.scheduled_start
                job.scheduled_start, job.scheduled_end = slot
                db.flush()
                moved += 1
                logger.info(f"Auto-rescheduled job {job.id} from {old_start} to {slot[0]}")
        db.commit()
        return moved
