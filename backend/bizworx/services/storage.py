"""
Tenant-scoped data access.

Every read and write goes through a ``TenantStorage`` bound to one
business_id. It is built per request by the auth dependencies (see
auth.py) and handed to the services, so no handler ever reaches for a
module-level session or forgets the tenant filter.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Type, TypeVar

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from .. import models
from ..enums import EstimateStatus, InvoiceStatus, JobStatus
from ..exceptions import AuthorizationError, NotFoundError
from ..timeutils import ensure_utc, utcnow

ModelT = TypeVar("ModelT")


class TenantStorage:
    """Typed CRUD per entity, filtered by ``business_id``."""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------
    def _scoped(self, model: Type[ModelT]):
        return self.db.query(model).filter(model.business_id == self.business_id)

    def _get(self, model: Type[ModelT], row_id: int, label: str, for_update: bool = False) -> ModelT:
        query = self.db.query(model).filter(model.id == row_id)
        if for_update:
            query = query.with_for_update()
        row = query.first()
        if row is None:
            raise NotFoundError(f"{label} not found")
        if row.business_id != self.business_id:
            raise AuthorizationError(f"{label} does not belong to this business")
        return row

    def add(self, obj: ModelT) -> ModelT:
        """Stage a new row for this tenant without committing."""
        obj.business_id = self.business_id
        self.db.add(obj)
        self.db.flush()
        return obj

    def save(self, obj: ModelT) -> ModelT:
        """Stage (if new), commit and refresh a row."""
        if sa_inspect(obj).transient:
            obj.business_id = self.business_id
        elif obj.business_id != self.business_id:
            raise AuthorizationError("Row does not belong to this business")
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, obj) -> None:
        self.db.delete(obj)
        self.db.commit()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    # ------------------------------------------------------------------
    # Business
    # ------------------------------------------------------------------
    def get_business(self) -> models.Business:
        business = self.db.get(models.Business, self.business_id)
        if business is None:
            raise NotFoundError("Business not found")
        return business

    # ------------------------------------------------------------------
    # Team members
    # ------------------------------------------------------------------
    def list_users(self, active_only: bool = True) -> List[models.User]:
        query = self._scoped(models.User)
        if active_only:
            query = query.filter(models.User.is_active.is_(True))
        return query.order_by(models.User.first_name, models.User.last_name).all()

    def get_user(self, user_id: int) -> models.User:
        return self._get(models.User, user_id, "Team member")

    def find_user_by_username(self, username: str) -> Optional[models.User]:
        return self._scoped(models.User).filter(models.User.username == username).first()

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    def list_clients(self) -> List[models.Client]:
        return self._scoped(models.Client).order_by(models.Client.created_at.desc(), models.Client.id.desc()).all()

    def get_client(self, client_id: int) -> models.Client:
        return self._get(models.Client, client_id, "Client")

    # ------------------------------------------------------------------
    # Services catalog
    # ------------------------------------------------------------------
    def list_services(self, active_only: bool = True) -> List[models.Service]:
        query = self._scoped(models.Service)
        if active_only:
            query = query.filter(models.Service.is_active.is_(True))
        return query.order_by(models.Service.name).all()

    def get_service(self, service_id: int) -> models.Service:
        return self._get(models.Service, service_id, "Service")

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------
    def list_jobs(
        self,
        client_id: Optional[int] = None,
        status: Optional[JobStatus] = None,
        on_date: Optional[date] = None,
    ) -> List[models.Job]:
        query = self._scoped(models.Job)
        if client_id is not None:
            query = query.filter(models.Job.client_id == client_id)
        if status is not None:
            query = query.filter(models.Job.status == status)
        if on_date is not None:
            start, end = day_bounds(on_date)
            query = query.filter(models.Job.scheduled_start >= start, models.Job.scheduled_start < end)
            return query.order_by(models.Job.scheduled_start).all()
        return query.order_by(models.Job.scheduled_start.desc(), models.Job.id.desc()).all()

    def jobs_between(self, start: datetime, end: datetime, status: Optional[JobStatus] = None) -> List[models.Job]:
        query = self._scoped(models.Job).filter(
            models.Job.scheduled_start >= start,
            models.Job.scheduled_start < end,
        )
        if status is not None:
            query = query.filter(models.Job.status == status)
        return query.order_by(models.Job.scheduled_start).all()

    def get_job(self, job_id: int) -> models.Job:
        return self._get(models.Job, job_id, "Job")

    # ------------------------------------------------------------------
    # Estimates
    # ------------------------------------------------------------------
    def list_estimates(
        self,
        client_id: Optional[int] = None,
        status: Optional[EstimateStatus] = None,
    ) -> List[models.Estimate]:
        query = self._scoped(models.Estimate)
        if client_id is not None:
            query = query.filter(models.Estimate.client_id == client_id)
        if status is not None:
            query = query.filter(models.Estimate.status == status)
        return query.order_by(models.Estimate.created_at.desc(), models.Estimate.id.desc()).all()

    def get_estimate(self, estimate_id: int, for_update: bool = False) -> models.Estimate:
        return self._get(models.Estimate, estimate_id, "Estimate", for_update=for_update)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------
    def list_invoices(
        self,
        client_id: Optional[int] = None,
        statuses: Optional[Iterable[InvoiceStatus]] = None,
        limit: Optional[int] = None,
    ) -> List[models.Invoice]:
        query = self._scoped(models.Invoice)
        if client_id is not None:
            query = query.filter(models.Invoice.client_id == client_id)
        if statuses is not None:
            query = query.filter(models.Invoice.status.in_(list(statuses)))
        query = query.order_by(models.Invoice.created_at.desc(), models.Invoice.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_invoice(self, invoice_id: int, for_update: bool = False) -> models.Invoice:
        return self._get(models.Invoice, invoice_id, "Invoice", for_update=for_update)

    def paid_invoices_between(self, start: datetime, end: datetime) -> List[models.Invoice]:
        return self._scoped(models.Invoice).filter(
            models.Invoice.status == InvoiceStatus.PAID,
            models.Invoice.paid_at >= start,
            models.Invoice.paid_at < end,
        ).all()

    # ------------------------------------------------------------------
    # Time entries
    # ------------------------------------------------------------------
    def list_time_entries(
        self,
        user_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[models.TimeEntry]:
        query = self._scoped(models.TimeEntry)
        if user_id is not None:
            query = query.filter(models.TimeEntry.user_id == user_id)
        if start is not None:
            query = query.filter(models.TimeEntry.clock_in >= start)
        if end is not None:
            query = query.filter(models.TimeEntry.clock_in < end)
        return query.order_by(models.TimeEntry.clock_in.desc()).all()

    def get_time_entry(self, entry_id: int) -> models.TimeEntry:
        return self._get(models.TimeEntry, entry_id, "Time entry")

    def get_open_time_entry(self, user_id: int, for_update: bool = False) -> Optional[models.TimeEntry]:
        query = self._scoped(models.TimeEntry).filter(
            models.TimeEntry.user_id == user_id,
            models.TimeEntry.clock_out.is_(None),
        )
        if for_update:
            query = query.with_for_update()
        return query.order_by(models.TimeEntry.clock_in.desc()).first()

    # ------------------------------------------------------------------
    # Payroll settings
    # ------------------------------------------------------------------
    def get_payroll_settings(self) -> models.PayrollSettings:
        """Return the business's payroll settings, creating the row on first read."""
        settings = self._scoped(models.PayrollSettings).first()
        if settings is None:
            settings = self.save(models.PayrollSettings(business_id=self.business_id))
        return settings


@dataclass
class TenantContext:
    """Who is calling: the tenant, the team member (if any) and their storage."""
    business: models.Business
    storage: TenantStorage
    user: Optional[models.User] = None

    @property
    def business_id(self) -> int:
        return self.business.id


def day_bounds(day: date):
    """UTC [start, end) datetimes covering one calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def get_estimate_by_share_token(db: Session, token: str) -> models.Estimate:
    """
    Share tokens are globally unique capabilities, so this lookup is
    intentionally not scoped to a business.
    """
    estimate = db.query(models.Estimate).filter(models.Estimate.share_token == token).first()
    _check_share_token(estimate, "Estimate")
    return estimate


def get_invoice_by_share_token(db: Session, token: str) -> models.Invoice:
    invoice = db.query(models.Invoice).filter(models.Invoice.share_token == token).first()
    _check_share_token(invoice, "Invoice")
    return invoice


def _check_share_token(document, label: str) -> None:
    if document is None:
        raise NotFoundError(f"{label} not found")
    expires_at = ensure_utc(document.share_token_expires_at)
    if expires_at is not None and expires_at <= utcnow():
        raise NotFoundError(f"{label} share link has expired")
