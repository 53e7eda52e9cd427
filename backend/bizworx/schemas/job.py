from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from ..enums import JobStatus, JobPriority, RecurringFrequency


class JobBase(BaseModel):
    client_id: int
    assigned_user_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    address: Optional[str] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    status: JobStatus = JobStatus.SCHEDULED
    priority: JobPriority = JobPriority.NORMAL
    job_type: Optional[str] = None
    estimated_amount: Optional[Decimal] = Field(None, ge=0)
    actual_amount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    recurring_end_date: Optional[datetime] = None


class JobCreate(JobBase):
    pass


class JobUpdate(BaseModel):
    client_id: Optional[int] = None
    assigned_user_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    status: Optional[JobStatus] = None
    priority: Optional[JobPriority] = None
    job_type: Optional[str] = None
    estimated_amount: Optional[Decimal] = Field(None, ge=0)
    actual_amount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class Job(JobBase):
    id: int
    business_id: int
    parent_job_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
