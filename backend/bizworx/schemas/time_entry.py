from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class ClockInRequest(BaseModel):
    job_id: Optional[int] = None
    notes: Optional[str] = None


class ClockOutRequest(BaseModel):
    notes: Optional[str] = None


class TimeEntryUpdate(BaseModel):
    """Admin correction of a shift; hours are recomputed from the new times."""
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    job_id: Optional[int] = None
    notes: Optional[str] = None


class TimeEntry(BaseModel):
    id: int
    business_id: int
    user_id: int
    job_id: Optional[int] = None
    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    total_hours: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TimeStatus(BaseModel):
    clocked_in: bool
    on_break: bool
    entry: Optional[TimeEntry] = None


class TeamMemberHours(BaseModel):
    user_id: int
    name: str
    total_hours: Decimal
    entry_count: int


class TeamHoursResponse(BaseModel):
    start_date: datetime
    end_date: datetime
    members: List[TeamMemberHours]
