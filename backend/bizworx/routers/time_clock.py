from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_current_tenant, require_admin, require_team_member
from ..enums import UserRole
from ..exceptions import ValidationError
from ..schemas import (
    ClockInRequest,
    ClockOutRequest,
    TeamHoursResponse,
    TeamMemberHours,
    TimeEntry,
    TimeEntryUpdate,
    TimeStatus,
)
from ..services.storage import TenantContext
from ..services.time_service import TimeService, is_on_break
from ..timeutils import ensure_utc

router = APIRouter(prefix="/time", tags=["Time clock"])


@router.get("/status", response_model=TimeStatus)
def time_status(ctx: TenantContext = Depends(require_team_member)):
    entry = TimeService.current_entry(ctx.storage, ctx.user)
    return TimeStatus(
        clocked_in=entry is not None,
        on_break=is_on_break(entry),
        entry=TimeEntry.model_validate(entry) if entry else None,
    )


@router.post("/clock-in", response_model=TimeEntry)
def clock_in(request: Optional[ClockInRequest] = None, ctx: TenantContext = Depends(require_team_member)):
    request = request or ClockInRequest()
    return TimeEntry.model_validate(TimeService.clock_in(ctx.storage, ctx.user, request.job_id, request.notes))


@router.post("/clock-out", response_model=TimeEntry)
def clock_out(request: Optional[ClockOutRequest] = None, ctx: TenantContext = Depends(require_team_member)):
    notes = request.notes if request else None
    return TimeEntry.model_validate(TimeService.clock_out(ctx.storage, ctx.user, notes))


@router.post("/break/start", response_model=TimeEntry)
def start_break(ctx: TenantContext = Depends(require_team_member)):
    return TimeEntry.model_validate(TimeService.start_break(ctx.storage, ctx.user))


@router.post("/break/end", response_model=TimeEntry)
def end_break(ctx: TenantContext = Depends(require_team_member)):
    return TimeEntry.model_validate(TimeService.end_break(ctx.storage, ctx.user))


@router.get("/entries", response_model=List[TimeEntry])
def list_time_entries(
    user_id: Optional[int] = Query(None, description="Admins only; members always see their own entries"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    ctx: TenantContext = Depends(get_current_tenant),
):
    if ctx.user is not None and ctx.user.role != UserRole.ADMIN:
        user_id = ctx.user.id
    entries = TimeService.list_entries(
        ctx.storage, user_id=user_id, start=ensure_utc(start_date), end=ensure_utc(end_date)
    )
    return [TimeEntry.model_validate(e) for e in entries]


@router.put("/entries/{entry_id}", response_model=TimeEntry)
def update_time_entry(entry_id: int, update: TimeEntryUpdate, ctx: TenantContext = Depends(require_admin)):
    return TimeEntry.model_validate(TimeService.update_entry(ctx.storage, entry_id, update))


@router.get("/team-hours", response_model=TeamHoursResponse)
def team_hours(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    ctx: TenantContext = Depends(require_admin),
):
    start, end = ensure_utc(start_date), ensure_utc(end_date)
    if end <= start:
        raise ValidationError("end_date must be after start_date")
    members = [TeamMemberHours(**row) for row in TimeService.team_hours(ctx.storage, start, end)]
    return TeamHoursResponse(start_date=start, end_date=end, members=members)
