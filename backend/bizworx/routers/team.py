from typing import List
from fastapi import APIRouter, Depends

from ..dependencies import get_current_tenant, require_admin
from ..schemas import TeamMemberCreate, TeamMemberResponse, TeamMemberUpdate
from ..services.storage import TenantContext
from ..services.team_service import TeamService

router = APIRouter(prefix="/team", tags=["Team"])


@router.get("", response_model=List[TeamMemberResponse])
def list_team_members(include_inactive: bool = False, ctx: TenantContext = Depends(get_current_tenant)):
    members = TeamService.list_members(ctx.storage, include_inactive=include_inactive)
    return [TeamMemberResponse.model_validate(m) for m in members]


@router.post("", response_model=TeamMemberResponse)
def create_team_member(member: TeamMemberCreate, ctx: TenantContext = Depends(require_admin)):
    return TeamMemberResponse.model_validate(TeamService.create_member(ctx.storage, member))


@router.put("/{user_id}", response_model=TeamMemberResponse)
def update_team_member(user_id: int, update: TeamMemberUpdate, ctx: TenantContext = Depends(require_admin)):
    return TeamMemberResponse.model_validate(TeamService.update_member(ctx.storage, user_id, update))


@router.delete("/{user_id}", response_model=TeamMemberResponse)
def deactivate_team_member(user_id: int, ctx: TenantContext = Depends(require_admin)):
    """Deactivate rather than delete, so past time entries stay attached."""
    acting_user_id = ctx.user.id if ctx.user else None
    return TeamMemberResponse.model_validate(
        TeamService.deactivate_member(ctx.storage, user_id, acting_user_id=acting_user_id)
    )
