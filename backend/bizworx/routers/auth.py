from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dependencies import get_db, get_current_tenant
from ..schemas import (
    AuthResponse,
    BusinessRegisterRequest,
    BusinessResponse,
    LoginRequest,
    MeResponse,
    TeamMemberResponse,
    UserLoginRequest,
)
from ..services.auth_service import AuthService
from ..services.storage import TenantContext

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/business/register", response_model=AuthResponse)
def register_business(request: BusinessRegisterRequest, db: Session = Depends(get_db)):
    """Create a new business account."""
    return AuthService.register_business(db, request)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate the business owner and return an access token."""
    return AuthService.login_business(db, request)


@router.post("/user/login", response_model=AuthResponse)
def login_team_member(
    request: UserLoginRequest,
    ctx: TenantContext = Depends(get_current_tenant),
    db: Session = Depends(get_db),
):
    """Exchange a business token plus username and PIN for a team member token."""
    return AuthService.login_team_member(db, ctx.business, request)


@router.get("/me", response_model=MeResponse)
def get_current_account(ctx: TenantContext = Depends(get_current_tenant)):
    """Get the current business and, after a PIN login, the team member."""
    return MeResponse(
        business=BusinessResponse.model_validate(ctx.business),
        user=TeamMemberResponse.model_validate(ctx.user) if ctx.user else None,
    )
