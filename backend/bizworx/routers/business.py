from fastapi import APIRouter, Depends

from ..dependencies import get_current_tenant, require_admin
from ..schemas import ApiKeyResponse, BusinessResponse, BusinessSettingsUpdate, MessageResponse
from ..services.auth_service import AuthService
from ..services.storage import TenantContext
from ..services.team_service import BusinessService

router = APIRouter(prefix="/business", tags=["Business"])


@router.get("/settings", response_model=BusinessResponse)
def get_business_settings(ctx: TenantContext = Depends(get_current_tenant)):
    return BusinessResponse.model_validate(ctx.business)


@router.put("/settings", response_model=BusinessResponse)
def update_business_settings(update: BusinessSettingsUpdate, ctx: TenantContext = Depends(require_admin)):
    """Update profile fields. Changing the email requires logging in again."""
    return BusinessResponse.model_validate(BusinessService.update_settings(ctx.storage, update))


@router.post("/api-key", response_model=ApiKeyResponse)
def generate_api_key(ctx: TenantContext = Depends(require_admin)):
    """Issue a new external API key; any previous key stops working."""
    raw_key, business = AuthService.generate_api_key(ctx.storage.db, ctx.business)
    return ApiKeyResponse(
        api_key=raw_key,
        api_key_prefix=business.api_key_prefix,
        created_at=business.api_key_created_at,
    )


@router.delete("/api-key", response_model=MessageResponse)
def revoke_api_key(ctx: TenantContext = Depends(require_admin)):
    AuthService.revoke_api_key(ctx.storage.db, ctx.business)
    return MessageResponse(message="API key revoked")
