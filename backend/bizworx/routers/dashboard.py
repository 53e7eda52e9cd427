from fastapi import APIRouter, Depends

from .. import schemas
from ..services.dashboard_service import DashboardService
from ..services.storage import TenantContext
from .surface import Surface


def build_router(surface: Surface) -> APIRouter:
    router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

    @router.get("/stats", response_model=surface.response_model(schemas.DashboardStats))
    def dashboard_stats(ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, DashboardService.stats(ctx.storage))

    return router
