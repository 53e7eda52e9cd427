from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..enums import EstimateStatus
from ..services.estimate_service import EstimateService
from ..services.storage import TenantContext
from .surface import Surface


def build_router(surface: Surface) -> APIRouter:
    router = APIRouter(prefix="/estimates", tags=["Estimates"])

    @router.get("", response_model=surface.response_model(List[schemas.Estimate]))
    def list_estimates(
        client_id: Optional[int] = Query(None, description="Filter by client ID"),
        status: Optional[EstimateStatus] = Query(None, description="Filter by estimate status"),
        ctx: TenantContext = Depends(surface.tenant),
    ):
        estimates = [
            schemas.Estimate.model_validate(e)
            for e in EstimateService.list_estimates(ctx.storage, client_id=client_id, status=status)
        ]
        return surface.respond(ctx, estimates, f"Found {len(estimates)} estimates")

    @router.post("", response_model=surface.response_model(schemas.Estimate))
    def create_estimate(estimate: schemas.EstimateCreate, ctx: TenantContext = Depends(surface.tenant)):
        """Create a draft estimate; totals and deposit are computed from the line items."""
        db_estimate = EstimateService.create_estimate(ctx.storage, estimate)
        return surface.respond(ctx, schemas.Estimate.model_validate(db_estimate), "Estimate created")

    @router.get("/{estimate_id}", response_model=surface.response_model(schemas.Estimate))
    def get_estimate(estimate_id: int, ctx: TenantContext = Depends(surface.tenant)):
        db_estimate = EstimateService.get_estimate(ctx.storage, estimate_id)
        return surface.respond(ctx, schemas.Estimate.model_validate(db_estimate))

    @router.put("/{estimate_id}", response_model=surface.response_model(schemas.Estimate))
    def update_estimate(estimate_id: int, update: schemas.EstimateUpdate, ctx: TenantContext = Depends(surface.tenant)):
        db_estimate = EstimateService.update_estimate(ctx.storage, estimate_id, update)
        return surface.respond(ctx, schemas.Estimate.model_validate(db_estimate), "Estimate updated")

    @router.delete("/{estimate_id}", response_model=surface.response_model(schemas.MessageResponse))
    def delete_estimate(estimate_id: int, ctx: TenantContext = Depends(surface.tenant)):
        EstimateService.delete_estimate(ctx.storage, estimate_id)
        return surface.respond(ctx, schemas.MessageResponse(message="Estimate deleted"))

    @router.post("/{estimate_id}/share", response_model=surface.response_model(schemas.Estimate))
    def share_estimate(estimate_id: int, ctx: TenantContext = Depends(surface.tenant)):
        """Issue the public share link; a draft estimate becomes sent."""
        db_estimate = EstimateService.share_estimate(ctx.storage, estimate_id)
        return surface.respond(ctx, schemas.Estimate.model_validate(db_estimate), "Estimate shared")

    @router.post("/{estimate_id}/convert-to-invoice", response_model=surface.response_model(schemas.Invoice))
    def convert_to_invoice(estimate_id: int, ctx: TenantContext = Depends(surface.tenant)):
        invoice = EstimateService.convert_to_invoice(ctx.storage, estimate_id)
        return surface.respond(ctx, schemas.Invoice.model_validate(invoice), "Estimate converted to invoice")

    return router
