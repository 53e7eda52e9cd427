from typing import List
from fastapi import APIRouter, Depends

from .. import models, schemas
from ..services.storage import TenantContext
from .surface import Surface


def build_router(surface: Surface) -> APIRouter:
    router = APIRouter(prefix="/services", tags=["Services"])

    @router.get("", response_model=surface.response_model(List[schemas.Service]))
    def list_services(include_inactive: bool = False, ctx: TenantContext = Depends(surface.tenant)):
        """Service catalog used to prefill line items"""
        services = [
            schemas.Service.model_validate(s)
            for s in ctx.storage.list_services(active_only=not include_inactive)
        ]
        return surface.respond(ctx, services, f"Found {len(services)} services")

    @router.post("", response_model=surface.response_model(schemas.Service))
    def create_service(service: schemas.ServiceCreate, ctx: TenantContext = Depends(surface.tenant)):
        db_service = ctx.storage.save(models.Service(**service.model_dump()))
        return surface.respond(ctx, schemas.Service.model_validate(db_service), "Service created")

    @router.get("/{service_id}", response_model=surface.response_model(schemas.Service))
    def get_service(service_id: int, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, schemas.Service.model_validate(ctx.storage.get_service(service_id)))

    @router.put("/{service_id}", response_model=surface.response_model(schemas.Service))
    def update_service(service_id: int, update: schemas.ServiceUpdate, ctx: TenantContext = Depends(surface.tenant)):
        db_service = ctx.storage.get_service(service_id)
        for field, value in update.model_dump(exclude_unset=True).items():
            if value is None and field in ("name", "unit", "is_active"):
                continue
            setattr(db_service, field, value)
        db_service = ctx.storage.save(db_service)
        return surface.respond(ctx, schemas.Service.model_validate(db_service), "Service updated")

    @router.delete("/{service_id}", response_model=surface.response_model(schemas.MessageResponse))
    def delete_service(service_id: int, ctx: TenantContext = Depends(surface.tenant)):
        ctx.storage.delete(ctx.storage.get_service(service_id))
        return surface.respond(ctx, schemas.MessageResponse(message="Service deleted"))

    return router
