from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError

from .. import schemas
from ..exceptions import ConflictError
from ..models import Client
from ..services.storage import TenantContext
from .surface import Surface


def build_router(surface: Surface) -> APIRouter:
    router = APIRouter(
        prefix="/clients",
        tags=["Clients"],
        responses={404: {"description": "Not found"}},
    )

    @router.get("", response_model=surface.response_model(List[schemas.Client]))
    def list_clients(ctx: TenantContext = Depends(surface.tenant)):
        """List all clients for the current business"""
        clients = [schemas.Client.model_validate(c) for c in ctx.storage.list_clients()]
        return surface.respond(ctx, clients, f"Found {len(clients)} clients")

    @router.post("", response_model=surface.response_model(schemas.Client))
    def create_client(client: schemas.ClientCreate, ctx: TenantContext = Depends(surface.tenant)):
        """Create a new client for the current business"""
        db_client = ctx.storage.save(Client(**client.model_dump()))
        return surface.respond(ctx, schemas.Client.model_validate(db_client), "Client created")

    @router.get("/{client_id}", response_model=surface.response_model(schemas.Client))
    def get_client(client_id: int, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, schemas.Client.model_validate(ctx.storage.get_client(client_id)))

    @router.put("/{client_id}", response_model=surface.response_model(schemas.Client))
    def update_client(client_id: int, update: schemas.ClientUpdate, ctx: TenantContext = Depends(surface.tenant)):
        db_client = ctx.storage.get_client(client_id)
        for field, value in update.model_dump(exclude_unset=True).items():
            if field == "name" and not value:
                continue
            setattr(db_client, field, value)
        db_client = ctx.storage.save(db_client)
        return surface.respond(ctx, schemas.Client.model_validate(db_client), "Client updated")

    @router.delete("/{client_id}", response_model=surface.response_model(schemas.MessageResponse))
    def delete_client(client_id: int, ctx: TenantContext = Depends(surface.tenant)):
        db_client = ctx.storage.get_client(client_id)
        try:
            ctx.storage.delete(db_client)
        except IntegrityError:
            ctx.storage.rollback()
            raise ConflictError("Client has jobs, estimates or invoices and cannot be deleted")
        return surface.respond(ctx, schemas.MessageResponse(message="Client deleted"))

    return router
