from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..enums import InvoiceStatus
from ..services.invoice_service import InvoiceService
from ..services.storage import TenantContext
from .surface import Surface


def build_router(surface: Surface) -> APIRouter:
    router = APIRouter(prefix="/invoices", tags=["Invoices"])

    def present(invoice):
        return schemas.Invoice.model_validate(invoice)

    @router.get("", response_model=surface.response_model(List[schemas.Invoice]))
    def list_invoices(
        client_id: Optional[int] = Query(None, description="Filter by client ID"),
        status: Optional[InvoiceStatus] = Query(None, description="Filter by status (overdue is derived)"),
        ctx: TenantContext = Depends(surface.tenant),
    ):
        invoices = [present(i) for i in InvoiceService.list_invoices(ctx.storage, client_id=client_id, status=status)]
        return surface.respond(ctx, invoices, f"Found {len(invoices)} invoices")

    @router.post("", response_model=surface.response_model(schemas.Invoice))
    def create_invoice(invoice: schemas.InvoiceCreate, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, present(InvoiceService.create_invoice(ctx.storage, invoice)), "Invoice created")

    @router.get("/{invoice_id}", response_model=surface.response_model(schemas.Invoice))
    def get_invoice(invoice_id: int, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, present(InvoiceService.get_invoice(ctx.storage, invoice_id)))

    @router.put("/{invoice_id}", response_model=surface.response_model(schemas.Invoice))
    def update_invoice(invoice_id: int, update: schemas.InvoiceUpdate, ctx: TenantContext = Depends(surface.tenant)):
        invoice = InvoiceService.update_invoice(ctx.storage, invoice_id, update)
        return surface.respond(ctx, present(invoice), "Invoice updated")

    @router.delete("/{invoice_id}", response_model=surface.response_model(schemas.MessageResponse))
    def delete_invoice(invoice_id: int, ctx: TenantContext = Depends(surface.tenant)):
        InvoiceService.delete_invoice(ctx.storage, invoice_id)
        return surface.respond(ctx, schemas.MessageResponse(message="Invoice deleted"))

    @router.post("/{invoice_id}/send", response_model=surface.response_model(schemas.Invoice))
    def send_invoice(invoice_id: int, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, present(InvoiceService.send_invoice(ctx.storage, invoice_id)), "Invoice sent")

    @router.post("/{invoice_id}/cancel", response_model=surface.response_model(schemas.Invoice))
    def cancel_invoice(invoice_id: int, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, present(InvoiceService.cancel_invoice(ctx.storage, invoice_id)), "Invoice cancelled")

    @router.post("/{invoice_id}/payment", response_model=surface.response_model(schemas.Invoice))
    def record_payment(invoice_id: int, payment: schemas.PaymentRequest, ctx: TenantContext = Depends(surface.tenant)):
        """Add a payment; the invoice is marked paid once the total is covered."""
        invoice = InvoiceService.record_payment(
            ctx.storage,
            invoice_id,
            payment.amount,
            payment_method=payment.payment_method,
            notes=payment.notes,
            signature=payment.signature,
        )
        return surface.respond(ctx, present(invoice), "Payment recorded")

    @router.post("/{invoice_id}/collect-deposit", response_model=surface.response_model(schemas.CollectDepositResponse))
    def collect_deposit(invoice_id: int, request: schemas.CollectDepositRequest, ctx: TenantContext = Depends(surface.tenant)):
        invoice, payment_url = InvoiceService.collect_deposit(ctx.storage, invoice_id, request.method)
        result = schemas.CollectDepositResponse(invoice=present(invoice), payment_url=payment_url)
        message = "Deposit payment link created" if payment_url else "Deposit marked as collected"
        return surface.respond(ctx, result, message)

    @router.patch("/{invoice_id}/signature", response_model=surface.response_model(schemas.Invoice))
    def collect_signature(invoice_id: int, request: schemas.SignatureRequest, ctx: TenantContext = Depends(surface.tenant)):
        invoice = InvoiceService.collect_signature(ctx.storage, invoice_id, request.signature)
        return surface.respond(ctx, present(invoice), "Signature saved")

    @router.post("/{invoice_id}/photos", response_model=surface.response_model(schemas.Invoice))
    def add_photo(invoice_id: int, photo: schemas.PhotoCreate, ctx: TenantContext = Depends(surface.tenant)):
        invoice = InvoiceService.add_photo(ctx.storage, invoice_id, photo.image, photo.caption)
        return surface.respond(ctx, present(invoice), "Photo added")

    @router.delete("/{invoice_id}/photos/{index}", response_model=surface.response_model(schemas.Invoice))
    def remove_photo(invoice_id: int, index: int, ctx: TenantContext = Depends(surface.tenant)):
        invoice = InvoiceService.remove_photo(ctx.storage, invoice_id, index)
        return surface.respond(ctx, present(invoice), "Photo removed")

    return router
