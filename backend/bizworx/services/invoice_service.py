import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .. import models
from ..enums import DepositCollectionMethod, InvoiceStatus
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..schemas import InvoiceCreate, InvoiceUpdate
from ..timeutils import ensure_utc, utcnow
from .documents import apply_fields, apply_pricing, issue_share_token, next_document_number, pricing_changes
from .payment_links import StripePaymentLinkService
from .storage import TenantStorage, get_invoice_by_share_token
from .totals import ZERO, round2, to_decimal

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)


def effective_status(invoice: models.Invoice, now: Optional[datetime] = None) -> InvoiceStatus:
    """Stored status, except unpaid invoices past their due date read as overdue."""
    if invoice.status in CLOSED_STATUSES:
        return invoice.status
    due = ensure_utc(invoice.due_date)
    if due is not None and due < (now or utcnow()):
        return InvoiceStatus.OVERDUE
    return invoice.status


class InvoiceService:
    """Invoice editing, payments, deposits, signatures and photos."""

    @staticmethod
    def list_invoices(
        storage: TenantStorage,
        client_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[models.Invoice]:
        """List invoices, filtering on the effective status when one is given."""
        if status is None:
            return storage.list_invoices(client_id=client_id)
        if status in CLOSED_STATUSES:
            return storage.list_invoices(client_id=client_id, statuses=[status])

        now = utcnow()
        candidates = storage.list_invoices(
            client_id=client_id, statuses=[InvoiceStatus.DRAFT, InvoiceStatus.SENT]
        )
        return [invoice for invoice in candidates if effective_status(invoice, now) == status]

    @staticmethod
    def get_invoice(storage: TenantStorage, invoice_id: int) -> models.Invoice:
        return storage.get_invoice(invoice_id)

    @staticmethod
    def create_invoice(storage: TenantStorage, request: InvoiceCreate) -> models.Invoice:
        storage.get_client(request.client_id)
        if request.job_id is not None:
            storage.get_job(request.job_id)
        payload = request.model_dump()

        invoice = models.Invoice(status=InvoiceStatus.DRAFT, amount_paid=ZERO, deposit_paid=False, photos=[])
        apply_fields(invoice, payload)
        apply_pricing(invoice, payload)
        invoice.invoice_number = next_document_number(
            storage.db, models.Invoice, models.Invoice.invoice_number, "INV", storage.business_id
        )

        try:
            invoice = storage.save(invoice)
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Invoice number already in use, please retry")

        logger.info(f"Created invoice {invoice.invoice_number} for business {storage.business_id}")
        return invoice

    @staticmethod
    def update_invoice(storage: TenantStorage, invoice_id: int, request: InvoiceUpdate) -> models.Invoice:
        """
        Edit content and pricing. Status, payments, deposit collection and
        signature are only changed by their dedicated operations.
        """
        invoice = storage.get_invoice(invoice_id)
        payload = request.model_dump(exclude_unset=True)

        if payload.get("client_id") is not None:
            storage.get_client(payload["client_id"])
        if payload.get("job_id") is not None:
            storage.get_job(payload["job_id"])

        apply_fields(invoice, payload)
        changes = pricing_changes(payload)
        if changes:
            apply_pricing(invoice, changes)
            if Decimal(invoice.total) < Decimal(invoice.amount_paid or 0):
                storage.rollback()
                raise ValidationError("Invoice total cannot be less than the amount already paid")
            if invoice.status == InvoiceStatus.PAID and Decimal(invoice.amount_paid) < Decimal(invoice.total):
                # a raised total reopens the invoice for the remaining balance
                invoice.status = InvoiceStatus.SENT
                invoice.paid_at = None
                logger.info(f"Invoice {invoice.id} reopened after its total changed to {invoice.total}")

        return InvoiceService._commit(storage, invoice)

    @staticmethod
    def delete_invoice(storage: TenantStorage, invoice_id: int) -> None:
        invoice = storage.get_invoice(invoice_id)
        storage.delete(invoice)
        logger.info(f"Deleted invoice {invoice_id}")

    @staticmethod
    def send_invoice(storage: TenantStorage, invoice_id: int) -> models.Invoice:
        invoice = storage.get_invoice(invoice_id)
        if invoice.status not in (InvoiceStatus.DRAFT, InvoiceStatus.SENT):
            raise ValidationError(f"Cannot send a {invoice.status.value} invoice")
        issue_share_token(invoice)
        invoice.status = InvoiceStatus.SENT
        invoice = InvoiceService._commit(storage, invoice)
        logger.info(f"Sent invoice {invoice.id}")
        return invoice

    @staticmethod
    def cancel_invoice(storage: TenantStorage, invoice_id: int) -> models.Invoice:
        invoice = storage.get_invoice(invoice_id, for_update=True)
        if invoice.status == InvoiceStatus.PAID:
            raise ValidationError("A paid invoice cannot be cancelled")
        invoice.status = InvoiceStatus.CANCELLED
        invoice = InvoiceService._commit(storage, invoice)
        logger.info(f"Cancelled invoice {invoice.id}")
        return invoice

    @staticmethod
    def record_payment(
        storage: TenantStorage,
        invoice_id: int,
        amount,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> models.Invoice:
        """
        Add a payment to the running ``amount_paid``. The invoice becomes paid
        once the total is covered; paying more than the balance is rejected.
        """
        amount = round2(to_decimal(amount, "amount"))
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")

        invoice = storage.get_invoice(invoice_id, for_update=True)
        if invoice.status == InvoiceStatus.CANCELLED:
            raise ValidationError("Cannot record a payment on a cancelled invoice")

        total = Decimal(invoice.total)
        already_paid = Decimal(invoice.amount_paid or 0)
        if already_paid + amount > total:
            raise ValidationError(
                "Payment exceeds the balance due",
                details={"balance_due": str(total - already_paid), "amount": str(amount)},
            )

        invoice.amount_paid = already_paid + amount
        if payment_method:
            invoice.payment_method = payment_method
        if notes:
            invoice.payment_notes = notes
        if signature:
            invoice.client_signature = signature
            invoice.signed_at = utcnow()
        if invoice.amount_paid >= total:
            invoice.status = InvoiceStatus.PAID
            invoice.paid_at = utcnow()

        invoice = InvoiceService._commit(storage, invoice)
        logger.info(
            f"Recorded payment of {amount} on invoice {invoice.id} "
            f"(paid {invoice.amount_paid} of {invoice.total}, status {invoice.status.value})"
        )
        return invoice

    @staticmethod
    def collect_deposit(
        storage: TenantStorage,
        invoice_id: int,
        method: DepositCollectionMethod,
        payment_service: Optional[StripePaymentLinkService] = None,
    ) -> Tuple[models.Invoice, Optional[str]]:
        """
        ``payment_link`` returns a hosted payment URL and leaves the invoice
        untouched; ``manual`` marks the deposit as received. amount_paid is
        never changed here.
        """
        invoice = storage.get_invoice(invoice_id, for_update=True)
        if not invoice.deposit_required:
            raise ValidationError("This invoice does not require a deposit")
        if invoice.deposit_paid:
            raise ValidationError("Deposit has already been collected")
        if invoice.status in CLOSED_STATUSES:
            raise ValidationError(f"Cannot collect a deposit on a {invoice.status.value} invoice")

        if method == DepositCollectionMethod.PAYMENT_LINK:
            service = payment_service or StripePaymentLinkService()
            url = service.create_deposit_link(invoice, storage.get_business())
            return invoice, url

        invoice.deposit_paid = True
        invoice.deposit_paid_at = utcnow()
        invoice = InvoiceService._commit(storage, invoice)
        logger.info(f"Deposit collected manually on invoice {invoice.id}")
        return invoice, None

    @staticmethod
    def collect_signature(storage: TenantStorage, invoice_id: int, signature: str) -> models.Invoice:
        if not (signature or "").strip():
            raise ValidationError("Signature cannot be empty")
        invoice = storage.get_invoice(invoice_id)
        invoice.client_signature = signature
        invoice.signed_at = utcnow()
        return InvoiceService._commit(storage, invoice)

    @staticmethod
    def add_photo(storage: TenantStorage, invoice_id: int, image: str, caption: Optional[str] = None) -> models.Invoice:
        invoice = storage.get_invoice(invoice_id)
        photos = list(invoice.photos or [])
        photos.append({"image": image, "caption": caption, "added_at": utcnow().isoformat()})
        # reassign so the JSON column is flagged dirty
        invoice.photos = photos
        return InvoiceService._commit(storage, invoice)

    @staticmethod
    def remove_photo(storage: TenantStorage, invoice_id: int, index: int) -> models.Invoice:
        invoice = storage.get_invoice(invoice_id)
        photos = list(invoice.photos or [])
        if index < 0 or index >= len(photos):
            raise NotFoundError("Photo not found")
        photos.pop(index)
        invoice.photos = photos
        return InvoiceService._commit(storage, invoice)

    @staticmethod
    def get_public_invoice(db: Session, token: str) -> models.Invoice:
        return get_invoice_by_share_token(db, token)

    @staticmethod
    def _commit(storage: TenantStorage, invoice: models.Invoice) -> models.Invoice:
        invoice_id = invoice.id
        try:
            return storage.save(invoice)
        except StaleDataError:
            storage.rollback()
            logger.warning(f"Concurrent update detected on invoice {invoice_id}")
            raise ConflictError("Invoice was modified by another request, please retry")
