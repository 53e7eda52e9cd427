import copy
import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..core.settings import get_settings
from ..enums import EstimateStatus, InvoiceStatus
from ..exceptions import ConflictError, ValidationError
from ..schemas import EstimateCreate, EstimateUpdate
from ..timeutils import utcnow
from .documents import apply_fields, apply_pricing, issue_share_token, next_document_number, pricing_changes
from .storage import TenantStorage, get_estimate_by_share_token

logger = logging.getLogger(__name__)


class EstimateService:
    """Estimate lifecycle: draft -> sent -> approved/rejected -> converted."""

    @staticmethod
    def list_estimates(
        storage: TenantStorage,
        client_id: Optional[int] = None,
        status: Optional[EstimateStatus] = None,
    ) -> List[models.Estimate]:
        return storage.list_estimates(client_id=client_id, status=status)

    @staticmethod
    def get_estimate(storage: TenantStorage, estimate_id: int) -> models.Estimate:
        return storage.get_estimate(estimate_id)

    @staticmethod
    def create_estimate(storage: TenantStorage, request: EstimateCreate) -> models.Estimate:
        storage.get_client(request.client_id)
        payload = request.model_dump()

        estimate = models.Estimate(status=EstimateStatus.DRAFT)
        apply_fields(estimate, payload)
        apply_pricing(estimate, payload)
        estimate.estimate_number = next_document_number(
            storage.db, models.Estimate, models.Estimate.estimate_number, "EST", storage.business_id
        )

        try:
            estimate = storage.save(estimate)
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Estimate number already in use, please retry")

        logger.info(f"Created estimate {estimate.estimate_number} for business {storage.business_id}")
        return estimate

    @staticmethod
    def update_estimate(storage: TenantStorage, estimate_id: int, request: EstimateUpdate) -> models.Estimate:
        """
        Edit content and pricing. Status is never changed here; it only moves
        through share, respond and convert.
        """
        estimate = storage.get_estimate(estimate_id)
        payload = request.model_dump(exclude_unset=True)

        if "client_id" in payload and payload["client_id"] is not None:
            storage.get_client(payload["client_id"])
        if estimate.status == EstimateStatus.CONVERTED:
            logger.warning(f"Editing estimate {estimate.id} after it was converted to an invoice")

        apply_fields(estimate, payload)
        changes = pricing_changes(payload)
        if changes:
            apply_pricing(estimate, changes)
        return storage.save(estimate)

    @staticmethod
    def delete_estimate(storage: TenantStorage, estimate_id: int) -> None:
        estimate = storage.get_estimate(estimate_id)
        if estimate.invoices:
            raise ConflictError("Estimate has been converted to an invoice and cannot be deleted")
        storage.delete(estimate)
        logger.info(f"Deleted estimate {estimate_id}")

    @staticmethod
    def share_estimate(storage: TenantStorage, estimate_id: int) -> models.Estimate:
        """Issue (or reuse) the share token; a draft becomes sent."""
        estimate = storage.get_estimate(estimate_id)
        issue_share_token(estimate)
        if estimate.status == EstimateStatus.DRAFT:
            estimate.status = EstimateStatus.SENT
        estimate = storage.save(estimate)
        logger.info(f"Shared estimate {estimate.id} (status {estimate.status.value})")
        return estimate

    @staticmethod
    def respond_to_estimate(
        db: Session,
        token: str,
        status: str,
        response: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> models.Estimate:
        """
        Record the client's decision from the public share link. Only a sent
        estimate accepts a response; approval needs a signature and rejection
        needs a reason.
        """
        try:
            decision = EstimateStatus(status)
        except ValueError:
            raise ValidationError("Response must be 'approved' or 'rejected'")
        if decision not in (EstimateStatus.APPROVED, EstimateStatus.REJECTED):
            raise ValidationError("Response must be 'approved' or 'rejected'")

        estimate = get_estimate_by_share_token(db, token)
        if estimate.status != EstimateStatus.SENT:
            raise ValidationError(
                f"Estimate is {estimate.status.value} and can no longer be responded to"
            )
        if decision == EstimateStatus.APPROVED and not (signature or "").strip():
            raise ValidationError("A signature is required to approve an estimate")
        if decision == EstimateStatus.REJECTED and not (response or "").strip():
            raise ValidationError("A response is required to reject an estimate")

        estimate.status = decision
        estimate.client_response = response
        if signature:
            estimate.client_signature = signature
        estimate.client_responded_at = utcnow()
        db.commit()
        db.refresh(estimate)

        logger.info(f"Estimate {estimate.id} {decision.value} by client")
        return estimate

    @staticmethod
    def convert_to_invoice(storage: TenantStorage, estimate_id: int) -> models.Invoice:
        """
        Create a draft invoice from an approved estimate and mark the estimate
        converted, both in one transaction.
        """
        estimate = storage.get_estimate(estimate_id, for_update=True)
        if estimate.status != EstimateStatus.APPROVED:
            raise ValidationError(
                f"Only approved estimates can be converted (estimate is {estimate.status.value})"
            )

        try:
            estimate.status = EstimateStatus.CONVERTED
            invoice = models.Invoice(
                client_id=estimate.client_id,
                estimate_id=estimate.id,
                invoice_number=next_document_number(
                    storage.db, models.Invoice, models.Invoice.invoice_number, "INV", storage.business_id
                ),
                title=estimate.title,
                description=estimate.description,
                line_items=copy.deepcopy(estimate.line_items or []),
                subtotal=estimate.subtotal,
                tax_rate=estimate.tax_rate,
                tax_amount=estimate.tax_amount,
                total=estimate.total,
                deposit_required=estimate.deposit_required,
                deposit_type=estimate.deposit_type,
                deposit_amount=estimate.deposit_amount,
                deposit_percentage=estimate.deposit_percentage,
                notes=estimate.notes,
                status=InvoiceStatus.DRAFT,
                due_date=utcnow() + timedelta(days=get_settings().invoice_due_days),
            )
            storage.add(invoice)
            storage.commit()
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Could not convert estimate, please retry")
        except Exception:
            storage.rollback()
            logger.error(f"Converting estimate {estimate_id} failed, rolled back", exc_info=True)
            raise

        storage.db.refresh(invoice)
        logger.info(f"Converted estimate {estimate_id} to invoice {invoice.invoice_number}")
        return invoice
