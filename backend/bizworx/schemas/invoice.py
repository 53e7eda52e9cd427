from pydantic import BaseModel, Field, computed_field, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from ..enums import DepositCollectionMethod, InvoiceStatus
from ..timeutils import ensure_utc, utcnow
from .document import BillingDocument, PricingInput, PricingUpdate


class InvoiceCreate(PricingInput):
    client_id: int
    job_id: Optional[int] = None
    due_date: Optional[datetime] = None


class InvoiceUpdate(PricingUpdate):
    client_id: Optional[int] = None
    job_id: Optional[int] = None
    due_date: Optional[datetime] = None


class InvoicePhoto(BaseModel):
    image: str
    caption: Optional[str] = None
    added_at: Optional[datetime] = None


class Invoice(BillingDocument):
    invoice_number: str
    job_id: Optional[int] = None
    estimate_id: Optional[int] = None
    status: InvoiceStatus
    amount_paid: Decimal
    deposit_paid: bool
    deposit_paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    payment_notes: Optional[str] = None
    signed_at: Optional[datetime] = None
    photos: List[InvoicePhoto] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @model_validator(mode="after")
    def derive_overdue(self):
        # overdue is never stored; it is read off the due date
        due = ensure_utc(self.due_date)
        if (
            self.status not in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)
            and due is not None
            and due < utcnow()
        ):
            self.status = InvoiceStatus.OVERDUE
        return self

    @computed_field
    @property
    def balance_due(self) -> Decimal:
        return self.total - self.amount_paid


class PaymentRequest(BaseModel):
    amount: Decimal
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    signature: Optional[str] = None


class CollectDepositRequest(BaseModel):
    method: DepositCollectionMethod


class CollectDepositResponse(BaseModel):
    invoice: Invoice
    payment_url: Optional[str] = None


class SignatureRequest(BaseModel):
    signature: str = Field(min_length=1)


class PhotoCreate(BaseModel):
    image: str = Field(min_length=1, description="URL or data URL")
    caption: Optional[str] = None
