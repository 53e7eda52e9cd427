from pydantic import BaseModel, Field, computed_field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from ..enums import DepositType


class LineItemInput(BaseModel):
    """Line item as sent by a caller; ``amount`` is always derived server-side."""
    description: str
    quantity: Decimal = Decimal("1")
    rate: Decimal = Decimal("0")


class LineItem(BaseModel):
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class PricingInput(BaseModel):
    """Fields shared by estimate and invoice create requests."""
    title: str
    description: Optional[str] = None
    line_items: List[LineItemInput] = Field(default_factory=list)
    tax_rate: Decimal = Decimal("0")
    deposit_required: bool = False
    deposit_type: DepositType = DepositType.FIXED
    deposit_amount: Optional[Decimal] = None
    deposit_percentage: Optional[Decimal] = None
    notes: Optional[str] = None


class PricingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    line_items: Optional[List[LineItemInput]] = None
    tax_rate: Optional[Decimal] = None
    deposit_required: Optional[bool] = None
    deposit_type: Optional[DepositType] = None
    deposit_amount: Optional[Decimal] = None
    deposit_percentage: Optional[Decimal] = None
    notes: Optional[str] = None


class BillingDocument(BaseModel):
    """Read shape shared by estimates and invoices."""
    id: int
    business_id: int
    client_id: int
    title: str
    description: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=list)
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    deposit_required: bool
    deposit_type: DepositType
    deposit_amount: Optional[Decimal] = None
    deposit_percentage: Optional[Decimal] = None
    client_signature: Optional[str] = None
    share_token: Optional[str] = None
    share_token_expires_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def remaining_after_deposit(self) -> Decimal:
        if not self.deposit_required or self.deposit_amount is None:
            return self.total
        return self.total - self.deposit_amount
