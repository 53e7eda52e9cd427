from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime

from ..enums import EstimateStatus
from .document import BillingDocument, PricingInput, PricingUpdate


class EstimateCreate(PricingInput):
    client_id: int
    valid_until: Optional[datetime] = None


class EstimateUpdate(PricingUpdate):
    client_id: Optional[int] = None
    valid_until: Optional[datetime] = None


class Estimate(BillingDocument):
    estimate_number: str
    status: EstimateStatus
    valid_until: Optional[datetime] = None
    client_response: Optional[str] = None
    client_responded_at: Optional[datetime] = None


class EstimateRespondRequest(BaseModel):
    """Client decision submitted through the public share link."""
    status: Literal["approved", "rejected"]
    response: Optional[str] = None
    signature: Optional[str] = None
