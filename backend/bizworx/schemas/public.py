from pydantic import BaseModel
from typing import Optional

from .estimate import Estimate
from .invoice import Invoice


class PublicBusiness(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[str] = None

    model_config = {"from_attributes": True}


class PublicClient(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    model_config = {"from_attributes": True}


class PublicEstimate(BaseModel):
    estimate: Estimate
    business: PublicBusiness
    client: PublicClient


class PublicInvoice(BaseModel):
    invoice: Invoice
    business: PublicBusiness
    client: PublicClient
