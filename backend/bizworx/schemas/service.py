from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class ServiceBase(BaseModel):
    name: str
    description: Optional[str] = None
    rate: Optional[Decimal] = Field(None, ge=0)
    unit: str = "hour"
    is_active: bool = True


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    rate: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = None
    is_active: Optional[bool] = None


class Service(ServiceBase):
    id: int
    business_id: int

    class Config:
        from_attributes = True
