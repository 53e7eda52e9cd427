from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from ..enums import PayPeriodType


class PayrollSettingsUpdate(BaseModel):
    pay_period_type: Optional[PayPeriodType] = None
    pay_period_start_date: Optional[date] = None
    overtime_threshold: Optional[Decimal] = Field(None, ge=0)
    overtime_multiplier: Optional[Decimal] = Field(None, ge=1)


class PayrollSettings(BaseModel):
    id: int
    business_id: int
    pay_period_type: PayPeriodType
    pay_period_start_date: Optional[date] = None
    overtime_threshold: Decimal
    overtime_multiplier: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EmployeeHours(BaseModel):
    user_id: int
    name: str
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    entry_count: int


class PayrollSummary(BaseModel):
    pay_period_type: PayPeriodType
    period_start: date
    period_end: date
    overtime_threshold: Decimal
    overtime_multiplier: Decimal
    employees: List[EmployeeHours]
