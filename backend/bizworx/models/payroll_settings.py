from decimal import Decimal
from sqlalchemy import Column, Integer, DateTime, Date, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base
from ..enums import PayPeriodType
from ..types import enum_type


class PayrollSettings(Base):
    """One row per business, created on first read."""
    __tablename__ = "payroll_settings"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, unique=True)
    pay_period_type = Column(enum_type(PayPeriodType), nullable=False, default=PayPeriodType.WEEKLY)
    pay_period_start_date = Column(Date, nullable=True)
    overtime_threshold = Column(Numeric(5, 2), nullable=False, default=Decimal("40.00"))
    overtime_multiplier = Column(Numeric(3, 2), nullable=False, default=Decimal("1.50"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="payroll_settings")
