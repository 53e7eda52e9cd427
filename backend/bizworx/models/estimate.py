from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from ..db import Base
from ..enums import EstimateStatus
from ..types import enum_type
from .billing_document import BillingDocumentMixin


class Estimate(BillingDocumentMixin, Base):
    """
    Proposed quote. Lifecycle: draft -> sent -> approved/rejected -> converted.
    """
    __tablename__ = "estimates"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    estimate_number = Column(String, unique=True, nullable=False)
    status = Column(enum_type(EstimateStatus), nullable=False, default=EstimateStatus.DRAFT, index=True)
    valid_until = Column(DateTime(timezone=True), nullable=True)
    client_response = Column(Text, nullable=True)
    client_responded_at = Column(DateTime(timezone=True), nullable=True)

    business = relationship("Business")
    client = relationship("Client")
    invoices = relationship("Invoice", back_populates="estimate")
