from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Numeric, Boolean
from sqlalchemy.orm import relationship
from ..db import Base
from ..enums import InvoiceStatus
from ..types import JSONBCompat, enum_type
from .billing_document import BillingDocumentMixin


class Invoice(BillingDocumentMixin, Base):
    """
    Bill sent to a client. Stored status is draft, sent, paid or cancelled;
    overdue is derived when the invoice is read.

    ``version`` is bumped by SQLAlchemy on every UPDATE, so two concurrent
    payment writes against the same row cannot both succeed.
    """
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True, index=True)
    estimate_id = Column(Integer, ForeignKey("estimates.id"), nullable=True, index=True)
    invoice_number = Column(String, unique=True, nullable=False)
    status = Column(enum_type(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT, index=True)
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    deposit_paid = Column(Boolean, nullable=False, default=False)
    deposit_paid_at = Column(DateTime(timezone=True), nullable=True)
    payment_method = Column(String, nullable=True)  # cash, check, zelle, card, ...
    payment_notes = Column(Text, nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=True)
    photos = Column(JSONBCompat, nullable=False, default=list)  # [{image, caption, added_at}]
    due_date = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)

    business = relationship("Business")
    client = relationship("Client")
    job = relationship("Job")
    estimate = relationship("Estimate", back_populates="invoices")

    __mapper_args__ = {"version_id_col": version}
