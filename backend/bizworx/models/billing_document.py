from sqlalchemy import Column, String, DateTime, Text, Numeric, Boolean
from sqlalchemy.sql import func
from ..enums import DepositType
from ..types import JSONBCompat, enum_type


class BillingDocumentMixin:
    """
    Columns shared by estimates and invoices.

    line_items is an ordered list of {description, quantity, rate, amount}
    with decimal strings; subtotal, tax_amount and total are always derived
    from it (see services/totals.py).
    """
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    line_items = Column(JSONBCompat, nullable=False, default=list)
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)
    deposit_required = Column(Boolean, nullable=False, default=False)
    deposit_type = Column(enum_type(DepositType), nullable=False, default=DepositType.FIXED)
    deposit_amount = Column(Numeric(10, 2), nullable=True)
    deposit_percentage = Column(Numeric(5, 2), nullable=True)
    client_signature = Column(Text, nullable=True)  # data URL of the signature image
    share_token = Column(String(64), unique=True, index=True, nullable=True)
    share_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
