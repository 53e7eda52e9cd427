from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base

class Business(Base):
    """
    Tenant root. Every other row carries a business_id pointing here.
    Only a SHA-256 digest of the external API key is stored.
    """
    __tablename__ = "businesses"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    logo = Column(Text, nullable=True)  # URL or data URL
    api_key_hash = Column(String(64), unique=True, index=True, nullable=True)
    api_key_prefix = Column(String(16), nullable=True)  # first characters, for display only
    api_key_created_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    users = relationship("User", back_populates="business")
    payroll_settings = relationship("PayrollSettings", back_populates="business", uselist=False)
