from sqlalchemy import Column, Integer, String, ForeignKey, Text, Numeric, Boolean
from sqlalchemy.orm import relationship
from ..db import Base


class Service(Base):
    """Reusable catalog line used to prefill estimate and invoice line items."""
    __tablename__ = "services"
    
    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    rate = Column(Numeric(10, 2), nullable=True)
    unit = Column(String, nullable=False, default="hour")  # hour, item, sq_ft, ...
    is_active = Column(Boolean, nullable=False, default=True)
    
    business = relationship("Business")
