from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base
from ..enums import UserRole
from ..types import enum_type

class User(Base):
    """Team member who clocks in with a PIN under the business account."""
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("business_id", "username", name="uq_users_business_username"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    username = Column(String, nullable=False)
    pin_hash = Column(String, nullable=False)
    role = Column(enum_type(UserRole), nullable=False, default=UserRole.MEMBER)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    business = relationship("Business", back_populates="users")
    time_entries = relationship("TimeEntry", back_populates="user")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
