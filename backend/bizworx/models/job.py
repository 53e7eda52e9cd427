from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Numeric, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base
from ..enums import JobStatus, JobPriority, RecurringFrequency
from ..types import enum_type


class Job(Base):
    __tablename__ = "jobs"
    
    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    assigned_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    scheduled_start = Column(DateTime(timezone=True), nullable=True, index=True)
    scheduled_end = Column(DateTime(timezone=True), nullable=True)
    status = Column(enum_type(JobStatus), nullable=False, default=JobStatus.SCHEDULED)
    priority = Column(enum_type(JobPriority), nullable=False, default=JobPriority.NORMAL)
    job_type = Column(String, nullable=True)
    estimated_amount = Column(Numeric(10, 2), nullable=True)
    actual_amount = Column(Numeric(10, 2), nullable=True)
    notes = Column(Text, nullable=True)
    # Recurring jobs: generated instances point back at the template job
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_frequency = Column(enum_type(RecurringFrequency), nullable=True)
    recurring_end_date = Column(DateTime(timezone=True), nullable=True)
    parent_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    business = relationship("Business")
    client = relationship("Client")
    assigned_user = relationship("User")
    parent_job = relationship("Job", remote_side=[id], backref="instances")
