from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Numeric, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..db import Base


class TimeEntry(Base):
    """
    One shift for a team member. clock_out is NULL while the shift is open;
    the partial unique index allows at most one open shift per user.
    """
    __tablename__ = "time_entries"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True)
    clock_in = Column(DateTime(timezone=True), nullable=False)
    clock_out = Column(DateTime(timezone=True), nullable=True)
    break_start = Column(DateTime(timezone=True), nullable=True)
    break_end = Column(DateTime(timezone=True), nullable=True)
    total_hours = Column(Numeric(5, 2), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="time_entries")
    job = relationship("Job")

    __table_args__ = (
        Index(
            "uq_time_entries_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=clock_out.is_(None),
            sqlite_where=clock_out.is_(None),
        ),
    )
