# Import and re-export all models so `from bizworx.models import X` works
# and every table is registered on Base.metadata.

from ..db import Base

from .business import Business
from .user import User
from .client import Client
from .service import Service
from .job import Job
from .estimate import Estimate
from .invoice import Invoice
from .time_entry import TimeEntry
from .payroll_settings import PayrollSettings

__all__ = [
    "Base",
    "Business",
    "User",
    "Client",
    "Service",
    "Job",
    "Estimate",
    "Invoice",
    "TimeEntry",
    "PayrollSettings",
]
