from pydantic import BaseModel
from typing import List
from decimal import Decimal

from .auth import TeamMemberResponse
from .invoice import Invoice
from .job import Job


class RevenueStats(BaseModel):
    total: Decimal
    count: int


class DashboardStats(BaseModel):
    revenue: RevenueStats
    todays_jobs: List[Job]
    recent_invoices: List[Invoice]
    team_members: List[TeamMemberResponse]
