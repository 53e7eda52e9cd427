from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..schemas import DashboardStats, Invoice, Job, RevenueStats, TeamMemberResponse
from ..timeutils import utcnow
from .storage import TenantStorage, day_bounds
from .totals import ZERO


class DashboardService:

    @staticmethod
    def stats(storage: TenantStorage, now: Optional[datetime] = None) -> DashboardStats:
        """Revenue paid this month, today's jobs, the five latest invoices and the active team."""
        now = now or utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if month_start.month == 12:
            next_month = month_start.replace(year=month_start.year + 1, month=1)
        else:
            next_month = month_start.replace(month=month_start.month + 1)

        paid = storage.paid_invoices_between(month_start, next_month)
        today_start, today_end = day_bounds(now.date())

        return DashboardStats(
            revenue=RevenueStats(
                total=sum((Decimal(invoice.total) for invoice in paid), ZERO),
                count=len(paid),
            ),
            todays_jobs=[Job.model_validate(job) for job in storage.jobs_between(today_start, today_end)],
            recent_invoices=[Invoice.model_validate(invoice) for invoice in storage.list_invoices(limit=5)],
            team_members=[TeamMemberResponse.model_validate(user) for user in storage.list_users()],
        )
