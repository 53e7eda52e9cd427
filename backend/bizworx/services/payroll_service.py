import logging
import calendar
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Tuple

from .. import models
from ..enums import PayPeriodType
from ..schemas import EmployeeHours, PayrollSettingsUpdate, PayrollSummary
from .storage import TenantStorage, day_bounds
from .totals import ZERO

logger = logging.getLogger(__name__)

# Monday; weekly and biweekly periods line up on this when no start date is configured
DEFAULT_PERIOD_ANCHOR = date(2024, 1, 1)


def pay_period_containing(settings: models.PayrollSettings, day: date) -> Tuple[date, date]:
    """Inclusive (first_day, last_day) of the pay period that contains ``day``."""
    if settings.pay_period_type == PayPeriodType.MONTHLY:
        last = calendar.monthrange(day.year, day.month)[1]
        return day.replace(day=1), day.replace(day=last)

    length = 14 if settings.pay_period_type == PayPeriodType.BIWEEKLY else 7
    anchor = settings.pay_period_start_date or DEFAULT_PERIOD_ANCHOR
    periods = (day - anchor).days // length
    start = anchor + timedelta(days=periods * length)
    return start, start + timedelta(days=length - 1)


class PayrollService:

    @staticmethod
    def get_settings(storage: TenantStorage) -> models.PayrollSettings:
        return storage.get_payroll_settings()

    @staticmethod
    def update_settings(storage: TenantStorage, request: PayrollSettingsUpdate) -> models.PayrollSettings:
        settings = storage.get_payroll_settings()
        for field, value in request.model_dump(exclude_unset=True).items():
            if value is None and field != "pay_period_start_date":
                continue
            setattr(settings, field, value)
        settings = storage.save(settings)
        logger.info(f"Payroll settings updated for business {storage.business_id}")
        return settings

    @staticmethod
    def summary(storage: TenantStorage, day: date) -> PayrollSummary:
        """
        Hours per team member for the pay period containing ``day``. Hours up
        to the overtime threshold are regular; the rest is overtime.
        """
        settings = storage.get_payroll_settings()
        period_start, period_end = pay_period_containing(settings, day)
        start, _ = day_bounds(period_start)
        _, end = day_bounds(period_end)
        threshold = Decimal(settings.overtime_threshold)

        hours = defaultdict(lambda: ZERO)
        counts = defaultdict(int)
        for entry in storage.list_time_entries(start=start, end=end):
            if entry.total_hours is None:
                continue
            hours[entry.user_id] += Decimal(entry.total_hours)
            counts[entry.user_id] += 1

        employees = []
        for user_id in sorted(hours):
            user = storage.get_user(user_id)
            total = hours[user_id]
            regular = min(total, threshold)
            employees.append(EmployeeHours(
                user_id=user_id,
                name=user.full_name,
                total_hours=total,
                regular_hours=regular,
                overtime_hours=total - regular,
                entry_count=counts[user_id],
            ))

        return PayrollSummary(
            pay_period_type=settings.pay_period_type,
            period_start=period_start,
            period_end=period_end,
            overtime_threshold=threshold,
            overtime_multiplier=Decimal(settings.overtime_multiplier),
            employees=employees,
        )
