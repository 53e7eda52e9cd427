from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_current_tenant, require_admin
from ..schemas import PayrollSettings, PayrollSettingsUpdate, PayrollSummary
from ..services.payroll_service import PayrollService
from ..services.storage import TenantContext
from ..timeutils import utcnow

router = APIRouter(prefix="/payroll", tags=["Payroll"])


@router.get("/settings", response_model=PayrollSettings)
def get_payroll_settings(ctx: TenantContext = Depends(get_current_tenant)):
    return PayrollSettings.model_validate(PayrollService.get_settings(ctx.storage))


@router.put("/settings", response_model=PayrollSettings)
def update_payroll_settings(update: PayrollSettingsUpdate, ctx: TenantContext = Depends(require_admin)):
    return PayrollSettings.model_validate(PayrollService.update_settings(ctx.storage, update))


@router.get("/summary", response_model=PayrollSummary)
def payroll_summary(
    on_date: Optional[date] = Query(None, alias="date", description="Any day inside the wanted pay period"),
    ctx: TenantContext = Depends(require_admin),
):
    return PayrollService.summary(ctx.storage, on_date or utcnow().date())
