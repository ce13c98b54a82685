from fastapi import APIRouter, Depends

from app.core.auth.deps import require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.production.production_plan import DailyReportSubmit
from app.modules.production.container import ProductionServices, get_production_services
from app.shared.responses import ok

router = APIRouter(prefix="/production/reports", tags=["Production - Daily Reports"])


@router.get("", summary="List daily reports")
async def list_daily_reports(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.reports.list_all())


@router.get("/daily/{daily_plan_id}", summary="Get the report of a daily plan")
async def get_report_for_daily_plan(
    daily_plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.reports.get_by_daily_plan(daily_plan_id))


@router.get("/{report_id}", summary="Get a daily report")
async def get_daily_report(
    report_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.reports.get(report_id))


@router.post("/{report_id}/submit", summary="Submit actual production")
async def submit_daily_report(
    report_id: str,
    data: DailyReportSubmit,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "update")),
):
    """
    Achievement below the threshold requires reason, corrective actions,
    responsible person and target completion date on that entry; an action
    plan is recorded for each such entry.
    """
    report, action_plans = await services.reports.submit(report_id, data)
    return ok({"report": report, "action_plans": action_plans}, "Daily report submitted")


@router.delete("/{report_id}", summary="Delete a daily report")
async def delete_daily_report(
    report_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "delete")),
):
    await services.reports.delete(report_id)
    return ok(message="Daily report deleted")
