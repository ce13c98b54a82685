from fastapi import APIRouter, Depends

from app.core.auth.deps import get_current_user, require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.production.production_plan import DailyPlanReject, DailyPlanSubmit
from app.modules.production.container import ProductionServices, get_production_services
from app.shared.responses import ok

router = APIRouter(prefix="/production/daily", tags=["Production - Daily Plans"])


@router.get("", summary="List daily plans")
async def list_daily_plans(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.daily.list_all())


@router.get("/status/{plan_status}", summary="List daily plans by status")
async def list_daily_plans_by_status(
    plan_status: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.daily.list_by_status(plan_status))


@router.get("/weekly/{weekly_plan_id}", summary="List daily plans of a weekly plan")
async def list_daily_plans_for_week(
    weekly_plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.daily.list_by_weekly_plan(weekly_plan_id))


@router.get("/{plan_id}", summary="Get a daily plan")
async def get_daily_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.daily.get(plan_id))


@router.get("/{plan_id}/capabilities", summary="What the caller may do with a daily plan")
async def get_daily_plan_capabilities(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(get_current_user),
):
    return ok(await services.daily.capabilities(plan_id, current_user))


@router.post("/{plan_id}/submit", summary="Submit a daily plan for review")
async def submit_daily_plan(
    plan_id: str,
    data: DailyPlanSubmit,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "update")),
):
    """Pending or rejected plans only. Entry targets are recomputed as h1 + h2 + ot."""
    return ok(await services.daily.submit(plan_id, data), "Daily plan submitted for review")


@router.post("/{plan_id}/approve", summary="Approve a daily plan")
async def approve_daily_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(require_permission("production", "approve")),
):
    """
    Completes the plan and creates its daily report (pending) with a report
    task. Approving an approved plan returns the existing report.
    """
    plan, report = await services.daily.approve(plan_id, current_user.user_id)
    return ok({"plan": plan, "daily_report": report}, "Daily plan approved")


@router.post("/{plan_id}/reject", summary="Reject a daily plan")
async def reject_daily_plan(
    plan_id: str,
    data: DailyPlanReject,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(require_permission("production", "approve")),
):
    plan = await services.daily.reject(plan_id, current_user.user_id, data.reason)
    return ok(plan, "Daily plan rejected")


@router.delete("/{plan_id}", summary="Delete a daily plan")
async def delete_daily_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "delete")),
):
    await services.daily.delete(plan_id)
    return ok(message="Daily plan deleted")
