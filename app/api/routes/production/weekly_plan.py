from typing import Optional

from fastapi import APIRouter, Depends

from app.core.auth.deps import require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.production.production_plan import WeeklyPlanSubmit
from app.modules.production.container import ProductionServices, get_production_services
from app.shared.responses import ok

router = APIRouter(prefix="/production/weekly", tags=["Production - Weekly Plans"])


@router.get("", summary="List weekly plans")
async def list_weekly_plans(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.weekly.list_all())


@router.get("/monthly/{monthly_plan_id}", summary="List weekly plans of a monthly plan")
async def list_weekly_plans_for_month(
    monthly_plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.weekly.list_by_monthly_plan(monthly_plan_id))


@router.get("/{plan_id}", summary="Get a weekly plan")
async def get_weekly_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.weekly.get(plan_id))


@router.post("/{plan_id}/submit", summary="Submit a weekly plan and derive daily plans")
async def submit_weekly_plan(
    plan_id: str,
    data: Optional[WeeklyPlanSubmit] = None,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "update")),
):
    plan, daily_plans = await services.weekly.submit(plan_id, data)
    return ok({"plan": plan, "daily_plans": daily_plans}, "Weekly plan submitted")


@router.delete("/{plan_id}", summary="Delete a weekly plan")
async def delete_weekly_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "delete")),
):
    await services.weekly.delete(plan_id)
    return ok(message="Weekly plan deleted")
