from typing import Optional

from fastapi import APIRouter, Depends, status

from app.core.auth.deps import require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.production.production_plan import (
    MonthlyPlanCreate,
    MonthlyPlanSubmit,
    MonthlyPlanUpdate,
)
from app.core.exceptions import NotFoundError
from app.modules.production.container import ProductionServices, get_production_services
from app.shared.responses import ok

router = APIRouter(prefix="/production/monthly", tags=["Production - Monthly Plans"])


@router.get("", summary="List monthly plans")
async def list_monthly_plans(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.monthly.list_all())


@router.get("/month/{month}/year/{year}", summary="Get the monthly plan for a month")
async def get_monthly_plan_for_month(
    month: int,
    year: int,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    plan = await services.monthly.get_by_month_year(month, year)
    if plan is None:
        raise NotFoundError("Monthly plan not found")
    return ok(plan)


@router.get("/{plan_id}", summary="Get a monthly plan")
async def get_monthly_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.monthly.get(plan_id))


@router.post("", summary="Create a monthly plan", status_code=status.HTTP_201_CREATED)
async def create_monthly_plan(
    data: MonthlyPlanCreate,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(require_permission("production", "create")),
):
    """
    Create the plan for (month, year) assigned to the caller, with a 30-day
    deadline and its tracker task. 409 if the month already has a plan.
    """
    plan = await services.monthly.create(data, assigned_to=current_user.user_id)
    return ok(plan, "Monthly plan created")


@router.put("/{plan_id}", summary="Update a pending monthly plan")
async def update_monthly_plan(
    plan_id: str,
    data: MonthlyPlanUpdate,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "update")),
):
    return ok(await services.monthly.update(plan_id, data), "Monthly plan updated")


@router.post("/{plan_id}/submit", summary="Submit a monthly plan and derive weekly plans")
async def submit_monthly_plan(
    plan_id: str,
    data: Optional[MonthlyPlanSubmit] = None,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "update")),
):
    """
    Completes the plan (optionally replacing its items / week count) and
    creates one weekly plan per week, each with its tracker task.
    """
    plan, weekly_plans = await services.monthly.submit(plan_id, data)
    return ok({"plan": plan, "weekly_plans": weekly_plans}, "Monthly plan submitted")


@router.delete("/{plan_id}", summary="Delete a monthly plan")
async def delete_monthly_plan(
    plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "delete")),
):
    await services.monthly.delete(plan_id)
    return ok(message="Monthly plan deleted")
