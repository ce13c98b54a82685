from fastapi import APIRouter, Depends

from app.core.auth.deps import require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.production.production_plan import ActionPlanUpdate
from app.modules.production.container import ProductionServices, get_production_services
from app.shared.responses import ok

router = APIRouter(prefix="/production/action-plans", tags=["Production - Action Plans"])


@router.get("", summary="List action plans")
async def list_action_plans(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.action_plans.list_all())


@router.get("/report/{daily_report_id}", summary="List action plans of a daily report")
async def list_action_plans_for_report(
    daily_report_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.action_plans.list_by_report(daily_report_id))


@router.get("/{action_plan_id}", summary="Get an action plan")
async def get_action_plan(
    action_plan_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.action_plans.get(action_plan_id))


@router.put("/{action_plan_id}", summary="Update an action plan")
async def update_action_plan(
    action_plan_id: str,
    data: ActionPlanUpdate,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "update")),
):
    plan = await services.action_plans.update(action_plan_id, **data.model_dump(exclude_none=True))
    return ok(plan, "Action plan updated")
