from fastapi import APIRouter, Depends

from app.core.auth import roles
from app.core.auth.deps import require_roles
from app.core.schemas.auth import Principal
from app.modules.production.container import ProductionServices, get_production_services
from app.shared.responses import ok

router = APIRouter(prefix="/cron", tags=["Scheduler"])


@router.post("/trigger/monthly", summary="Run the monthly plan job now")
async def trigger_monthly_plan(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_roles(roles.ADMIN, roles.PLANT_HEAD)),
):
    """Creates next month's empty plan unless it already exists."""
    return ok(await services.scheduler.trigger_now())


@router.get("/status", summary="Scheduler status")
async def scheduler_status(
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_roles(roles.ADMIN, roles.PLANT_HEAD)),
):
    return ok(services.scheduler.status())
