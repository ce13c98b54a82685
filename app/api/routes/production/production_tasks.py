from fastapi import APIRouter, Depends

from app.core.auth.deps import get_current_user, require_permission
from app.core.schemas.auth import Principal
from app.modules.production.container import ProductionServices, get_production_services
from app.modules.production.task_tracker import ProductionTaskService
from app.shared.responses import ok

router = APIRouter(prefix="/production/tasks", tags=["Production - Tasks"])


@router.get("", summary="List tracker tasks visible to the caller")
async def list_production_tasks(
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(get_current_user),
):
    """
    Plant heads and admins see every task except reports, and daily tasks only
    while they await review. Production managers see daily and report tasks.
    """
    tasks = await services.tasks.list_all()
    return ok(ProductionTaskService.visible_to(tasks, current_user.role_names))


@router.get("/assigned/{user_id}", summary="List tracker tasks assigned to a user")
async def list_tasks_for_assignee(
    user_id: str,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(require_permission("production", "read")),
):
    tasks = await services.tasks.find_by_assignee(user_id)
    return ok(ProductionTaskService.visible_to(tasks, current_user.role_names))


@router.get("/status/{task_status}", summary="List tracker tasks by status")
async def list_tasks_by_status(
    task_status: str,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(require_permission("production", "read")),
):
    tasks = await services.tasks.find_by_status(task_status)
    return ok(ProductionTaskService.visible_to(tasks, current_user.role_names))


@router.get("/type/{task_type}", summary="List tracker tasks by type")
async def list_tasks_by_type(
    task_type: str,
    services: ProductionServices = Depends(get_production_services),
    current_user: Principal = Depends(require_permission("production", "read")),
):
    tasks = await services.tasks.find_by_type(task_type)
    return ok(ProductionTaskService.visible_to(tasks, current_user.role_names))


@router.get("/{task_id}", summary="Get a tracker task")
async def get_production_task(
    task_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "read")),
):
    return ok(await services.tasks.get(task_id))


@router.delete("/{task_id}", summary="Delete a tracker task")
async def delete_production_task(
    task_id: str,
    services: ProductionServices = Depends(get_production_services),
    _: Principal = Depends(require_permission("production", "delete")),
):
    await services.tasks.get(task_id)
    await services.tasks.delete(task_id)
    return ok(message="Task deleted")
