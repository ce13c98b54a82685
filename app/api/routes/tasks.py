from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.auth.deps import get_current_user, require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.project import TaskCommentCreate, TaskCreate, TaskUpdate
from app.modules.projects.task_service import TaskService
from app.shared.responses import ok, paginate

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", summary="List tasks")
async def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[str] = None,
    project_id: Optional[str] = None,
    search: Optional[str] = None,
    current_user: Principal = Depends(get_current_user),
):
    """Admins see every task; everyone else sees the tasks assigned to them."""
    tasks = await TaskService.list_tasks(
        current_user,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        project_id=project_id,
        search=search,
    )
    return paginate(tasks, page, limit)


@router.get("/user/me", summary="Tasks assigned to the caller")
async def list_my_tasks(current_user: Principal = Depends(get_current_user)):
    return ok(await TaskService.list_for_user(current_user.user_id))


@router.get("/{task_id}", summary="Get a task")
async def get_task(task_id: str, _: Principal = Depends(get_current_user)):
    return ok(await TaskService.get_task(task_id))


@router.post("", summary="Create a task", status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    current_user: Principal = Depends(require_permission("task", "create")),
):
    return ok(await TaskService.create_task(data, current_user), "Task created")


@router.put("/{task_id}", summary="Update a task")
async def update_task(task_id: str, data: TaskUpdate, current_user: Principal = Depends(get_current_user)):
    return ok(await TaskService.update_task(task_id, data, current_user), "Task updated")


@router.delete("/{task_id}", summary="Delete a task")
async def delete_task(task_id: str, current_user: Principal = Depends(get_current_user)):
    await TaskService.delete_task(task_id, current_user)
    return ok(message="Task deleted")


@router.post("/{task_id}/comments", summary="Comment on a task")
async def add_task_comment(
    task_id: str,
    data: TaskCommentCreate,
    current_user: Principal = Depends(get_current_user),
):
    return ok(await TaskService.add_comment(task_id, data.content, current_user), "Comment added")
