from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.auth.deps import get_current_user, require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.project import ProjectCreate, ProjectMemberRequest, ProjectUpdate
from app.modules.projects.project_service import ProjectService
from app.modules.projects.task_service import TaskService
from app.shared.responses import ok, paginate

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", summary="List projects visible to the caller")
async def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    owner: Optional[str] = None,
    search: Optional[str] = None,
    current_user: Principal = Depends(get_current_user),
):
    projects = await ProjectService.list_projects(current_user, status=status, owner=owner, search=search)
    return paginate(projects, page, limit)


@router.get("/user/me", summary="Projects the caller owns or belongs to")
async def list_my_projects(current_user: Principal = Depends(get_current_user)):
    return ok(await ProjectService.list_my_projects(current_user))


@router.get("/{project_id}", summary="Get a project")
async def get_project(project_id: str, current_user: Principal = Depends(get_current_user)):
    return ok(await ProjectService.get_visible_project(project_id, current_user))


@router.post("", summary="Create a project", status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    current_user: Principal = Depends(require_permission("project", "create")),
):
    return ok(await ProjectService.create_project(data, current_user), "Project created")


@router.put("/{project_id}", summary="Update a project")
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    current_user: Principal = Depends(get_current_user),
):
    return ok(await ProjectService.update_project(project_id, data, current_user), "Project updated")


@router.delete("/{project_id}", summary="Delete a project and its tasks")
async def delete_project(project_id: str, current_user: Principal = Depends(get_current_user)):
    await ProjectService.delete_project(project_id, current_user)
    return ok(message="Project deleted")


@router.post("/{project_id}/members", summary="Add a project member")
async def add_project_member(
    project_id: str,
    data: ProjectMemberRequest,
    current_user: Principal = Depends(get_current_user),
):
    return ok(await ProjectService.add_member(project_id, data, current_user), "Member added")


@router.delete("/{project_id}/members/{user_id}", summary="Remove a project member")
async def remove_project_member(
    project_id: str,
    user_id: str,
    current_user: Principal = Depends(get_current_user),
):
    return ok(await ProjectService.remove_member(project_id, user_id, current_user), "Member removed")


@router.get("/{project_id}/tasks", summary="List a project's tasks")
async def list_project_tasks(project_id: str, current_user: Principal = Depends(get_current_user)):
    await ProjectService.get_visible_project(project_id, current_user)
    return ok(await TaskService.list_for_project(project_id))
