import logging
from typing import List, Optional

from app.core.auth import roles
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.models.project import Project, Task, TaskComment
from app.core.models.rbac import User
from app.core.schemas.auth import Principal
from app.core.schemas.project import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


class TaskService:
    """Project work items (unrelated to the production tracker tasks)."""

    @staticmethod
    def can_edit(task: Task, principal: Principal) -> bool:
        return (
            principal.user_id in (task.assigned_to, task.assigned_by)
            or principal.has_role(roles.ADMIN)
        )

    @staticmethod
    async def list_tasks(
        principal: Principal,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to: Optional[str] = None,
        project_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Task]:
        if principal.has_role(roles.ADMIN):
            query = Task.find_all()
        else:
            query = Task.find(Task.assigned_to == principal.user_id)
        tasks = await query.sort("-created_at").to_list()

        if status:
            tasks = [t for t in tasks if t.status == status]
        if priority:
            tasks = [t for t in tasks if t.priority == priority]
        if assigned_to:
            tasks = [t for t in tasks if t.assigned_to == assigned_to]
        if project_id:
            tasks = [t for t in tasks if t.project_id == project_id]
        if search:
            term = search.lower()
            tasks = [t for t in tasks if term in t.title.lower() or term in t.description.lower()]
        return tasks

    @staticmethod
    async def get_task(task_id: str) -> Task:
        task = await Task.get(task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    @staticmethod
    async def create_task(data: TaskCreate, principal: Principal) -> Task:
        if not await User.get(data.assigned_to):
            raise ValidationError("Assigned user does not exist")
        if not await Project.get(data.project_id):
            raise ValidationError("Project does not exist")

        task = Task(**data.model_dump(), assigned_by=principal.user_id)
        await task.insert()
        logger.info(f"Task {task.id} created in project {task.project_id}")
        return task

    @staticmethod
    async def update_task(task_id: str, data: TaskUpdate, principal: Principal) -> Task:
        task = await TaskService.get_task(task_id)
        if not TaskService.can_edit(task, principal):
            raise ForbiddenError("Insufficient permissions to update this task")

        updates = data.model_dump(exclude_unset=True)
        if "assigned_to" in updates and not await User.get(updates["assigned_to"]):
            raise ValidationError("Assigned user does not exist")
        for key, value in updates.items():
            setattr(task, key, value)

        task.touch()
        await task.save()
        return task

    @staticmethod
    async def delete_task(task_id: str, principal: Principal) -> None:
        task = await TaskService.get_task(task_id)
        if not TaskService.can_edit(task, principal):
            raise ForbiddenError("Insufficient permissions to delete this task")
        await task.delete()

    @staticmethod
    async def add_comment(task_id: str, content: str, principal: Principal) -> Task:
        task = await TaskService.get_task(task_id)
        if not TaskService.can_edit(task, principal):
            raise ForbiddenError("Insufficient permissions to comment on this task")

        task.comments.append(TaskComment(user_id=principal.user_id, content=content))
        task.touch()
        await task.save()
        return task

    @staticmethod
    async def list_for_user(user_id: str) -> List[Task]:
        return await Task.find(Task.assigned_to == user_id).sort("-created_at").to_list()

    @staticmethod
    async def list_for_project(project_id: str) -> List[Task]:
        return await Task.find(Task.project_id == project_id).sort("-created_at").to_list()
