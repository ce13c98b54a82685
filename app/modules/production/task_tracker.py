import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from app.core.auth import roles
from app.core.db.store import EntityStore
from app.core.models.production.common import PlanStatus
from app.core.models.production.production_task import ProductionTask
from app.core.monitoring.prometheus_middleware import track_transition

logger = logging.getLogger(__name__)


class ProductionTaskService:
    """Flat registry of tracker tasks, one per plan or report instance."""

    def __init__(self, store: EntityStore[ProductionTask]):
        self.store = store

    async def ensure_task(
        self,
        task_type: str,
        title: str,
        assigned_to: str,
        assigned_role: str,
        plan_id: str,
        deadline: datetime,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        dependencies: Optional[List[str]] = None,
    ) -> Tuple[ProductionTask, bool]:
        """Create the tracker task for `plan_id` unless one already exists."""
        task, created = await self.store.get_or_create(
            lambda: ProductionTask(
                type=task_type,
                title=title,
                description=description,
                priority=priority,
                assigned_to=assigned_to,
                assigned_role=assigned_role,
                plan_id=plan_id,
                deadline=deadline,
                dependencies=dependencies or [],
            ),
            ProductionTask.plan_id == plan_id,
        )
        if created:
            logger.info(f"Created {task_type} task {task.id} for plan {plan_id}")
        return task, created

    async def get(self, task_id: str) -> ProductionTask:
        return await self.store.get_or_404(task_id)

    async def list_all(self) -> List[ProductionTask]:
        return await self.store.all()

    async def find_by_type(self, task_type: str) -> List[ProductionTask]:
        return await self.store.find(ProductionTask.type == task_type, sort="-created_at")

    async def find_by_assignee(self, user_id: str) -> List[ProductionTask]:
        return await self.store.find(ProductionTask.assigned_to == user_id, sort="-created_at")

    async def find_by_status(self, status: str) -> List[ProductionTask]:
        return await self.store.find(ProductionTask.status == status, sort="-created_at")

    async def find_by_plan(self, plan_id: str) -> Optional[ProductionTask]:
        return await self.store.find_one(ProductionTask.plan_id == plan_id)

    async def set_status_for_plan(self, plan_id: str, status: str) -> Optional[ProductionTask]:
        task = await self.find_by_plan(plan_id)
        if task is None:
            logger.warning(f"No tracker task found for plan {plan_id}")
            return None
        if task.status != status:
            logger.info(f"Task {task.id}: {task.status} -> {status}")
            task.status = status
            await self.store.save(task)
        return task

    async def delete(self, task_id: str) -> bool:
        return await self.store.delete(task_id)

    async def delete_for_plan(self, plan_id: str) -> None:
        task = await self.find_by_plan(plan_id)
        if task is not None:
            await task.delete()

    @staticmethod
    def visible_to(tasks: Iterable[ProductionTask], role_names: Iterable[str]) -> List[ProductionTask]:
        """
        Role-based visibility, applied at query time:
        - plant head / admin: everything but report tasks; daily tasks only while awaiting review
        - production manager: daily and report tasks only
        """
        role_names = set(role_names)

        if role_names & {roles.PLANT_HEAD, roles.ADMIN}:
            return [
                t for t in tasks
                if t.type != "report"
                and (t.type != "daily" or t.status == PlanStatus.IN_PROGRESS)
            ]
        if roles.PRODUCTION_MANAGER in role_names:
            return [t for t in tasks if t.type in ("daily", "report")]
        return list(tasks)


class PlanStatusService:
    """
    Moves a plan or report to a new status and mirrors it onto its tracker
    task in the same call. Nothing else writes plan/task status.
    """

    def __init__(self, tasks: ProductionTaskService):
        self.tasks = tasks

    async def transition(self, store: EntityStore, plan, status: str, **fields):
        previous = plan.status
        for key, value in fields.items():
            setattr(plan, key, value)
        plan.status = status
        await store.save(plan)
        await self.tasks.set_status_for_plan(plan.id, status)
        track_transition(store.label, status)
        logger.info(f"{store.label} {plan.id}: {previous} -> {status}")
        return plan
