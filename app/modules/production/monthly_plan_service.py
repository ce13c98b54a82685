import logging
from typing import List, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from app.core.auth import roles
from app.core.db.store import EntityStore
from app.core.exceptions import DuplicateError, PreconditionError, ValidationError
from app.core.models.production.common import PlanStatus, ProductionItem
from app.core.models.production.monthly_plan import MonthlyPlan
from app.core.models.production.weekly_plan import WeeklyPlan
from app.core.schemas.production.production_plan import (
    MonthlyPlanCreate,
    MonthlyPlanSubmit,
    MonthlyPlanUpdate,
)
from app.modules.production import plan_calendar as cal
from app.modules.production.cascade import PlanCascadeService
from app.modules.production.task_tracker import PlanStatusService, ProductionTaskService
from app.shared.timezone import days_from_now, get_plant_now

logger = logging.getLogger(__name__)

MONTHLY_DEADLINE_DAYS = 30


class MonthlyPlanService:

    def __init__(
        self,
        store: EntityStore[MonthlyPlan],
        tasks: ProductionTaskService,
        status: PlanStatusService,
        cascade: PlanCascadeService,
    ):
        self.store = store
        self.tasks = tasks
        self.status = status
        self.cascade = cascade

    @staticmethod
    def resolve_week_count(year: int, month: int, week_count: Optional[int]) -> int:
        """Default to the number of (partial) weeks in the month; reject anything outside 1..that."""
        limit = cal.max_week_count(year, month)
        if week_count is None:
            return limit
        if not 1 <= week_count <= limit:
            raise ValidationError(
                f"week_count must be between 1 and {limit} for {cal.month_name(month)} {year}"
            )
        return week_count

    @staticmethod
    def default_title(month: int, year: int) -> str:
        return f"Monthly Production Plan - {cal.month_name(month)} {year}"

    def _build(
        self,
        month: int,
        year: int,
        items: List[ProductionItem],
        assigned_to: str,
        assigned_role: str,
        deadline_days: int,
        week_count: Optional[int] = None,
        title: Optional[str] = None,
    ) -> MonthlyPlan:
        return MonthlyPlan(
            title=title or self.default_title(month, year),
            month=month,
            year=year,
            assigned_to=assigned_to,
            assigned_role=assigned_role,
            deadline=days_from_now(deadline_days),
            week_count=self.resolve_week_count(year, month, week_count),
            items=items,
        )

    async def _ensure_task(self, plan: MonthlyPlan) -> None:
        await self.tasks.ensure_task(
            task_type="monthly",
            title=plan.title,
            assigned_to=plan.assigned_to,
            assigned_role=plan.assigned_role,
            plan_id=plan.id,
            deadline=plan.deadline,
        )

    async def create(
        self,
        data: MonthlyPlanCreate,
        assigned_to: str,
        assigned_role: str = roles.PRODUCTION_MANAGER,
    ) -> MonthlyPlan:
        """
        Create the monthly plan for (month, year) together with its tracker task.

        Raises:
            DuplicateError: a plan for that month already exists
            ValidationError: week_count is out of range for the month
        """
        if await self.get_by_month_year(data.month, data.year) is not None:
            raise DuplicateError(
                f"Monthly plan for {cal.month_name(data.month)} {data.year} already exists"
            )

        plan = self._build(
            month=data.month,
            year=data.year,
            items=[item.to_item() for item in data.items],
            assigned_to=assigned_to,
            assigned_role=assigned_role,
            deadline_days=MONTHLY_DEADLINE_DAYS,
            week_count=data.week_count,
            title=data.title,
        )
        try:
            await self.store.create(plan)
        except DuplicateKeyError:
            raise DuplicateError(
                f"Monthly plan for {cal.month_name(data.month)} {data.year} already exists"
            )

        await self._ensure_task(plan)
        logger.info(f"Created monthly plan {plan.id} for {data.month}/{data.year}")
        return plan

    async def ensure_monthly_plan(
        self,
        month: int,
        year: int,
        assigned_to: str,
        assigned_role: str = roles.PRODUCTION_MANAGER,
        items: Optional[List[ProductionItem]] = None,
        deadline_days: int = MONTHLY_DEADLINE_DAYS,
    ) -> Tuple[MonthlyPlan, bool]:
        """Lookup-or-create the plan for (month, year). Returns (plan, created)."""
        plan, created = await self.store.get_or_create(
            lambda: self._build(
                month=month,
                year=year,
                items=list(items or []),
                assigned_to=assigned_to,
                assigned_role=assigned_role,
                deadline_days=deadline_days,
            ),
            MonthlyPlan.month == month,
            MonthlyPlan.year == year,
        )
        await self._ensure_task(plan)
        if created:
            logger.info(f"Created monthly plan {plan.id} for {month}/{year}")
        return plan, created

    async def get(self, plan_id: str) -> MonthlyPlan:
        return await self.store.get_or_404(plan_id)

    async def list_all(self) -> List[MonthlyPlan]:
        return await self.store.all()

    async def get_by_month_year(self, month: int, year: int) -> Optional[MonthlyPlan]:
        return await self.store.find_one(MonthlyPlan.month == month, MonthlyPlan.year == year)

    async def update(self, plan_id: str, data: MonthlyPlanUpdate) -> MonthlyPlan:
        plan = await self.get(plan_id)
        if plan.status != PlanStatus.PENDING:
            raise PreconditionError("Only pending monthly plans can be updated")

        if data.title is not None:
            plan.title = data.title
        if data.items is not None:
            plan.items = [item.to_item() for item in data.items]
        if data.week_count is not None:
            plan.week_count = self.resolve_week_count(plan.year, plan.month, data.week_count)
        return await self.store.save(plan)

    async def delete(self, plan_id: str) -> None:
        plan = await self.get(plan_id)
        await self.tasks.delete_for_plan(plan.id)
        await plan.delete()
        logger.info(f"Deleted monthly plan {plan_id}")

    async def submit(
        self, plan_id: str, data: Optional[MonthlyPlanSubmit] = None
    ) -> Tuple[MonthlyPlan, List[WeeklyPlan]]:
        """
        Complete a pending monthly plan and derive its weekly plans.

        Raises:
            PreconditionError: the plan is not pending
        """
        plan = await self.get(plan_id)
        if plan.status != PlanStatus.PENDING:
            raise PreconditionError(f"Monthly plan is already {plan.status}")

        fields = {"submitted_at": get_plant_now()}
        if data is not None:
            if data.items is not None:
                fields["items"] = [item.to_item() for item in data.items]
            if data.week_count is not None:
                fields["week_count"] = self.resolve_week_count(plan.year, plan.month, data.week_count)

        previous_status = plan.status
        previous = {key: getattr(plan, key) for key in fields}
        plan = await self.status.transition(self.store, plan, PlanStatus.COMPLETED, **fields)
        try:
            weekly_plans = await self.cascade.derive_weekly_from_monthly(plan)
        except Exception:
            logger.error(f"Weekly plans for monthly plan {plan.id} could not be derived; reopening it")
            await self.status.transition(self.store, plan, previous_status, **previous)
            raise
        return plan, weekly_plans
