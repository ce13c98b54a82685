import logging
from typing import List, Optional, Tuple

from app.core.db.store import EntityStore
from app.core.exceptions import PreconditionError, ValidationError
from app.core.models.production.common import PlanStatus
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.weekly_plan import WeeklyPlan
from app.core.schemas.production.production_plan import WeeklyPlanSubmit
from app.modules.production.cascade import PlanCascadeService
from app.modules.production.task_tracker import PlanStatusService, ProductionTaskService
from app.shared.timezone import get_plant_now, parse_date_str, to_date_str

logger = logging.getLogger(__name__)


class WeeklyPlanService:

    def __init__(
        self,
        store: EntityStore[WeeklyPlan],
        tasks: ProductionTaskService,
        status: PlanStatusService,
        cascade: PlanCascadeService,
    ):
        self.store = store
        self.tasks = tasks
        self.status = status
        self.cascade = cascade

    async def get(self, plan_id: str) -> WeeklyPlan:
        return await self.store.get_or_404(plan_id)

    async def list_all(self) -> List[WeeklyPlan]:
        return await self.store.all()

    async def list_by_monthly_plan(self, monthly_plan_id: str) -> List[WeeklyPlan]:
        return await self.store.find(WeeklyPlan.monthly_plan_id == monthly_plan_id, sort="week_number")

    async def delete(self, plan_id: str) -> None:
        plan = await self.get(plan_id)
        await self.tasks.delete_for_plan(plan.id)
        await plan.delete()
        logger.info(f"Deleted weekly plan {plan_id}")

    @staticmethod
    def _normalise_date(value: str, field: str) -> str:
        try:
            return to_date_str(parse_date_str(value))
        except ValueError:
            raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")

    async def submit(
        self, plan_id: str, data: Optional[WeeklyPlanSubmit] = None
    ) -> Tuple[WeeklyPlan, List[DailyPlan]]:
        """
        Complete a weekly plan and derive its daily plans.

        Raises:
            PreconditionError: the plan was already submitted
        """
        plan = await self.get(plan_id)
        if plan.status == PlanStatus.COMPLETED:
            raise PreconditionError("Weekly plan is already completed")

        fields = {"submitted_at": get_plant_now()}
        if data is not None:
            if data.items is not None:
                fields["items"] = [item.to_item() for item in data.items]
            if data.week_start_date:
                fields["week_start_date"] = self._normalise_date(data.week_start_date, "week_start_date")
            if data.week_end_date:
                fields["week_end_date"] = self._normalise_date(data.week_end_date, "week_end_date")

        previous_status = plan.status
        previous = {key: getattr(plan, key) for key in fields}
        plan = await self.status.transition(self.store, plan, PlanStatus.COMPLETED, **fields)
        try:
            daily_plans = await self.cascade.derive_daily_from_weekly(plan)
        except Exception:
            logger.error(f"Daily plans for weekly plan {plan.id} could not be derived; reopening it")
            await self.status.transition(self.store, plan, previous_status, **previous)
            raise
        return plan, daily_plans
