import logging
from typing import List, Optional

from app.core.db.store import EntityStore
from app.core.exceptions import ValidationError
from app.core.models.production.action_plan import ActionPlan
from app.core.models.production.common import ProductionEntry
from app.core.monitoring.prometheus_middleware import track_action_plans
from app.core.setting import config

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("reason", "corrective_actions", "responsible_person", "target_completion_date")


class ActionPlanService:
    """
    Corrective-action trigger for daily report entries.

    An entry whose achievement is below the threshold must carry a reason,
    corrective actions, a responsible person and a target completion date.
    Each such entry produces one pending ActionPlan.
    """

    def __init__(self, store: EntityStore[ActionPlan], threshold: Optional[float] = None):
        self.store = store
        self.threshold = config.ACHIEVEMENT_THRESHOLD if threshold is None else threshold

    def requires_action_plan(self, entry: ProductionEntry) -> bool:
        return (entry.production_percentage or 0) < self.threshold

    def validate_entry(self, entry: ProductionEntry) -> None:
        if not self.requires_action_plan(entry):
            return

        missing = [field for field in REQUIRED_FIELDS if not (getattr(entry, field) or "").strip()]
        if missing:
            raise ValidationError(
                f"Action plan required for {entry.dept_name} - {entry.operator_name}: "
                f"achievement is {entry.production_percentage}% (below {self.threshold}%). "
                f"Missing: {', '.join(missing)}"
            )

    def validate_entries(self, entries: List[ProductionEntry]) -> None:
        """Validate every entry before anything is written."""
        for entry in entries:
            self.validate_entry(entry)

    async def create_for_entries(
        self, daily_report_id: str, daily_plan_id: str, entries: List[ProductionEntry]
    ) -> List[ActionPlan]:
        """
        Create one pending action plan per under-threshold entry.
        Entries are assumed to be validated and to carry their computed percentage.
        """
        created = []
        try:
            for entry in entries:
                if not self.requires_action_plan(entry):
                    continue
                plan = ActionPlan(
                    daily_report_id=daily_report_id,
                    daily_plan_id=daily_plan_id,
                    department=entry.dept_name,
                    operator=entry.operator_name,
                    target_production=entry.target,
                    actual_production=entry.actual_production or 0,
                    achievement_percentage=entry.production_percentage or 0,
                    reason=entry.reason,
                    corrective_actions=entry.corrective_actions,
                    responsible_person=entry.responsible_person,
                    target_completion_date=entry.target_completion_date,
                )
                created.append(await self.store.create(plan))
        except Exception:
            await self.delete_many(created)
            raise

        if created:
            logger.info(f"Created {len(created)} action plans for daily report {daily_report_id}")
        track_action_plans(len(created))
        return created

    async def delete_many(self, plans: List[ActionPlan]) -> None:
        for plan in plans:
            await plan.delete()
        if plans:
            logger.warning(f"Removed {len(plans)} action plans")

    async def list_all(self) -> List[ActionPlan]:
        return await self.store.all()

    async def get(self, plan_id: str) -> ActionPlan:
        return await self.store.get_or_404(plan_id)

    async def list_by_report(self, daily_report_id: str) -> List[ActionPlan]:
        return await self.store.find(ActionPlan.daily_report_id == daily_report_id, sort="created_at")

    async def update(self, plan_id: str, **fields) -> ActionPlan:
        return await self.store.update(plan_id, **fields)
