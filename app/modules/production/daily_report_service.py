import logging
from typing import List, Tuple

from app.core.db.store import EntityStore
from app.core.exceptions import NotFoundError, PreconditionError, ValidationError
from app.core.models.production.action_plan import ActionPlan
from app.core.models.production.common import PlanStatus, ProductionEntry
from app.core.models.production.daily_report import DailyReport
from app.core.schemas.production.production_plan import DailyReportSubmit
from app.modules.production import plan_calendar as cal
from app.modules.production.action_plan_service import ActionPlanService
from app.modules.production.task_tracker import PlanStatusService, ProductionTaskService
from app.shared.timezone import get_plant_now

logger = logging.getLogger(__name__)


def compute_actual(entry: ProductionEntry) -> int:
    """Sum of the hourly actuals when any is given, otherwise the reported total."""
    hourly = (entry.h1_actual, entry.h2_actual, entry.ot_actual)
    if any(value is not None for value in hourly):
        return sum(value or 0 for value in hourly)
    return entry.actual_production or 0


class DailyReportService:

    def __init__(
        self,
        store: EntityStore[DailyReport],
        tasks: ProductionTaskService,
        status: PlanStatusService,
        action_plans: ActionPlanService,
    ):
        self.store = store
        self.tasks = tasks
        self.status = status
        self.action_plans = action_plans

    async def get(self, report_id: str) -> DailyReport:
        return await self.store.get_or_404(report_id)

    async def list_all(self) -> List[DailyReport]:
        return await self.store.all()

    async def get_by_daily_plan(self, daily_plan_id: str) -> DailyReport:
        report = await self.store.find_one(DailyReport.daily_plan_id == daily_plan_id)
        if report is None:
            raise NotFoundError("Daily report not found for this daily plan")
        return report

    async def delete(self, report_id: str) -> None:
        report = await self.get(report_id)
        await self.tasks.delete_for_plan(report.id)
        await report.delete()
        logger.info(f"Deleted daily report {report_id}")

    @staticmethod
    def score_entries(data: DailyReportSubmit) -> List[ProductionEntry]:
        """Build report entries with actual production and achievement filled in."""
        entries = []
        for item in data.entries:
            entry = item.to_entry(recompute_target=False)
            actual = compute_actual(entry)
            entry.actual_production = actual
            entry.production_percentage = cal.achievement_percentage(actual, entry.target)
            entries.append(entry)
        return entries

    async def submit(self, report_id: str, data: DailyReportSubmit) -> Tuple[DailyReport, List[ActionPlan]]:
        """
        Record actuals for a pending report.

        Entries below the achievement threshold must carry an action plan; every
        entry is checked before anything is written.

        Raises:
            PreconditionError: report already submitted
            ValidationError: no entries, or an under-target entry without its action plan
        """
        report = await self.get(report_id)
        if report.status != PlanStatus.PENDING:
            raise PreconditionError(f"Daily report is already {report.status}")
        if not data.entries:
            raise ValidationError("At least one production entry is required")

        entries = self.score_entries(data)
        self.action_plans.validate_entries(entries)

        created = await self.action_plans.create_for_entries(report.id, report.daily_plan_id, entries)
        try:
            report = await self.status.transition(
                self.store,
                report,
                PlanStatus.COMPLETED,
                entries=entries,
                submitted_at=get_plant_now(),
            )
        except Exception:
            logger.error(f"Saving daily report {report_id} failed; removing its action plans")
            await self.action_plans.delete_many(created)
            raise

        return report, created
