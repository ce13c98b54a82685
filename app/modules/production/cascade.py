"""
Plan cascade: completed monthly -> weekly plans -> daily plans -> daily report.

Every child is looked up by its natural key before it is created, so running a
derivation twice (or concurrently) never duplicates plans or tracker tasks.
If any child of a batch fails, the children created by that call are removed
again and the first error is re-raised.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Tuple

from app.core.auth import roles
from app.core.db.store import EntityStore
from app.core.exceptions import PreconditionError
from app.core.models.production.common import PlanStatus, ProductionEntry
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.daily_report import DailyReport
from app.core.models.production.monthly_plan import MonthlyPlan
from app.core.models.production.weekly_plan import WeeklyPlan
from app.core.monitoring.prometheus_middleware import track_derivation
from app.core.setting import config
from app.modules.production import plan_calendar as cal
from app.modules.production.task_tracker import ProductionTaskService
from app.shared.timezone import days_from_now, parse_date_str, to_date_str

logger = logging.getLogger(__name__)

WEEKLY_TASK_DAYS = 7
DAILY_TASK_DAYS = 1
REPORT_TASK_DAYS = 1

DEFAULT_DEPARTMENT = "Production"
DEFAULT_OPERATOR = "Production Team"


class PlanCascadeService:

    def __init__(
        self,
        weekly_store: EntityStore[WeeklyPlan],
        daily_store: EntityStore[DailyPlan],
        report_store: EntityStore[DailyReport],
        tasks: ProductionTaskService,
        days_per_week: int = None,
    ):
        self.weekly_store = weekly_store
        self.daily_store = daily_store
        self.report_store = report_store
        self.tasks = tasks
        self.days_per_week = days_per_week or config.DAYS_PER_WEEK

    # ------------------------------------------------------------------
    # monthly -> weekly
    # ------------------------------------------------------------------

    async def derive_weekly_from_monthly(self, monthly: MonthlyPlan) -> List[WeeklyPlan]:
        self._require_completed(monthly)

        steps = [
            (lambda n=week_number: self._ensure_weekly(monthly, n))
            for week_number in range(1, monthly.week_count + 1)
        ]
        weekly_plans = await self._run_batch(steps, self.weekly_store)
        logger.info(
            f"Monthly plan {monthly.id}: {len(weekly_plans)} weekly plans ready "
            f"({cal.month_name(monthly.month)} {monthly.year})"
        )
        return weekly_plans

    async def _ensure_weekly(self, monthly: MonthlyPlan, week_number: int) -> Tuple[WeeklyPlan, bool]:
        week_start, week_end = cal.week_dates(monthly.year, monthly.month, week_number, monthly.week_count)
        key = cal.week_key(monthly.year, monthly.month, week_number, monthly.week_count)

        def build() -> WeeklyPlan:
            items = []
            for item in monthly.items:
                week_qty = cal.week_quantity(item, key, monthly.week_count)
                quantities = {key: week_qty}
                quantities.update(cal.split_week_into_days(week_qty, self.days_per_week))
                items.append(item.copy_fresh(quantities))

            return WeeklyPlan(
                title=f"Weekly Production Plan - Week {week_number}",
                week_number=week_number,
                week_start_date=to_date_str(week_start),
                week_end_date=to_date_str(week_end),
                month=monthly.month,
                year=monthly.year,
                assigned_to=monthly.assigned_to,
                assigned_role=monthly.assigned_role,
                monthly_plan_id=monthly.id,
                items=items,
            )

        plan, created = await self.weekly_store.get_or_create(
            build,
            WeeklyPlan.monthly_plan_id == monthly.id,
            WeeklyPlan.week_number == week_number,
        )
        if not created:
            logger.info(f"Weekly plan for week {week_number} of monthly plan {monthly.id} already exists")
        track_derivation("weekly", created)

        await self._with_task(
            plan,
            created,
            self.weekly_store,
            task_type="weekly",
            title=plan.title,
            assigned_to=plan.assigned_to,
            assigned_role=plan.assigned_role,
            deadline=days_from_now(WEEKLY_TASK_DAYS),
            dependencies=[monthly.id],
        )
        return plan, created

    # ------------------------------------------------------------------
    # weekly -> daily
    # ------------------------------------------------------------------

    async def derive_daily_from_weekly(self, weekly: WeeklyPlan) -> List[DailyPlan]:
        self._require_completed(weekly)

        steps = [
            (lambda n=day_number: self._ensure_daily(weekly, n))
            for day_number in range(1, self.days_per_week + 1)
        ]
        daily_plans = await self._run_batch(steps, self.daily_store)
        logger.info(f"Weekly plan {weekly.id}: {len(daily_plans)} daily plans ready")
        return daily_plans

    def _daily_entries(self, weekly: WeeklyPlan, day_number: int) -> List[ProductionEntry]:
        entries = []
        for item in weekly.items:
            quantity = cal.day_quantity(item, day_number, self.days_per_week)
            h1, h2, ot = cal.split_shifts(quantity)
            entries.append(ProductionEntry(
                item_code=item.item_code,
                item_name=item.item_name,
                customer_name=item.customer_name,
                dept_name=DEFAULT_DEPARTMENT,
                operator_name=DEFAULT_OPERATOR,
                work=f"Production of {item.item_name or item.item_code}",
                h1_plan=h1,
                h2_plan=h2,
                ot_plan=ot,
                target=h1 + h2 + ot,
                production_percentage=0,
            ))
        return entries

    async def _ensure_daily(self, weekly: WeeklyPlan, day_number: int) -> Tuple[DailyPlan, bool]:
        day = cal.day_date(parse_date_str(weekly.week_start_date), day_number)
        manager = config.identity_for(roles.PRODUCTION_MANAGER)

        plan, created = await self.daily_store.get_or_create(
            lambda: DailyPlan(
                title=f"Daily Production Plan - Day {day_number} (Week {weekly.week_number})",
                day_number=day_number,
                date=to_date_str(day),
                week_number=weekly.week_number,
                month=weekly.month,
                year=weekly.year,
                weekly_plan_id=weekly.id,
                assigned_to=manager,
                assigned_role=roles.PRODUCTION_MANAGER,
                entries=self._daily_entries(weekly, day_number),
            ),
            DailyPlan.weekly_plan_id == weekly.id,
            DailyPlan.day_number == day_number,
        )
        if not created:
            logger.info(f"Daily plan for day {day_number} of weekly plan {weekly.id} already exists")
        track_derivation("daily", created)

        await self._with_task(
            plan,
            created,
            self.daily_store,
            task_type="daily",
            title=plan.title,
            assigned_to=plan.assigned_to,
            assigned_role=plan.assigned_role,
            deadline=days_from_now(DAILY_TASK_DAYS),
            dependencies=[weekly.id],
        )
        return plan, created

    # ------------------------------------------------------------------
    # approved daily -> report
    # ------------------------------------------------------------------

    async def derive_report_from_approved_daily(self, daily: DailyPlan) -> DailyReport:
        """Return the report for an approved daily plan, creating it on first call."""
        self._require_completed(daily)

        title = f"Daily Production Report - {daily.title}"
        report, created = await self.report_store.get_or_create(
            lambda: DailyReport(
                title=title,
                daily_plan_id=daily.id,
                assigned_to=daily.assigned_to,
                assigned_role=daily.assigned_role,
                entries=[self._report_entry(entry) for entry in daily.entries],
            ),
            DailyReport.daily_plan_id == daily.id,
        )
        if created:
            logger.info(f"Created daily report {report.id} for daily plan {daily.id}")
        else:
            logger.info(f"Daily report already exists for daily plan {daily.id}: {report.id}")
        track_derivation("report", created)

        await self._with_task(
            report,
            created,
            self.report_store,
            task_type="report",
            title=title,
            assigned_to=report.assigned_to,
            assigned_role=report.assigned_role,
            deadline=days_from_now(REPORT_TASK_DAYS),
            dependencies=[daily.id],
        )
        return report

    @staticmethod
    def _report_entry(entry: ProductionEntry) -> ProductionEntry:
        return ProductionEntry(
            item_code=entry.item_code,
            item_name=entry.item_name,
            customer_name=entry.customer_name,
            dept_name=entry.dept_name,
            operator_name=entry.operator_name,
            work=entry.work,
            h1_plan=entry.h1_plan,
            h2_plan=entry.h2_plan,
            ot_plan=entry.ot_plan,
            target=entry.target,
            h1_actual=0,
            h2_actual=0,
            ot_actual=0,
            actual_production=0,
            quality_defect=0,
            production_percentage=0,
            reason="",
            corrective_actions="",
            responsible_person="",
            target_completion_date="",
        )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_completed(plan) -> None:
        if plan.status != PlanStatus.COMPLETED:
            raise PreconditionError("parent plan must be completed")

    async def _with_task(self, plan, created: bool, store: EntityStore, task_type: str, **task_fields) -> None:
        """Ensure the tracker task for `plan`; drop a freshly created plan if that fails."""
        try:
            await self.tasks.ensure_task(task_type=task_type, plan_id=plan.id, **task_fields)
        except Exception:
            if created:
                logger.error(f"Tracker task for {store.label} {plan.id} failed; removing the plan")
                await plan.delete()
            raise

    async def _run_batch(
        self,
        steps: List[Callable[[], Awaitable[Tuple[object, bool]]]],
        store: EntityStore,
    ) -> list:
        outcomes = await asyncio.gather(*(step() for step in steps), return_exceptions=True)

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            created = [o[0] for o in outcomes if not isinstance(o, BaseException) and o[1]]
            logger.error(
                f"{store.label} derivation failed ({len(failures)} of {len(steps)}); "
                f"rolling back {len(created)} new plans"
            )
            await self._compensate(created)
            raise failures[0]

        return [plan for plan, _ in outcomes]

    async def _compensate(self, plans: list) -> None:
        for plan in plans:
            try:
                await self.tasks.delete_for_plan(plan.id)
                await plan.delete()
            except Exception as e:
                logger.error(f"Rollback of {plan.id} failed: {e}")
