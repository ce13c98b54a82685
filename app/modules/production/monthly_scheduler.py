"""
Monthly plan scheduler.

Once a month (MONTHLY_PLAN_CRON, plant timezone) an empty monthly plan for the
following month is created for the production manager, with its tracker task.
An existing plan for that month makes the run a no-op.
"""
import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.auth import roles
from app.core.monitoring.prometheus_middleware import track_scheduler_run
from app.core.setting import config
from app.modules.production import plan_calendar as cal
from app.modules.production.monthly_plan_service import MonthlyPlanService
from app.shared.timezone import get_plant_now

logger = logging.getLogger(__name__)

JOB_ID = "monthly_plan_creation"


class MonthlyPlanScheduler:

    def __init__(self, monthly: MonthlyPlanService, cron: Optional[str] = None, timezone: Optional[str] = None):
        self.monthly = monthly
        self.cron = cron or config.MONTHLY_PLAN_CRON
        self.timezone = timezone or config.SCHEDULER_TIMEZONE
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.last_run: Optional[dict] = None

    def start(self) -> None:
        if self.scheduler is not None and self.scheduler.running:
            return

        tz = ZoneInfo(self.timezone)
        self.scheduler = AsyncIOScheduler(timezone=tz)
        self.scheduler.add_job(
            self.create_next_month_plan,
            CronTrigger.from_crontab(self.cron, timezone=tz),
            id=JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info(f"Monthly plan scheduler started ('{self.cron}' {self.timezone})")

    def shutdown(self) -> None:
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Monthly plan scheduler stopped")
        self.scheduler = None

    def _record(self, outcome: str, month: int, year: int, plan_id: Optional[str] = None, error: Optional[str] = None) -> dict:
        self.last_run = {
            "outcome": outcome,
            "month": month,
            "year": year,
            "plan_id": plan_id,
            "error": error,
            "ran_at": get_plant_now().isoformat(),
        }
        track_scheduler_run(outcome)
        return self.last_run

    async def create_next_month_plan(self, now: Optional[datetime] = None) -> dict:
        """
        Ensure next month's plan exists. Never raises: failures are logged and
        reported in the returned run summary.
        """
        now = now or get_plant_now()
        year, month = cal.next_month(now.year, now.month)
        label = f"{cal.month_name(month)} {year}"

        try:
            plan, created = await self.monthly.ensure_monthly_plan(
                month=month,
                year=year,
                assigned_to=config.identity_for(roles.PRODUCTION_MANAGER),
                assigned_role=roles.PRODUCTION_MANAGER,
                items=[],
                deadline_days=config.MONTHLY_PLAN_DEADLINE_DAYS,
            )
        except Exception as e:
            logger.exception(f"Scheduled monthly plan creation for {label} failed")
            return self._record("failed", month, year, error=str(e))

        if created:
            logger.info(f"Scheduled run created monthly plan {plan.id} for {label}")
            return self._record("created", month, year, plan_id=plan.id)

        logger.info(f"Monthly plan for {label} already exists ({plan.id}); nothing to do")
        return self._record("skipped", month, year, plan_id=plan.id)

    async def trigger_now(self) -> dict:
        logger.info("Manual trigger of monthly plan creation")
        return await self.create_next_month_plan()

    def status(self) -> dict:
        running = self.scheduler is not None and self.scheduler.running
        job = self.scheduler.get_job(JOB_ID) if running else None
        next_run = job.next_run_time if job is not None else None

        return {
            "enabled": config.SCHEDULER_ENABLED,
            "initialized": running,
            "schedule": self.cron,
            "timezone": self.timezone,
            "next_run_time": next_run.isoformat() if next_run else None,
            "last_run": self.last_run,
        }
