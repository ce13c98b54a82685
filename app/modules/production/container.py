"""
Wiring of the production workflow services.

Services receive their collaborators at construction; `production_services`
is the process-wide instance the routes and the scheduler share.
"""
from typing import Optional

from app.core.db.store import EntityStore
from app.core.models.production.action_plan import ActionPlan
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.daily_report import DailyReport
from app.core.models.production.monthly_plan import MonthlyPlan
from app.core.models.production.production_task import ProductionTask
from app.core.models.production.weekly_plan import WeeklyPlan
from app.modules.production.action_plan_service import ActionPlanService
from app.modules.production.cascade import PlanCascadeService
from app.modules.production.daily_plan_service import DailyPlanService
from app.modules.production.daily_report_service import DailyReportService
from app.modules.production.monthly_plan_service import MonthlyPlanService
from app.modules.production.monthly_scheduler import MonthlyPlanScheduler
from app.modules.production.task_tracker import PlanStatusService, ProductionTaskService
from app.modules.production.weekly_plan_service import WeeklyPlanService


class ProductionServices:

    def __init__(self, days_per_week: Optional[int] = None, achievement_threshold: Optional[float] = None):
        self.monthly_store = EntityStore(MonthlyPlan, "Monthly plan")
        self.weekly_store = EntityStore(WeeklyPlan, "Weekly plan")
        self.daily_store = EntityStore(DailyPlan, "Daily plan")
        self.report_store = EntityStore(DailyReport, "Daily report")
        self.action_plan_store = EntityStore(ActionPlan, "Action plan")
        self.task_store = EntityStore(ProductionTask, "Production task")

        self.tasks = ProductionTaskService(self.task_store)
        self.status = PlanStatusService(self.tasks)
        self.cascade = PlanCascadeService(
            self.weekly_store, self.daily_store, self.report_store, self.tasks, days_per_week
        )
        self.action_plans = ActionPlanService(self.action_plan_store, achievement_threshold)

        self.monthly = MonthlyPlanService(self.monthly_store, self.tasks, self.status, self.cascade)
        self.weekly = WeeklyPlanService(self.weekly_store, self.tasks, self.status, self.cascade)
        self.daily = DailyPlanService(self.daily_store, self.tasks, self.status, self.cascade)
        self.reports = DailyReportService(self.report_store, self.tasks, self.status, self.action_plans)

        self.scheduler = MonthlyPlanScheduler(self.monthly)


production_services = ProductionServices()


def get_production_services() -> ProductionServices:
    return production_services
