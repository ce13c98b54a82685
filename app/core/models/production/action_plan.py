from pymongo import ASCENDING

from app.core.models.base import AppDocument
from app.core.models.production.common import PlanStatus


class ActionPlan(AppDocument):
    """Corrective action recorded for a report entry below the achievement threshold."""

    daily_report_id: str
    daily_plan_id: str
    department: str
    operator: str
    target_production: int
    actual_production: int
    achievement_percentage: float
    reason: str
    corrective_actions: str
    responsible_person: str
    target_completion_date: str
    status: str = PlanStatus.PENDING

    class Settings:
        name = "action_plans"
        indexes = [
            [("daily_report_id", ASCENDING)],
        ]
