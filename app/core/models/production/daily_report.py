from datetime import datetime
from typing import List, Optional

from pydantic import Field
from pymongo import ASCENDING, IndexModel

from app.core.models.base import AppDocument
from app.core.models.production.common import PlanStatus, ProductionEntry


class DailyReport(AppDocument):
    """Actuals for an approved daily plan. At most one report per daily plan."""

    title: str
    daily_plan_id: str
    status: str = PlanStatus.PENDING
    assigned_to: str
    assigned_role: str
    entries: List[ProductionEntry] = Field(default_factory=list)
    submitted_at: Optional[datetime] = None

    class Settings:
        name = "daily_reports"
        indexes = [
            IndexModel([("daily_plan_id", ASCENDING)], unique=True),
        ]
