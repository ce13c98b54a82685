from datetime import datetime
from typing import List, Optional

from pydantic import Field
from pymongo import ASCENDING, IndexModel

from app.core.models.base import AppDocument
from app.core.models.production.common import PlanStatus, ProductionItem


class WeeklyPlan(AppDocument):
    """
    Weekly slice of a completed monthly plan.
    Item quantities are keyed "day<N>".
    """

    title: str
    week_number: int = Field(..., ge=1)
    week_start_date: str = Field(..., description="YYYY-MM-DD")
    week_end_date: str = Field(..., description="YYYY-MM-DD")
    month: int
    year: int
    status: str = PlanStatus.PENDING
    assigned_to: str
    assigned_role: str
    monthly_plan_id: str
    submitted_at: Optional[datetime] = None
    items: List[ProductionItem] = Field(default_factory=list)

    class Settings:
        name = "weekly_plans"
        indexes = [
            IndexModel([("monthly_plan_id", ASCENDING), ("week_number", ASCENDING)], unique=True),
        ]
