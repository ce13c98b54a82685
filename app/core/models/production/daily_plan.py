"""
Daily Production Plan - one document per (weekly plan, day number).
Filled in by the production manager, reviewed by the plant head.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field
from pymongo import ASCENDING, IndexModel

from app.core.models.base import AppDocument
from app.core.models.production.common import PlanStatus, ProductionEntry


class DailyPlan(AppDocument):
    title: str
    day_number: int = Field(..., ge=1, le=7)
    date: str = Field(..., description="YYYY-MM-DD")
    week_number: int
    month: int
    year: int
    weekly_plan_id: str
    status: str = PlanStatus.PENDING
    assigned_to: str
    assigned_role: str
    entries: List[ProductionEntry] = Field(default_factory=list)

    submitted_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Settings:
        name = "daily_plans"
        indexes = [
            IndexModel([("weekly_plan_id", ASCENDING), ("day_number", ASCENDING)], unique=True),
            [("status", ASCENDING)],
        ]
