from datetime import datetime
from typing import List, Optional

from pydantic import Field
from pymongo import ASCENDING, IndexModel

from app.core.models.base import AppDocument
from app.core.models.production.common import PlanStatus, ProductionItem


class MonthlyPlan(AppDocument):
    """
    MongoDB Document representing a Monthly Production Plan.
    Exactly one plan exists per (month, year).
    """

    # -----------------------------
    # FIELDS
    # -----------------------------
    title: str
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    status: str = PlanStatus.PENDING
    assigned_to: str
    assigned_role: str
    deadline: datetime
    week_count: int = Field(..., ge=1, le=6)
    submitted_at: Optional[datetime] = None
    items: List[ProductionItem] = Field(default_factory=list)

    # -----------------------------
    # SETTINGS (INDEXES)
    # -----------------------------
    class Settings:
        name = "monthly_plans"
        indexes = [
            IndexModel([("month", ASCENDING), ("year", ASCENDING)], unique=True),
        ]
