from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field
from pymongo import ASCENDING, IndexModel

from app.core.models.base import AppDocument
from app.core.models.production.common import PlanStatus

TaskType = Literal["monthly", "weekly", "daily", "report"]


class ProductionTask(AppDocument):
    """
    Tracker entry mirroring one plan or report.
    plan_id points at the plan (or, for type "report", the daily report).
    """

    type: TaskType
    title: str
    description: Optional[str] = None
    status: str = PlanStatus.PENDING
    priority: Optional[Literal["low", "medium", "high"]] = None
    assigned_to: str
    assigned_role: str
    plan_id: str
    deadline: datetime
    dependencies: List[str] = Field(default_factory=list)

    class Settings:
        name = "production_tasks"
        indexes = [
            IndexModel([("plan_id", ASCENDING)], unique=True),
            [("type", ASCENDING), ("status", ASCENDING)],
            [("assigned_to", ASCENDING)],
        ]
