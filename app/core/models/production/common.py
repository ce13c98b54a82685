"""
Embedded value types shared by the plan and report documents.
They are always copied into a child document, never referenced.
"""
from typing import Dict, Optional

from pydantic import BaseModel, Field

from app.core.models.base import generate_id


class PlanStatus:
    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ProductionItem(BaseModel):
    """A product line on a monthly or weekly plan."""

    id: str = Field(default_factory=generate_id)
    item_code: str
    item_name: str = ""
    customer_name: str = ""
    monthly_quantity: int = Field(0, ge=0)
    # "week<start>-<end>" keys on monthly plans, "day<N>" keys on weekly plans
    weekly_quantities: Dict[str, int] = Field(default_factory=dict)

    def copy_fresh(self, weekly_quantities: Dict[str, int]) -> "ProductionItem":
        return self.model_copy(
            update={"id": generate_id(), "weekly_quantities": dict(weekly_quantities)}
        )


class ProductionEntry(BaseModel):
    """
    One department/operator line. Plan-side fields are filled on the daily
    plan; actual-side fields are filled when the daily report is submitted.
    """

    id: str = Field(default_factory=generate_id)
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    customer_name: Optional[str] = None
    dept_name: str
    operator_name: str
    work: str = ""

    h1_plan: int = Field(0, ge=0)
    h2_plan: int = Field(0, ge=0)
    ot_plan: int = Field(0, ge=0)
    target: int = Field(0, ge=0)

    h1_actual: Optional[int] = Field(None, ge=0)
    h2_actual: Optional[int] = Field(None, ge=0)
    ot_actual: Optional[int] = Field(None, ge=0)
    actual_production: Optional[int] = Field(None, ge=0)
    quality_defect: Optional[int] = Field(None, ge=0)
    production_percentage: Optional[float] = None

    reason: Optional[str] = None
    corrective_actions: Optional[str] = None
    responsible_person: Optional[str] = None
    target_completion_date: Optional[str] = None

    @property
    def planned_total(self) -> int:
        return self.h1_plan + self.h2_plan + self.ot_plan
