from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, List

from app.core.models.production.common import ProductionItem, ProductionEntry


# ----------------------------- Monthly Plan -----------------------------

class ProductionItemRequest(BaseModel):
    """One product line on a monthly or weekly plan."""
    item_code: str = Field(..., min_length=1, description="Part / item code")
    item_name: str = Field("", description="Display name of the item")
    customer_name: str = ""
    monthly_quantity: int = Field(0, ge=0, description="Total quantity for the month")
    weekly_quantities: Dict[str, int] = Field(
        default_factory=dict,
        description="Optional per-week ('week1-7') or per-day ('day1') quantities",
    )

    @field_validator('weekly_quantities')
    @classmethod
    def validate_quantities(cls, v):
        for key, qty in v.items():
            if qty < 0:
                raise ValueError(f"Quantity for '{key}' must not be negative")
        return v

    def to_item(self) -> ProductionItem:
        return ProductionItem(**self.model_dump())


class MonthlyPlanCreate(BaseModel):
    title: Optional[str] = None
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    week_count: Optional[int] = Field(None, ge=1, description="Defaults to the number of weeks in the month")
    items: List[ProductionItemRequest] = Field(default_factory=list)


class MonthlyPlanUpdate(BaseModel):
    title: Optional[str] = None
    week_count: Optional[int] = Field(None, ge=1)
    items: Optional[List[ProductionItemRequest]] = None


class MonthlyPlanSubmit(BaseModel):
    """Final items (optional) sent with the monthly plan submission."""
    week_count: Optional[int] = Field(None, ge=1)
    items: Optional[List[ProductionItemRequest]] = None


# ----------------------------- Weekly Plan -----------------------------

class WeeklyPlanSubmit(BaseModel):
    week_start_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    week_end_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    items: Optional[List[ProductionItemRequest]] = None


# ----------------------------- Daily Plan -----------------------------

class ProductionEntryRequest(BaseModel):
    """Department / operator line of a daily plan or report."""
    id: Optional[str] = None
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    customer_name: Optional[str] = None
    dept_name: str = Field(..., min_length=1)
    operator_name: str = Field(..., min_length=1)
    work: str = ""

    h1_plan: int = Field(0, ge=0)
    h2_plan: int = Field(0, ge=0)
    ot_plan: int = Field(0, ge=0)
    target: Optional[int] = Field(None, ge=0, description="Recomputed from the shift plan on submission")

    h1_actual: Optional[int] = Field(None, ge=0)
    h2_actual: Optional[int] = Field(None, ge=0)
    ot_actual: Optional[int] = Field(None, ge=0)
    actual_production: Optional[int] = Field(None, ge=0)
    quality_defect: Optional[int] = Field(None, ge=0)

    reason: Optional[str] = None
    corrective_actions: Optional[str] = None
    responsible_person: Optional[str] = None
    target_completion_date: Optional[str] = None

    def to_entry(self, recompute_target: bool = True) -> ProductionEntry:
        data = self.model_dump(exclude_none=True)
        planned = self.h1_plan + self.h2_plan + self.ot_plan
        if recompute_target or self.target is None:
            data["target"] = planned
        return ProductionEntry(**data)


class DailyPlanSubmit(BaseModel):
    entries: List[ProductionEntryRequest] = Field(..., min_length=1)


class DailyPlanReject(BaseModel):
    reason: str = Field(..., description="Why the plan is sent back to the production manager")

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, v):
        if not v.strip():
            raise ValueError("Rejection reason is required")
        return v.strip()


class DailyPlanCapabilities(BaseModel):
    """What the calling user may do with a daily plan right now."""
    plan_id: str
    status: str
    can_submit: bool
    can_approve: bool
    can_reject: bool


# ----------------------------- Daily Report -----------------------------

class DailyReportSubmit(BaseModel):
    entries: List[ProductionEntryRequest] = Field(..., min_length=1)


# ----------------------------- Action Plan -----------------------------

class ActionPlanUpdate(BaseModel):
    status: Optional[str] = Field(None, description="pending, inProgress or completed")
    reason: Optional[str] = None
    corrective_actions: Optional[str] = None
    responsible_person: Optional[str] = None
    target_completion_date: Optional[str] = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in ("pending", "inProgress", "completed"):
            raise ValueError("Status must be one of pending, inProgress, completed")
        return v
