import logging
from typing import List, Tuple

from app.core.auth import roles
from app.core.db.store import EntityStore
from app.core.exceptions import PreconditionError, ValidationError
from app.core.models.production.common import PlanStatus
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.daily_report import DailyReport
from app.core.schemas.auth import Principal
from app.core.schemas.production.production_plan import (
    DailyPlanCapabilities,
    DailyPlanSubmit,
)
from app.modules.production.cascade import PlanCascadeService
from app.modules.production.task_tracker import PlanStatusService, ProductionTaskService
from app.shared.timezone import get_plant_now

logger = logging.getLogger(__name__)

SUBMITTABLE = (PlanStatus.PENDING, PlanStatus.REJECTED)


class DailyPlanService:
    """
    Daily plan review loop:
    pending/rejected --submit--> inProgress --approve--> completed (+ daily report)
                                            --reject---> rejected
    """

    def __init__(
        self,
        store: EntityStore[DailyPlan],
        tasks: ProductionTaskService,
        status: PlanStatusService,
        cascade: PlanCascadeService,
    ):
        self.store = store
        self.tasks = tasks
        self.status = status
        self.cascade = cascade

    async def get(self, plan_id: str) -> DailyPlan:
        return await self.store.get_or_404(plan_id)

    async def list_all(self) -> List[DailyPlan]:
        return await self.store.all()

    async def list_by_status(self, status: str) -> List[DailyPlan]:
        return await self.store.find(DailyPlan.status == status, sort="date")

    async def list_by_weekly_plan(self, weekly_plan_id: str) -> List[DailyPlan]:
        return await self.store.find(DailyPlan.weekly_plan_id == weekly_plan_id, sort="day_number")

    async def delete(self, plan_id: str) -> None:
        plan = await self.get(plan_id)
        await self.tasks.delete_for_plan(plan.id)
        await plan.delete()
        logger.info(f"Deleted daily plan {plan_id}")

    async def submit(self, plan_id: str, data: DailyPlanSubmit) -> DailyPlan:
        """
        Send a pending (or previously rejected) plan to the plant head for review.
        Entry targets are recomputed from the shift plan.
        """
        plan = await self.get(plan_id)
        if plan.status not in SUBMITTABLE:
            raise PreconditionError(f"Daily plan cannot be submitted while {plan.status}")
        if not data.entries:
            raise ValidationError("At least one production entry is required")

        entries = [entry.to_entry() for entry in data.entries]
        return await self.status.transition(
            self.store,
            plan,
            PlanStatus.IN_PROGRESS,
            entries=entries,
            submitted_at=get_plant_now(),
        )

    async def approve(self, plan_id: str, approver_id: str) -> Tuple[DailyPlan, DailyReport]:
        """
        Approve a plan under review and derive its daily report.
        Approving an already approved plan returns the existing report.
        """
        plan = await self.get(plan_id)
        if plan.status == PlanStatus.COMPLETED:
            logger.info(f"Daily plan {plan_id} already approved; returning its report")
            report = await self.cascade.derive_report_from_approved_daily(plan)
            return plan, report
        if plan.status != PlanStatus.IN_PROGRESS:
            raise PreconditionError("Only daily plans under review can be approved")

        plan = await self.status.transition(
            self.store,
            plan,
            PlanStatus.COMPLETED,
            approved_by=approver_id,
            approved_at=get_plant_now(),
        )
        report = await self.cascade.derive_report_from_approved_daily(plan)
        return plan, report

    async def reject(self, plan_id: str, rejector_id: str, reason: str) -> DailyPlan:
        plan = await self.get(plan_id)
        if plan.status != PlanStatus.IN_PROGRESS:
            raise PreconditionError("Only daily plans under review can be rejected")
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required")

        return await self.status.transition(
            self.store,
            plan,
            PlanStatus.REJECTED,
            rejected_by=rejector_id,
            rejected_at=get_plant_now(),
            rejection_reason=reason.strip(),
        )

    @staticmethod
    def capabilities_for(plan: DailyPlan, principal: Principal) -> DailyPlanCapabilities:
        can_prepare = (
            principal.user_id == plan.assigned_to
            or principal.has_role(roles.PRODUCTION_MANAGER, roles.ADMIN)
        )
        can_review = (
            principal.has_role(roles.PLANT_HEAD, roles.ADMIN)
            or principal.has_permission("production", "approve")
        )
        under_review = plan.status == PlanStatus.IN_PROGRESS

        return DailyPlanCapabilities(
            plan_id=plan.id,
            status=plan.status,
            can_submit=plan.status in SUBMITTABLE and can_prepare,
            can_approve=under_review and can_review,
            can_reject=under_review and can_review,
        )

    async def capabilities(self, plan_id: str, principal: Principal) -> DailyPlanCapabilities:
        return self.capabilities_for(await self.get(plan_id), principal)
