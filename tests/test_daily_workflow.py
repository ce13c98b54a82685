import pytest

from app.core.auth import roles
from app.core.exceptions import PreconditionError, ValidationError
from app.core.models.production.common import PlanStatus, ProductionEntry
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.daily_report import DailyReport
from app.core.models.production.production_task import ProductionTask
from app.core.schemas.production.production_plan import DailyPlanSubmit, ProductionEntryRequest
from tests.factories import make_principal


async def make_daily_plan(services, status=PlanStatus.PENDING, target=100) -> DailyPlan:
    plan = DailyPlan(
        title="Daily Production Plan - Day 1 (Week 1)",
        day_number=1,
        date="2025-09-01",
        week_number=1,
        month=9,
        year=2025,
        weekly_plan_id="weekly-1",
        status=status,
        assigned_to="pm-1",
        assigned_role=roles.PRODUCTION_MANAGER,
        entries=[ProductionEntry(dept_name="Press", operator_name="Ravi", h1_plan=40, h2_plan=40, ot_plan=20, target=target)],
    )
    await services.daily_store.create(plan)
    await services.tasks.ensure_task(
        task_type="daily",
        title=plan.title,
        assigned_to=plan.assigned_to,
        assigned_role=plan.assigned_role,
        plan_id=plan.id,
        deadline=plan.created_at,
    )
    return plan


def submission(**overrides) -> DailyPlanSubmit:
    entry = {"dept_name": "Press", "operator_name": "Ravi", "h1_plan": 50, "h2_plan": 30, "ot_plan": 10, "target": 5}
    entry.update(overrides)
    return DailyPlanSubmit(entries=[ProductionEntryRequest(**entry)])


async def test_submit_moves_plan_and_task_to_in_progress(services):
    plan = await make_daily_plan(services)

    plan = await services.daily.submit(plan.id, submission())

    assert plan.status == PlanStatus.IN_PROGRESS
    assert plan.submitted_at is not None
    # target is recomputed from the shift plan, not taken from the request
    assert plan.entries[0].target == 90
    task = await services.tasks.find_by_plan(plan.id)
    assert task.status == PlanStatus.IN_PROGRESS


async def test_approve_creates_exactly_one_report(services):
    plan = await make_daily_plan(services, status=PlanStatus.IN_PROGRESS)

    approved, report = await services.daily.approve(plan.id, "plant-head-1")

    assert approved.status == PlanStatus.COMPLETED
    assert approved.approved_by == "plant-head-1"
    assert report.daily_plan_id == plan.id
    assert report.status == PlanStatus.PENDING
    assert len(report.entries) == 1
    entry = report.entries[0]
    assert entry.target == 100
    assert (entry.h1_actual, entry.h2_actual, entry.ot_actual, entry.actual_production) == (0, 0, 0, 0)

    report_tasks = await ProductionTask.find(ProductionTask.type == "report").to_list()
    assert len(report_tasks) == 1
    assert report_tasks[0].plan_id == report.id
    assert (await services.tasks.find_by_plan(plan.id)).status == PlanStatus.COMPLETED


async def test_reapproving_returns_the_same_report(services):
    plan = await make_daily_plan(services, status=PlanStatus.IN_PROGRESS)
    _, first = await services.daily.approve(plan.id, "plant-head-1")

    _, second = await services.daily.approve(plan.id, "plant-head-1")

    assert second.id == first.id
    assert await DailyReport.find(DailyReport.daily_plan_id == plan.id).count() == 1
    assert await ProductionTask.find(ProductionTask.type == "report").count() == 1


async def test_approve_requires_review_state(services):
    plan = await make_daily_plan(services)

    with pytest.raises(PreconditionError):
        await services.daily.approve(plan.id, "plant-head-1")
    assert await DailyReport.count() == 0


async def test_reject_then_resubmit(services):
    plan = await make_daily_plan(services)
    await services.daily.submit(plan.id, submission())

    rejected = await services.daily.reject(plan.id, "plant-head-1", "  OT too high  ")
    assert rejected.status == PlanStatus.REJECTED
    assert rejected.rejection_reason == "OT too high"
    assert (await services.tasks.find_by_plan(plan.id)).status == PlanStatus.REJECTED

    resubmitted = await services.daily.submit(plan.id, submission(ot_plan=0))
    assert resubmitted.status == PlanStatus.IN_PROGRESS
    assert resubmitted.entries[0].target == 80


async def test_reject_requires_reason_and_review_state(services):
    plan = await make_daily_plan(services)
    with pytest.raises(PreconditionError):
        await services.daily.reject(plan.id, "plant-head-1", "late")

    await services.daily.submit(plan.id, submission())
    with pytest.raises(ValidationError):
        await services.daily.reject(plan.id, "plant-head-1", "   ")


async def test_submit_rejected_when_already_under_review(services):
    plan = await make_daily_plan(services, status=PlanStatus.IN_PROGRESS)

    with pytest.raises(PreconditionError):
        await services.daily.submit(plan.id, submission())


async def test_capabilities_follow_role_and_status(services):
    plan = await make_daily_plan(services)
    manager = make_principal(roles.PRODUCTION_MANAGER, user_id="pm-1")
    plant_head = make_principal(roles.PLANT_HEAD, user_id="ph-1")

    caps = services.daily.capabilities_for(plan, manager)
    assert (caps.can_submit, caps.can_approve, caps.can_reject) == (True, False, False)
    caps = services.daily.capabilities_for(plan, plant_head)
    assert (caps.can_submit, caps.can_approve, caps.can_reject) == (False, False, False)

    plan = await services.daily.submit(plan.id, submission())
    caps = await services.daily.capabilities(plan.id, plant_head)
    assert (caps.can_submit, caps.can_approve, caps.can_reject) == (False, True, True)
    caps = await services.daily.capabilities(plan.id, manager)
    assert caps.can_submit is False
