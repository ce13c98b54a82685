import asyncio

import pytest

from app.core.auth import roles
from app.core.exceptions import PreconditionError
from app.core.models.production.common import PlanStatus
from app.core.models.production.daily_plan import DailyPlan
from app.core.models.production.production_task import ProductionTask
from app.core.models.production.weekly_plan import WeeklyPlan
from app.core.schemas.production.production_plan import MonthlyPlanCreate, ProductionItemRequest
from app.core.setting import config


async def create_monthly(services, month=9, year=2025, week_count=4, quantity=1000):
    data = MonthlyPlanCreate(
        month=month,
        year=year,
        week_count=week_count,
        items=[ProductionItemRequest(item_code="TEST001", item_name="Bracket", monthly_quantity=quantity)],
    )
    return await services.monthly.create(data, assigned_to="pm-1")


async def test_monthly_submit_derives_one_weekly_plan_per_week(services):
    monthly = await create_monthly(services)

    plan, weekly_plans = await services.monthly.submit(monthly.id)

    assert plan.status == PlanStatus.COMPLETED
    assert sorted(w.week_number for w in weekly_plans) == [1, 2, 3, 4]
    assert await WeeklyPlan.find(WeeklyPlan.monthly_plan_id == monthly.id).count() == 4

    for weekly in weekly_plans:
        item = weekly.items[0]
        assert item.item_code == "TEST001"
        assert item.id != monthly.items[0].id
        week_total = [qty for key, qty in item.weekly_quantities.items() if key.startswith("week")]
        assert week_total == [250]
        assert item.weekly_quantities["day1"] == 42
        assert weekly.assigned_to == "pm-1"

    last = max(weekly_plans, key=lambda w: w.week_number)
    assert (last.week_start_date, last.week_end_date) == ("2025-09-22", "2025-09-30")


async def test_each_weekly_plan_gets_a_tracker_task(services):
    monthly = await create_monthly(services)
    _, weekly_plans = await services.monthly.submit(monthly.id)

    for weekly in weekly_plans:
        task = await services.tasks.find_by_plan(weekly.id)
        assert task is not None
        assert task.type == "weekly"
        assert task.status == PlanStatus.PENDING

    monthly_task = await services.tasks.find_by_plan(monthly.id)
    assert monthly_task.status == PlanStatus.COMPLETED


async def test_weekly_derivation_is_idempotent(services):
    monthly = await create_monthly(services)
    _, first = await services.monthly.submit(monthly.id)
    monthly = await services.monthly.get(monthly.id)

    second = await services.cascade.derive_weekly_from_monthly(monthly)

    assert {w.id for w in first} == {w.id for w in second}
    assert await WeeklyPlan.find(WeeklyPlan.monthly_plan_id == monthly.id).count() == 4
    assert await ProductionTask.find(ProductionTask.type == "weekly").count() == 4


async def test_concurrent_derivations_converge_on_one_set(services):
    monthly = await create_monthly(services)
    _, weekly_plans = await services.monthly.submit(monthly.id)
    weekly = await services.weekly.get(weekly_plans[0].id)
    weekly = await services.status.transition(services.weekly_store, weekly, PlanStatus.COMPLETED)

    results = await asyncio.gather(
        services.cascade.derive_daily_from_weekly(weekly),
        services.cascade.derive_daily_from_weekly(weekly),
    )

    assert {p.id for p in results[0]} == {p.id for p in results[1]}
    assert await DailyPlan.find(DailyPlan.weekly_plan_id == weekly.id).count() == 6


async def test_derivation_requires_completed_parent(services):
    monthly = await create_monthly(services)

    with pytest.raises(PreconditionError, match="parent plan must be completed"):
        await services.cascade.derive_weekly_from_monthly(monthly)
    assert await WeeklyPlan.count() == 0


async def test_weekly_submit_derives_daily_plans(services):
    monthly = await create_monthly(services)
    _, weekly_plans = await services.monthly.submit(monthly.id)
    week_two = next(w for w in weekly_plans if w.week_number == 2)

    plan, daily_plans = await services.weekly.submit(week_two.id)

    assert plan.status == PlanStatus.COMPLETED
    assert [d.day_number for d in sorted(daily_plans, key=lambda d: d.day_number)] == [1, 2, 3, 4, 5, 6]
    day_three = next(d for d in daily_plans if d.day_number == 3)
    assert day_three.date == "2025-09-10"
    assert day_three.assigned_to == config.identity_for(roles.PRODUCTION_MANAGER)
    assert day_three.assigned_role == roles.PRODUCTION_MANAGER

    entry = day_three.entries[0]
    assert (entry.h1_plan, entry.h2_plan, entry.ot_plan) == (17, 17, 9)
    assert entry.target == entry.h1_plan + entry.h2_plan + entry.ot_plan
    assert entry.dept_name == "Production"
    assert entry.operator_name == "Production Team"
    assert entry.work == "Production of Bracket"

    task = await services.tasks.find_by_plan(day_three.id)
    assert task.type == "daily"


async def test_days_per_week_is_configurable(database):
    from app.modules.production.container import ProductionServices

    services = ProductionServices(days_per_week=7)
    monthly = await create_monthly(services)
    _, weekly_plans = await services.monthly.submit(monthly.id)
    _, daily_plans = await services.weekly.submit(weekly_plans[0].id)

    assert len(daily_plans) == 7
    assert len([k for k in weekly_plans[0].items[0].weekly_quantities if k.startswith("day")]) == 7


async def test_failed_child_rolls_back_created_siblings(services, monkeypatch):
    monthly = await create_monthly(services)
    monthly = await services.status.transition(services.monthly_store, monthly, PlanStatus.COMPLETED)

    original = services.tasks.ensure_task

    async def failing_ensure_task(**kwargs):
        if kwargs["title"].endswith("Week 3"):
            raise RuntimeError("tracker unavailable")
        return await original(**kwargs)

    monkeypatch.setattr(services.tasks, "ensure_task", failing_ensure_task)

    with pytest.raises(RuntimeError, match="tracker unavailable"):
        await services.cascade.derive_weekly_from_monthly(monthly)

    assert await WeeklyPlan.count() == 0
    assert await ProductionTask.find(ProductionTask.type == "weekly").count() == 0


async def test_failed_monthly_submit_reopens_the_plan(services, monkeypatch):
    monthly = await create_monthly(services)
    original = services.tasks.ensure_task

    async def failing_ensure_task(**kwargs):
        if kwargs["title"].endswith("Week 3"):
            raise RuntimeError("tracker unavailable")
        return await original(**kwargs)

    monkeypatch.setattr(services.tasks, "ensure_task", failing_ensure_task)
    with pytest.raises(RuntimeError, match="tracker unavailable"):
        await services.monthly.submit(monthly.id)

    reopened = await services.monthly.get(monthly.id)
    assert reopened.status == PlanStatus.PENDING
    assert reopened.submitted_at is None
    assert (await services.tasks.find_by_plan(monthly.id)).status == PlanStatus.PENDING
    assert await WeeklyPlan.count() == 0

    monkeypatch.setattr(services.tasks, "ensure_task", original)
    plan, weekly_plans = await services.monthly.submit(monthly.id)

    assert plan.status == PlanStatus.COMPLETED
    assert len(weekly_plans) == 4


async def test_failed_weekly_submit_reopens_the_plan(services, monkeypatch):
    monthly = await create_monthly(services)
    _, weekly_plans = await services.monthly.submit(monthly.id)
    weekly = weekly_plans[0]
    original = services.tasks.ensure_task

    async def failing_ensure_task(**kwargs):
        if kwargs["title"].startswith("Daily Production Plan - Day 3"):
            raise RuntimeError("tracker unavailable")
        return await original(**kwargs)

    monkeypatch.setattr(services.tasks, "ensure_task", failing_ensure_task)
    with pytest.raises(RuntimeError, match="tracker unavailable"):
        await services.weekly.submit(weekly.id)

    reopened = await services.weekly.get(weekly.id)
    assert reopened.status == PlanStatus.PENDING
    assert (await services.tasks.find_by_plan(weekly.id)).status == PlanStatus.PENDING
    assert await DailyPlan.count() == 0

    monkeypatch.setattr(services.tasks, "ensure_task", original)
    plan, daily_plans = await services.weekly.submit(weekly.id)

    assert plan.status == PlanStatus.COMPLETED
    assert len(daily_plans) == 6
