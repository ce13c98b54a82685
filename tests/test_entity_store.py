import json
import logging

import pytest

from app.core.db.store import EntityStore
from app.core.exceptions import NotFoundError
from app.core.logging_config import JsonFormatter
from app.core.models.production.monthly_plan import MonthlyPlan
from app.core.setting import config
from app.shared.timezone import days_from_now


def monthly(month: int, title: str = "") -> MonthlyPlan:
    return MonthlyPlan(
        title=title or f"Plan {month}",
        month=month,
        year=2025,
        week_count=5,
        assigned_to="pm-1",
        assigned_role="production_manager",
        deadline=days_from_now(config.MONTHLY_PLAN_DEADLINE_DAYS),
    )


@pytest.fixture
def store(database) -> EntityStore[MonthlyPlan]:
    return EntityStore(MonthlyPlan, "Monthly plan")


async def test_crud(store):
    plan = await store.create(monthly(1))

    assert (await store.get(plan.id)).title == "Plan 1"
    updated = await store.update(plan.id, title="January")
    assert updated.title == "January"

    assert [p.month for p in await store.find(MonthlyPlan.year == 2025)] == [1]
    assert await store.delete(plan.id) is True
    assert await store.delete(plan.id) is False
    assert await store.get(plan.id) is None


async def test_get_or_404_names_the_entity(store):
    with pytest.raises(NotFoundError, match="Monthly plan not found"):
        await store.get_or_404("missing")


async def test_get_or_create_reuses_existing(store):
    key = (MonthlyPlan.month == 2, MonthlyPlan.year == 2025)

    first, created = await store.get_or_create(lambda: monthly(2, "First"), *key)
    second, created_again = await store.get_or_create(lambda: monthly(2, "Second"), *key)

    assert (created, created_again) == (True, False)
    assert second.id == first.id
    assert second.title == "First"


async def test_get_or_create_resolves_unique_index_race(store, monkeypatch):
    winner = await store.create(monthly(3, "Winner"))
    calls = []
    original = MonthlyPlan.find_one

    def stale_lookup(*criteria, **kwargs):
        # first lookup misses, as if the other insert had not landed yet
        calls.append(criteria)
        if len(calls) == 1:
            return _none()
        return original(*criteria, **kwargs)

    monkeypatch.setattr(MonthlyPlan, "find_one", stale_lookup)

    plan, created = await store.get_or_create(
        lambda: monthly(3, "Loser"), MonthlyPlan.month == 3, MonthlyPlan.year == 2025
    )

    assert created is False
    assert plan.id == winner.id
    assert await MonthlyPlan.count() == 1


async def _none():
    return None


async def test_clear_all(store):
    await store.create(monthly(4))
    await store.create(monthly(5))

    assert await store.clear_all() == 2
    assert await store.all() == []


def test_json_formatter_merges_extra_fields():
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "plan %s derived", ("p-1",), None)
    record.plan_level = "weekly"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "plan p-1 derived"
    assert payload["level"] == "INFO"
    assert payload["plan_level"] == "weekly"
