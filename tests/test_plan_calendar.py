from datetime import date

import pytest

from app.core.models.production.common import ProductionItem
from app.modules.production import plan_calendar as cal


def test_max_week_count_covers_partial_weeks():
    assert cal.max_week_count(2025, 2) == 4   # 28 days
    assert cal.max_week_count(2024, 2) == 5   # leap year, 29 days
    assert cal.max_week_count(2025, 9) == 5   # 30 days


def test_next_month_rolls_over_year():
    assert cal.next_month(2025, 11) == (2025, 12)
    assert cal.next_month(2025, 12) == (2026, 1)


def test_last_week_runs_to_month_end():
    assert cal.week_day_range(2025, 9, 1, 4) == (1, 7)
    assert cal.week_day_range(2025, 9, 3, 4) == (15, 21)
    assert cal.week_day_range(2025, 9, 4, 4) == (22, 30)
    assert cal.week_dates(2025, 9, 4, 4) == (date(2025, 9, 22), date(2025, 9, 30))


def test_week_range_is_capped_at_month_length():
    assert cal.week_day_range(2025, 2, 4, 5) == (22, 28)


@pytest.mark.parametrize("week_number", [0, 5, 6])
def test_week_outside_plan_is_rejected(week_number):
    with pytest.raises(ValueError):
        cal.week_day_range(2025, 9, week_number, 4)


def test_week_key_and_day_date():
    assert cal.week_key(2025, 9, 2, 4) == "week8-14"
    assert cal.day_date(date(2025, 9, 8), 3) == date(2025, 9, 10)


def test_week_quantity_prefers_explicit_weekly_figure():
    item = ProductionItem(item_code="A1", monthly_quantity=1000, weekly_quantities={"week8-14": 300})
    assert cal.week_quantity(item, "week8-14", 4) == 300
    assert cal.week_quantity(item, "week1-7", 4) == 250


def test_week_quantity_rounds_up():
    item = ProductionItem(item_code="A1", monthly_quantity=1001)
    assert cal.week_quantity(item, "week1-7", 4) == 251


def test_split_week_into_days():
    assert cal.split_week_into_days(250, 6) == {f"day{n}": 42 for n in range(1, 7)}
    assert len(cal.split_week_into_days(250, 7)) == 7


def test_day_quantity_fallbacks():
    with_days = ProductionItem(item_code="A1", weekly_quantities={"day1": 40, "week1-7": 250})
    assert cal.day_quantity(with_days, 1, 6) == 40
    # no "day2" key: fall back to the week total split over the working days
    assert cal.day_quantity(with_days, 2, 6) == 42
    assert cal.day_quantity(ProductionItem(item_code="A2"), 1, 6) == 0


def test_split_shifts_uses_integer_ceiling():
    assert cal.split_shifts(100) == (40, 40, 20)
    # 0.4 * 15 is 6.000000000000001 in floating point; must stay 6
    assert cal.split_shifts(15) == (6, 6, 3)
    assert cal.split_shifts(42) == (17, 17, 9)
    assert cal.split_shifts(0) == (0, 0, 0)


def test_achievement_percentage():
    assert cal.achievement_percentage(70, 100) == 70.0
    assert cal.achievement_percentage(2, 3) == 66.67
    assert cal.achievement_percentage(50, 0) == 0.0
