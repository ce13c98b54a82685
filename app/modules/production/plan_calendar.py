"""
Calendar arithmetic and quantity splitting for the plan cascade.

Week N of a month covers days (N-1)*7+1 .. N*7, capped at the month length;
the last week of a plan always runs to the end of the month.
"""
import calendar
from datetime import date, timedelta
from typing import Dict, Tuple

from app.core.models.production.common import ProductionItem

# Shift split of a day's quantity, in percent
H1_SHARE = 40
H2_SHARE = 40
OT_SHARE = 20


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def month_name(month: int) -> str:
    return calendar.month_name[month]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def max_week_count(year: int, month: int) -> int:
    return ceil_div(days_in_month(year, month), 7)


def next_month(year: int, month: int) -> Tuple[int, int]:
    """Return (year, month) of the following calendar month."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def week_day_range(year: int, month: int, week_number: int, week_count: int) -> Tuple[int, int]:
    """First and last day-of-month covered by `week_number`."""
    last_day = days_in_month(year, month)
    start_day = (week_number - 1) * 7 + 1
    if week_number < 1 or week_number > week_count or start_day > last_day:
        raise ValueError(f"Week {week_number} is outside {month_name(month)} {year} ({week_count} weeks)")

    end_day = last_day if week_number == week_count else min(week_number * 7, last_day)
    return start_day, end_day


def week_dates(year: int, month: int, week_number: int, week_count: int) -> Tuple[date, date]:
    start_day, end_day = week_day_range(year, month, week_number, week_count)
    return date(year, month, start_day), date(year, month, end_day)


def week_key(year: int, month: int, week_number: int, week_count: int) -> str:
    start_day, end_day = week_day_range(year, month, week_number, week_count)
    return f"week{start_day}-{end_day}"


def day_key(day_number: int) -> str:
    return f"day{day_number}"


def day_date(week_start: date, day_number: int) -> date:
    return week_start + timedelta(days=day_number - 1)


def week_quantity(item: ProductionItem, key: str, week_count: int) -> int:
    """
    Quantity of `item` planned for the week identified by `key`.
    An explicit per-week figure on the monthly plan wins over the equal split.
    """
    if key in item.weekly_quantities:
        return item.weekly_quantities[key]
    return ceil_div(item.monthly_quantity, week_count)


def split_week_into_days(quantity: int, days_per_week: int) -> Dict[str, int]:
    per_day = ceil_div(quantity, days_per_week)
    return {day_key(day): per_day for day in range(1, days_per_week + 1)}


def day_quantity(item: ProductionItem, day_number: int, days_per_week: int) -> int:
    """
    Quantity of `item` for one day of a weekly plan: the "day<N>" figure when
    present, otherwise the item's week total split across the working days.
    """
    key = day_key(day_number)
    if key in item.weekly_quantities:
        return item.weekly_quantities[key]

    week_total = sum(qty for k, qty in item.weekly_quantities.items() if k.startswith("week"))
    if week_total:
        return ceil_div(week_total, days_per_week)
    return 0


def split_shifts(quantity: int) -> Tuple[int, int, int]:
    """(h1, h2, ot) shares of a day's quantity, each rounded up."""
    h1 = ceil_div(quantity * H1_SHARE, 100)
    h2 = ceil_div(quantity * H2_SHARE, 100)
    ot = ceil_div(quantity * OT_SHARE, 100)
    return h1, h2, ot


def achievement_percentage(actual: int, target: int) -> float:
    if not target:
        return 0.0
    return round(actual / target * 100, 2)
