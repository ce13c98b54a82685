"""
Plant-local time helpers.
All workflow timestamps (deadlines, submission and approval times) go through
this module so the scheduler and the API agree on "today".
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.core.setting import config

PLANT_TZ = ZoneInfo(config.SCHEDULER_TIMEZONE)


def get_plant_now() -> datetime:
    """Current timezone-aware datetime in the plant's timezone."""
    return datetime.now(tz=PLANT_TZ)


def days_from_now(days: int) -> datetime:
    return get_plant_now() + timedelta(days=days)


def to_date_str(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def parse_date_str(value: str) -> date:
    """
    Parse a YYYY-MM-DD string (a full ISO timestamp is accepted and truncated).

    Raises:
        ValueError: if the value is not a valid date
    """
    return datetime.strptime(value[:10], "%Y-%m-%d").date()
