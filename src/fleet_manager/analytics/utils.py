from datetime import date, datetime
from typing import Optional

import pendulum


def utc_now() -> datetime:
    return pendulum.now("UTC")


def add_months(dt: datetime, months: int) -> datetime:
    """Calendar-aware month arithmetic (Jan 31 + 1 month -> end of Feb)."""
    return pendulum.instance(dt).add(months=months)


def month_start(dt: datetime) -> date:
    return date(dt.year, dt.month, 1)


def month_key(dt: datetime) -> str:
    return f"{dt.year:04d}-{dt.month:02d}"


def vehicle_age_in_months(model_year: int, now: datetime) -> int:
    # Model year is counted from January
    return (now.year - model_year) * 12 + now.month - 1


def in_window(
    value: datetime, start: Optional[datetime], end: Optional[datetime]
) -> bool:
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True
