"""Calendar-date helpers. Dates carry no time-of-day semantics."""
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd


def parse_date(val: Any) -> Optional[date]:
    """
    Coerce a value from a task listing into a calendar date.

    Accepts date/datetime objects, ISO strings and pandas timestamps.
    Returns None for blanks and unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if isinstance(val, str) and val.strip() == '':
        return None
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    try:
        return pd.to_datetime(val).date()
    except (TypeError, ValueError):
        return None


def add_days(day: date, days: int) -> date:
    """Shift a date by a whole number of days (negative moves earlier)."""
    return day + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end."""
    return (end - start).days
