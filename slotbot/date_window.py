"""Calendar dates to ask the timetable API about."""

from __future__ import annotations

import datetime as dt

WEEKEND_INDICES = {5, 6}  # Saturday, Sunday


def is_weekend(value: dt.date) -> bool:
    return value.weekday() in WEEKEND_INDICES


def query_window(horizon_days: int, *, skip_weekends: bool = False, today: dt.date | None = None) -> list[dt.date]:
    """Return today and the following ``horizon_days - 1`` days, oldest first.

    With ``skip_weekends`` Saturdays and Sundays are dropped, not replaced, so
    the window can be shorter than ``horizon_days``.
    """
    today = today or dt.date.today()
    window: list[dt.date] = []
    for i in range(max(horizon_days, 0)):
        value = today + dt.timedelta(days=i)
        if skip_weekends and is_weekend(value):
            continue
        window.append(value)
    return window
