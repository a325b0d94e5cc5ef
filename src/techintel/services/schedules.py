"""
techintel.services.schedules

Next-run computation for scheduled reports.

Responsibilities:
- Parse a schedule (`time` "HH:MM", `dayOfWeek` 0=Sunday, `dayOfMonth`).
- Return the next occurrence strictly after `now` for a recurrence.
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from techintel.db.models import Recurrence


class ScheduleError(ValueError):
    pass


def _parse_time(raw: Any) -> tuple[int, int]:
    try:
        hours_s, minutes_s = str(raw).split(":", 1)
        hours, minutes = int(hours_s), int(minutes_s)
    except ValueError as e:
        raise ScheduleError(f"invalid schedule time: {raw!r}") from e
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ScheduleError(f"invalid schedule time: {raw!r}")
    return hours, minutes


def _parse_day(schedule: Mapping[str, Any], key: str, default: int, low: int, high: int) -> int:
    raw = schedule.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ScheduleError(f"invalid {key}: {raw!r}") from e
    if not low <= value <= high:
        raise ScheduleError(f"invalid {key}: {raw!r}")
    return value


def _add_months(ts: datetime, months: int, day: int) -> datetime:
    month_index = ts.month - 1 + months
    year, month = ts.year + month_index // 12, month_index % 12 + 1
    # Clamp to the month's length (e.g. dayOfMonth=31 in February).
    day = max(1, min(day, calendar.monthrange(year, month)[1]))
    return ts.replace(year=year, month=month, day=day)


def sunday_based_weekday(ts: datetime) -> int:
    # datetime.weekday() is Monday=0; schedules use Sunday=0.
    return (ts.weekday() + 1) % 7


def calculate_next_run(
    recurrence: Recurrence | str,
    schedule: Mapping[str, Any],
    *,
    now: datetime,
) -> datetime:
    """
    Today's date at the schedule time; if that is not after `now`, roll forward:
    daily +1 day, weekly to the next `dayOfWeek` (a full week when it is today),
    monthly +1 month and quarterly +3 months on `dayOfMonth`.
    """

    recurrence = Recurrence(recurrence)
    hours, minutes = _parse_time(schedule.get("time", "09:00"))
    next_run = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    # Day fields are validated even when the run lands later today.
    day_of_week = _parse_day(schedule, "dayOfWeek", sunday_based_weekday(now), 0, 6)
    day_of_month = _parse_day(schedule, "dayOfMonth", now.day, 1, 31)
    if next_run > now:
        return next_run

    if recurrence is Recurrence.daily:
        return next_run + timedelta(days=1)
    if recurrence is Recurrence.weekly:
        days = (day_of_week - sunday_based_weekday(next_run) + 7) % 7 or 7
        return next_run + timedelta(days=days)

    months = 1 if recurrence is Recurrence.monthly else 3
    return _add_months(next_run, months, day_of_month)
