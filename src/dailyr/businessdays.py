"""Business-day calendar helpers.

All functions work on calendar dates.  Datetimes are truncated to their
date first so time-of-day never shifts the arithmetic.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta


def start_of_day(value: date | datetime) -> date:
    """Normalize a date or datetime to day granularity."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_days(day: date, n: int) -> date:
    return start_of_day(day) + timedelta(days=n)


def is_weekend(day: date | datetime) -> bool:
    return start_of_day(day).weekday() >= 5


def is_before(a: date | datetime, b: date | datetime) -> bool:
    return start_of_day(a) < start_of_day(b)


def is_today(a: date | datetime, today: date | None = None) -> bool:
    if today is None:
        today = date.today()
    return start_of_day(a) == start_of_day(today)


def business_days_between(start: date | datetime, end: date | datetime) -> int:
    """Signed count of weekdays from *start* up to *end*.

    Moving forward, weekdays in ``[start, end)`` are counted.  Moving
    backward, weekdays in ``(end, start]`` are counted and the result is
    negative.  Mon -> Wed is 2, Wed -> Mon is -2, Sat -> Mon is 0.
    """
    start = start_of_day(start)
    end = start_of_day(end)
    diff = (end - start).days
    sign = -1 if diff < 0 else 1

    # Every full week holds exactly five weekdays.
    weeks = int(diff / 7)
    result = weeks * 5
    current = start + timedelta(days=weeks * 7)

    while current != end:
        if not is_weekend(current):
            result += sign
        current += timedelta(days=sign)

    return result
