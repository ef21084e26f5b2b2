"""Business day calendar for Jira Sprint Metrics.

Counting convention: the start date is day 0 and a day is only credited once
it has fully elapsed. `business_days_between(start, end)` therefore counts the
weekdays `d` with `start < d <= end`:

    Mon -> Mon = 0, Mon -> Tue = 1, Mon -> Fri = 4

Measured from a sprint start to "today", today itself is never credited, and
for every `n >= 0`

    business_days_between(d, shift_business_days(d, n)) == n
"""

import datetime
from typing import Iterator

SATURDAY = 5


def as_date(value):
    """Return the calendar date of a date or datetime."""
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def is_business_day(day) -> bool:
    """Monday to Friday are business days."""
    return as_date(day).weekday() < SATURDAY


def iter_days(start, end) -> Iterator[datetime.date]:
    """Yield each calendar day from `start` to `end`, both inclusive."""
    day = as_date(start)
    end = as_date(end)
    while day <= end:
        yield day
        day += datetime.timedelta(days=1)


def business_days_between(start, end) -> int:
    """Count the business days elapsed between `start` and `end`.

    Returns 0 when `end` is on or before `start`.
    """
    start = as_date(start)
    end = as_date(end)
    if end <= start:
        return 0

    days = (end - start).days
    full_weeks, remainder = divmod(days, 7)
    count = full_weeks * 5

    day = start + datetime.timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        day += datetime.timedelta(days=1)
        if is_business_day(day):
            count += 1
    return count


def shift_business_days(day, n: int):
    """Move `day` by `n` business days, skipping weekends.

    Positive values move forward, negative values move backward. The result
    keeps the type of `day`, so datetimes keep their time of day.
    """
    step = datetime.timedelta(days=1 if n >= 0 else -1)
    remaining = abs(n)
    result = day
    while remaining > 0:
        result += step
        if is_business_day(result):
            remaining -= 1
    return result
