"""
HR Payroll - Working-Day Calculator

Counts Monday-Friday days. Weekends never count and public holidays are
not modelled: a month's working days are purely a function of the calendar.
"""

from calendar import monthrange
from datetime import date, timedelta
from typing import Tuple


def working_days_between(start: date, end: date) -> int:
    """
    Count working days between two dates, both endpoints included.

    Returns 0 when start is after end.
    """
    if start > end:
        return 0

    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5

    # Walk the leftover partial week
    current = start + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        if current.isoweekday() <= 5:
            count += 1
        current += timedelta(days=1)

    return count


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def working_days_in_month(year: int, month: int) -> int:
    """Count Monday-Friday days in a calendar month."""
    first, last = month_bounds(year, month)
    return working_days_between(first, last)
