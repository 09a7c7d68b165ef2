"""
HR Payroll - Working Day Calculator Tests
"""

from datetime import date, timedelta

import pytest

from app.services.payroll_engine import Period, working_days_between, working_days_in_month
from app.services.payroll_engine.working_days import month_bounds


class TestWorkingDaysInMonth:
    """Monday to Friday count per calendar month."""

    def test_february_2024_leap_year(self):
        """Leap February starting on a Thursday has 21 working days."""
        assert working_days_in_month(2024, 2) == 21

    @pytest.mark.parametrize(
        "year,month,expected",
        [
            (2024, 1, 23),   # starts Monday, 31 days
            (2024, 3, 21),   # ends on a weekend
            (2024, 4, 22),
            (2024, 6, 20),   # starts Saturday, 30 days
            (2023, 2, 20),   # exactly four weeks
        ],
    )
    def test_known_months(self, year, month, expected):
        assert working_days_in_month(year, month) == expected

    def test_matches_day_by_day_count(self):
        for month in range(1, 13):
            start, end = month_bounds(2025, month)
            day, count = start, 0
            while day <= end:
                if day.weekday() < 5:
                    count += 1
                day += timedelta(days=1)
            assert working_days_in_month(2025, month) == count

    def test_period_exposes_working_days(self):
        assert Period(2024, 2).working_days == 21


class TestWorkingDaysBetween:
    """Inclusive range counting."""

    def test_weekend_only_range(self):
        assert working_days_between(date(2024, 4, 6), date(2024, 4, 7)) == 0

    def test_single_weekday(self):
        assert working_days_between(date(2024, 4, 8), date(2024, 4, 8)) == 1

    def test_both_endpoints_included(self):
        # Monday to Friday
        assert working_days_between(date(2024, 4, 8), date(2024, 4, 12)) == 5

    def test_range_across_weekend(self):
        # Thursday to Tuesday
        assert working_days_between(date(2024, 4, 4), date(2024, 4, 9)) == 4

    def test_reversed_range_is_zero(self):
        assert working_days_between(date(2024, 4, 12), date(2024, 4, 8)) == 0

    def test_long_range(self):
        assert working_days_between(date(2024, 1, 1), date(2024, 12, 31)) == 262
