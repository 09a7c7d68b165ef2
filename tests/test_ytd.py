"""
HR Payroll - Year-to-Date Totals Tests
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.payroll_engine import (
    LeaveTotals,
    PayrollInputs,
    Period,
    new_draft,
    year_to_date,
)
from app.utils.error_handling import InvalidInputException


def _record(period, gross, net, tax, social):
    return SimpleNamespace(
        period=period,
        gross_salary=Decimal(gross) if gross is not None else None,
        net_salary=Decimal(net) if net is not None else None,
        tax_deduction=Decimal(tax) if tax is not None else None,
        social_security_deduction=Decimal(social) if social is not None else None,
    )


@pytest.fixture
def records():
    return [
        _record("2024-01", "3000", "2100", "210", "690"),
        _record("2024-02", "3000", "2100", "210", "690"),
        _record("2024-03", "3200", "2230", "234", "736"),
        _record("2023-12", "2900", "2050", "200", "650"),
        _record("2025-01", "3100", "2160", "220", "713"),
    ]


class TestYearToDate:

    def test_sums_within_year_and_month(self, records):
        totals = year_to_date(records, 2024, 2)

        assert totals.payroll_count == 2
        assert totals.gross_total == Decimal("6000")
        assert totals.net_total == Decimal("4200")
        assert totals.tax_total == Decimal("420")
        assert totals.social_total == Decimal("1380")

    def test_full_year(self, records):
        totals = year_to_date(records, 2024, 12)

        assert totals.payroll_count == 3
        assert totals.gross_total == Decimal("9200")

    def test_no_records(self):
        totals = year_to_date([], 2024, 6)

        assert totals.payroll_count == 0
        assert totals.gross_total == 0
        assert totals.year == 2024
        assert totals.through_month == 6

    def test_missing_figures_count_as_zero(self):
        totals = year_to_date([_record("2024-01", None, None, None, None)], 2024, 1)

        assert totals.payroll_count == 1
        assert totals.net_total == 0

    def test_accepts_snapshots(self):
        now = datetime(2024, 2, 1, tzinfo=timezone.utc)
        inputs = PayrollInputs(base_salary=Decimal("3000"), working_days=23)
        snapshot = new_draft(uuid.uuid4(), Period(2024, 1), inputs).calculate(LeaveTotals(), now)

        totals = year_to_date([snapshot], 2024, 1)

        assert totals.gross_total == Decimal("3000")
        assert totals.net_total == snapshot.net_salary

    @pytest.mark.parametrize("through_month", [0, 13])
    def test_through_month_out_of_range(self, records, through_month):
        with pytest.raises(InvalidInputException):
            year_to_date(records, 2024, through_month)
