"""
HR Payroll - Salary Derivation Tests
"""

from decimal import Decimal

import pytest

from app.services.payroll_engine import daily_rate, gross_salary, net_salary, round_money
from app.utils.error_handling import InvalidInputException


class TestGrossSalary:

    def test_no_adjustments(self):
        assert gross_salary(Decimal("3000"), 22, 0) == Decimal("3000")

    def test_unpaid_days_deducted_at_daily_rate(self):
        gross = gross_salary(Decimal("3000"), 22, 2)
        assert round_money(gross) == Decimal("2727.27")

    def test_full_precision_kept_until_display(self):
        gross = gross_salary(Decimal("3000"), 22, 2)
        assert gross != round_money(gross)

    def test_additions(self):
        gross = gross_salary(
            Decimal("3000"), 20, 0,
            bonuses=Decimal("150"),
            allowances=Decimal("80.50"),
            overtime=Decimal("45.25"),
        )
        assert gross == Decimal("3275.75")

    def test_non_increasing_in_unpaid_days(self):
        values = [gross_salary(Decimal("2500"), 21, days) for days in range(0, 22)]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert round_money(values[-1]) == 0

    def test_non_decreasing_in_additions(self):
        base = gross_salary(Decimal("2500"), 21, 3)
        assert gross_salary(Decimal("2500"), 21, 3, bonuses=Decimal("1")) > base
        assert gross_salary(Decimal("2500"), 21, 3, allowances=Decimal("1")) > base
        assert gross_salary(Decimal("2500"), 21, 3, overtime=Decimal("1")) > base

    @pytest.mark.parametrize("working_days", [0, -1])
    def test_working_days_must_be_positive(self, working_days):
        with pytest.raises(InvalidInputException):
            gross_salary(Decimal("3000"), working_days, 0)

    def test_unpaid_days_cannot_exceed_working_days(self):
        with pytest.raises(InvalidInputException):
            gross_salary(Decimal("3000"), 20, 21)

    def test_negative_amounts_rejected(self):
        with pytest.raises(InvalidInputException):
            gross_salary(Decimal("-1"), 20, 0)
        with pytest.raises(InvalidInputException):
            gross_salary(Decimal("3000"), 20, 0, bonuses=Decimal("-5"))

    def test_daily_rate(self):
        assert daily_rate(Decimal("2200"), 22) == Decimal("100")


class TestNetSalary:

    def test_subtracts_withholdings(self):
        net = net_salary(Decimal("3000"), Decimal("690"), Decimal("250"), Decimal("60"))
        assert net == Decimal("2000")

    def test_floored_at_zero(self):
        assert net_salary(Decimal("100"), Decimal("50"), Decimal("40"), Decimal("20")) == 0
