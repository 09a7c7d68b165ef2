"""
HR Payroll - Statutory Deduction Tests

Income tax uses the 2024.1 bracket table on annualized gross less a 10%
standard deduction.
"""

from decimal import Decimal

import pytest

from app.models.payroll_enums import FilingStatus
from app.services.payroll_engine import (
    PayrollRules,
    TaxBracket,
    employer_contribution,
    get_rules,
    income_tax,
    income_tax_breakdown,
    round_money,
    social_contribution,
)
from app.services.payroll_engine.rules import RULES_2024
from app.utils.error_handling import AppException, ErrorCode, InvalidInputException


GROSS_EXAMPLE = Decimal("30000") / Decimal("11")   # 3000 less two unpaid days out of 22


class TestSocialContribution:

    def test_employee_rate_23_percent(self):
        assert social_contribution(Decimal("1000")) == Decimal("230")

    def test_worked_example(self):
        assert round_money(social_contribution(GROSS_EXAMPLE)) == Decimal("627.27")

    def test_employer_rate_reported_separately(self):
        assert employer_contribution(Decimal("1000")) == Decimal("424.5")

    def test_negative_gross_rejected(self):
        with pytest.raises(InvalidInputException):
            social_contribution(Decimal("-0.01"))


class TestIncomeTax:

    def test_below_first_threshold_is_zero(self):
        # 900 * 12 * 0.9 = 9,720 taxable
        assert income_tax(Decimal("900")) == 0

    def test_zero_gross(self):
        assert income_tax(Decimal("0")) == 0

    def test_worked_example(self):
        """Taxable 29,454.55: 16,701 at 11% plus 1,976.55 at 30%."""
        tax = income_tax(GROSS_EXAMPLE)
        assert round_money(tax) == Decimal("202.51")

    def test_top_bracket(self):
        # Taxable 216,000 reaches the 45% bracket
        tax = income_tax(Decimal("20000"))
        assert round_money(tax) == Decimal("6282.60")

    def test_joint_filer_factor(self):
        single = income_tax(GROSS_EXAMPLE, FilingStatus.SINGLE)
        joint = income_tax(GROSS_EXAMPLE, FilingStatus.JOINT)
        assert round_money(joint) == round_money(single * Decimal("0.8"))
        assert round_money(joint) == Decimal("162.00")

    def test_filing_status_accepts_plain_strings(self):
        assert income_tax(GROSS_EXAMPLE, "joint") == income_tax(GROSS_EXAMPLE, FilingStatus.JOINT)

    def test_unknown_filing_status_rejected(self):
        with pytest.raises(InvalidInputException):
            income_tax(GROSS_EXAMPLE, "widowed")

    def test_negative_gross_rejected(self):
        with pytest.raises(InvalidInputException):
            income_tax(Decimal("-100"))

    def test_monotonic_in_gross(self):
        amounts = [Decimal(v) for v in range(0, 30000, 750)]
        taxes = [income_tax(a) for a in amounts]
        assert all(a <= b for a, b in zip(taxes, taxes[1:]))

    def test_breakdown(self):
        result = income_tax_breakdown(GROSS_EXAMPLE)

        assert result["rules_version"] == "2024.1"
        assert result["filing_status"] == "single"
        assert round_money(result["taxable_income"]) == Decimal("29454.55")
        assert [b["rate"] for b in result["tax_brackets"]] == ["0%", "11%", "30%"]
        assert result["tax_brackets"][1]["tax_amount"] == Decimal("1837.11")


class TestPayrollRules:

    def test_default_version(self):
        assert get_rules() is RULES_2024
        assert get_rules("2024.1") is RULES_2024

    def test_unknown_version(self):
        with pytest.raises(AppException) as exc_info:
            get_rules("1999.1")
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_brackets_must_be_contiguous(self):
        with pytest.raises(ValueError):
            PayrollRules(
                version="broken",
                tax_brackets=(
                    TaxBracket(Decimal("0"), Decimal("1000"), Decimal("0")),
                    TaxBracket(Decimal("2000"), None, Decimal("10")),
                ),
            )

    def test_only_last_bracket_open_ended(self):
        with pytest.raises(ValueError):
            PayrollRules(
                version="broken",
                tax_brackets=(
                    TaxBracket(Decimal("0"), None, Decimal("0")),
                    TaxBracket(Decimal("1000"), None, Decimal("10")),
                ),
            )

    def test_injected_rules_drive_the_calculation(self):
        flat = PayrollRules(
            version="flat-10",
            tax_brackets=(TaxBracket(Decimal("0"), None, Decimal("10")),),
            employee_social_rate=Decimal("20"),
            standard_deduction_rate=Decimal("0"),
        )

        assert income_tax(Decimal("1000"), rules=flat) == Decimal("100")
        assert social_contribution(Decimal("1000"), rules=flat) == Decimal("200")
