"""
HR Payroll - Salary Derivation

Gross and net salary formulas. Amounts keep full Decimal precision here;
rounding to cents happens only when a figure is presented.
"""

from decimal import Decimal
from typing import Any

from app.utils.error_handling import InvalidInputException, validate_amount


ZERO = Decimal("0")


def daily_rate(base_salary: Any, working_days: int) -> Decimal:
    """Base salary divided by the period's working days."""
    if working_days <= 0:
        raise InvalidInputException(
            f"Working days must be greater than 0, got {working_days}",
            field="working_days",
        )
    return validate_amount(base_salary, "base_salary") / working_days


def gross_salary(
    base_salary: Any,
    working_days: int,
    unpaid_days: int,
    bonuses: Any = ZERO,
    allowances: Any = ZERO,
    overtime: Any = ZERO,
) -> Decimal:
    """
    Gross salary for one period.

    gross = base - daily_rate * unpaid_days + bonuses + allowances + overtime
    """
    rate = daily_rate(base_salary, working_days)

    if unpaid_days < 0:
        raise InvalidInputException(
            f"Unpaid leave days cannot be negative, got {unpaid_days}",
            field="unpaid_leave_days",
        )
    if unpaid_days > working_days:
        raise InvalidInputException(
            f"Unpaid leave days ({unpaid_days}) exceed working days ({working_days})",
            field="unpaid_leave_days",
        )

    unpaid_deduction = rate * unpaid_days

    return (
        validate_amount(base_salary, "base_salary")
        - unpaid_deduction
        + validate_amount(bonuses, "bonuses")
        + validate_amount(allowances, "allowances")
        + validate_amount(overtime, "overtime")
    )


def net_salary(
    gross: Any,
    social_security_deduction: Any,
    tax_deduction: Any,
    other_deductions: Any = ZERO,
) -> Decimal:
    """Gross minus withholdings, floored at zero."""
    net = (
        validate_amount(gross, "gross_salary")
        - validate_amount(social_security_deduction, "social_security_deduction")
        - validate_amount(tax_deduction, "tax_deduction")
        - validate_amount(other_deductions, "other_deductions")
    )
    return max(ZERO, net)
