"""
HR Payroll - Payroll Engine Package

Pure calculation core of the payroll module.

Modules:
- working_days: Mon-Fri day counting (no public holidays)
- period: YYYY-MM payroll period
- rules: versioned rate and tax bracket tables
- leave: approved leave aggregation per bucket
- salary: gross and net salary formulas
- deductions: social contributions and progressive income tax
- lifecycle: immutable payroll snapshot and its draft/calculated/validated/paid states
- ytd: year-to-date totals
- engine: composition of the above per (employee, period)
"""

from decimal import ROUND_HALF_UP, Decimal

from app.services.payroll_engine.deductions import (
    employer_contribution,
    income_tax,
    income_tax_breakdown,
    social_contribution,
)
from app.services.payroll_engine.engine import (
    EmployeeDirectory,
    EmployeeRecord,
    PayrollAdjustments,
    PayrollEngine,
    ensure_valid_payroll_data,
    validate_payroll_data,
)
from app.services.payroll_engine.leave import (
    LeaveAggregator,
    LeaveCategory,
    LeaveInterval,
    LeaveStore,
    LeaveTotals,
    aggregate_leave,
    category_for,
)
from app.services.payroll_engine.lifecycle import (
    Calculated,
    Draft,
    Paid,
    PayrollComputation,
    PayrollFigures,
    PayrollInputs,
    PayrollState,
    Validated,
    calculate,
    mark_paid,
    new_draft,
    state_from_fields,
    validate,
)
from app.services.payroll_engine.period import Period
from app.services.payroll_engine.rules import PayrollRules, TaxBracket, get_rules, register_rules
from app.services.payroll_engine.salary import daily_rate, gross_salary, net_salary
from app.services.payroll_engine.working_days import working_days_between, working_days_in_month
from app.services.payroll_engine.ytd import YearToDateTotals, year_to_date


CENT = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Round to cents. Presentation only; never feed the result back into a derivation."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, currency: str = "EUR") -> str:
    """Format an amount for display, e.g. '2,727.27 EUR'."""
    return f"{round_money(amount):,.2f} {currency}"


__all__ = [
    # Calendar
    "working_days_between",
    "working_days_in_month",
    "Period",
    # Rules
    "PayrollRules",
    "TaxBracket",
    "get_rules",
    "register_rules",
    # Leave
    "LeaveAggregator",
    "LeaveCategory",
    "LeaveInterval",
    "LeaveStore",
    "LeaveTotals",
    "aggregate_leave",
    "category_for",
    # Salary and deductions
    "daily_rate",
    "gross_salary",
    "net_salary",
    "social_contribution",
    "employer_contribution",
    "income_tax",
    "income_tax_breakdown",
    # Lifecycle
    "Draft",
    "Calculated",
    "Validated",
    "Paid",
    "PayrollState",
    "PayrollComputation",
    "PayrollFigures",
    "PayrollInputs",
    "calculate",
    "validate",
    "mark_paid",
    "new_draft",
    "state_from_fields",
    # Engine
    "EmployeeDirectory",
    "EmployeeRecord",
    "PayrollAdjustments",
    "PayrollEngine",
    "validate_payroll_data",
    "ensure_valid_payroll_data",
    # Reporting
    "YearToDateTotals",
    "year_to_date",
    "round_money",
    "format_currency",
]
