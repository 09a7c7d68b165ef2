"""
HR Payroll - Statutory Deduction Calculator

Social contributions and progressive income tax, both computed from the
monthly gross salary using a PayrollRules table.

Income tax steps:
1. Annualize the monthly gross (x12)
2. Apply the standard deduction (10%)
3. Tax each bracket's slice of the taxable income at its marginal rate
4. Joint filers: multiply the annual tax by 0.8
5. Return to a monthly figure (/12), floored at zero
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from app.models.payroll_enums import FilingStatus
from app.services.payroll_engine.rules import PayrollRules, get_rules
from app.utils.error_handling import InvalidInputException, validate_amount


def _gross(value: Any) -> Decimal:
    return validate_amount(value, field="gross_salary")


def _filing_status(value: Union[FilingStatus, str, None]) -> FilingStatus:
    if value is None:
        return FilingStatus.SINGLE
    try:
        return FilingStatus(value)
    except ValueError:
        raise InvalidInputException(f"Unknown filing status: {value}", field="filing_status")


def social_contribution(gross: Any, rules: Optional[PayrollRules] = None) -> Decimal:
    """Employee social contribution withheld from pay (23% of gross)."""
    rules = rules or get_rules()
    return _gross(gross) * (rules.employee_social_rate / 100)


def employer_contribution(gross: Any, rules: Optional[PayrollRules] = None) -> Decimal:
    """Employer-side contribution. Reported only; never deducted from net pay."""
    rules = rules or get_rules()
    return _gross(gross) * (rules.employer_social_rate / 100)


def annual_taxable_income(gross: Any, rules: Optional[PayrollRules] = None) -> Decimal:
    """Annualized gross less the standard deduction."""
    rules = rules or get_rules()
    annual = _gross(gross) * rules.months_per_year
    return annual - annual * (rules.standard_deduction_rate / 100)


def calculate_annual_tax(
    taxable_income: Decimal,
    rules: Optional[PayrollRules] = None,
) -> Tuple[Decimal, List[Dict[str, Any]]]:
    """
    Apply the progressive brackets to an annual taxable income.

    Returns:
        Tuple of (total_tax, bracket_breakdown)
    """
    rules = rules or get_rules()
    total_tax = Decimal("0")
    breakdown = []

    for bracket in rules.tax_brackets:
        tax_in_bracket = bracket.tax_for(taxable_income)

        if tax_in_bracket > 0 or taxable_income > bracket.lower:
            upper = "∞" if bracket.upper is None else f"{bracket.upper:,.0f}"
            breakdown.append({
                "range": f"{bracket.lower:,.0f} - {upper}",
                "rate": f"{bracket.rate}%",
                "tax_amount": tax_in_bracket,
            })

        total_tax += tax_in_bracket

    return total_tax, breakdown


def income_tax(
    gross: Any,
    filing_status: Union[FilingStatus, str, None] = FilingStatus.SINGLE,
    rules: Optional[PayrollRules] = None,
) -> Decimal:
    """Monthly income tax withheld from a monthly gross salary."""
    return income_tax_breakdown(gross, filing_status, rules)["monthly_tax"]


def income_tax_breakdown(
    gross: Any,
    filing_status: Union[FilingStatus, str, None] = FilingStatus.SINGLE,
    rules: Optional[PayrollRules] = None,
) -> Dict[str, Any]:
    """
    Complete income tax calculation with intermediate figures.

    Args:
        gross: Monthly gross salary
        filing_status: single or joint
        rules: Rate tables (defaults to the configured version)

    Returns:
        Dict with annual gross, taxable income, per-bracket tax, annual and
        monthly tax
    """
    rules = rules or get_rules()
    status = _filing_status(filing_status)
    monthly_gross = _gross(gross)

    taxable = annual_taxable_income(monthly_gross, rules)
    annual_tax, brackets = calculate_annual_tax(taxable, rules)

    if status == FilingStatus.JOINT:
        annual_tax = annual_tax * rules.joint_filer_factor

    monthly_tax = max(Decimal("0"), annual_tax / rules.months_per_year)

    return {
        "rules_version": rules.version,
        "filing_status": status.value,
        "annual_gross": monthly_gross * rules.months_per_year,
        "taxable_income": taxable,
        "annual_tax": annual_tax,
        "monthly_tax": monthly_tax,
        "tax_brackets": brackets,
    }
