"""
HR Payroll - Statutory Rules

Versioned rate tables consumed by the deduction calculators.

Income Tax Brackets (annual taxable income, version 2024.1):
- €0 - €10,777: 0%
- €10,777 - €27,478: 11%
- €27,478 - €78,570: 30%
- €78,570 - €168,994: 41%
- Above €168,994: 45%

Social contributions:
- Employee: 23% of gross (withheld from pay)
- Employer: 42.45% of gross (reported, never withheld)

Standard deduction: 10% of annual gross before brackets apply.
Joint filers: computed tax multiplied by 0.8.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from app.config import settings
from app.utils.error_handling import AppException, ErrorCode


@dataclass(frozen=True)
class TaxBracket:
    """Marginal tax bracket. Rate is a percentage."""
    lower: Decimal
    upper: Optional[Decimal]
    rate: Decimal

    def tax_for(self, taxable_income: Decimal) -> Decimal:
        """Tax on the slice of income that falls inside this bracket."""
        if taxable_income <= self.lower:
            return Decimal("0")

        if self.upper is None:
            # Top bracket (no upper limit)
            taxable_in_bracket = taxable_income - self.lower
        else:
            taxable_in_bracket = min(taxable_income, self.upper) - self.lower

        if taxable_in_bracket <= 0:
            return Decimal("0")

        return taxable_in_bracket * (self.rate / 100)


@dataclass(frozen=True)
class PayrollRules:
    """
    Every rate the payroll engine applies, grouped under one version.

    Changing a rate means registering a new version, not editing
    derivation code.
    """
    version: str
    tax_brackets: Tuple[TaxBracket, ...]
    employee_social_rate: Decimal = Decimal("23")
    employer_social_rate: Decimal = Decimal("42.45")
    standard_deduction_rate: Decimal = Decimal("10")
    joint_filer_factor: Decimal = Decimal("0.8")
    months_per_year: int = 12
    currency: str = "EUR"
    notes: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        previous_upper = Decimal("0")
        for index, bracket in enumerate(self.tax_brackets):
            if bracket.lower != previous_upper:
                raise ValueError(
                    f"Tax bracket {index} of rules {self.version} starts at {bracket.lower}, "
                    f"expected {previous_upper}"
                )
            if bracket.upper is None and index != len(self.tax_brackets) - 1:
                raise ValueError(f"Only the last bracket of rules {self.version} may be open-ended")
            previous_upper = bracket.upper


FRANCE_2024_TAX_BRACKETS = (
    TaxBracket(Decimal("0"), Decimal("10777"), Decimal("0")),
    TaxBracket(Decimal("10777"), Decimal("27478"), Decimal("11")),
    TaxBracket(Decimal("27478"), Decimal("78570"), Decimal("30")),
    TaxBracket(Decimal("78570"), Decimal("168994"), Decimal("41")),
    TaxBracket(Decimal("168994"), None, Decimal("45")),
)

RULES_2024 = PayrollRules(
    version="2024.1",
    tax_brackets=FRANCE_2024_TAX_BRACKETS,
    notes={"source": "Simplified French income tax scale 2024"},
)

DEFAULT_RULES_VERSION = RULES_2024.version

_REGISTRY: Dict[str, PayrollRules] = {RULES_2024.version: RULES_2024}


def register_rules(rules: PayrollRules) -> None:
    """Register a new rules version."""
    if rules.version in _REGISTRY and _REGISTRY[rules.version] != rules:
        raise ValueError(f"Payroll rules version {rules.version} is already registered")
    _REGISTRY[rules.version] = rules


def get_rules(version: Optional[str] = None) -> PayrollRules:
    """Look up a registered rules version (defaults to the configured one)."""
    key = version or settings.payroll_rules_version or DEFAULT_RULES_VERSION
    try:
        return _REGISTRY[key]
    except KeyError:
        raise AppException(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=f"Unknown payroll rules version: {key}",
            details={"available_versions": available_versions()},
        )


def available_versions() -> List[str]:
    return sorted(_REGISTRY)
