"""
HR Payroll - Year-to-Date Summarizer

Sums already-computed payroll figures. No figure is re-derived here.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Union

from app.services.payroll_engine.period import Period
from app.utils.error_handling import InvalidInputException


class PayrollFiguresRecord(Protocol):
    """Anything exposing a period and the four summed amounts (ORM rows and snapshots)."""
    period: Union[str, Period]
    gross_salary: Optional[Decimal]
    net_salary: Optional[Decimal]
    tax_deduction: Optional[Decimal]
    social_security_deduction: Optional[Decimal]


@dataclass(frozen=True)
class YearToDateTotals:
    year: int
    through_month: int
    gross_total: Decimal = Decimal("0")
    net_total: Decimal = Decimal("0")
    tax_total: Decimal = Decimal("0")
    social_total: Decimal = Decimal("0")
    payroll_count: int = 0


def year_to_date(
    records: Iterable[PayrollFiguresRecord],
    year: int,
    through_month: int,
) -> YearToDateTotals:
    """
    Sum gross, net, tax and social figures of the records whose period falls
    in `year` at or before `through_month`. Records without figures (drafts)
    contribute zero.
    """
    if not 1 <= through_month <= 12:
        raise InvalidInputException(
            f"through_month must be between 1 and 12, got {through_month}",
            field="through_month",
        )

    gross = net = tax = social = Decimal("0")
    count = 0

    for record in records:
        period = record.period if isinstance(record.period, Period) else Period.parse(record.period)
        if period.year != year or period.month > through_month:
            continue

        gross += record.gross_salary or 0
        net += record.net_salary or 0
        tax += record.tax_deduction or 0
        social += record.social_security_deduction or 0
        count += 1

    return YearToDateTotals(
        year=year,
        through_month=through_month,
        gross_total=gross,
        net_total=net,
        tax_total=tax,
        social_total=social,
        payroll_count=count,
    )
