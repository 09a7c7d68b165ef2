"""
HR Payroll - Payroll Engine

Composes the working-day calculator, the leave aggregator, salary
derivation and the statutory deductions into one computation per
(employee, period).

Two entry points share the same rules table:
- compute(): fresh lookup of the employee and their approved leave
- recompute(): re-derivation from a stored snapshot's own inputs
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Protocol

from app.models.payroll_enums import ContractType, FilingStatus
from app.services.payroll_engine.leave import LeaveAggregator, LeaveStore
from app.services.payroll_engine.lifecycle import (
    PayrollComputation,
    PayrollInputs,
    calculate,
    new_draft,
)
from app.services.payroll_engine.period import PERIOD_PATTERN, Period
from app.services.payroll_engine.rules import PayrollRules, get_rules
from app.utils.error_handling import ValidationException

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = Decimal("365.25")


@dataclass(frozen=True)
class EmployeeRecord:
    """What the engine needs to know about an employee."""
    employee_id: uuid.UUID
    base_salary: Decimal
    hire_date: date
    contract_type: ContractType = ContractType.CDI
    filing_status: FilingStatus = FilingStatus.SINGLE

    def years_of_service(self, as_of: date) -> int:
        """Whole years between hire date and `as_of` (0 before hiring)."""
        if as_of <= self.hire_date:
            return 0
        return int(Decimal((as_of - self.hire_date).days) / DAYS_PER_YEAR)


class EmployeeDirectory(Protocol):
    """Read side of the employee store."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeRecord:
        """Raise EmployeeNotFoundException when the employee does not exist."""
        ...


@dataclass(frozen=True)
class PayrollAdjustments:
    """Optional per-period amounts supplied with a calculation request."""
    bonuses: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    overtime: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")


class PayrollEngine:
    """
    Stateless calculation facade.

    Serializing concurrent calculations of the same (employee, period) is
    the caller's job; the engine holds no state between calls.
    """

    def __init__(
        self,
        directory: EmployeeDirectory,
        leave_store: LeaveStore,
        rules: Optional[PayrollRules] = None,
    ):
        self.directory = directory
        self.leave_aggregator = LeaveAggregator(leave_store)
        self.rules = rules or get_rules()

    async def compute(
        self,
        employee_id: uuid.UUID,
        period: Period,
        now: datetime,
        adjustments: Optional[PayrollAdjustments] = None,
        existing: Optional[PayrollComputation] = None,
    ) -> PayrollComputation:
        """
        Full calculation from a fresh employee and leave lookup.

        When `existing` is given it is re-derived in place of a new draft,
        so the lifecycle guard of calculate() applies to it.
        """
        adjustments = adjustments or PayrollAdjustments()
        employee = await self.directory.get_employee(employee_id)

        inputs = PayrollInputs(
            base_salary=employee.base_salary,
            working_days=period.working_days,
            bonuses=adjustments.bonuses,
            allowances=adjustments.allowances,
            overtime=adjustments.overtime,
            other_deductions=adjustments.other_deductions,
            filing_status=employee.filing_status,
        )

        snapshot = new_draft(employee_id, period, inputs)
        if existing is not None:
            snapshot = replace(existing, inputs=inputs, rules_version=self.rules.version)

        leave = await self.leave_aggregator.leave_totals(employee_id, period)
        result = calculate(snapshot, leave, now, self.rules)

        logger.info(
            f"Payroll calculated for employee {employee_id} period {period}: "
            f"gross={result.figures.gross_salary:.2f} net={result.figures.net_salary:.2f} "
            f"(rules {result.rules_version})"
        )
        return result

    def recompute(self, snapshot: PayrollComputation, now: datetime) -> PayrollComputation:
        """Re-derive a stored snapshot from its own inputs and leave days."""
        result = calculate(snapshot, snapshot.leave, now, self.rules)
        logger.info(f"Payroll recomputed for employee {snapshot.employee_id} period {snapshot.period}")
        return result


def validate_payroll_data(data: Mapping[str, Any]) -> List[str]:
    """
    Pre-flight checks on a payroll payload submitted for import or review.
    Stricter than calculate(): a zero base salary is flagged here but is a
    valid calculation input.

    Returns the list of problems found (empty when the payload is valid).
    """
    errors: List[str] = []

    if not data.get("employee_id"):
        errors.append("Employee ID is required")

    period = data.get("period")
    if isinstance(period, Period):
        period = str(period)
    if not period or not isinstance(period, str) or not PERIOD_PATTERN.fullmatch(period):
        errors.append("Valid period (YYYY-MM) is required")
    else:
        month = int(period[5:7])
        if not 1 <= month <= 12:
            errors.append("Valid period (YYYY-MM) is required")

    try:
        salary_ok = Decimal(str(data.get("base_salary") or 0)) > 0
    except InvalidOperation:
        salary_ok = False
    if not salary_ok:
        errors.append("Base salary must be greater than 0")

    working_days = data.get("working_days")
    if not working_days or working_days <= 0:
        errors.append("Working days must be greater than 0")

    actual_working_days = data.get("actual_working_days")
    if actual_working_days is not None and actual_working_days < 0:
        errors.append("Actual working days cannot be negative")

    return errors


def ensure_valid_payroll_data(data: Mapping[str, Any]) -> None:
    """Raise ValidationException listing every problem found by validate_payroll_data."""
    errors = validate_payroll_data(data)
    if errors:
        details: Dict[str, Any] = {"errors": errors}
        raise ValidationException("; ".join(errors), details=details)
