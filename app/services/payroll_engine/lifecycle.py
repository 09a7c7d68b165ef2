"""
HR Payroll - Payroll Aggregate and Lifecycle

A PayrollComputation is an immutable snapshot of one employee's payroll for
one period. Every transition returns a new snapshot; nothing is mutated in
place.

Lifecycle states carry their own timestamps:
- Draft: inputs only, no derived figures
- Calculated: derived figures plus calculated_at
- Validated: adds validated_at and validated_by
- Paid: adds paid_at (terminal)

Only Calculated exposes validate() and only Validated exposes mark_paid(),
so a Draft cannot be turned straight into a Paid state.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional, Union

from app.models.payroll_enums import FilingStatus, PayrollStatus
from app.services.payroll_engine.deductions import (
    employer_contribution,
    income_tax,
    social_contribution,
)
from app.services.payroll_engine.leave import LeaveTotals
from app.services.payroll_engine.period import Period
from app.services.payroll_engine.rules import PayrollRules, get_rules
from app.services.payroll_engine.salary import ZERO, gross_salary, net_salary
from app.utils.error_handling import (
    InvalidInputException,
    InvalidStateTransitionException,
    validate_amount,
)


MAX_WORKING_DAYS = 31


# ===========================================
# LIFECYCLE STATES
# ===========================================

@dataclass(frozen=True)
class Draft:
    status: ClassVar[PayrollStatus] = PayrollStatus.DRAFT


@dataclass(frozen=True)
class Calculated:
    calculated_at: datetime
    status: ClassVar[PayrollStatus] = PayrollStatus.CALCULATED

    def validate(self, validator_id: uuid.UUID, now: datetime) -> "Validated":
        return Validated(
            calculated_at=self.calculated_at,
            validated_at=now,
            validated_by=validator_id,
        )


@dataclass(frozen=True)
class Validated:
    calculated_at: datetime
    validated_at: datetime
    validated_by: uuid.UUID
    status: ClassVar[PayrollStatus] = PayrollStatus.VALIDATED

    def mark_paid(self, now: datetime) -> "Paid":
        return Paid(
            calculated_at=self.calculated_at,
            validated_at=self.validated_at,
            validated_by=self.validated_by,
            paid_at=now,
        )


@dataclass(frozen=True)
class Paid:
    calculated_at: datetime
    validated_at: datetime
    validated_by: uuid.UUID
    paid_at: datetime
    status: ClassVar[PayrollStatus] = PayrollStatus.PAID


PayrollState = Union[Draft, Calculated, Validated, Paid]

EDITABLE_STATES = (Draft, Calculated)


def state_from_fields(
    status: PayrollStatus,
    calculated_at: Optional[datetime] = None,
    validated_at: Optional[datetime] = None,
    validated_by: Optional[uuid.UUID] = None,
    paid_at: Optional[datetime] = None,
) -> PayrollState:
    """Rebuild a tagged state from flat (persisted) columns."""
    status = PayrollStatus(status)
    if status == PayrollStatus.DRAFT:
        return Draft()
    if status == PayrollStatus.CALCULATED:
        return Calculated(calculated_at=calculated_at)
    if status == PayrollStatus.VALIDATED:
        return Validated(
            calculated_at=calculated_at,
            validated_at=validated_at,
            validated_by=validated_by,
        )
    return Paid(
        calculated_at=calculated_at,
        validated_at=validated_at,
        validated_by=validated_by,
        paid_at=paid_at,
    )


# ===========================================
# SNAPSHOT
# ===========================================

@dataclass(frozen=True)
class PayrollInputs:
    """Caller-supplied inputs of a payroll computation."""
    base_salary: Decimal
    working_days: int
    bonuses: Decimal = ZERO
    allowances: Decimal = ZERO
    overtime: Decimal = ZERO
    other_deductions: Decimal = ZERO
    filing_status: FilingStatus = FilingStatus.SINGLE

    def __post_init__(self):
        for name in ("base_salary", "bonuses", "allowances", "overtime", "other_deductions"):
            object.__setattr__(self, name, validate_amount(getattr(self, name), field=name))
        if not isinstance(self.working_days, int) or not 1 <= self.working_days <= MAX_WORKING_DAYS:
            raise InvalidInputException(
                f"Working days must be between 1 and {MAX_WORKING_DAYS}, got {self.working_days}",
                field="working_days",
            )


@dataclass(frozen=True)
class PayrollFigures:
    """Fields derived by calculate(). Full precision, unrounded."""
    paid_leave_days: int
    unpaid_leave_days: int
    sick_leave_days: int
    actual_working_days: int
    gross_salary: Decimal
    social_security_deduction: Decimal
    tax_deduction: Decimal
    net_salary: Decimal
    employer_contribution: Decimal


@dataclass(frozen=True)
class PayrollComputation:
    employee_id: uuid.UUID
    period: Period
    inputs: PayrollInputs
    leave: LeaveTotals = field(default_factory=LeaveTotals)
    figures: Optional[PayrollFigures] = None
    state: PayrollState = field(default_factory=Draft)
    rules_version: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.state, Draft) != (self.figures is None):
            raise ValueError("Derived figures are present exactly when the payroll is not a draft")

    @property
    def status(self) -> PayrollStatus:
        return self.state.status

    def is_editable(self) -> bool:
        return isinstance(self.state, EDITABLE_STATES)

    def _figure(self, name: str) -> Optional[Decimal]:
        return getattr(self.figures, name) if self.figures is not None else None

    @property
    def gross_salary(self) -> Optional[Decimal]:
        return self._figure("gross_salary")

    @property
    def net_salary(self) -> Optional[Decimal]:
        return self._figure("net_salary")

    @property
    def tax_deduction(self) -> Optional[Decimal]:
        return self._figure("tax_deduction")

    @property
    def social_security_deduction(self) -> Optional[Decimal]:
        return self._figure("social_security_deduction")

    def calculate(
        self,
        leave: LeaveTotals,
        now: datetime,
        rules: Optional[PayrollRules] = None,
    ) -> "PayrollComputation":
        return calculate(self, leave, now, rules)

    def validate(self, validator_id: uuid.UUID, now: datetime) -> "PayrollComputation":
        return validate(self, validator_id, now)

    def mark_paid(self, now: datetime) -> "PayrollComputation":
        return mark_paid(self, now)


def new_draft(
    employee_id: uuid.UUID,
    period: Period,
    inputs: PayrollInputs,
) -> PayrollComputation:
    return PayrollComputation(employee_id=employee_id, period=period, inputs=inputs)


# ===========================================
# TRANSITIONS
# ===========================================

def derive_figures(
    inputs: PayrollInputs,
    leave: LeaveTotals,
    rules: PayrollRules,
) -> PayrollFigures:
    """
    Run the derivation pipeline: attendance, gross, contributions, tax, net.
    """
    actual_working_days = inputs.working_days - leave.total_days
    if actual_working_days < 0:
        raise InvalidInputException(
            f"Leave days ({leave.total_days}) exceed working days ({inputs.working_days})",
            field="actual_working_days",
            details={
                "paid_leave_days": leave.paid_days,
                "unpaid_leave_days": leave.unpaid_days,
                "sick_leave_days": leave.sick_days,
            },
        )

    gross = gross_salary(
        inputs.base_salary,
        inputs.working_days,
        leave.unpaid_days,
        bonuses=inputs.bonuses,
        allowances=inputs.allowances,
        overtime=inputs.overtime,
    )
    social = social_contribution(gross, rules)
    tax = income_tax(gross, inputs.filing_status, rules)

    return PayrollFigures(
        paid_leave_days=leave.paid_days,
        unpaid_leave_days=leave.unpaid_days,
        sick_leave_days=leave.sick_days,
        actual_working_days=actual_working_days,
        gross_salary=gross,
        social_security_deduction=social,
        tax_deduction=tax,
        net_salary=net_salary(gross, social, tax, inputs.other_deductions),
        employer_contribution=employer_contribution(gross, rules),
    )


def calculate(
    snapshot: PayrollComputation,
    leave: LeaveTotals,
    now: datetime,
    rules: Optional[PayrollRules] = None,
) -> PayrollComputation:
    """
    Derive every figure and move the snapshot to Calculated.

    Allowed from Draft and Calculated. Re-deriving a Calculated snapshot
    overwrites its figures; validated and paid payrolls are frozen.
    """
    if not snapshot.is_editable():
        raise InvalidStateTransitionException(
            f"Cannot recalculate a {snapshot.status.value} payroll",
            current_status=snapshot.status.value,
            requested=PayrollStatus.CALCULATED.value,
        )

    rules = rules or get_rules(snapshot.rules_version)
    figures = derive_figures(snapshot.inputs, leave, rules)

    return replace(
        snapshot,
        leave=leave,
        figures=figures,
        state=Calculated(calculated_at=now),
        rules_version=rules.version,
    )


def validate(snapshot: PayrollComputation, validator_id: uuid.UUID, now: datetime) -> PayrollComputation:
    if not isinstance(snapshot.state, Calculated):
        raise InvalidStateTransitionException(
            "Payroll must be calculated before validation",
            current_status=snapshot.status.value,
            requested=PayrollStatus.VALIDATED.value,
        )
    return replace(snapshot, state=snapshot.state.validate(validator_id, now))


def mark_paid(snapshot: PayrollComputation, now: datetime) -> PayrollComputation:
    if not isinstance(snapshot.state, Validated):
        raise InvalidStateTransitionException(
            "Payroll must be validated before marking as paid",
            current_status=snapshot.status.value,
            requested=PayrollStatus.PAID.value,
        )
    return replace(snapshot, state=snapshot.state.mark_paid(now))
