"""
HR Payroll - Payroll Lifecycle Tests

draft -> calculated -> validated -> paid, with recalculation allowed only
while the payroll is still a draft or calculated.
"""

import dataclasses
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.models.payroll_enums import FilingStatus, PayrollStatus
from app.services.payroll_engine import (
    Calculated,
    Draft,
    LeaveTotals,
    Paid,
    PayrollComputation,
    PayrollInputs,
    Period,
    Validated,
    new_draft,
    round_money,
    state_from_fields,
)
from app.utils.error_handling import (
    ErrorCode,
    InvalidInputException,
    InvalidStateTransitionException,
)


NOW = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)
VALIDATOR = uuid.UUID("00000000-0000-0000-0000-0000000000aa")


@pytest.fixture
def draft() -> PayrollComputation:
    inputs = PayrollInputs(base_salary=Decimal("3000"), working_days=22)
    return new_draft(uuid.uuid4(), Period(2024, 4), inputs)


@pytest.fixture
def leave() -> LeaveTotals:
    return LeaveTotals(paid_days=1, unpaid_days=2, sick_days=1)


class TestPayrollInputs:

    @pytest.mark.parametrize("working_days", [0, -1, 32])
    def test_working_days_out_of_range(self, working_days):
        with pytest.raises(InvalidInputException):
            PayrollInputs(base_salary=Decimal("3000"), working_days=working_days)

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidInputException):
            PayrollInputs(base_salary=Decimal("3000"), working_days=22, bonuses=Decimal("-5"))

    def test_amounts_coerced_to_decimal(self):
        inputs = PayrollInputs(base_salary="3000.50", working_days=22)
        assert inputs.base_salary == Decimal("3000.50")


class TestCalculate:

    def test_draft_has_no_figures(self, draft):
        assert draft.status == PayrollStatus.DRAFT
        assert draft.figures is None
        assert draft.gross_salary is None
        assert draft.is_editable()

    def test_calculated_figures(self, draft, leave):
        result = draft.calculate(leave, NOW)

        assert result.status == PayrollStatus.CALCULATED
        assert result.state.calculated_at == NOW
        assert result.rules_version == "2024.1"
        assert round_money(result.gross_salary) == Decimal("2727.27")
        assert round_money(result.social_security_deduction) == Decimal("627.27")
        assert round_money(result.tax_deduction) == Decimal("202.51")
        assert round_money(result.net_salary) == Decimal("1897.49")
        assert round_money(result.figures.employer_contribution) == Decimal("1157.73")

    def test_leave_days_add_up_to_working_days(self, draft, leave):
        figures = draft.calculate(leave, NOW).figures

        assert (
            figures.actual_working_days
            + figures.paid_leave_days
            + figures.unpaid_leave_days
            + figures.sick_leave_days
        ) == draft.inputs.working_days
        assert figures.actual_working_days == 18

    def test_net_is_gross_less_deductions(self, draft, leave):
        result = draft.calculate(leave, NOW)
        assert result.net_salary == (
            result.gross_salary - result.social_security_deduction - result.tax_deduction
        )

    def test_only_unpaid_leave_reduces_gross(self, draft):
        paid_only = draft.calculate(LeaveTotals(paid_days=5, sick_days=3), NOW)
        assert paid_only.gross_salary == Decimal("3000")

    def test_recalculation_is_idempotent(self, draft, leave):
        first = draft.calculate(leave, NOW)
        second = first.calculate(leave, NOW + timedelta(hours=1))

        assert second.figures == first.figures
        assert second.state.calculated_at == NOW + timedelta(hours=1)

    def test_joint_filer(self, leave):
        inputs = PayrollInputs(
            base_salary=Decimal("3000"), working_days=22, filing_status=FilingStatus.JOINT,
        )
        result = new_draft(uuid.uuid4(), Period(2024, 4), inputs).calculate(leave, NOW)
        assert round_money(result.tax_deduction) == Decimal("162.00")

    def test_leave_exceeding_working_days(self, draft):
        with pytest.raises(InvalidInputException) as exc_info:
            draft.calculate(LeaveTotals(paid_days=20, sick_days=3), NOW)
        assert exc_info.value.field == "actual_working_days"

    def test_input_snapshot_is_untouched(self, draft, leave):
        draft.calculate(leave, NOW)
        assert draft.status == PayrollStatus.DRAFT
        assert draft.figures is None

    def test_snapshot_is_frozen(self, draft):
        with pytest.raises(dataclasses.FrozenInstanceError):
            draft.rules_version = "2025.1"


class TestTransitions:

    def test_full_path_to_paid(self, draft, leave):
        calculated = draft.calculate(leave, NOW)
        validated = calculated.validate(VALIDATOR, NOW + timedelta(days=1))
        paid = validated.mark_paid(NOW + timedelta(days=2))

        assert isinstance(validated.state, Validated)
        assert validated.state.validated_by == VALIDATOR
        assert isinstance(paid.state, Paid)
        assert paid.state.calculated_at == NOW
        assert paid.state.paid_at == NOW + timedelta(days=2)
        assert paid.figures == calculated.figures

    def test_validate_requires_calculation(self, draft):
        with pytest.raises(InvalidStateTransitionException) as exc_info:
            draft.validate(VALIDATOR, NOW)

        exc = exc_info.value
        assert exc.code == ErrorCode.INVALID_STATE_TRANSITION
        assert exc.message == "Payroll must be calculated before validation"
        assert exc.details["current_status"] == "draft"
        assert exc.details["requested_transition"] == "validated"

    def test_mark_paid_requires_validation(self, draft, leave):
        with pytest.raises(InvalidStateTransitionException) as exc_info:
            draft.calculate(leave, NOW).mark_paid(NOW)
        assert exc_info.value.message == "Payroll must be validated before marking as paid"

    def test_cannot_validate_twice(self, draft, leave):
        validated = draft.calculate(leave, NOW).validate(VALIDATOR, NOW)
        with pytest.raises(InvalidStateTransitionException):
            validated.validate(VALIDATOR, NOW)

    def test_validated_payroll_is_frozen(self, draft, leave):
        validated = draft.calculate(leave, NOW).validate(VALIDATOR, NOW)

        assert not validated.is_editable()
        with pytest.raises(InvalidStateTransitionException):
            validated.calculate(leave, NOW)

    def test_paid_is_terminal(self, draft, leave):
        paid = draft.calculate(leave, NOW).validate(VALIDATOR, NOW).mark_paid(NOW)

        with pytest.raises(InvalidStateTransitionException):
            paid.calculate(leave, NOW)
        with pytest.raises(InvalidStateTransitionException):
            paid.mark_paid(NOW)

    def test_states_only_expose_next_step(self):
        assert not hasattr(Draft(), "validate")
        assert not hasattr(Draft(), "mark_paid")
        assert not hasattr(Calculated(calculated_at=NOW), "mark_paid")

    def test_figures_must_match_state(self, draft, leave):
        figures = draft.calculate(leave, NOW).figures

        with pytest.raises(ValueError):
            dataclasses.replace(draft, figures=figures)
        with pytest.raises(ValueError):
            dataclasses.replace(draft, state=Calculated(calculated_at=NOW))


class TestStateFromFields:

    def test_rebuilds_each_state(self):
        assert isinstance(state_from_fields(PayrollStatus.DRAFT), Draft)
        assert state_from_fields("calculated", calculated_at=NOW) == Calculated(calculated_at=NOW)

        paid = state_from_fields(
            PayrollStatus.PAID,
            calculated_at=NOW,
            validated_at=NOW,
            validated_by=VALIDATOR,
            paid_at=NOW,
        )
        assert isinstance(paid, Paid)
        assert paid.validated_by == VALIDATOR

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            state_from_fields("archived")
