"""
HR Payroll - Leave Aggregator

Turns approved leave intervals into per-category working-day totals for
one payroll period.

Category buckets:
- paid_leave, parental_paid -> paid days
- sick -> sick days
- unpaid -> unpaid days (the only bucket that reduces gross salary)
- other / unrecognised -> paid days
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol, Sequence

from app.models.payroll_enums import LeaveType
from app.services.payroll_engine.period import Period
from app.services.payroll_engine.working_days import working_days_between
from app.utils.error_handling import InvalidDateRangeException

if TYPE_CHECKING:
    from app.services.payroll_engine.engine import EmployeeDirectory

logger = logging.getLogger(__name__)


class LeaveCategory(str, Enum):
    """How an approved leave interval is treated for payroll."""
    PAID_LEAVE = "paid_leave"
    SICK = "sick"
    UNPAID = "unpaid"
    PARENTAL_PAID = "parental_paid"
    OTHER = "other"


LEAVE_TYPE_CATEGORIES = {
    LeaveType.PAID_LEAVE: LeaveCategory.PAID_LEAVE,
    LeaveType.RTT: LeaveCategory.PAID_LEAVE,
    LeaveType.SICK: LeaveCategory.SICK,
    # Covered by social security, not deducted from salary
    LeaveType.MATERNITY: LeaveCategory.PARENTAL_PAID,
    LeaveType.PATERNITY: LeaveCategory.PARENTAL_PAID,
    LeaveType.UNPAID: LeaveCategory.UNPAID,
    LeaveType.TRAINING: LeaveCategory.OTHER,
    LeaveType.EXCEPTIONAL: LeaveCategory.OTHER,
}


def category_for(leave_type: LeaveType) -> LeaveCategory:
    """Map a leave request type onto its payroll category."""
    return LEAVE_TYPE_CATEGORIES.get(leave_type, LeaveCategory.OTHER)


@dataclass(frozen=True)
class LeaveInterval:
    """One approved leave request, borrowed read-only from the leave store."""
    start_date: date
    end_date: date
    category: LeaveCategory

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise InvalidDateRangeException(str(self.start_date), str(self.end_date))

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and self.end_date >= start

    def clipped_working_days(self, start: date, end: date) -> int:
        """Working days of this interval that fall inside [start, end]."""
        return working_days_between(max(self.start_date, start), min(self.end_date, end))


@dataclass(frozen=True)
class LeaveTotals:
    """Working days of leave per payroll bucket."""
    paid_days: int = 0
    unpaid_days: int = 0
    sick_days: int = 0

    @property
    def total_days(self) -> int:
        return self.paid_days + self.unpaid_days + self.sick_days


class LeaveStore(Protocol):
    """Read side of the leave request store."""

    async def get_approved_leave(
        self,
        employee_id: uuid.UUID,
        period_start: date,
        period_end: date,
    ) -> Sequence[LeaveInterval]:
        ...


def aggregate_leave(intervals: Iterable[LeaveInterval], period: Period) -> LeaveTotals:
    """
    Sum working days of leave per bucket for one period.

    Intervals are clipped to the period boundaries; intervals outside the
    period contribute nothing. Identical intervals are each counted.
    """
    period_start, period_end = period.bounds
    paid = unpaid = sick = 0

    for interval in intervals:
        if not interval.overlaps(period_start, period_end):
            continue

        days = interval.clipped_working_days(period_start, period_end)

        if interval.category in (LeaveCategory.PAID_LEAVE, LeaveCategory.PARENTAL_PAID):
            paid += days
        elif interval.category == LeaveCategory.SICK:
            sick += days
        elif interval.category == LeaveCategory.UNPAID:
            unpaid += days
        else:
            # Default bucket: anything not explicitly unpaid or sick is paid
            paid += days

    return LeaveTotals(paid_days=paid, unpaid_days=unpaid, sick_days=sick)


class LeaveAggregator:
    """
    Fetches an employee's approved leave for a period and totals it.

    When an employee directory is supplied the employee is looked up first,
    so an unknown employee fails with a not-found error instead of an empty
    total.
    """

    def __init__(self, leave_store: LeaveStore, directory: Optional["EmployeeDirectory"] = None):
        self.leave_store = leave_store
        self.directory = directory

    async def leave_totals(self, employee_id: uuid.UUID, period: Period) -> LeaveTotals:
        if self.directory is not None:
            await self.directory.get_employee(employee_id)

        period_start, period_end = period.bounds
        intervals: List[LeaveInterval] = list(
            await self.leave_store.get_approved_leave(employee_id, period_start, period_end)
        )
        totals = aggregate_leave(intervals, period)
        logger.debug(
            f"Leave totals for employee {employee_id} in {period}: "
            f"paid={totals.paid_days} unpaid={totals.unpaid_days} sick={totals.sick_days} "
            f"({len(intervals)} intervals)"
        )
        return totals
