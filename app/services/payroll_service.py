"""
HR Payroll - Payroll Service

Database side of the payroll module:
- EmployeeRepository: employee directory (create, get, list) and the
  read interface the payroll engine consumes
- LeaveRepository: leave request workflow and the approved-leave read
  interface the payroll engine consumes
- PayrollService: calculate / recalculate / validate / pay payroll rows,
  pay-slip view and year-to-date totals

Writes to one (employee, period) payroll row are serialized with a row lock
(SELECT ... FOR UPDATE) and the row's optimistic `version` counter.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.payroll import (
    Employee, EmployeeStatus, LeaveRequest, LeaveStatus, Payroll, PayrollStatus,
)
from app.services.payroll_engine import (
    EmployeeRecord,
    LeaveInterval,
    LeaveTotals,
    PayrollAdjustments,
    PayrollComputation,
    PayrollEngine,
    PayrollFigures,
    PayrollInputs,
    PayrollRules,
    Period,
    YearToDateTotals,
    category_for,
    format_currency,
    get_rules,
    round_money,
    state_from_fields,
    working_days_between,
    year_to_date,
)
from app.utils.error_handling import (
    DuplicateEntryException,
    EmployeeNotFoundException,
    InvalidDateRangeException,
    InvalidInputException,
    InvalidStateTransitionException,
    LeaveRequestNotFoundException,
    PayrollNotFoundException,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ===========================================
# SNAPSHOT <-> ROW MAPPING
# ===========================================

def snapshot_from_row(row: Payroll) -> PayrollComputation:
    """Rebuild the immutable snapshot stored in a payroll row."""
    status = PayrollStatus(row.status)
    figures = None
    if status != PayrollStatus.DRAFT:
        figures = PayrollFigures(
            paid_leave_days=row.paid_leave_days,
            unpaid_leave_days=row.unpaid_leave_days,
            sick_leave_days=row.sick_leave_days,
            actual_working_days=row.actual_working_days,
            gross_salary=row.gross_salary,
            social_security_deduction=row.social_security_deduction,
            tax_deduction=row.tax_deduction,
            net_salary=row.net_salary,
            employer_contribution=row.employer_contribution,
        )

    return PayrollComputation(
        employee_id=row.employee_id,
        period=Period.parse(row.period),
        inputs=PayrollInputs(
            base_salary=row.base_salary,
            working_days=row.working_days,
            bonuses=row.bonuses,
            allowances=row.allowances,
            overtime=row.overtime,
            other_deductions=row.other_deductions,
            filing_status=row.filing_status,
        ),
        leave=LeaveTotals(
            paid_days=row.paid_leave_days,
            unpaid_days=row.unpaid_leave_days,
            sick_days=row.sick_leave_days,
        ),
        figures=figures,
        state=state_from_fields(
            status,
            calculated_at=row.calculated_at,
            validated_at=row.validated_at,
            validated_by=row.validated_by,
            paid_at=row.paid_at,
        ),
        rules_version=row.rules_version,
    )


def apply_snapshot(row: Payroll, snapshot: PayrollComputation) -> Payroll:
    """Copy every field of a snapshot onto a payroll row."""
    inputs = snapshot.inputs
    row.employee_id = snapshot.employee_id
    row.period = str(snapshot.period)
    row.base_salary = inputs.base_salary
    row.working_days = inputs.working_days
    row.bonuses = inputs.bonuses
    row.allowances = inputs.allowances
    row.overtime = inputs.overtime
    row.other_deductions = inputs.other_deductions
    row.filing_status = inputs.filing_status
    row.rules_version = snapshot.rules_version

    figures = snapshot.figures
    if figures is not None:
        row.paid_leave_days = figures.paid_leave_days
        row.unpaid_leave_days = figures.unpaid_leave_days
        row.sick_leave_days = figures.sick_leave_days
        row.actual_working_days = figures.actual_working_days
        row.gross_salary = figures.gross_salary
        row.social_security_deduction = figures.social_security_deduction
        row.tax_deduction = figures.tax_deduction
        row.net_salary = figures.net_salary
        row.employer_contribution = figures.employer_contribution

    state = snapshot.state
    row.status = state.status
    row.calculated_at = getattr(state, "calculated_at", None)
    row.validated_at = getattr(state, "validated_at", None)
    row.validated_by = getattr(state, "validated_by", None)
    row.paid_at = getattr(state, "paid_at", None)
    return row


# ===========================================
# EMPLOYEE DIRECTORY
# ===========================================

class EmployeeRepository:
    """Employee store. Also serves as the engine's EmployeeDirectory."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: Dict[str, Any]) -> Employee:
        """Create a new employee."""
        existing = await self.db.execute(
            select(Employee).where(
                or_(
                    Employee.employee_number == data["employee_number"],
                    Employee.email == data["email"],
                )
            )
        )
        duplicate = existing.scalars().first()
        if duplicate is not None:
            if duplicate.employee_number == data["employee_number"]:
                raise DuplicateEntryException("Employee", "employee_number", data["employee_number"])
            raise DuplicateEntryException("Employee", "email", data["email"])

        employee = Employee(**data)
        self.db.add(employee)
        await self.db.commit()
        await self.db.refresh(employee)

        logger.info(f"Employee {employee.employee_number} created ({employee.id})")
        return employee

    async def get(self, employee_id: uuid.UUID) -> Employee:
        """Get employee by ID or raise EmployeeNotFoundException."""
        employee = await self.db.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundException(employee_id)
        return employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeRecord:
        employee = await self.get(employee_id)
        return EmployeeRecord(
            employee_id=employee.id,
            base_salary=employee.base_salary,
            hire_date=employee.hire_date,
            contract_type=employee.contract_type,
            filing_status=employee.filing_status,
        )

    async def list_employees(
        self,
        status: Optional[EmployeeStatus] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[List[Employee], int]:
        """List employees with filters and pagination."""
        query = select(Employee)

        if status:
            query = query.where(Employee.status == status)

        if department:
            query = query.where(Employee.department == department)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Employee.first_name.ilike(search_term),
                    Employee.last_name.ilike(search_term),
                    Employee.email.ilike(search_term),
                    Employee.employee_number.ilike(search_term),
                )
            )

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar() or 0

        query = query.order_by(Employee.last_name, Employee.first_name)
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total


# ===========================================
# LEAVE REQUESTS
# ===========================================

class LeaveRepository:
    """Leave request workflow. Also serves as the engine's LeaveStore."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_approved_leave(
        self,
        employee_id: uuid.UUID,
        period_start: date,
        period_end: date,
    ) -> List[LeaveInterval]:
        """Approved requests overlapping [period_start, period_end]."""
        result = await self.db.execute(
            select(LeaveRequest).where(
                and_(
                    LeaveRequest.employee_id == employee_id,
                    LeaveRequest.status == LeaveStatus.APPROVED,
                    LeaveRequest.start_date <= period_end,
                    LeaveRequest.end_date >= period_start,
                )
            )
            .order_by(LeaveRequest.start_date)
        )
        return [
            LeaveInterval(
                start_date=request.start_date,
                end_date=request.end_date,
                category=category_for(request.leave_type),
            )
            for request in result.scalars().all()
        ]

    async def submit(self, employee_id: uuid.UUID, data: Dict[str, Any]) -> LeaveRequest:
        """Create a pending leave request."""
        start_date, end_date = data["start_date"], data["end_date"]
        if end_date < start_date:
            raise InvalidDateRangeException(str(start_date), str(end_date))

        number_of_days = working_days_between(start_date, end_date)
        if number_of_days < 1:
            raise InvalidInputException(
                "Leave request must cover at least one working day",
                field="end_date",
                details={"start_date": str(start_date), "end_date": str(end_date)},
            )

        request = LeaveRequest(
            employee_id=employee_id,
            number_of_days=number_of_days,
            status=LeaveStatus.PENDING,
            **data,
        )
        self.db.add(request)
        await self.db.commit()
        await self.db.refresh(request)

        logger.info(
            f"Leave request {request.id} submitted for employee {employee_id}: "
            f"{request.leave_type.value} {start_date} - {end_date} ({number_of_days} days)"
        )
        return request

    async def get(self, leave_request_id: uuid.UUID) -> LeaveRequest:
        request = await self.db.get(LeaveRequest, leave_request_id)
        if request is None:
            raise LeaveRequestNotFoundException(leave_request_id)
        return request

    async def list_for_employee(
        self,
        employee_id: uuid.UUID,
        status: Optional[LeaveStatus] = None,
    ) -> List[LeaveRequest]:
        query = select(LeaveRequest).where(LeaveRequest.employee_id == employee_id)
        if status:
            query = query.where(LeaveRequest.status == status)
        result = await self.db.execute(query.order_by(LeaveRequest.start_date.desc()))
        return list(result.scalars().all())

    async def _review(
        self,
        leave_request_id: uuid.UUID,
        new_status: LeaveStatus,
        reviewer_id: uuid.UUID,
        comments: Optional[str],
        now: datetime,
    ) -> LeaveRequest:
        request = await self.get(leave_request_id)
        if request.status != LeaveStatus.PENDING:
            raise InvalidStateTransitionException(
                f"Only pending leave requests can be {new_status.value}",
                current_status=request.status.value,
                requested=new_status.value,
            )

        request.status = new_status
        request.reviewed_by = reviewer_id
        request.reviewed_at = now
        request.review_comments = comments

        await self.db.commit()
        await self.db.refresh(request)

        logger.info(f"Leave request {request.id} {new_status.value} by {reviewer_id}")
        return request

    async def approve(
        self,
        leave_request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        comments: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        return await self._review(leave_request_id, LeaveStatus.APPROVED, reviewer_id, comments, now or utc_now())

    async def reject(
        self,
        leave_request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        comments: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        return await self._review(leave_request_id, LeaveStatus.REJECTED, reviewer_id, comments, now or utc_now())

    async def cancel(self, leave_request_id: uuid.UUID) -> LeaveRequest:
        """Cancel a pending or approved request."""
        request = await self.get(leave_request_id)
        if request.status not in (LeaveStatus.PENDING, LeaveStatus.APPROVED):
            raise InvalidStateTransitionException(
                f"Cannot cancel a {request.status.value} leave request",
                current_status=request.status.value,
                requested=LeaveStatus.CANCELLED.value,
            )

        request.status = LeaveStatus.CANCELLED
        await self.db.commit()
        await self.db.refresh(request)
        return request


# ===========================================
# PAYROLL
# ===========================================

class PayrollService:
    """
    Payroll service for calculating and processing monthly payroll records.
    """

    def __init__(self, db: AsyncSession, rules: Optional[PayrollRules] = None):
        self.db = db
        self.rules = rules or get_rules()
        self.employees = EmployeeRepository(db)
        self.leaves = LeaveRepository(db)
        self.engine = PayrollEngine(self.employees, self.leaves, self.rules)

    # ===========================================
    # LOOKUPS
    # ===========================================

    async def get_payroll(self, payroll_id: uuid.UUID, for_update: bool = False) -> Payroll:
        """Get payroll by ID or raise PayrollNotFoundException."""
        query = select(Payroll).where(Payroll.id == payroll_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        payroll = result.scalar_one_or_none()
        if payroll is None:
            raise PayrollNotFoundException(payroll_id)
        return payroll

    async def _find_for_period(self, employee_id: uuid.UUID, period: Period) -> Optional[Payroll]:
        result = await self.db.execute(
            select(Payroll)
            .where(
                and_(
                    Payroll.employee_id == employee_id,
                    Payroll.period == str(period),
                )
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def list_payrolls(
        self,
        employee_id: Optional[uuid.UUID] = None,
        period: Optional[str] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Payroll], int]:
        """List payroll records with filters."""
        query = select(Payroll)

        if employee_id:
            query = query.where(Payroll.employee_id == employee_id)

        if period:
            query = query.where(Payroll.period == str(Period.parse(period)))

        if year:
            query = query.where(Payroll.period.like(f"{year:04d}-%"))

        if status:
            query = query.where(Payroll.status == status)

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar() or 0

        query = query.order_by(Payroll.period.desc(), Payroll.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    # ===========================================
    # CALCULATION
    # ===========================================

    async def calculate_payroll(
        self,
        employee_id: uuid.UUID,
        year: int,
        month: int,
        adjustments: Optional[PayrollAdjustments] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Payroll:
        """
        Calculate (or re-calculate) the payroll of one employee for one month.

        Creates the row on first call. Rows already validated or paid are
        refused with InvalidStateTransitionException.
        """
        period = Period(year, month)
        await self.employees.get(employee_id)

        row = await self._find_for_period(employee_id, period)
        existing = snapshot_from_row(row) if row is not None else None

        snapshot = await self.engine.compute(
            employee_id,
            period,
            now or utc_now(),
            adjustments=adjustments,
            existing=existing,
        )

        if row is None:
            row = Payroll()
            self.db.add(row)
        apply_snapshot(row, snapshot)
        if notes is not None:
            row.notes = notes

        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def recalculate_payroll(
        self,
        payroll_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> Payroll:
        """Re-derive a stored payroll from its own stored inputs and leave days."""
        row = await self.get_payroll(payroll_id, for_update=True)
        snapshot = self.engine.recompute(snapshot_from_row(row), now or utc_now())

        apply_snapshot(row, snapshot)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    # ===========================================
    # LIFECYCLE
    # ===========================================

    async def validate_payroll(
        self,
        payroll_id: uuid.UUID,
        validator_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> Payroll:
        """Validate a calculated payroll."""
        row = await self.get_payroll(payroll_id, for_update=True)
        snapshot = snapshot_from_row(row).validate(validator_id, now or utc_now())

        apply_snapshot(row, snapshot)
        await self.db.commit()
        await self.db.refresh(row)

        logger.info(f"Payroll {row.id} ({row.period}) validated by {validator_id}")
        return row

    async def mark_payroll_paid(
        self,
        payroll_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> Payroll:
        """Mark a validated payroll as paid."""
        row = await self.get_payroll(payroll_id, for_update=True)
        snapshot = snapshot_from_row(row).mark_paid(now or utc_now())

        apply_snapshot(row, snapshot)
        await self.db.commit()
        await self.db.refresh(row)

        logger.info(f"Payroll {row.id} ({row.period}) marked as paid")
        return row

    # ===========================================
    # REPORTING
    # ===========================================

    async def get_payslip(self, payroll_id: uuid.UUID) -> Dict[str, Any]:
        """
        Pay-slip view of a payroll: amounts rounded to cents, French period
        label and formatted currency strings.
        """
        row = await self.get_payroll(payroll_id)
        if row.status == PayrollStatus.DRAFT:
            raise InvalidStateTransitionException(
                "Payroll must be calculated before a pay slip can be issued",
                current_status=row.status.value,
            )

        employee = await self.employees.get(row.employee_id)
        period = Period.parse(row.period)
        currency = settings.currency or self.rules.currency

        amounts = {
            "base_salary": row.base_salary,
            "bonuses": row.bonuses,
            "allowances": row.allowances,
            "overtime": row.overtime,
            "gross_salary": row.gross_salary,
            "social_security_deduction": row.social_security_deduction,
            "tax_deduction": row.tax_deduction,
            "other_deductions": row.other_deductions,
            "net_salary": row.net_salary,
            "employer_contribution": row.employer_contribution,
        }

        return {
            "payroll_id": row.id,
            "employee_id": employee.id,
            "employee_number": employee.employee_number,
            "employee_name": employee.full_name,
            "position": employee.position,
            "department": employee.department,
            "period": row.period,
            "period_label": period.label,
            "status": row.status,
            "status_label": PayrollStatus(row.status).label,
            "currency": currency,
            "working_days": row.working_days,
            "actual_working_days": row.actual_working_days,
            "paid_leave_days": row.paid_leave_days,
            "unpaid_leave_days": row.unpaid_leave_days,
            "sick_leave_days": row.sick_leave_days,
            "amounts": {name: round_money(value) for name, value in amounts.items()},
            "formatted": {name: format_currency(value, currency) for name, value in amounts.items()},
            "rules_version": row.rules_version,
            "calculated_at": row.calculated_at,
            "validated_at": row.validated_at,
            "paid_at": row.paid_at,
        }

    async def year_to_date(
        self,
        employee_id: uuid.UUID,
        year: int,
        through_month: int,
    ) -> YearToDateTotals:
        """Totals of the employee's stored payrolls from January to `through_month`."""
        await self.employees.get(employee_id)

        result = await self.db.execute(
            select(Payroll).where(
                and_(
                    Payroll.employee_id == employee_id,
                    Payroll.period.like(f"{year:04d}-%"),
                )
            )
        )
        records: Sequence[Payroll] = result.scalars().all()
        return year_to_date(records, year, through_month)

    @staticmethod
    def working_days(year: int, month: int) -> Dict[str, Any]:
        """Working-day lookup for a calendar month."""
        period = Period(year, month)
        return {
            "period": str(period),
            "period_label": period.label,
            "start_date": period.start,
            "end_date": period.end,
            "working_days": period.working_days,
        }
