"""
HR Payroll - Payroll Models

Employees, leave requests and monthly payroll records.

Payroll records:
- One row per (employee, period), enforced by a unique constraint
- Amounts are stored at 4 decimal places; cents rounding happens on display
- `version` is an optimistic lock counter bumped by every UPDATE
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
    Enum as SQLEnum, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.payroll_enums import (
    ContractType,
    EmployeeStatus,
    FilingStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
)

__all__ = [
    "ContractType",
    "EmployeeStatus",
    "FilingStatus",
    "LeaveStatus",
    "LeaveType",
    "PayrollStatus",
    "Employee",
    "LeaveRequest",
    "Payroll",
]


# ===========================================
# EMPLOYEE MODEL
# ===========================================

class Employee(BaseModel):
    """Employee master data used by payroll."""

    __tablename__ = "employees"

    employee_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Internal staff number",
    )

    # Personal Information
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Employment Details
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Monthly gross base salary",
    )
    contract_type: Mapped[ContractType] = mapped_column(
        SQLEnum(ContractType),
        default=ContractType.CDI,
        nullable=False,
    )
    status: Mapped[EmployeeStatus] = mapped_column(
        SQLEnum(EmployeeStatus),
        default=EmployeeStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    filing_status: Mapped[FilingStatus] = mapped_column(
        SQLEnum(FilingStatus),
        default=FilingStatus.SINGLE,
        nullable=False,
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    leave_requests: Mapped[List["LeaveRequest"]] = relationship(
        "LeaveRequest", back_populates="employee", cascade="all, delete-orphan",
    )
    payrolls: Mapped[List["Payroll"]] = relationship(
        "Payroll", back_populates="employee", cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("base_salary >= 0", name="base_salary_non_negative"),
    )

    @property
    def full_name(self) -> str:
        """Get employee's full name."""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, employee_number={self.employee_number}, name={self.full_name})>"


# ===========================================
# LEAVE REQUEST MODEL
# ===========================================

class LeaveRequest(BaseModel):
    """
    Track employee leave requests and approvals.
    Only approved requests feed the payroll calculation.
    """

    __tablename__ = "leave_requests"

    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    leave_type: Mapped[LeaveType] = mapped_column(
        SQLEnum(LeaveType),
        nullable=False,
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Working days covered by the request",
    )

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[LeaveStatus] = mapped_column(
        SQLEnum(LeaveStatus),
        default=LeaveStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Review
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    review_comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationship
    employee: Mapped["Employee"] = relationship(
        "Employee", back_populates="leave_requests",
    )

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="leave_dates_ordered"),
    )

    def __repr__(self) -> str:
        return f"<LeaveRequest(employee_id={self.employee_id}, type={self.leave_type}, status={self.status})>"


# ===========================================
# PAYROLL MODEL
# ===========================================

def _money_column(nullable: bool = False, default: Optional[Decimal] = Decimal("0")):
    return mapped_column(
        Numeric(precision=14, scale=4),
        default=default,
        nullable=nullable,
    )


class Payroll(BaseModel):
    """
    Monthly payroll record of one employee.

    Inputs, derived figures and lifecycle columns flatten one
    PayrollComputation snapshot.
    """

    __tablename__ = "payrolls"

    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        index=True,
        comment="YYYY-MM",
    )

    # Inputs
    base_salary: Mapped[Decimal] = _money_column()
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    bonuses: Mapped[Decimal] = _money_column()
    allowances: Mapped[Decimal] = _money_column()
    overtime: Mapped[Decimal] = _money_column()
    other_deductions: Mapped[Decimal] = _money_column()
    filing_status: Mapped[FilingStatus] = mapped_column(
        SQLEnum(FilingStatus),
        default=FilingStatus.SINGLE,
        nullable=False,
    )

    # Attendance
    paid_leave_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unpaid_leave_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sick_leave_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    actual_working_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Derived amounts (NULL while draft)
    gross_salary: Mapped[Optional[Decimal]] = _money_column(nullable=True, default=None)
    social_security_deduction: Mapped[Optional[Decimal]] = _money_column(nullable=True, default=None)
    tax_deduction: Mapped[Optional[Decimal]] = _money_column(nullable=True, default=None)
    net_salary: Mapped[Optional[Decimal]] = _money_column(nullable=True, default=None)
    employer_contribution: Mapped[Optional[Decimal]] = _money_column(nullable=True, default=None)
    rules_version: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Lifecycle
    status: Mapped[PayrollStatus] = mapped_column(
        SQLEnum(PayrollStatus),
        default=PayrollStatus.DRAFT,
        nullable=False,
        index=True,
    )
    calculated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    validated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    validated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationship
    employee: Mapped["Employee"] = relationship(
        "Employee", back_populates="payrolls",
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "period", name="uq_payroll_employee_period"),
        CheckConstraint("working_days BETWEEN 1 AND 31", name="working_days_range"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Payroll(employee_id={self.employee_id}, period={self.period}, status={self.status})>"
