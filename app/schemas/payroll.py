"""
HR Payroll - Payroll Schemas

Pydantic schemas for employee, leave and payroll requests and responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from app.models.payroll_enums import (
    ContractType,
    EmployeeStatus,
    FilingStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
)


# ===========================================
# EMPLOYEE SCHEMAS
# ===========================================

class EmployeeBase(BaseModel):
    """Base employee schema."""
    employee_number: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=20)
    position: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    hire_date: date
    base_salary: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    contract_type: ContractType = ContractType.CDI
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    filing_status: FilingStatus = FilingStatus.SINGLE
    notes: Optional[str] = None


class EmployeeCreate(EmployeeBase):
    """Create employee request."""
    pass


class EmployeeResponse(EmployeeBase):
    """Employee response."""
    id: UUID
    full_name: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EmployeeListResponse(BaseModel):
    items: List[EmployeeResponse]
    total: int
    page: int
    per_page: int


# ===========================================
# LEAVE SCHEMAS
# ===========================================

class LeaveRequestCreate(BaseModel):
    """Submit leave request."""
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class LeaveReviewRequest(BaseModel):
    """Approve or reject a leave request."""
    reviewer_id: UUID
    comments: Optional[str] = None


class LeaveRequestResponse(BaseModel):
    id: UUID
    employee_id: UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    number_of_days: int
    reason: Optional[str] = None
    status: LeaveStatus
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===========================================
# PAYROLL SCHEMAS
# ===========================================

class PayrollCalculateRequest(BaseModel):
    """Calculate (or recalculate) one employee's payroll for one month."""
    employee_id: UUID
    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)
    bonuses: Decimal = Field(Decimal("0"), ge=0)
    allowances: Decimal = Field(Decimal("0"), ge=0)
    overtime: Decimal = Field(Decimal("0"), ge=0)
    other_deductions: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None


class PayrollValidateRequest(BaseModel):
    validator_id: UUID


class PayrollResponse(BaseModel):
    """Payroll record. Amounts are stored at 4 decimal places; see the pay slip for cents."""
    id: UUID
    employee_id: UUID
    period: str

    base_salary: Decimal
    working_days: int
    bonuses: Decimal
    allowances: Decimal
    overtime: Decimal
    other_deductions: Decimal
    filing_status: FilingStatus

    paid_leave_days: int
    unpaid_leave_days: int
    sick_leave_days: int
    actual_working_days: Optional[int] = None

    gross_salary: Optional[Decimal] = None
    social_security_deduction: Optional[Decimal] = None
    tax_deduction: Optional[Decimal] = None
    net_salary: Optional[Decimal] = None
    employer_contribution: Optional[Decimal] = None
    rules_version: Optional[str] = None

    status: PayrollStatus
    calculated_at: Optional[datetime] = None
    validated_at: Optional[datetime] = None
    validated_by: Optional[UUID] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    version: int

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PayrollListResponse(BaseModel):
    items: List[PayrollResponse]
    total: int
    page: int
    per_page: int


class PayslipResponse(BaseModel):
    """Pay-slip view: amounts rounded to cents."""
    payroll_id: UUID
    employee_id: UUID
    employee_number: str
    employee_name: str
    position: str
    department: str
    period: str
    period_label: str
    status: PayrollStatus
    status_label: str
    currency: str
    working_days: int
    actual_working_days: Optional[int] = None
    paid_leave_days: int
    unpaid_leave_days: int
    sick_leave_days: int
    amounts: Dict[str, Decimal]
    formatted: Dict[str, str]
    rules_version: Optional[str] = None
    calculated_at: Optional[datetime] = None
    validated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


# ===========================================
# REPORTING SCHEMAS
# ===========================================

class YearToDateResponse(BaseModel):
    employee_id: UUID
    year: int
    through_month: int
    gross_total: Decimal
    net_total: Decimal
    tax_total: Decimal
    social_total: Decimal
    payroll_count: int


class WorkingDaysResponse(BaseModel):
    period: str
    period_label: str
    start_date: date
    end_date: date
    working_days: int
