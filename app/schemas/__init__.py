"""
HR Payroll - Schemas Package

Pydantic schemas for request/response validation.
"""

from app.schemas.payroll import (
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveReviewRequest,
    PayrollCalculateRequest,
    PayrollListResponse,
    PayrollResponse,
    PayrollValidateRequest,
    PayslipResponse,
    WorkingDaysResponse,
    YearToDateResponse,
)

__all__ = [
    "EmployeeCreate",
    "EmployeeListResponse",
    "EmployeeResponse",
    "LeaveRequestCreate",
    "LeaveRequestResponse",
    "LeaveReviewRequest",
    "PayrollCalculateRequest",
    "PayrollListResponse",
    "PayrollResponse",
    "PayrollValidateRequest",
    "PayslipResponse",
    "WorkingDaysResponse",
    "YearToDateResponse",
]
