"""
HR Payroll - Payroll Router

API endpoints for employees, leave requests and monthly payroll.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.models.payroll import EmployeeStatus, LeaveStatus, PayrollStatus
from app.services.payroll_engine import PayrollAdjustments
from app.services.payroll_service import EmployeeRepository, LeaveRepository, PayrollService
from app.schemas.payroll import (
    # Employee schemas
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    # Leave schemas
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveReviewRequest,
    # Payroll schemas
    PayrollCalculateRequest,
    PayrollListResponse,
    PayrollResponse,
    PayrollValidateRequest,
    PayslipResponse,
    # Reporting
    WorkingDaysResponse,
    YearToDateResponse,
)


router = APIRouter()


# ===========================================
# EMPLOYEE ENDPOINTS
# ===========================================

@router.post(
    "/employees",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new employee",
)
async def create_employee(
    data: EmployeeCreate,
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeRepository(db).create(data.model_dump())
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/employees",
    response_model=EmployeeListResponse,
    summary="List employees",
    description="Get paginated list of employees with optional filters.",
)
async def list_employees(
    employee_status: Optional[EmployeeStatus] = Query(None, alias="status", description="Employee status filter"),
    department: Optional[str] = Query(None, description="Department filter"),
    search: Optional[str] = Query(None, description="Search by name, email, or staff number"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
):
    employees, total = await EmployeeRepository(db).list_employees(
        status=employee_status,
        department=department,
        search=search,
        page=page,
        per_page=per_page,
    )
    return EmployeeListResponse(
        items=[EmployeeResponse.model_validate(e) for e in employees],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    summary="Get employee details",
)
async def get_employee(
    employee_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeRepository(db).get(employee_id)
    return EmployeeResponse.model_validate(employee)


# ===========================================
# LEAVE ENDPOINTS
# ===========================================

@router.post(
    "/employees/{employee_id}/leave-requests",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a leave request",
)
async def submit_leave_request(
    data: LeaveRequestCreate,
    employee_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    await EmployeeRepository(db).get(employee_id)
    request = await LeaveRepository(db).submit(employee_id, data.model_dump())
    return LeaveRequestResponse.model_validate(request)


@router.get(
    "/employees/{employee_id}/leave-requests",
    response_model=List[LeaveRequestResponse],
    summary="List an employee's leave requests",
)
async def list_leave_requests(
    employee_id: uuid.UUID = Path(...),
    leave_status: Optional[LeaveStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_async_session),
):
    await EmployeeRepository(db).get(employee_id)
    requests = await LeaveRepository(db).list_for_employee(employee_id, status=leave_status)
    return [LeaveRequestResponse.model_validate(r) for r in requests]


@router.post(
    "/leave-requests/{leave_request_id}/approve",
    response_model=LeaveRequestResponse,
    summary="Approve a pending leave request",
)
async def approve_leave_request(
    data: LeaveReviewRequest,
    leave_request_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    request = await LeaveRepository(db).approve(leave_request_id, data.reviewer_id, data.comments)
    return LeaveRequestResponse.model_validate(request)


@router.post(
    "/leave-requests/{leave_request_id}/reject",
    response_model=LeaveRequestResponse,
    summary="Reject a pending leave request",
)
async def reject_leave_request(
    data: LeaveReviewRequest,
    leave_request_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    request = await LeaveRepository(db).reject(leave_request_id, data.reviewer_id, data.comments)
    return LeaveRequestResponse.model_validate(request)


@router.post(
    "/leave-requests/{leave_request_id}/cancel",
    response_model=LeaveRequestResponse,
    summary="Cancel a pending or approved leave request",
)
async def cancel_leave_request(
    leave_request_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    request = await LeaveRepository(db).cancel(leave_request_id)
    return LeaveRequestResponse.model_validate(request)


# ===========================================
# PAYROLL ENDPOINTS
# ===========================================

@router.post(
    "/payrolls/calculate",
    response_model=PayrollResponse,
    summary="Calculate an employee's monthly payroll",
    description="Creates the payroll record on first call; recalculates it while it is still editable.",
)
async def calculate_payroll(
    data: PayrollCalculateRequest,
    db: AsyncSession = Depends(get_async_session),
):
    service = PayrollService(db)
    payroll = await service.calculate_payroll(
        employee_id=data.employee_id,
        year=data.year,
        month=data.month,
        adjustments=PayrollAdjustments(
            bonuses=data.bonuses,
            allowances=data.allowances,
            overtime=data.overtime,
            other_deductions=data.other_deductions,
        ),
        notes=data.notes,
    )
    return PayrollResponse.model_validate(payroll)


@router.get(
    "/payrolls",
    response_model=PayrollListResponse,
    summary="List payroll records",
)
async def list_payrolls(
    employee_id: Optional[uuid.UUID] = Query(None),
    period: Optional[str] = Query(None, description="YYYY-MM"),
    year: Optional[int] = Query(None, ge=1, le=9999),
    payroll_status: Optional[PayrollStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
):
    payrolls, total = await PayrollService(db).list_payrolls(
        employee_id=employee_id,
        period=period,
        year=year,
        status=payroll_status,
        page=page,
        per_page=per_page,
    )
    return PayrollListResponse(
        items=[PayrollResponse.model_validate(p) for p in payrolls],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/payrolls/{payroll_id}",
    response_model=PayrollResponse,
    summary="Get payroll record",
)
async def get_payroll(
    payroll_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    payroll = await PayrollService(db).get_payroll(payroll_id)
    return PayrollResponse.model_validate(payroll)


@router.post(
    "/payrolls/{payroll_id}/recalculate",
    response_model=PayrollResponse,
    summary="Recalculate a payroll from its stored inputs",
)
async def recalculate_payroll(
    payroll_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    payroll = await PayrollService(db).recalculate_payroll(payroll_id)
    return PayrollResponse.model_validate(payroll)


@router.post(
    "/payrolls/{payroll_id}/validate",
    response_model=PayrollResponse,
    summary="Validate a calculated payroll",
)
async def validate_payroll(
    data: PayrollValidateRequest,
    payroll_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    payroll = await PayrollService(db).validate_payroll(payroll_id, data.validator_id)
    return PayrollResponse.model_validate(payroll)


@router.post(
    "/payrolls/{payroll_id}/pay",
    response_model=PayrollResponse,
    summary="Mark a validated payroll as paid",
)
async def mark_payroll_paid(
    payroll_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    payroll = await PayrollService(db).mark_payroll_paid(payroll_id)
    return PayrollResponse.model_validate(payroll)


@router.get(
    "/payrolls/{payroll_id}/payslip",
    response_model=PayslipResponse,
    summary="Pay-slip view of a payroll",
)
async def get_payslip(
    payroll_id: uuid.UUID = Path(...),
    db: AsyncSession = Depends(get_async_session),
):
    return PayslipResponse(**await PayrollService(db).get_payslip(payroll_id))


# ===========================================
# REPORTING ENDPOINTS
# ===========================================

@router.get(
    "/employees/{employee_id}/year-to-date",
    response_model=YearToDateResponse,
    summary="Year-to-date payroll totals",
)
async def year_to_date(
    employee_id: uuid.UUID = Path(...),
    year: int = Query(..., ge=1, le=9999),
    through_month: int = Query(12, ge=1, le=12),
    db: AsyncSession = Depends(get_async_session),
):
    totals = await PayrollService(db).year_to_date(employee_id, year, through_month)
    return YearToDateResponse(
        employee_id=employee_id,
        year=totals.year,
        through_month=totals.through_month,
        gross_total=totals.gross_total,
        net_total=totals.net_total,
        tax_total=totals.tax_total,
        social_total=totals.social_total,
        payroll_count=totals.payroll_count,
    )


@router.get(
    "/calendar/{year}/{month}/working-days",
    response_model=WorkingDaysResponse,
    summary="Working days (Monday to Friday) in a month",
)
async def working_days(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
):
    return WorkingDaysResponse(**PayrollService.working_days(year, month))
