"""
HR Payroll - Services Package

Business logic services.
"""

from app.services.payroll_service import (
    EmployeeRepository,
    LeaveRepository,
    PayrollService,
)

__all__ = [
    "EmployeeRepository",
    "LeaveRepository",
    "PayrollService",
]
