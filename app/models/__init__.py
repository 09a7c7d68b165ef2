"""
HR Payroll - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin
from app.models.payroll_enums import (
    ContractType,
    EmployeeStatus,
    FilingStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
)
from app.models.payroll import Employee, LeaveRequest, Payroll

__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    # Enums
    "ContractType",
    "EmployeeStatus",
    "FilingStatus",
    "LeaveStatus",
    "LeaveType",
    "PayrollStatus",
    # Models
    "Employee",
    "LeaveRequest",
    "Payroll",
]
