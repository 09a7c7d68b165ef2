"""
HR Payroll - Routers Package

FastAPI route handlers.

Routers:
- payroll: employees, leave requests, payroll lifecycle and reporting
"""

from app.routers import payroll

__all__ = ["payroll"]
