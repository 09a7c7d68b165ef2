"""
HR Payroll - Enums

Enums shared by the ORM models and the payroll engine. Kept free of
SQLAlchemy imports so the engine can use them without touching the database
layer.
"""

from enum import Enum


class ContractType(str, Enum):
    """Employment contract type."""
    CDI = "cdi"                    # Permanent contract
    CDD = "cdd"                    # Fixed-term contract
    INTERNSHIP = "internship"
    FREELANCE = "freelance"
    INTERIM = "interim"


class EmployeeStatus(str, Enum):
    """Employee status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class FilingStatus(str, Enum):
    """Income tax filing status."""
    SINGLE = "single"
    JOINT = "joint"                # Married / civil partnership, joint return


class LeaveType(str, Enum):
    """Type of leave request."""
    PAID_LEAVE = "paid_leave"
    RTT = "rtt"                    # Reduced working time days
    SICK = "sick"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    TRAINING = "training"
    UNPAID = "unpaid"
    EXCEPTIONAL = "exceptional"


class LeaveStatus(str, Enum):
    """Leave request status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PayrollStatus(str, Enum):
    """Payroll processing status. Declaration order is lifecycle order."""
    DRAFT = "draft"
    CALCULATED = "calculated"
    VALIDATED = "validated"
    PAID = "paid"

    @property
    def label(self) -> str:
        return PAYROLL_STATUS_LABELS[self]


PAYROLL_STATUS_LABELS = {
    PayrollStatus.DRAFT: "Brouillon",
    PayrollStatus.CALCULATED: "Calculé",
    PayrollStatus.VALIDATED: "Validé",
    PayrollStatus.PAID: "Payé",
}
