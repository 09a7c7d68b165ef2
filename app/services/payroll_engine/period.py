"""
HR Payroll - Payroll Period

A payroll period is one calendar month, identified on the wire as YYYY-MM.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Tuple

from app.services.payroll_engine.working_days import month_bounds, working_days_in_month
from app.utils.error_handling import InvalidPeriodException


PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# Pay-slip labels, kept in the language of the payroll office
MONTH_NAMES = [
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
]


@dataclass(frozen=True, order=True)
class Period:
    """Immutable (year, month) pair."""
    year: int
    month: int

    def __post_init__(self):
        if not isinstance(self.year, int) or not isinstance(self.month, int):
            raise InvalidPeriodException(f"{self.year}-{self.month}")
        if not 1 <= self.month <= 12 or not 1 <= self.year <= 9999:
            raise InvalidPeriodException(f"{self.year}-{self.month}")

    @classmethod
    def parse(cls, value: str) -> "Period":
        """Parse a YYYY-MM string."""
        if not isinstance(value, str):
            raise InvalidPeriodException(value)
        match = PERIOD_PATTERN.fullmatch(value)
        if not match:
            raise InvalidPeriodException(value)
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_date(cls, value: date) -> "Period":
        return cls(value.year, value.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def bounds(self) -> Tuple[date, date]:
        """First and last calendar day of the period."""
        return month_bounds(self.year, self.month)

    @property
    def start(self) -> date:
        return self.bounds[0]

    @property
    def end(self) -> date:
        return self.bounds[1]

    @property
    def working_days(self) -> int:
        return working_days_in_month(self.year, self.month)

    @property
    def label(self) -> str:
        """Human readable label, e.g. 'Mars 2024'."""
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"
