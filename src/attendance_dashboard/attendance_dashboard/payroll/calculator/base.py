from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ...attendance.model import AttendanceRecord


@dataclass(frozen=True)
class PayrollPolicy:
    hourly_rate: float
    standard_hours: float
    overtime_rate: float
    tax_rate: float


@dataclass(frozen=True)
class PayrollBreakdown:
    regular_hours: float
    overtime_hours: float
    regular_pay: float
    overtime_pay: float
    gross_pay: float
    tax_amount: float
    net_pay: float
    days_worked: int
    days_late: int


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, records: Sequence[AttendanceRecord], policy: PayrollPolicy) -> PayrollBreakdown:
        raise NotImplementedError
