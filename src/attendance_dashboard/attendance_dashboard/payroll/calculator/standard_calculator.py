from __future__ import annotations

from typing import Sequence

from .base import PayrollBreakdown, PayrollCalculator, PayrollPolicy
from ...attendance.model import AttendanceRecord


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: per worked day, hours up to the standard are regular, the rest overtime."""

    def calculate(self, records: Sequence[AttendanceRecord], policy: PayrollPolicy) -> PayrollBreakdown:
        regular_hours = 0.0
        overtime_hours = 0.0
        days_worked = 0
        days_late = 0

        for r in records:
            if not r.status.is_worked:
                continue
            days_worked += 1
            if r.status.is_late:
                days_late += 1

            hours = max(float(r.hours or 0), 0.0)
            regular_hours += min(hours, policy.standard_hours)
            overtime_hours += max(hours - policy.standard_hours, 0.0)

        regular_pay = regular_hours * policy.hourly_rate
        overtime_pay = overtime_hours * policy.hourly_rate * policy.overtime_rate
        gross_pay = regular_pay + overtime_pay
        tax_amount = gross_pay * policy.tax_rate

        return PayrollBreakdown(
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            regular_pay=regular_pay,
            overtime_pay=overtime_pay,
            gross_pay=gross_pay,
            tax_amount=tax_amount,
            net_pay=gross_pay - tax_amount,
            days_worked=days_worked,
            days_late=days_late,
        )
