from datetime import date

import pytest

from src.attendance_dashboard.attendance_dashboard.attendance.model import AttendanceRecord
from src.attendance_dashboard.attendance_dashboard.core.enums import AttendanceStatus
from src.attendance_dashboard.attendance_dashboard.payroll.calculator.base import PayrollPolicy
from src.attendance_dashboard.attendance_dashboard.payroll.calculator.standard_calculator import StandardPayrollCalculator

POLICY = PayrollPolicy(hourly_rate=20.0, standard_hours=8.0, overtime_rate=1.5, tax_rate=0.2)


def _record(day: int, hours: float, status=AttendanceStatus.PRESENT) -> AttendanceRecord:
    return AttendanceRecord(id=f"att_{day}", employee_id="emp_1", date=date(2026, 10, day), status=status, hours=hours)


def test_ten_hour_day_splits_into_regular_and_overtime():
    result = StandardPayrollCalculator().calculate([_record(12, 10.0)], POLICY)

    assert result.regular_hours == 8
    assert result.overtime_hours == 2
    assert result.gross_pay == pytest.approx(220)
    assert result.tax_amount == pytest.approx(44)
    assert result.net_pay == pytest.approx(176)


def test_overtime_is_per_record_not_per_period():
    records = [_record(12, 6.0), _record(13, 6.0)]

    result = StandardPayrollCalculator().calculate(records, POLICY)

    assert result.regular_hours == 12
    assert result.overtime_hours == 0


def test_only_worked_statuses_count():
    records = [
        _record(12, 9.0, AttendanceStatus.LATE),
        _record(13, 8.0, AttendanceStatus.ABSENT),
        _record(14, 4.0, AttendanceStatus.HALF_DAY),
        _record(15, 8.0, AttendanceStatus.TARDY),
    ]

    result = StandardPayrollCalculator().calculate(records, POLICY)

    assert result.days_worked == 2
    assert result.days_late == 2
    assert result.regular_hours == 16
    assert result.overtime_hours == 1


def test_empty_period_is_zero():
    result = StandardPayrollCalculator().calculate([], POLICY)

    assert result.gross_pay == 0
    assert result.net_pay == 0
