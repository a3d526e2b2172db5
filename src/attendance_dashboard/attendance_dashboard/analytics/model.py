from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from ..core.enums import AttendanceLevel


@dataclass(frozen=True)
class DepartmentRollup:
    total: int
    with_100_percent: int
    with_issues: int


@dataclass(frozen=True)
class OvertimeSummary:
    records_today: int
    hours_today: float
    this_week_total: float


@dataclass(frozen=True)
class TodayStats:
    total: int
    present: int
    late: int
    absent: int
    attendance_rate: int


@dataclass(frozen=True)
class AttendanceStats:
    """Attendance statistics for one day.

    ``to_dict`` renders the legacy top-level fields and the nested ``today``
    block with identical values; dashboard pages read one or the other.
    """

    date: date
    total_employees: int
    present: int
    late: int
    absent: int
    attendance_rate: int
    tardy_rate: int
    weekly_trend: Tuple[int, ...]
    departments: DepartmentRollup
    overtime: OvertimeSummary
    last_updated: datetime

    @property
    def present_today(self) -> int:
        return self.present

    @property
    def absent_today(self) -> int:
        return self.absent

    @property
    def tardy_today(self) -> int:
        return self.late

    @property
    def present_percentage(self) -> int:
        return self.attendance_rate

    @property
    def today(self) -> TodayStats:
        return TodayStats(
            total=self.total_employees,
            present=self.present,
            late=self.late,
            absent=self.absent,
            attendance_rate=self.attendance_rate,
        )

    def to_dict(self) -> Dict[str, Any]:
        today = self.today
        return {
            "date": self.date.isoformat(),
            "totalEmployees": self.total_employees,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "presentPercentage": self.present_percentage,
            "presentToday": self.present_today,
            "absentToday": self.absent_today,
            "tardyToday": self.tardy_today,
            "attendanceRate": self.attendance_rate,
            "tardyRate": self.tardy_rate,
            "weeklyTrend": list(self.weekly_trend),
            "lastUpdated": self.last_updated.isoformat(),
            "departments": {
                "total": self.departments.total,
                "with100Percent": self.departments.with_100_percent,
                "withIssues": self.departments.with_issues,
            },
            "overtime": {
                "recordsToday": self.overtime.records_today,
                "hoursToday": self.overtime.hours_today,
                "thisWeekTotal": self.overtime.this_week_total,
            },
            "today": {
                "total": today.total,
                "present": today.present,
                "late": today.late,
                "absent": today.absent,
                "attendanceRate": today.attendance_rate,
            },
        }


@dataclass(frozen=True)
class DayAttendance:
    total: int
    present: int
    rate: float
    level: AttendanceLevel

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "present": self.present, "rate": self.rate, "level": self.level.value}


@dataclass(frozen=True)
class PerformanceMetric:
    employee_id: str
    name: str
    department: Optional[str]
    attendance_rate: float
    punctuality_rate: float
    total_records: int
    days_present: int
    days_late: int
    days_absent: int
    last_updated: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "department": self.department,
            "attendanceRate": self.attendance_rate,
            "punctualityRate": self.punctuality_rate,
            "totalRecords": self.total_records,
            "daysPresent": self.days_present,
            "daysLate": self.days_late,
            "daysAbsent": self.days_absent,
            "lastUpdated": self.last_updated.isoformat(),
        }
