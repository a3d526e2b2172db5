"""Derived attendance analytics.

Everything here is computed from the employee and attendance collections on
demand; nothing is persisted by these functions.
"""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceLevel, AttendanceStatus
from ..employees.model import Employee
from ..settings.model import Settings
from .model import AttendanceStats, DayAttendance, DepartmentRollup, OvertimeSummary, PerformanceMetric

ON_TIME_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.OVERTIME)


def percent(part: float, whole: float) -> int:
    """Whole percentage rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def attendance_level(rate: float) -> AttendanceLevel:
    if rate >= 0.8:
        return AttendanceLevel.HIGH
    if rate >= 0.6:
        return AttendanceLevel.MEDIUM
    if rate > 0:
        return AttendanceLevel.LOW
    return AttendanceLevel.NONE


def week_start(day: date) -> date:
    """Sunday of the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _is_on_time(record: AttendanceRecord) -> bool:
    return record.status in ON_TIME_STATUSES


def _extra_hours(records: Iterable[AttendanceRecord], standard_hours: float) -> float:
    return round(sum(max(r.hours - standard_hours, 0.0) for r in records), 2)


def department_rollup(
    employees: Sequence[Employee],
    day_records: Sequence[AttendanceRecord],
    *,
    issue_threshold: float,
) -> DepartmentRollup:
    all_departments = {e.department for e in employees if e.department}

    totals: Dict[str, int] = defaultdict(int)
    attended: Dict[str, int] = defaultdict(int)
    department_of = {}
    for e in employees:
        if e.department and e.is_active:
            totals[e.department] += 1
            department_of[e.id] = e.department

    for r in day_records:
        dept = department_of.get(r.employee_id)
        if dept and r.status.is_worked:
            attended[dept] += 1

    with_100 = sum(1 for d, total in totals.items() if total > 0 and attended[d] == total)
    with_issues = sum(1 for d, total in totals.items() if total > 0 and attended[d] / total < issue_threshold)

    return DepartmentRollup(total=len(all_departments), with_100_percent=with_100, with_issues=with_issues)


def attendance_stats(
    employees: Sequence[Employee],
    records: Sequence[AttendanceRecord],
    settings: Settings,
    *,
    target: date,
    now: datetime,
) -> AttendanceStats:
    active_ids = {e.id for e in employees if e.is_active}
    total = len(active_ids)
    relevant = [r for r in records if r.employee_id in active_ids]

    day_records = [r for r in relevant if r.date == target]
    present = sum(1 for r in day_records if _is_on_time(r))
    late = sum(1 for r in day_records if r.status.is_late)
    absent = max(total - present - late, 0)

    start = week_start(target)
    week_days = [start + timedelta(days=i) for i in range(7)]
    weekly_trend = []
    for day in week_days:
        attended = sum(1 for r in relevant if r.date == day and (_is_on_time(r) or r.status.is_late))
        weekly_trend.append(percent(attended, total))

    standard_hours = settings.company.working_hours
    week_records = [r for r in relevant if week_days[0] <= r.date <= week_days[-1]]

    return AttendanceStats(
        date=target,
        total_employees=total,
        present=present,
        late=late,
        absent=absent,
        attendance_rate=percent(present + late, total),
        tardy_rate=percent(late, total),
        weekly_trend=tuple(weekly_trend),
        departments=department_rollup(
            employees, day_records, issue_threshold=settings.attendance.issue_threshold
        ),
        overtime=OvertimeSummary(
            records_today=sum(1 for r in day_records if r.status == AttendanceStatus.OVERTIME),
            hours_today=_extra_hours(day_records, standard_hours),
            this_week_total=_extra_hours(week_records, standard_hours),
        ),
        last_updated=now,
    )


def calendar_attendance(
    records: Iterable[AttendanceRecord],
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Dict[date, DayAttendance]:
    """Per-day attendance level for calendar views."""

    by_date: Dict[date, List[AttendanceRecord]] = defaultdict(list)
    for r in records:
        if start and r.date < start:
            continue
        if end and r.date > end:
            continue
        by_date[r.date].append(r)

    out: Dict[date, DayAttendance] = {}
    for day in sorted(by_date):
        day_records = by_date[day]
        present = sum(1 for r in day_records if _is_on_time(r))
        rate = present / len(day_records) if day_records else 0.0
        out[day] = DayAttendance(total=len(day_records), present=present, rate=rate, level=attendance_level(rate))
    return out


def employee_performance(
    employees: Sequence[Employee],
    records: Sequence[AttendanceRecord],
    *,
    now: datetime,
    employee_id: Optional[str] = None,
) -> List[PerformanceMetric]:
    if employee_id:
        employees = [e for e in employees if e.id == employee_id]

    by_employee: Dict[str, List[AttendanceRecord]] = defaultdict(list)
    for r in records:
        by_employee[r.employee_id].append(r)

    metrics = []
    for e in employees:
        own = by_employee.get(e.id, [])
        total = len(own)
        present = sum(1 for r in own if _is_on_time(r))
        late = sum(1 for r in own if r.status.is_late)
        absent = sum(1 for r in own if r.status == AttendanceStatus.ABSENT)

        metrics.append(
            PerformanceMetric(
                employee_id=e.id,
                name=e.full_name,
                department=e.department,
                attendance_rate=round((present + late) / total * 100, 1) if total else 100.0,
                punctuality_rate=round(present / total * 100, 1) if total else 100.0,
                total_records=total,
                days_present=present,
                days_late=late,
                days_absent=absent,
                last_updated=now,
            )
        )
    return metrics
