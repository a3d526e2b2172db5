"""In-memory model: the full dataset one tab works on."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Tuple, TypeVar

from ..attendance.model import AttendanceRecord
from ..core.exceptions import ValidationError
from ..employees.model import Employee
from ..payroll.model import PayrollRecord
from ..settings.model import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Snapshot:
    employees: List[Employee] = field(default_factory=list)
    attendance_records: List[AttendanceRecord] = field(default_factory=list)
    payroll_records: List[PayrollRecord] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    analytics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employees": [e.to_dict() for e in self.employees],
            "attendanceRecords": [r.to_dict() for r in self.attendance_records],
            "payrollRecords": [p.to_dict() for p in self.payroll_records],
            "settings": self.settings.to_dict(),
            "analytics": dict(self.analytics),
        }

    def to_minimal_dict(self) -> Dict[str, Any]:
        """Reduced document written when the full one does not fit the quota."""
        return {
            "employees": [e.to_dict() for e in self.employees],
            "settings": self.settings.to_dict(),
        }

    def find_employee(self, employee_id: str):
        return next((e for e in self.employees if e.id == employee_id), None)


@dataclass(frozen=True)
class CleanReport:
    employees_dropped: int = 0
    attendance_dropped: int = 0
    payroll_dropped: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.employees_dropped or self.attendance_dropped or self.payroll_dropped)


def _parse_all(items: Any, parse: Callable[[Mapping[str, Any]], T], kind: str) -> Tuple[List[T], int]:
    if not isinstance(items, list):
        return [], 0

    parsed: List[T] = []
    dropped = 0
    for item in items:
        if not isinstance(item, Mapping):
            dropped += 1
            continue
        try:
            parsed.append(parse(item))
        except ValidationError as e:
            logger.debug("Dropping invalid %s: %s", kind, e)
            dropped += 1
    return parsed, dropped


def clean_snapshot(raw: Mapping[str, Any]) -> Tuple[Snapshot, CleanReport]:
    """Build a Snapshot from a persisted document, discarding entries that do not parse.

    Employees need ``id`` and ``fullName``; attendance records need ``id``,
    ``employeeId`` and ``date``. Unreadable settings fall back to defaults.
    """

    employees, employees_dropped = _parse_all(raw.get("employees"), Employee.from_dict, "employee")
    records, attendance_dropped = _parse_all(
        raw.get("attendanceRecords"), AttendanceRecord.from_dict, "attendance record"
    )
    payroll, payroll_dropped = _parse_all(raw.get("payrollRecords"), PayrollRecord.from_dict, "payroll record")

    try:
        settings = Settings.from_dict(raw.get("settings"))
    except ValidationError as e:
        logger.warning("Persisted settings unreadable, using defaults: %s", e)
        settings = Settings()

    analytics = raw.get("analytics")
    report = CleanReport(
        employees_dropped=employees_dropped,
        attendance_dropped=attendance_dropped,
        payroll_dropped=payroll_dropped,
    )
    if report.changed:
        logger.warning(
            "Cleaned snapshot: dropped %d employees, %d attendance records, %d payroll records",
            employees_dropped,
            attendance_dropped,
            payroll_dropped,
        )

    snapshot = Snapshot(
        employees=employees,
        attendance_records=records,
        payroll_records=payroll,
        settings=settings,
        analytics=dict(analytics) if isinstance(analytics, Mapping) else {},
    )
    return snapshot, report
