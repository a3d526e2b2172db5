from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, Mapping, Optional

from ..common.datetime_utils import (
    format_clock_time,
    format_datetime,
    parse_clock_time,
    parse_optional_date,
    parse_optional_datetime,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    id: str
    employee_id: str
    date: date
    status: AttendanceStatus
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    hours: float = 0.0
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "date": self.date.isoformat(),
            "clockIn": format_clock_time(self.clock_in),
            "clockOut": format_clock_time(self.clock_out),
            "hours": self.hours,
            "status": self.status.value,
            "notes": self.notes,
            "createdAt": format_datetime(self.created_at),
            "lastModified": format_datetime(self.last_modified),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceRecord":
        if not data.get("id") or not data.get("employeeId") or not data.get("date"):
            raise ValidationError("Attendance record requires id, employeeId and date")

        try:
            return cls(
                id=str(data["id"]),
                employee_id=str(data["employeeId"]),
                date=parse_optional_date(data["date"]),
                status=AttendanceStatus(data.get("status") or AttendanceStatus.PRESENT.value),
                # Older snapshots used timeIn/timeOut.
                clock_in=parse_clock_time(_first(data, "clockIn", "timeIn")),
                clock_out=parse_clock_time(_first(data, "clockOut", "timeOut")),
                hours=float(data.get("hours") or 0),
                notes=data.get("notes"),
                created_at=parse_optional_datetime(data.get("createdAt")),
                last_modified=parse_optional_datetime(data.get("lastModified")),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid attendance record {data.get('id')!r}: {e}")


@dataclass(frozen=True)
class NewAttendance:
    """Input for ``DataService.add_attendance_record`` (upserts by employee + date).

    ``status`` is derived from the clock-in time when left empty.
    """

    employee_id: str
    date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewAttendance":
        if not data.get("employeeId") or not data.get("date"):
            raise ValidationError("employeeId and date are required")
        try:
            return cls(
                employee_id=str(data["employeeId"]),
                date=parse_optional_date(data["date"]),
                clock_in=parse_clock_time(_first(data, "clockIn", "timeIn")),
                clock_out=parse_clock_time(_first(data, "clockOut", "timeOut")),
                status=AttendanceStatus(data["status"]) if data.get("status") else None,
                notes=data.get("notes"),
                id=data.get("id"),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid attendance data: {e}")


@dataclass(frozen=True)
class AttendancePatch:
    """Partial attendance update. The owning employee cannot be changed."""

    date: Optional[date] = None
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendancePatch":
        try:
            return cls(
                date=parse_optional_date(data.get("date")),
                clock_in=parse_clock_time(_first(data, "clockIn", "timeIn")),
                clock_out=parse_clock_time(_first(data, "clockOut", "timeOut")),
                status=AttendanceStatus(data["status"]) if data.get("status") else None,
                notes=data.get("notes"),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid attendance update: {e}")


@dataclass(frozen=True)
class AttendanceFilters:
    employee_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    date: Optional[date] = None

    def matches(self, record: AttendanceRecord) -> bool:
        if self.employee_id and record.employee_id != self.employee_id:
            return False
        if self.start_date and record.date < self.start_date:
            return False
        if self.end_date and record.date > self.end_date:
            return False
        if self.status and record.status != self.status:
            return False
        if self.date and record.date != self.date:
            return False
        return True


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) not in (None, ""):
            return data[key]
    return None
