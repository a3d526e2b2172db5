from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization in page controllers."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the snapshot."""

    PRESENT = "present"
    LATE = "late"
    TARDY = "tardy"
    ABSENT = "absent"
    OVERTIME = "overtime"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"

    @property
    def is_late(self) -> bool:
        return self in (AttendanceStatus.LATE, AttendanceStatus.TARDY)

    @property
    def is_worked(self) -> bool:
        return self in (
            AttendanceStatus.PRESENT,
            AttendanceStatus.LATE,
            AttendanceStatus.TARDY,
            AttendanceStatus.OVERTIME,
        )


class PayFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class AttendanceLevel(str, Enum):
    """Calendar heat level for a day's attendance rate."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class StoreStatus(str, Enum):
    """Lifecycle of the durable store: NOT_FOUND -> FIXTURE_LOADED -> READY, READY -> QUOTA_DEGRADED."""

    NOT_FOUND = "not_found"
    FIXTURE_LOADED = "fixture_loaded"
    READY = "ready"
    QUOTA_DEGRADED = "quota_degraded"


class SaveOutcome(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    FAILED = "failed"
