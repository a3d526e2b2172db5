from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from ..common.datetime_utils import (
    format_date,
    format_datetime,
    parse_optional_date,
    parse_optional_datetime,
)
from ..common.patching import changed_fields
from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class WageUpdate:
    """Audit entry for the most recent hourly rate change."""

    date: datetime
    old_rate: Optional[float]
    new_rate: float
    reason: str = ""
    by: str = "system"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": format_datetime(self.date),
            "oldRate": self.old_rate,
            "newRate": self.new_rate,
            "reason": self.reason,
            "by": self.by,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WageUpdate":
        return cls(
            date=parse_optional_datetime(data.get("date")),
            old_rate=_optional_float(data.get("oldRate")),
            new_rate=float(data["newRate"]),
            reason=str(data.get("reason") or ""),
            by=str(data.get("by") or "system"),
        )


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee (also the login account)."""

    id: str
    full_name: str
    username: Optional[str] = None
    password: Optional[str] = None
    role: Role = Role.EMPLOYEE
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    hourly_rate: Optional[float] = None
    last_wage_update: Optional[WageUpdate] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "role": self.role.value,
            "fullName": self.full_name,
            "email": self.email,
            "department": self.department,
            "position": self.position,
            "startDate": format_date(self.start_date),
            "hourlyRate": self.hourly_rate,
            "lastWageUpdate": self.last_wage_update.to_dict() if self.last_wage_update else None,
            "status": self.status.value,
            "createdAt": format_datetime(self.created_at),
            "lastModified": format_datetime(self.last_modified),
        }

    def to_public_dict(self) -> Dict[str, Any]:
        data = self.to_dict()
        data.pop("password")
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Employee":
        if not data.get("id") or not data.get("fullName"):
            raise ValidationError("Employee requires id and fullName")

        wage = data.get("lastWageUpdate")
        if wage and not isinstance(wage, Mapping):
            raise ValidationError(f"Invalid employee {data.get('id')!r}: lastWageUpdate must be an object")
        try:
            return cls(
                id=str(data["id"]),
                full_name=str(data["fullName"]),
                username=data.get("username"),
                password=data.get("password"),
                role=Role(data.get("role") or Role.EMPLOYEE.value),
                email=data.get("email"),
                department=data.get("department"),
                position=data.get("position"),
                start_date=parse_optional_date(data.get("startDate") or data.get("hireDate")),
                hourly_rate=_optional_float(data.get("hourlyRate")),
                last_wage_update=WageUpdate.from_dict(wage) if wage else None,
                status=EmployeeStatus(data.get("status") or EmployeeStatus.ACTIVE.value),
                created_at=parse_optional_datetime(data.get("createdAt")),
                last_modified=parse_optional_datetime(data.get("lastModified")),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid employee {data.get('id')!r}: {e}")


@dataclass(frozen=True)
class NewEmployee:
    """Input for ``DataService.add_employee``; ``id`` is generated when absent."""

    full_name: str
    username: Optional[str] = None
    password: Optional[str] = None
    role: Role = Role.EMPLOYEE
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    hourly_rate: Optional[float] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewEmployee":
        try:
            return cls(
                full_name=str(data.get("fullName") or ""),
                username=data.get("username"),
                password=data.get("password"),
                role=Role(data.get("role") or Role.EMPLOYEE.value),
                email=data.get("email"),
                department=data.get("department"),
                position=data.get("position"),
                start_date=parse_optional_date(data.get("startDate") or data.get("hireDate")),
                hourly_rate=_optional_float(data.get("hourlyRate")),
                status=EmployeeStatus(data.get("status") or EmployeeStatus.ACTIVE.value),
                id=data.get("id"),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid employee data: {e}")


@dataclass(frozen=True)
class EmployeePatch:
    """Partial employee update. ``None`` fields are left unchanged."""

    full_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    hourly_rate: Optional[float] = None
    status: Optional[EmployeeStatus] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for name, value in changed_fields(self).items():
            if name == "password":
                continue
            if hasattr(value, "value"):
                value = value.value
            elif isinstance(value, date):
                value = value.isoformat()
            out[name] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmployeePatch":
        try:
            return cls(
                full_name=data.get("fullName"),
                username=data.get("username"),
                password=data.get("password"),
                role=Role(data["role"]) if data.get("role") else None,
                email=data.get("email"),
                department=data.get("department"),
                position=data.get("position"),
                start_date=parse_optional_date(data.get("startDate") or data.get("hireDate")),
                hourly_rate=_optional_float(data.get("hourlyRate")),
                status=EmployeeStatus(data["status"]) if data.get("status") else None,
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid employee update: {e}")


@dataclass(frozen=True)
class WageChange:
    employee: Employee
    old_rate: Optional[float]
    new_rate: float


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)
