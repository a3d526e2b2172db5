from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.datetime_utils import format_clock_time, format_datetime, parse_clock_time, parse_optional_datetime
from ..common.patching import merge_patch
from ..core.constants import (
    DEFAULT_HOURLY_RATE,
    DEFAULT_ISSUE_THRESHOLD,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_OVERTIME_RATE,
    DEFAULT_STANDARD_HOURS,
    DEFAULT_TAX_RATE,
)
from ..core.enums import PayFrequency
from ..core.exceptions import ValidationError

DEFAULT_DEPARTMENTS = ("Management", "Operations", "Human Resources", "Finance", "IT")


@dataclass(frozen=True)
class CompanySettings:
    name: str = "Bricks Company"
    working_hours: float = DEFAULT_STANDARD_HOURS
    start_time: time = time(8, 0)
    end_time: time = time(17, 0)


@dataclass(frozen=True)
class PayrollSettings:
    standard_wage: float = DEFAULT_HOURLY_RATE
    overtime_rate: float = DEFAULT_OVERTIME_RATE
    min_overtime_hours: float = DEFAULT_STANDARD_HOURS
    frequency: PayFrequency = PayFrequency.BIWEEKLY
    currency: str = "PHP"
    currency_symbol: str = "₱"
    tax_rate: float = DEFAULT_TAX_RATE


@dataclass(frozen=True)
class AttendanceSettings:
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    # Departments below this attendance rate count as "with issues".
    issue_threshold: float = DEFAULT_ISSUE_THRESHOLD


@dataclass(frozen=True)
class PreferenceSettings:
    theme: str = "auto"
    date_format: str = "YYYY-MM-DD"
    time_format: str = "24"


@dataclass(frozen=True)
class Settings:
    company: CompanySettings = field(default_factory=CompanySettings)
    payroll: PayrollSettings = field(default_factory=PayrollSettings)
    attendance: AttendanceSettings = field(default_factory=AttendanceSettings)
    preferences: PreferenceSettings = field(default_factory=PreferenceSettings)
    departments: Tuple[str, ...] = DEFAULT_DEPARTMENTS
    last_updated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company": {
                "name": self.company.name,
                "workingHours": self.company.working_hours,
                "startTime": format_clock_time(self.company.start_time),
                "endTime": format_clock_time(self.company.end_time),
            },
            "payroll": {
                "standardWage": self.payroll.standard_wage,
                "overtimeRate": self.payroll.overtime_rate,
                "minOvertimeHours": self.payroll.min_overtime_hours,
                "frequency": self.payroll.frequency.value,
                "currency": self.payroll.currency,
                "currencySymbol": self.payroll.currency_symbol,
                "taxRate": self.payroll.tax_rate,
            },
            "attendance": {
                "lateGraceMinutes": self.attendance.late_grace_minutes,
                "issueThreshold": self.attendance.issue_threshold,
            },
            "preferences": {
                "theme": self.preferences.theme,
                "dateFormat": self.preferences.date_format,
                "timeFormat": self.preferences.time_format,
            },
            "departments": list(self.departments),
            "lastUpdated": format_datetime(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Settings":
        """Read a persisted settings document; missing values fall back to defaults."""

        if not data:
            return cls()
        try:
            return SettingsPatch.from_dict(data).apply(cls())
        except (AttributeError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid settings: {e}")


@dataclass(frozen=True)
class CompanyPatch:
    name: Optional[str] = None
    working_hours: Optional[float] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


@dataclass(frozen=True)
class PayrollPatch:
    standard_wage: Optional[float] = None
    overtime_rate: Optional[float] = None
    min_overtime_hours: Optional[float] = None
    frequency: Optional[PayFrequency] = None
    currency: Optional[str] = None
    currency_symbol: Optional[str] = None
    tax_rate: Optional[float] = None


@dataclass(frozen=True)
class AttendancePolicyPatch:
    late_grace_minutes: Optional[int] = None
    issue_threshold: Optional[float] = None


@dataclass(frozen=True)
class PreferencesPatch:
    theme: Optional[str] = None
    date_format: Optional[str] = None
    time_format: Optional[str] = None


@dataclass(frozen=True)
class SettingsPatch:
    """Partial settings update merged section by section, field by field."""

    company: Optional[CompanyPatch] = None
    payroll: Optional[PayrollPatch] = None
    attendance: Optional[AttendancePolicyPatch] = None
    preferences: Optional[PreferencesPatch] = None
    departments: Optional[Tuple[str, ...]] = None
    last_updated: Optional[datetime] = None

    def apply(self, settings: Settings) -> Settings:
        return merge_patch(settings, self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SettingsPatch":
        company = data.get("company") or {}
        payroll = data.get("payroll") or {}
        attendance = data.get("attendance") or {}
        preferences = data.get("preferences") or {}
        departments = data.get("departments")

        return cls(
            company=CompanyPatch(
                name=company.get("name"),
                working_hours=_opt(float, company.get("workingHours")),
                start_time=parse_clock_time(company.get("startTime")),
                end_time=parse_clock_time(company.get("endTime")),
            ) if company else None,
            payroll=PayrollPatch(
                standard_wage=_opt(float, payroll.get("standardWage")),
                overtime_rate=_opt(float, payroll.get("overtimeRate")),
                min_overtime_hours=_opt(float, payroll.get("minOvertimeHours")),
                frequency=_opt(PayFrequency, payroll.get("frequency")),
                currency=payroll.get("currency"),
                currency_symbol=payroll.get("currencySymbol"),
                tax_rate=_opt(float, payroll.get("taxRate")),
            ) if payroll else None,
            attendance=AttendancePolicyPatch(
                late_grace_minutes=_opt(int, attendance.get("lateGraceMinutes")),
                issue_threshold=_opt(float, attendance.get("issueThreshold")),
            ) if attendance else None,
            preferences=PreferencesPatch(
                theme=preferences.get("theme"),
                date_format=preferences.get("dateFormat"),
                time_format=preferences.get("timeFormat"),
            ) if preferences else None,
            departments=tuple(str(d) for d in departments) if departments is not None else None,
            last_updated=parse_optional_datetime(data.get("lastUpdated")),
        )


def _opt(cast, value):
    if value is None or value == "":
        return None
    return cast(value)
