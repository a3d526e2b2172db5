from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from ..common.datetime_utils import format_datetime, parse_optional_date, parse_optional_datetime
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class PayrollRecord:
    """Result of one payroll calculation. Append-only history entry."""

    id: str
    employee_id: str
    employee_name: str
    period_start: date
    period_end: date
    hourly_rate: float
    regular_hours: float
    overtime_hours: float
    regular_pay: float
    overtime_pay: float
    gross_pay: float
    tax_amount: float
    net_pay: float
    days_worked: int
    days_late: int
    currency: str
    currency_symbol: str
    calculated_at: datetime
    status: str = "calculated"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            "hourlyRate": self.hourly_rate,
            "regularHours": self.regular_hours,
            "overtimeHours": self.overtime_hours,
            "regularPay": self.regular_pay,
            "overtimePay": self.overtime_pay,
            "grossPay": self.gross_pay,
            "taxAmount": self.tax_amount,
            "netPay": self.net_pay,
            "daysWorked": self.days_worked,
            "daysLate": self.days_late,
            "currency": self.currency,
            "currencySymbol": self.currency_symbol,
            "calculatedAt": format_datetime(self.calculated_at),
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PayrollRecord":
        try:
            return cls(
                id=str(data["id"]),
                employee_id=str(data["employeeId"]),
                employee_name=str(data.get("employeeName") or ""),
                period_start=parse_optional_date(data["periodStart"]),
                period_end=parse_optional_date(data["periodEnd"]),
                hourly_rate=float(data["hourlyRate"]),
                regular_hours=float(data["regularHours"]),
                overtime_hours=float(data["overtimeHours"]),
                regular_pay=float(data["regularPay"]),
                overtime_pay=float(data["overtimePay"]),
                gross_pay=float(data["grossPay"]),
                tax_amount=float(data["taxAmount"]),
                net_pay=float(data["netPay"]),
                days_worked=int(data.get("daysWorked") or 0),
                days_late=int(data.get("daysLate") or 0),
                currency=str(data.get("currency") or "PHP"),
                currency_symbol=str(data.get("currencySymbol") or ""),
                calculated_at=parse_optional_datetime(data["calculatedAt"]),
                status=str(data.get("status") or "calculated"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid payroll record {data.get('id')!r}: {e}")


@dataclass(frozen=True)
class PayrollFilters:
    employee_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def matches(self, record: PayrollRecord) -> bool:
        if self.employee_id and record.employee_id != self.employee_id:
            return False
        if self.start_date and record.period_start < self.start_date:
            return False
        if self.end_date and record.period_end > self.end_date:
            return False
        return True
