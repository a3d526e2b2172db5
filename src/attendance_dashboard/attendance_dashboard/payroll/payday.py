"""Payday scheduling.

Pure functions of (now, frequency): nothing here reads or writes the store.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Tuple, Union

from ..common.datetime_utils import add_months, last_day_of_month
from ..core.enums import PayFrequency

FRIDAY = 4


@dataclass(frozen=True)
class PaydaySchedule:
    next_payday: date
    frequency: str
    days_remaining: int
    hours_remaining: int
    last_payday: date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nextPayday": self.next_payday.isoformat(),
            "frequency": self.frequency,
            "daysRemaining": self.days_remaining,
            "hoursRemaining": self.hours_remaining,
            "lastPayday": self.last_payday.isoformat(),
        }


def payday_window(today: date, frequency: Union[PayFrequency, str]) -> Tuple[date, date]:
    """Return (next_payday, last_payday) for the given day."""

    if frequency == PayFrequency.WEEKLY:
        # Friday itself is payday.
        next_payday = today + timedelta(days=(FRIDAY - today.weekday()) % 7)
        return next_payday, next_payday - timedelta(days=7)

    if frequency == PayFrequency.BIWEEKLY:
        month_end = last_day_of_month(today.year, today.month)
        if today.day < 15:
            next_payday = today.replace(day=15)
        elif today < month_end:
            next_payday = month_end
        else:
            next_payday = add_months(today.replace(day=15), 1)

        if today.day < 15:
            last_payday = today.replace(day=1) - timedelta(days=1)
        else:
            last_payday = today.replace(day=15)
        return next_payday, last_payday

    if frequency == PayFrequency.MONTHLY:
        next_payday = last_day_of_month(today.year, today.month)
        return next_payday, today.replace(day=1) - timedelta(days=1)

    return today + timedelta(days=14), today - timedelta(days=14)


def next_payday(now: datetime, frequency: Union[PayFrequency, str]) -> PaydaySchedule:
    frequency_value = frequency.value if isinstance(frequency, PayFrequency) else str(frequency)
    today = now.date()
    upcoming, last = payday_window(today, frequency_value)

    until_payday = datetime.combine(upcoming, time.min) - now
    hours_remaining = max(math.ceil(until_payday.total_seconds() / 3600), 0)

    return PaydaySchedule(
        next_payday=upcoming,
        frequency=frequency_value,
        days_remaining=(upcoming - today).days,
        hours_remaining=hours_remaining,
        last_payday=last,
    )
