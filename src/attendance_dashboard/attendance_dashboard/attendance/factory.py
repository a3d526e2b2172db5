from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(
        self,
        *,
        clock_in: Optional[time],
        work_date: date,
        start_time: Optional[time],
        grace_minutes: int,
    ) -> AttendanceStrategy:
        if clock_in is None:
            return AbsentStrategy()
        if start_time is None:
            return NormalStrategy()

        shift_start = datetime.combine(work_date, start_time)
        if datetime.combine(work_date, clock_in) <= shift_start + timedelta(minutes=grace_minutes):
            return NormalStrategy()
        return LateStrategy()
