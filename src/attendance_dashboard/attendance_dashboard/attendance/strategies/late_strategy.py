from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late clock-in."""

    def decide(self, *, clock_in: Optional[time], work_date: date, start_time: time) -> StatusDecision:
        late = datetime.combine(work_date, clock_in) - datetime.combine(work_date, start_time)
        minutes = int(late.total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes} min")
