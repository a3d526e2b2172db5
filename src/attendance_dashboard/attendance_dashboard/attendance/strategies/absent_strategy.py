from __future__ import annotations

from datetime import date, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """No clock-in at all."""

    def decide(self, *, clock_in: Optional[time], work_date: date, start_time: time) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
