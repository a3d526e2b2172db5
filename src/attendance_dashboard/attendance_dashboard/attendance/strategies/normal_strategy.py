from __future__ import annotations

from datetime import date, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time clock-in."""

    def decide(self, *, clock_in: Optional[time], work_date: date, start_time: time) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="On time")
