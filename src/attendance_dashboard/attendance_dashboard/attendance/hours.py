from __future__ import annotations

from datetime import time
from typing import Optional


def calculate_hours(clock_in: Optional[time], clock_out: Optional[time]) -> float:
    """Hours between clock-in and clock-out, rounded to 2 decimals.

    A clock-out earlier than the clock-in is an overnight shift and wraps past
    midnight. Missing either time yields 0.
    """

    if clock_in is None or clock_out is None:
        return 0.0

    in_minutes = clock_in.hour * 60 + clock_in.minute
    out_minutes = clock_out.hour * 60 + clock_out.minute

    if out_minutes >= in_minutes:
        total_minutes = out_minutes - in_minutes
    else:
        total_minutes = (24 * 60 - in_minutes) + out_minutes

    return round(total_minutes / 60, 2)
