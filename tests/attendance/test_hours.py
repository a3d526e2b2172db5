from datetime import time

from src.attendance_dashboard.attendance_dashboard.attendance.hours import calculate_hours


def test_same_day_shift():
    assert calculate_hours(time(8, 0), time(17, 30)) == 9.5


def test_overnight_shift_wraps_midnight():
    assert calculate_hours(time(22, 0), time(6, 0)) == 8.0


def test_rounded_to_two_decimals():
    assert calculate_hours(time(8, 0), time(8, 20)) == 0.33


def test_missing_clock_out_is_zero():
    assert calculate_hours(time(8, 0), None) == 0.0
    assert calculate_hours(None, time(17, 0)) == 0.0
