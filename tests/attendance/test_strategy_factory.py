from datetime import date, time

from src.attendance_dashboard.attendance_dashboard.attendance.factory import AttendanceStrategyFactory
from src.attendance_dashboard.attendance_dashboard.attendance.strategies.absent_strategy import AbsentStrategy
from src.attendance_dashboard.attendance_dashboard.attendance.strategies.late_strategy import LateStrategy
from src.attendance_dashboard.attendance_dashboard.attendance.strategies.normal_strategy import NormalStrategy
from src.attendance_dashboard.attendance_dashboard.core.enums import AttendanceStatus


def test_factory_clock_in_on_time_within_grace():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_clock_in(
        clock_in=time(8, 4, 59), work_date=date(2026, 10, 19), start_time=time(8, 0), grace_minutes=5
    )

    assert isinstance(strategy, NormalStrategy)


def test_factory_clock_in_late_after_grace():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_clock_in(
        clock_in=time(8, 6), work_date=date(2026, 10, 19), start_time=time(8, 0), grace_minutes=5
    )

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide(clock_in=time(8, 6), work_date=date(2026, 10, 19), start_time=time(8, 0))
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "Late by 6 min"


def test_factory_without_clock_in_is_absent():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_clock_in(clock_in=None, work_date=date(2026, 10, 19), start_time=time(8, 0), grace_minutes=5)

    assert isinstance(strategy, AbsentStrategy)
