from datetime import date, datetime

from src.attendance_dashboard.attendance_dashboard.core.enums import PayFrequency
from src.attendance_dashboard.attendance_dashboard.payroll.payday import next_payday, payday_window


def test_weekly_payday_is_coming_friday():
    # 2026-10-19 is a Monday
    upcoming, last = payday_window(date(2026, 10, 19), PayFrequency.WEEKLY)

    assert upcoming == date(2026, 10, 23)
    assert last == date(2026, 10, 16)


def test_weekly_payday_on_friday_is_today():
    upcoming, _ = payday_window(date(2026, 10, 23), "weekly")

    assert upcoming == date(2026, 10, 23)


def test_biweekly_before_the_fifteenth():
    upcoming, last = payday_window(date(2026, 10, 3), PayFrequency.BIWEEKLY)

    assert upcoming == date(2026, 10, 15)
    assert last == date(2026, 9, 30)


def test_biweekly_after_the_fifteenth_pays_at_month_end():
    upcoming, last = payday_window(date(2026, 10, 19), PayFrequency.BIWEEKLY)

    assert upcoming == date(2026, 10, 31)
    assert last == date(2026, 10, 15)


def test_biweekly_on_month_end_moves_to_next_fifteenth():
    upcoming, last = payday_window(date(2026, 12, 31), PayFrequency.BIWEEKLY)

    assert upcoming == date(2027, 1, 15)
    assert last == date(2026, 12, 15)


def test_monthly_pays_on_last_day():
    upcoming, last = payday_window(date(2026, 2, 10), PayFrequency.MONTHLY)

    assert upcoming == date(2026, 2, 28)
    assert last == date(2026, 1, 31)


def test_unknown_frequency_falls_back_to_two_weeks():
    upcoming, last = payday_window(date(2026, 10, 19), "fortnightly-ish")

    assert upcoming == date(2026, 11, 2)
    assert last == date(2026, 10, 5)


def test_next_payday_counts_down_to_start_of_day():
    schedule = next_payday(datetime(2026, 10, 19, 9, 30), PayFrequency.WEEKLY)

    assert schedule.next_payday == date(2026, 10, 23)
    assert schedule.days_remaining == 4
    # 14h30 left on Monday + three full days
    assert schedule.hours_remaining == 87
    assert schedule.to_dict()["frequency"] == "weekly"


def test_hours_remaining_never_negative_on_payday():
    schedule = next_payday(datetime(2026, 10, 23, 15, 0), PayFrequency.WEEKLY)

    assert schedule.days_remaining == 0
    assert schedule.hours_remaining == 0
