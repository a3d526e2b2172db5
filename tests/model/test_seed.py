from datetime import datetime

from src.attendance_dashboard.attendance_dashboard.core.enums import AttendanceStatus, EmployeeStatus
from src.attendance_dashboard.attendance_dashboard.employees.model import Employee
from src.attendance_dashboard.attendance_dashboard.model.seed import (
    DEFAULT_FIXTURE_PATH,
    backfill_today,
    default_snapshot,
    hash_passwords,
    load_fixture,
)
from src.attendance_dashboard.attendance_dashboard.model.snapshot import Snapshot

NOW = datetime(2026, 10, 19, 9, 30)


def test_default_snapshot_has_admin_and_today_attendance():
    snapshot = default_snapshot(NOW)

    assert len(snapshot.employees) == 6
    assert snapshot.employees[0].username == "admin"
    assert {r.employee_id for r in snapshot.attendance_records} == {"emp_001", "emp_002", "emp_003", "emp_004"}
    assert all(r.date == NOW.date() for r in snapshot.attendance_records)


def test_backfill_distribution_is_positional():
    employees = [Employee(id=f"e{i}", full_name=f"E{i}") for i in range(8)]
    snapshot = Snapshot(employees=employees)

    added = backfill_today(snapshot, NOW)

    statuses = [r.status for r in snapshot.attendance_records]
    assert added == 8
    assert statuses == [
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.PRESENT,
        AttendanceStatus.ABSENT,
        AttendanceStatus.LATE,
        AttendanceStatus.PRESENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
    ]
    assert snapshot.attendance_records[3].notes == "Sick leave"


def test_backfill_skips_covered_and_inactive_employees():
    snapshot = default_snapshot(NOW)
    snapshot.employees.append(Employee(id="emp_x", full_name="X", status=EmployeeStatus.INACTIVE))

    assert backfill_today(snapshot, NOW) == 2
    assert backfill_today(snapshot, NOW) == 0


def test_hash_passwords_keeps_existing_hashes():
    hashed = hash_passwords([Employee(id="a", full_name="A", password="pw")], method="pbkdf2:sha256:1000")
    again = hash_passwords(hashed, method="pbkdf2:sha256:1000")

    assert hashed[0].password.startswith("pbkdf2:sha256:1000$")
    assert again[0].password == hashed[0].password


def test_load_fixture(tmp_path):
    assert load_fixture(DEFAULT_FIXTURE_PATH)["employees"]
    assert load_fixture(tmp_path / "missing.json") is None

    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")
    assert load_fixture(broken) is None

    no_employees = tmp_path / "empty.json"
    no_employees.write_text('{"employees": "nope"}', encoding="utf-8")
    assert load_fixture(no_employees) is None
