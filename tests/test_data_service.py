from __future__ import annotations

import asyncio
import json
from datetime import date, time

import pytest

from src.attendance_dashboard.attendance_dashboard.attendance.model import (
    AttendanceFilters,
    AttendancePatch,
    NewAttendance,
)
from src.attendance_dashboard.attendance_dashboard.core.constants import DATA_KEY, MINIMAL_DATA_KEY
from src.attendance_dashboard.attendance_dashboard.core.enums import (
    AttendanceStatus,
    EmployeeStatus,
    PayFrequency,
    StoreStatus,
)
from src.attendance_dashboard.attendance_dashboard.core.exceptions import NotFoundError, ValidationError
from src.attendance_dashboard.attendance_dashboard.employees.auth import AuthSuccess, InvalidCredentials
from src.attendance_dashboard.attendance_dashboard.employees.model import EmployeePatch, NewEmployee
from src.attendance_dashboard.attendance_dashboard.model.seed import DEFAULT_FIXTURE_PATH
from src.attendance_dashboard.attendance_dashboard.payroll.model import PayrollFilters
from src.attendance_dashboard.attendance_dashboard.settings.model import PayrollPatch, SettingsPatch
from src.attendance_dashboard.attendance_dashboard.storage.backends import MemoryStorage


def run(coro):
    return asyncio.run(coro)


def persisted(storage):
    return json.loads(storage.get_item(DATA_KEY))


# --- bootstrap ---------------------------------------------------------------


def test_bootstrap_without_fixture_builds_default_dataset(make_service, storage, fixed_now):
    service = make_service()

    employees = run(service.get_employees())
    assert len(employees) == 6
    assert sum(1 for e in employees if e.role.value == "admin") == 1
    assert all(e.password.startswith("pbkdf2:") for e in employees)
    assert service.store.status == StoreStatus.FIXTURE_LOADED

    today = run(service.get_today_attendance())
    assert {r.employee_id for r in today} == {e.id for e in employees}
    assert len(persisted(storage)["employees"]) == 6


def test_bootstrap_from_bundled_fixture(make_service):
    service = make_service(fixture_path=DEFAULT_FIXTURE_PATH)

    employees = run(service.get_employees())
    assert len(employees) == 8
    assert service.store.status == StoreStatus.FIXTURE_LOADED

    # The inactive employee gets no placeholder row.
    today = run(service.get_today_attendance())
    assert len(today) == 7
    assert "emp_008" not in {r.employee_id for r in today}


def test_bootstrap_cleans_persisted_snapshot(make_service, storage, fixed_now):
    storage.set_item(
        DATA_KEY,
        json.dumps(
            {
                "employees": [
                    {"id": "emp_1", "fullName": "Ana Cruz", "username": "ana", "status": "active"},
                    {"id": "emp_2"},
                    {"fullName": "No Id"},
                ],
                "attendanceRecords": [
                    {"id": "att_1", "employeeId": "emp_1", "date": fixed_now.date().isoformat(), "status": "present"},
                    {"id": "att_2", "employeeId": "emp_1"},
                    None,
                ],
                "payrollRecords": [{"id": "pay_1"}],
                "settings": {},
            }
        ),
    )

    service = make_service()

    assert [e.id for e in run(service.get_employees())] == ["emp_1"]
    assert [r.id for r in run(service.get_attendance_records())] == ["att_1"]
    assert service.store.status == StoreStatus.READY

    document = persisted(storage)
    assert len(document["employees"]) == 1
    assert len(document["attendanceRecords"]) == 1
    assert document["payrollRecords"] == []


def test_bootstrap_drops_employee_with_malformed_wage_history(make_service, storage):
    storage.set_item(
        DATA_KEY,
        json.dumps(
            {
                "employees": [
                    {"id": "emp_1", "fullName": "Ana Cruz"},
                    {"id": "emp_2", "fullName": "Bob Reyes", "lastWageUpdate": "garbage"},
                ],
                "attendanceRecords": [],
            }
        ),
    )

    service = make_service()

    assert [e.id for e in run(service.get_employees())] == ["emp_1"]
    assert [e["id"] for e in persisted(storage)["employees"]] == ["emp_1"]


def test_bootstrap_corrupted_snapshot_falls_back_to_seed(make_service, storage):
    storage.set_item(DATA_KEY, "{broken")

    service = make_service()

    assert len(run(service.get_employees())) == 6


def test_bootstrap_backfills_today_for_persisted_data(make_service, storage, fixed_now):
    storage.set_item(
        DATA_KEY,
        json.dumps(
            {
                "employees": [
                    {"id": "emp_1", "fullName": "A"},
                    {"id": "emp_2", "fullName": "B"},
                    {"id": "emp_3", "fullName": "C", "status": "inactive"},
                ],
                "attendanceRecords": [],
            }
        ),
    )

    service = make_service()

    today = run(service.get_today_attendance())
    by_employee = {r.employee_id: r for r in today}
    assert set(by_employee) == {"emp_1", "emp_2"}
    assert by_employee["emp_1"].status == AttendanceStatus.PRESENT
    assert by_employee["emp_2"].status == AttendanceStatus.LATE
    assert by_employee["emp_2"].clock_in == time(8, 20)
    assert len(persisted(storage)["attendanceRecords"]) == 2


# --- employees ---------------------------------------------------------------


def test_add_employee_generates_id_hashes_password_and_notifies(make_service, storage):
    service = make_service()
    events = []
    service.on("employeeAdded", lambda payload: events.append((payload, persisted(storage))))

    employee = run(service.add_employee(NewEmployee(full_name="Ana Cruz", username="ana", password="secret1")))

    assert employee.id.startswith("emp_")
    assert employee.password != "secret1"
    payload, document_at_emit = events[0]
    assert payload["employee"]["id"] == employee.id
    assert "password" not in payload["employee"]
    # Persisted before listeners run.
    assert employee.id in {e["id"] for e in document_at_emit["employees"]}


def test_add_employee_rejects_duplicates_and_blank_names(make_service):
    service = make_service()

    with pytest.raises(ValidationError):
        run(service.add_employee(NewEmployee(full_name="Dup", id="emp_001")))
    with pytest.raises(ValidationError):
        run(service.add_employee(NewEmployee(full_name="Dup", username="admin")))
    with pytest.raises(ValidationError):
        run(service.add_employee(NewEmployee(full_name="   ")))


def test_get_unknown_employee_raises_not_found(make_service):
    service = make_service()

    with pytest.raises(NotFoundError):
        run(service.get_employee("emp_missing"))


def test_update_employee_merges_patch(make_service):
    service = make_service()
    events = []
    service.on("employeeUpdated", events.append)

    updated = run(service.update_employee("emp_003", EmployeePatch(position="Foreman")))

    assert updated.position == "Foreman"
    assert updated.full_name == "Mike Worker"
    assert updated.hourly_rate == 18.0
    assert events[0]["previous"]["position"] == "Construction Worker"
    assert events[0]["employee"]["position"] == "Foreman"
    assert events[0]["changes"] == {"position": "Foreman"}


def test_update_unknown_employee_raises_not_found(make_service):
    service = make_service()

    with pytest.raises(NotFoundError):
        run(service.update_employee("emp_missing", EmployeePatch(position="x")))


def test_update_employee_wage_records_audit_entry(make_service, fixed_now):
    service = make_service()
    events = []
    service.on("employeeWageUpdated", events.append)

    change = run(service.update_employee_wage("emp_002", 17.5, "Annual review"))

    assert change.old_rate == 15.0
    assert change.new_rate == 17.5
    assert change.employee.hourly_rate == 17.5
    assert change.employee.last_wage_update.reason == "Annual review"
    assert change.employee.last_wage_update.date == fixed_now
    assert events == [{"employee_id": "emp_002", "old_rate": 15.0, "new_rate": 17.5, "reason": "Annual review"}]


def test_negative_wage_is_rejected(make_service):
    service = make_service()

    with pytest.raises(ValidationError):
        run(service.update_employee_wage("emp_002", -1))


def test_delete_employee(make_service):
    service = make_service()
    events = []
    service.on("employeeDeleted", events.append)

    assert run(service.delete_employee("emp_006")) is True
    assert events[0]["employee_id"] == "emp_006"
    with pytest.raises(NotFoundError):
        run(service.get_employee("emp_006"))
    with pytest.raises(NotFoundError):
        run(service.delete_employee("emp_006"))


def test_departments_and_members(make_service):
    service = make_service()

    departments = run(service.get_departments())
    assert departments[:2] == ["Management", "Operations"]
    assert len(departments) == len(set(departments))

    operations = run(service.get_employees_by_department("Operations"))
    assert len(operations) == 5


# --- attendance --------------------------------------------------------------


def test_add_attendance_upserts_by_employee_and_day(make_service):
    service = make_service()
    events = []
    service.on("attendanceUpdated", events.append)
    day = date(2026, 10, 16)

    first = run(service.add_attendance_record(NewAttendance(employee_id="emp_003", date=day, clock_in=time(8, 0))))
    second = run(
        service.add_attendance_record(
            NewAttendance(employee_id="emp_003", date=day, clock_in=time(8, 0), clock_out=time(17, 0))
        )
    )

    records = run(service.get_attendance_records(AttendanceFilters(employee_id="emp_003", date=day)))
    assert len(records) == 1
    assert second.id == first.id
    assert records[0].hours == 9.0
    assert [e["action"] for e in events] == ["add", "update"]


def test_add_attendance_for_unknown_employee_raises(make_service):
    service = make_service()

    with pytest.raises(NotFoundError):
        run(service.add_attendance_record(NewAttendance(employee_id="emp_missing", date=date(2026, 10, 16))))


@pytest.mark.parametrize(
    "clock_in, expected",
    [
        (time(7, 55), AttendanceStatus.PRESENT),
        (time(8, 5), AttendanceStatus.PRESENT),
        (time(8, 6), AttendanceStatus.LATE),
        (None, AttendanceStatus.ABSENT),
    ],
)
def test_missing_status_is_derived_from_clock_in(make_service, clock_in, expected):
    service = make_service()

    record = run(
        service.add_attendance_record(NewAttendance(employee_id="emp_004", date=date(2026, 10, 15), clock_in=clock_in))
    )

    assert record.status == expected


def test_explicit_status_is_kept(make_service):
    service = make_service()

    record = run(
        service.add_attendance_record(
            NewAttendance(
                employee_id="emp_004",
                date=date(2026, 10, 15),
                clock_in=time(9, 0),
                status=AttendanceStatus.ON_LEAVE,
            )
        )
    )

    assert record.status == AttendanceStatus.ON_LEAVE


def test_update_attendance_recomputes_hours(make_service):
    service = make_service()
    record = run(
        service.add_attendance_record(
            NewAttendance(employee_id="emp_004", date=date(2026, 10, 16), clock_in=time(22, 0))
        )
    )

    updated = run(service.update_attendance_record(record.id, AttendancePatch(clock_out=time(6, 30))))

    assert updated.hours == 8.5
    assert updated.employee_id == "emp_004"


def test_update_attendance_cannot_collide_with_another_day(make_service):
    service = make_service()
    run(service.add_attendance_record(NewAttendance(employee_id="emp_004", date=date(2026, 10, 15))))
    other = run(service.add_attendance_record(NewAttendance(employee_id="emp_004", date=date(2026, 10, 16))))

    with pytest.raises(ValidationError):
        run(service.update_attendance_record(other.id, AttendancePatch(date=date(2026, 10, 15))))


def test_update_unknown_attendance_raises(make_service):
    service = make_service()

    with pytest.raises(NotFoundError):
        run(service.update_attendance_record("att_missing", AttendancePatch(notes="x")))


def test_delete_attendance_record(make_service):
    service = make_service()
    events = []
    service.on("attendanceUpdated", events.append)
    record = run(service.add_attendance_record(NewAttendance(employee_id="emp_004", date=date(2026, 10, 15))))

    assert run(service.delete_attendance_record(record.id)) is True
    assert events[-1]["action"] == "delete"
    assert run(service.get_attendance_records(AttendanceFilters(date=date(2026, 10, 15)))) == []


def test_inverted_date_range_yields_empty_result(make_service):
    service = make_service()

    records = run(
        service.get_attendance_records(AttendanceFilters(start_date=date(2026, 10, 20), end_date=date(2026, 10, 1)))
    )

    assert records == []


# --- analytics & payroll -----------------------------------------------------


def test_today_stats_for_default_dataset(make_service):
    service = make_service()

    stats = run(service.get_attendance_stats())

    assert stats.total_employees == 6
    assert stats.present == 4
    assert stats.late == 2
    assert stats.absent == 0
    assert stats.attendance_rate == 100
    assert service.snapshot.analytics["attendanceStats"]["today"]["present"] == 4


def test_stats_ignore_deleted_employees(make_service):
    service = make_service()
    run(service.delete_employee("emp_006"))

    stats = run(service.get_attendance_stats())

    assert stats.total_employees == 5
    assert stats.present + stats.late + stats.absent == 5


def test_calculate_payroll_formula(make_service, fixed_now):
    service = make_service()
    run(service.update_employee_wage("emp_005", 20.0))
    run(
        service.add_attendance_record(
            NewAttendance(
                employee_id="emp_005",
                date=date(2026, 10, 16),
                clock_in=time(7, 0),
                clock_out=time(17, 0),
                status=AttendanceStatus.PRESENT,
            )
        )
    )
    events = []
    service.on("payrollCalculated", events.append)

    payroll = run(service.calculate_payroll("emp_005", date(2026, 10, 12), date(2026, 10, 18)))

    assert payroll.regular_hours == 8
    assert payroll.overtime_hours == 2
    assert payroll.gross_pay == pytest.approx(220)
    assert payroll.tax_amount == pytest.approx(44)
    assert payroll.net_pay == pytest.approx(176)
    assert payroll.currency == "PHP"
    assert payroll.calculated_at == fixed_now
    assert events[0]["record"]["id"] == payroll.id


def test_payroll_history_is_append_only(make_service):
    service = make_service()

    first = run(service.calculate_payroll("emp_002", date(2026, 10, 1), date(2026, 10, 15)))
    second = run(service.calculate_payroll("emp_002", date(2026, 10, 1), date(2026, 10, 15)))

    history = run(service.get_payroll_history(PayrollFilters(employee_id="emp_002")))
    assert [p.id for p in history] == [first.id, second.id]


def test_payroll_keeps_zero_hourly_rate(make_service):
    service = make_service()
    run(service.update_employee_wage("emp_005", 0))
    run(
        service.add_attendance_record(
            NewAttendance(
                employee_id="emp_005",
                date=date(2026, 10, 16),
                clock_in=time(7, 0),
                clock_out=time(17, 0),
                status=AttendanceStatus.PRESENT,
            )
        )
    )

    record = run(service.calculate_payroll("emp_005", date(2026, 10, 12), date(2026, 10, 18)))

    assert record.hourly_rate == 0.0
    assert record.gross_pay == 0.0
    assert record.net_pay == 0.0


def test_payroll_for_unknown_employee_raises(make_service):
    service = make_service()

    with pytest.raises(NotFoundError):
        run(service.calculate_payroll("emp_missing", date(2026, 10, 1), date(2026, 10, 15)))


def test_next_payday_follows_settings(make_service):
    service = make_service()

    assert run(service.get_next_payday()).next_payday == date(2026, 10, 31)

    run(service.save_settings(SettingsPatch(payroll=PayrollPatch(frequency=PayFrequency.WEEKLY))))

    assert run(service.get_next_payday()).next_payday == date(2026, 10, 23)


# --- settings ----------------------------------------------------------------


def test_save_settings_merges_sections(make_service, fixed_now):
    service = make_service()
    events = []
    service.on("settingsUpdated", events.append)

    settings = run(service.save_settings(SettingsPatch(payroll=PayrollPatch(overtime_rate=2.0))))

    assert settings.payroll.overtime_rate == 2.0
    assert settings.payroll.currency == "PHP"
    assert settings.company.name == "Bricks Company"
    assert settings.last_updated == fixed_now
    assert events[0]["settings"]["payroll"]["overtimeRate"] == 2.0


def test_invalid_settings_are_rejected(make_service):
    service = make_service()

    with pytest.raises(ValidationError):
        run(service.save_settings(SettingsPatch(payroll=PayrollPatch(tax_rate=1.5))))
    assert run(service.get_settings()).payroll.tax_rate == 0.2


# --- auth, status, persistence -----------------------------------------------


def test_authenticate(make_service):
    service = make_service()

    ok = run(service.authenticate("admin", "admin123"))
    assert isinstance(ok, AuthSuccess)
    assert ok.user.employee_id == "emp_001"
    assert ok.token

    assert isinstance(run(service.authenticate("admin", "wrong")), InvalidCredentials)
    assert isinstance(run(service.authenticate("nobody", "admin123")), InvalidCredentials)


def test_inactive_employee_cannot_sign_in(make_service):
    service = make_service()
    run(service.update_employee("emp_002", EmployeePatch(status=EmployeeStatus.INACTIVE)))

    assert isinstance(run(service.authenticate("employee", "employee123")), InvalidCredentials)


def test_connection_status_change_is_emitted_once(make_service):
    service = make_service()
    events = []
    service.on("connectionChange", events.append)

    service.set_connection_status(False)
    service.set_connection_status(False)
    service.set_connection_status(True)

    assert events == [{"status": "offline"}, {"status": "online"}]


def test_quota_pressure_keeps_change_in_memory(make_service, fixed_now):
    probe = make_service(backing=MemoryStorage(), channel=False)
    minimal_size = len(MINIMAL_DATA_KEY) + len(json.dumps(probe.snapshot.to_minimal_dict()))

    small = MemoryStorage(quota_bytes=minimal_size + 200)
    service = make_service(backing=small)
    assert service.store.status == StoreStatus.QUOTA_DEGRADED

    record = run(service.add_attendance_record(NewAttendance(employee_id="emp_004", date=date(2026, 10, 16))))

    assert record in run(service.get_attendance_records())
    assert small.get_item(DATA_KEY) is None
    assert len(json.loads(small.get_item(MINIMAL_DATA_KEY))["employees"]) == 6


def test_clear_all_data(make_service, storage):
    service = make_service()
    events = []
    service.on("dataSync", events.append)

    run(service.clear_all_data())

    assert run(service.get_employees()) == []
    assert storage.get_item(DATA_KEY) is None
    assert events[0]["action"] == "clear"
    assert service.store.status == StoreStatus.NOT_FOUND


# --- ordering ----------------------------------------------------------------


def test_reads_issued_after_a_mutation_see_it_under_latency(make_service):
    service = make_service(latency=(0.0, 0.02))

    async def scenario():
        added = asyncio.ensure_future(service.add_employee(NewEmployee(full_name="Ana Cruz")))
        reads = [asyncio.ensure_future(service.get_employees()) for _ in range(20)]
        return await asyncio.gather(added, *reads)

    employee, *results = run(scenario())

    assert all(employee.id in [e.id for e in employees] for employees in results)


def test_mutations_apply_in_program_order_under_latency(make_service):
    service = make_service(latency=(0.0, 0.02))

    async def scenario():
        await asyncio.gather(*[service.update_employee_wage("emp_003", rate) for rate in range(20, 30)])

    run(scenario())

    assert service.snapshot.find_employee("emp_003").hourly_rate == 29.0
