"""Query and mutation API over the in-memory model.

Every public method is a coroutine. Mutations run the same steps in order:
validate, apply to the snapshot, persist (pinging other tabs when the full
save went through), notify in-tab listeners, return the result.

The work of a call happens before its simulated latency is awaited, so calls
take effect in the order they were issued.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from werkzeug.security import generate_password_hash

from .analytics.model import AttendanceStats, DayAttendance, PerformanceMetric
from .analytics.stats import attendance_stats, calendar_attendance, employee_performance
from .attendance.factory import AttendanceStrategyFactory
from .attendance.hours import calculate_hours
from .attendance.model import AttendanceFilters, AttendancePatch, AttendanceRecord, NewAttendance
from .common.datetime_utils import epoch_millis, now_local
from .common.identifiers import new_id
from .common.patching import merge_patch
from .common.validators import require_non_empty, require_non_negative
from .core.constants import (
    ATTENDANCE_UPDATED,
    CONNECTION_CHANGE,
    DATA_SYNC,
    DEFAULT_HOURLY_RATE,
    DEFAULT_PASSWORD_HASH_METHOD,
    EMPLOYEE_ADDED,
    EMPLOYEE_DELETED,
    EMPLOYEE_UPDATED,
    EMPLOYEE_WAGE_UPDATED,
    PAYROLL_CALCULATED,
    SETTINGS_UPDATED,
)
from .core.enums import SaveOutcome
from .core.exceptions import NotFoundError, ValidationError
from .employees.auth import AuthResult, AuthSuccess, authenticate
from .employees.model import Employee, EmployeePatch, NewEmployee, WageChange, WageUpdate
from .events.notifier import ChangeNotifier, Handler
from .model.seed import backfill_today, default_snapshot, hash_passwords, load_fixture
from .model.snapshot import Snapshot, clean_snapshot
from .payroll.calculator.base import PayrollCalculator, PayrollPolicy
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.model import PayrollFilters, PayrollRecord
from .payroll.payday import PaydaySchedule, next_payday
from .settings.model import Settings, SettingsPatch
from .storage.adapter import DurableStore
from .sync.synchronizer import CrossTabSynchronizer

logger = logging.getLogger(__name__)


class DataService:
    def __init__(
        self,
        store: DurableStore,
        *,
        notifier: Optional[ChangeNotifier] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        payroll_calculator: Optional[PayrollCalculator] = None,
        clock: Callable = now_local,
        latency: Tuple[float, float] = (0.0, 0.0),
        fixture_path: Union[str, Path, None] = None,
        hash_method: str = DEFAULT_PASSWORD_HASH_METHOD,
    ):
        self._store = store
        self._notifier = notifier or ChangeNotifier()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = payroll_calculator or StandardPayrollCalculator()
        self._clock = clock
        self._latency = latency
        self._fixture_path = fixture_path
        self._hash_method = hash_method
        self._online = True
        self._auth_token: Optional[str] = None

        self._snapshot = self._bootstrap()

        self._synchronizer: Optional[CrossTabSynchronizer] = None
        if store.channel is not None:
            self._synchronizer = CrossTabSynchronizer(
                channel=store.channel,
                store=store,
                notifier=self._notifier,
                replace_model=self._replace_model,
                clock=clock,
            )

    # --- bootstrap -------------------------------------------------------

    def _bootstrap(self) -> Snapshot:
        now = self._clock()
        persist = False
        seeded = False

        document = self._store.load()
        if document is not None:
            snapshot, report = clean_snapshot(document)
            persist = report.changed
        else:
            snapshot = self._seed_snapshot()
            persist = seeded = True

        hashed = hash_passwords(snapshot.employees, method=self._hash_method)
        if hashed != snapshot.employees:
            snapshot.employees = hashed
            persist = True
        if backfill_today(snapshot, now):
            persist = True

        outcome = None
        if persist:
            outcome = self._store.save(snapshot.to_dict(), minimal=snapshot.to_minimal_dict())

        if seeded and outcome == SaveOutcome.OK:
            self._store.mark_fixture_loaded()
        elif outcome is None:
            self._store.mark_ready()

        logger.info(
            "Data layer ready: %d employees, %d attendance records (store=%s)",
            len(snapshot.employees),
            len(snapshot.attendance_records),
            self._store.status.value,
        )
        return snapshot

    def _seed_snapshot(self) -> Snapshot:
        fixture = load_fixture(self._fixture_path)
        if fixture is not None:
            snapshot, _ = clean_snapshot(fixture)
            if snapshot.employees:
                logger.info("Loaded bundled fixture")
                return snapshot
            logger.warning("Fixture contained no usable employees")

        logger.info("Creating default dataset")
        return default_snapshot(self._clock())

    def _hash(self, password: str) -> str:
        return generate_password_hash(password, method=self._hash_method)

    def _replace_model(self, document: Dict[str, Any]) -> None:
        snapshot, _ = clean_snapshot(document)
        self._snapshot = snapshot

    # --- plumbing --------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def store(self) -> DurableStore:
        return self._store

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def is_online(self) -> bool:
        return self._online

    async def simulate_delay(self) -> None:
        low, high = self._latency
        await asyncio.sleep(random.uniform(low, high) if high > 0 else 0)

    def _persist(self, action: str) -> SaveOutcome:
        outcome = self._store.save(self._snapshot.to_dict(), minimal=self._snapshot.to_minimal_dict())
        if outcome == SaveOutcome.OK:
            self._store.broadcast_sync(action)
        elif outcome == SaveOutcome.DEGRADED:
            logger.warning("Saved reduced snapshot after %s; history kept in memory only", action)
        return outcome

    def on(self, event: str, handler: Handler) -> None:
        self._notifier.on(event, handler)

    def off(self, event: str, handler: Handler) -> None:
        self._notifier.off(event, handler)

    def close(self) -> None:
        if self._synchronizer is not None:
            self._synchronizer.close()
            self._synchronizer = None
        if self._store.channel is not None:
            self._store.channel.close()

    def _employee_index(self, employee_id: str) -> int:
        for i, e in enumerate(self._snapshot.employees):
            if e.id == employee_id:
                return i
        raise NotFoundError(f"Employee with ID {employee_id} not found")

    def _attendance_index(self, record_id: str) -> int:
        for i, r in enumerate(self._snapshot.attendance_records):
            if r.id == record_id:
                return i
        raise NotFoundError(f"Attendance record with ID {record_id} not found")

    def _check_username(self, username: Optional[str], *, exclude_id: Optional[str] = None) -> None:
        if not username:
            return
        for e in self._snapshot.employees:
            if e.username == username and e.id != exclude_id:
                raise ValidationError(f"Username {username!r} is already taken")

    # --- employees -------------------------------------------------------

    async def get_employees(self) -> List[Employee]:
        employees = list(self._snapshot.employees)
        await self.simulate_delay()
        return employees

    async def get_employee(self, employee_id: str) -> Employee:
        employee = self._snapshot.employees[self._employee_index(employee_id)]
        await self.simulate_delay()
        return employee

    async def add_employee(self, data: NewEmployee) -> Employee:
        full_name = require_non_empty(data.full_name, "fullName")
        if data.id and self._snapshot.find_employee(data.id):
            raise ValidationError(f"Employee with ID {data.id} already exists")
        self._check_username(data.username)
        hourly_rate = require_non_negative(data.hourly_rate, "hourlyRate") if data.hourly_rate is not None else None

        now = self._clock()
        employee = Employee(
            id=data.id or new_id("emp"),
            full_name=full_name,
            username=data.username,
            password=self._hash(data.password) if data.password else None,
            role=data.role,
            email=data.email,
            department=data.department,
            position=data.position,
            start_date=data.start_date,
            hourly_rate=hourly_rate,
            status=data.status,
            created_at=now,
            last_modified=now,
        )
        self._snapshot.employees.append(employee)
        self._persist("employeeAdded")

        self._notifier.emit(EMPLOYEE_ADDED, {"employee": employee.to_public_dict()})
        await self.simulate_delay()
        return employee

    async def update_employee(self, employee_id: str, patch: EmployeePatch) -> Employee:
        index = self._employee_index(employee_id)
        before = self._snapshot.employees[index]
        if patch.full_name is not None:
            require_non_empty(patch.full_name, "fullName")
        if patch.hourly_rate is not None:
            require_non_negative(patch.hourly_rate, "hourlyRate")
        self._check_username(patch.username, exclude_id=employee_id)

        if patch.password:
            patch = replace(patch, password=self._hash(patch.password))
        after = replace(merge_patch(before, patch), last_modified=self._clock())

        self._snapshot.employees[index] = after
        self._persist("employeeUpdated")

        self._notifier.emit(
            EMPLOYEE_UPDATED,
            {
                "employee_id": employee_id,
                "previous": before.to_public_dict(),
                "employee": after.to_public_dict(),
                "changes": patch.to_dict(),
            },
        )
        await self.simulate_delay()
        return after

    async def update_employee_wage(self, employee_id: str, new_rate: float, reason: str = "") -> WageChange:
        index = self._employee_index(employee_id)
        rate = require_non_negative(new_rate, "hourlyRate")
        before = self._snapshot.employees[index]

        now = self._clock()
        after = replace(
            before,
            hourly_rate=rate,
            last_wage_update=WageUpdate(
                date=now,
                old_rate=before.hourly_rate,
                new_rate=rate,
                reason=reason or "",
                by="admin" if self._auth_token else "system",
            ),
            last_modified=now,
        )
        self._snapshot.employees[index] = after
        self._persist("employeeWageUpdated")

        self._notifier.emit(
            EMPLOYEE_WAGE_UPDATED,
            {"employee_id": employee_id, "old_rate": before.hourly_rate, "new_rate": rate, "reason": reason or ""},
        )
        await self.simulate_delay()
        return WageChange(employee=after, old_rate=before.hourly_rate, new_rate=rate)

    async def delete_employee(self, employee_id: str) -> bool:
        index = self._employee_index(employee_id)
        removed = self._snapshot.employees.pop(index)
        self._persist("employeeDeleted")

        self._notifier.emit(EMPLOYEE_DELETED, {"employee_id": employee_id, "employee": removed.to_public_dict()})
        await self.simulate_delay()
        return True

    async def get_departments(self) -> List[str]:
        seen: Dict[str, None] = {}
        for dept in self._snapshot.settings.departments:
            seen.setdefault(dept, None)
        for e in self._snapshot.employees:
            if e.department:
                seen.setdefault(e.department, None)
        await self.simulate_delay()
        return list(seen)

    async def get_employees_by_department(self, department: str) -> List[Employee]:
        employees = [e for e in self._snapshot.employees if e.department == department]
        await self.simulate_delay()
        return employees

    # --- attendance ------------------------------------------------------

    async def get_attendance_records(self, filters: Optional[AttendanceFilters] = None) -> List[AttendanceRecord]:
        filters = filters or AttendanceFilters()
        records = [r for r in self._snapshot.attendance_records if filters.matches(r)]
        await self.simulate_delay()
        return records

    async def get_today_attendance(self) -> List[AttendanceRecord]:
        return await self.get_attendance_records(AttendanceFilters(date=self._clock().date()))

    async def add_attendance_record(self, data: NewAttendance) -> AttendanceRecord:
        """Insert or replace the record for (employee, date)."""

        if not self._snapshot.find_employee(data.employee_id):
            raise NotFoundError(f"Employee with ID {data.employee_id} not found")

        records = self._snapshot.attendance_records
        existing_index = next(
            (i for i, r in enumerate(records) if r.employee_id == data.employee_id and r.date == data.date),
            None,
        )
        existing = records[existing_index] if existing_index is not None else None

        if data.id and any(r.id == data.id and r is not existing for r in records):
            raise ValidationError(f"Attendance record with ID {data.id} already exists")

        status, notes = data.status, data.notes
        if status is None:
            settings = self._snapshot.settings
            strategy = self._factory.for_clock_in(
                clock_in=data.clock_in,
                work_date=data.date,
                start_time=settings.company.start_time,
                grace_minutes=settings.attendance.late_grace_minutes,
            )
            decision = strategy.decide(
                clock_in=data.clock_in, work_date=data.date, start_time=settings.company.start_time
            )
            status = decision.status
            notes = notes or decision.note

        now = self._clock()
        record = AttendanceRecord(
            id=data.id or (existing.id if existing else new_id("att")),
            employee_id=data.employee_id,
            date=data.date,
            status=status,
            clock_in=data.clock_in,
            clock_out=data.clock_out,
            hours=calculate_hours(data.clock_in, data.clock_out),
            notes=notes,
            created_at=existing.created_at if existing and existing.created_at else now,
            last_modified=now,
        )

        if existing_index is not None:
            records[existing_index] = record
            action = "update"
        else:
            records.append(record)
            action = "add"
        self._persist("attendanceUpdated")

        payload = {"action": action, "record": record.to_dict()}
        if existing is not None:
            payload["previous"] = existing.to_dict()
        self._notifier.emit(ATTENDANCE_UPDATED, payload)
        await self.simulate_delay()
        return record

    async def update_attendance_record(self, record_id: str, patch: AttendancePatch) -> AttendanceRecord:
        index = self._attendance_index(record_id)
        records = self._snapshot.attendance_records
        before = records[index]

        if patch.date is not None and patch.date != before.date:
            if any(r.employee_id == before.employee_id and r.date == patch.date for r in records):
                raise ValidationError(
                    f"Employee {before.employee_id} already has attendance for {patch.date.isoformat()}"
                )

        after = merge_patch(before, patch)
        if patch.clock_in is not None or patch.clock_out is not None:
            after = replace(after, hours=calculate_hours(after.clock_in, after.clock_out))
        after = replace(after, last_modified=self._clock())

        records[index] = after
        self._persist("attendanceUpdated")

        self._notifier.emit(
            ATTENDANCE_UPDATED,
            {"action": "update", "record": after.to_dict(), "previous": before.to_dict()},
        )
        await self.simulate_delay()
        return after

    async def delete_attendance_record(self, record_id: str) -> bool:
        index = self._attendance_index(record_id)
        removed = self._snapshot.attendance_records.pop(index)
        self._persist("attendanceUpdated")

        self._notifier.emit(ATTENDANCE_UPDATED, {"action": "delete", "record": removed.to_dict()})
        await self.simulate_delay()
        return True

    # --- analytics -------------------------------------------------------

    async def get_attendance_stats(self, target: Optional[date] = None) -> AttendanceStats:
        now = self._clock()
        stats = attendance_stats(
            self._snapshot.employees,
            self._snapshot.attendance_records,
            self._snapshot.settings,
            target=target or now.date(),
            now=now,
        )
        # Cached only; written with the next save.
        self._snapshot.analytics["attendanceStats"] = stats.to_dict()
        await self.simulate_delay()
        return stats

    async def get_calendar_attendance(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> Dict[date, DayAttendance]:
        days = calendar_attendance(self._snapshot.attendance_records, start=start, end=end)
        await self.simulate_delay()
        return days

    async def get_employee_performance(self, employee_id: Optional[str] = None) -> List[PerformanceMetric]:
        metrics = employee_performance(
            self._snapshot.employees,
            self._snapshot.attendance_records,
            now=self._clock(),
            employee_id=employee_id,
        )
        await self.simulate_delay()
        return metrics

    # --- payroll ---------------------------------------------------------

    async def calculate_payroll(self, employee_id: str, start: date, end: date) -> PayrollRecord:
        employee = self._snapshot.employees[self._employee_index(employee_id)]
        settings = self._snapshot.settings
        records = [
            r
            for r in self._snapshot.attendance_records
            if r.employee_id == employee_id and start <= r.date <= end
        ]

        # A rate of 0 is a real rate; only a missing one falls back.
        hourly_rate = employee.hourly_rate
        if hourly_rate is None:
            hourly_rate = settings.payroll.standard_wage
        if hourly_rate is None:
            hourly_rate = DEFAULT_HOURLY_RATE

        policy = PayrollPolicy(
            hourly_rate=hourly_rate,
            standard_hours=settings.company.working_hours,
            overtime_rate=settings.payroll.overtime_rate,
            tax_rate=settings.payroll.tax_rate,
        )
        breakdown = self._calculator.calculate(records, policy)

        payroll = PayrollRecord(
            id=new_id("pay"),
            employee_id=employee_id,
            employee_name=employee.full_name,
            period_start=start,
            period_end=end,
            hourly_rate=policy.hourly_rate,
            regular_hours=breakdown.regular_hours,
            overtime_hours=breakdown.overtime_hours,
            regular_pay=breakdown.regular_pay,
            overtime_pay=breakdown.overtime_pay,
            gross_pay=breakdown.gross_pay,
            tax_amount=breakdown.tax_amount,
            net_pay=breakdown.net_pay,
            days_worked=breakdown.days_worked,
            days_late=breakdown.days_late,
            currency=settings.payroll.currency,
            currency_symbol=settings.payroll.currency_symbol,
            calculated_at=self._clock(),
        )
        self._snapshot.payroll_records.append(payroll)
        self._persist("payrollCalculated")

        self._notifier.emit(PAYROLL_CALCULATED, {"record": payroll.to_dict()})
        await self.simulate_delay()
        return payroll

    async def get_payroll_data(self, filters: Optional[PayrollFilters] = None) -> List[PayrollRecord]:
        filters = filters or PayrollFilters()
        records = [p for p in self._snapshot.payroll_records if filters.matches(p)]
        await self.simulate_delay()
        return records

    async def get_payroll_history(self, filters: Optional[PayrollFilters] = None) -> List[PayrollRecord]:
        return await self.get_payroll_data(filters)

    async def get_next_payday(self) -> PaydaySchedule:
        schedule = next_payday(self._clock(), self._snapshot.settings.payroll.frequency)
        await self.simulate_delay()
        return schedule

    # --- settings --------------------------------------------------------

    async def get_settings(self) -> Settings:
        settings = self._snapshot.settings
        await self.simulate_delay()
        return settings

    async def save_settings(self, patch: SettingsPatch) -> Settings:
        before = self._snapshot.settings
        after = replace(patch.apply(before), last_updated=self._clock())
        _validate_settings(after)

        self._snapshot.settings = after
        self._persist("settingsUpdated")

        self._notifier.emit(SETTINGS_UPDATED, {"settings": after.to_dict(), "previous": before.to_dict()})
        await self.simulate_delay()
        return after

    # --- session & status ------------------------------------------------

    async def authenticate(self, username: str, password: str) -> AuthResult:
        result = authenticate(self._snapshot.employees, username, password)
        if isinstance(result, AuthSuccess):
            self._auth_token = result.token
            logger.info("User %s signed in", username)
        else:
            logger.info("Rejected sign-in for %r", username)
        await self.simulate_delay()
        return result

    def set_connection_status(self, online: bool) -> None:
        online = bool(online)
        if online == self._online:
            return
        self._online = online
        self._notifier.emit(CONNECTION_CHANGE, {"status": "online" if online else "offline"})

    async def clear_all_data(self) -> None:
        """Drop every collection and the persisted keys; settings survive in memory."""

        self._snapshot = Snapshot(settings=self._snapshot.settings)
        self._store.clear()
        self._store.broadcast_sync("clear")

        self._notifier.emit(
            DATA_SYNC,
            {"source": "local", "action": "clear", "timestamp": epoch_millis(self._clock())},
        )
        await self.simulate_delay()


def _validate_settings(settings: Settings) -> None:
    if settings.company.working_hours <= 0:
        raise ValidationError("workingHours must be positive")
    require_non_negative(settings.payroll.standard_wage, "standardWage")
    require_non_negative(settings.payroll.overtime_rate, "overtimeRate")
    if not 0 <= settings.payroll.tax_rate <= 1:
        raise ValidationError("taxRate must be between 0 and 1")
    if settings.attendance.late_grace_minutes < 0:
        raise ValidationError("lateGraceMinutes must not be negative")
