"""Bootstrap data: the bundled fixture, the built-in default dataset and today's backfill."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from werkzeug.security import generate_password_hash

from ..attendance.model import AttendanceRecord
from ..common.identifiers import new_id
from ..core.constants import DEFAULT_PASSWORD_HASH_METHOD
from ..core.enums import AttendanceStatus, Role
from ..employees.model import Employee
from ..settings.model import Settings
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_FIXTURE_PATH = Path(__file__).resolve().parents[1] / "fixtures" / "data.json"

HASH_PREFIXES = ("pbkdf2:", "scrypt:")

# (id, username, password, role, full name, department, position, start date, hourly rate)
DEFAULT_EMPLOYEES = (
    ("emp_001", "admin", "admin123", Role.ADMIN, "John Administrator", "Management", "System Administrator", date(2024, 1, 1), 25.0),
    ("emp_002", "employee", "employee123", Role.EMPLOYEE, "Jane Employee", "Operations", "Staff", date(2024, 1, 15), 15.0),
    ("emp_003", "worker1", "worker123", Role.EMPLOYEE, "Mike Worker", "Operations", "Construction Worker", date(2024, 2, 1), 18.0),
    ("emp_004", "worker2", "worker123", Role.EMPLOYEE, "Sarah Builder", "Operations", "Site Supervisor", date(2024, 3, 1), 22.0),
    ("emp_005", "worker3", "worker123", Role.EMPLOYEE, "Tom Mason", "Operations", "Mason", date(2024, 4, 1), 20.0),
    ("emp_006", "worker4", "worker123", Role.EMPLOYEE, "Lisa Crane", "Operations", "Crane Operator", date(2024, 5, 1), 24.0),
)

# emp_005 and emp_006 get no row here; the backfill covers them.
DEFAULT_TODAY = (
    ("emp_001", time(8, 0), AttendanceStatus.PRESENT, "Present"),
    ("emp_002", time(8, 15), AttendanceStatus.LATE, "Late arrival"),
    ("emp_003", time(7, 45), AttendanceStatus.PRESENT, "Early arrival"),
    ("emp_004", time(8, 5), AttendanceStatus.PRESENT, "On time"),
)


def is_password_hash(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(HASH_PREFIXES)


def hash_passwords(employees: List[Employee], *, method: str = DEFAULT_PASSWORD_HASH_METHOD) -> List[Employee]:
    """Replace plaintext passwords with werkzeug hashes; existing hashes are kept."""

    out = []
    for e in employees:
        if e.password and not is_password_hash(e.password):
            e = replace(e, password=generate_password_hash(e.password, method=method))
        out.append(e)
    return out


def load_fixture(path: Union[str, Path, None] = None) -> Optional[Dict[str, Any]]:
    """Read the bundled dataset. Returns ``None`` when it is missing or unreadable."""

    fixture_path = Path(path) if path else DEFAULT_FIXTURE_PATH
    try:
        document = json.loads(fixture_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Fixture %s not found", fixture_path)
        return None
    except (OSError, ValueError) as e:
        logger.error("Failed to read fixture %s: %s", fixture_path, e)
        return None

    if not isinstance(document, dict) or not isinstance(document.get("employees"), list):
        logger.error("Fixture %s has no employees list", fixture_path)
        return None
    return document


def default_snapshot(now: datetime) -> Snapshot:
    """Minimal built-in dataset: one admin, five employees and today's attendance for four of them."""

    today = now.date()
    employees = [
        Employee(
            id=emp_id,
            username=username,
            password=password,
            role=role,
            full_name=full_name,
            email=f"{username}@bricks.com",
            department=department,
            position=position,
            start_date=start_date,
            hourly_rate=rate,
            created_at=now,
            last_modified=now,
        )
        for emp_id, username, password, role, full_name, department, position, start_date, rate in DEFAULT_EMPLOYEES
    ]

    records = [
        AttendanceRecord(
            id=f"att_{i:03d}",
            employee_id=emp_id,
            date=today,
            status=status,
            clock_in=clock_in,
            notes=notes,
            created_at=now,
            last_modified=now,
        )
        for i, (emp_id, clock_in, status, notes) in enumerate(DEFAULT_TODAY, start=1)
    ]

    return Snapshot(
        employees=employees,
        attendance_records=records,
        settings=Settings(last_updated=now),
    )


def _placeholder(index: int, employee: Employee, today: date, now: datetime) -> AttendanceRecord:
    if index % 3 == 1:
        status, clock_in, notes = AttendanceStatus.LATE, time(8, 20), "Traffic delay"
    elif index % 4 == 3:
        status, clock_in, notes = AttendanceStatus.ABSENT, None, "Sick leave"
    else:
        status, clock_in, notes = AttendanceStatus.PRESENT, time(8, 0), "On time"

    return AttendanceRecord(
        id=new_id("att"),
        employee_id=employee.id,
        date=today,
        status=status,
        clock_in=clock_in,
        notes=notes,
        created_at=now,
        last_modified=now,
    )


def backfill_today(snapshot: Snapshot, now: datetime) -> int:
    """Give every active employee without a row for today a placeholder one.

    The status distribution is fixed by the employee's position among the
    active employees. Returns the number of rows added.
    """

    today = now.date()
    covered = {r.employee_id for r in snapshot.attendance_records if r.date == today}

    added = 0
    active = [e for e in snapshot.employees if e.is_active]
    for index, employee in enumerate(active):
        if employee.id in covered:
            continue
        snapshot.attendance_records.append(_placeholder(index, employee, today, now))
        added += 1

    if added:
        logger.info("Backfilled %d attendance rows for %s", added, today.isoformat())
    return added
