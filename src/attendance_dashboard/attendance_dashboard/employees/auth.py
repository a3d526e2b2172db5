from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from werkzeug.security import check_password_hash

from ..core.enums import Role
from .model import Employee


@dataclass(frozen=True)
class SessionUser:
    """What a page controller keeps for the signed-in user."""

    employee_id: str
    username: str
    full_name: str
    role: Role
    department: Optional[str]

    def to_dict(self):
        return {
            "id": self.employee_id,
            "username": self.username,
            "fullName": self.full_name,
            "role": self.role.value,
            "department": self.department,
        }


@dataclass(frozen=True)
class AuthSuccess:
    token: str
    user: SessionUser


@dataclass(frozen=True)
class InvalidCredentials:
    message: str = "Invalid username or password"


AuthResult = Union[AuthSuccess, InvalidCredentials]


def _password_matches(stored: Optional[str], password: str) -> bool:
    if not stored:
        return False
    try:
        return check_password_hash(stored, password)
    except Exception:
        # Plaintext or corrupted stored values.
        return False


def authenticate(employees: Iterable[Employee], username: str, password: str) -> AuthResult:
    employee = next((e for e in employees if e.username and e.username == username), None)
    if not employee or not employee.is_active:
        return InvalidCredentials()

    if not _password_matches(employee.password, password or ""):
        return InvalidCredentials()

    return AuthSuccess(
        token=secrets.token_urlsafe(32),
        user=SessionUser(
            employee_id=employee.id,
            username=employee.username,
            full_name=employee.full_name,
            role=employee.role,
            department=employee.department,
        ),
    )
