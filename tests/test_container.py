import asyncio

import pytest

from src.attendance_dashboard.attendance_dashboard.container import build_container, build_storage
from src.attendance_dashboard.attendance_dashboard.core.enums import StoreStatus
from src.attendance_dashboard.attendance_dashboard.core.exceptions import PersistenceQuotaError
from src.attendance_dashboard.attendance_dashboard.employees.model import NewEmployee
from src.attendance_dashboard.attendance_dashboard.storage.backends import MemoryStorage


def test_open_tab_shares_storage_and_channel(fixed_now, tmp_path):
    container = build_container(
        storage=MemoryStorage(),
        clock=lambda: fixed_now,
        fixture_path=tmp_path / "missing.json",
        hash_method="pbkdf2:sha256:1000",
    )
    tab = container.open_tab()

    assert container.tabs == [tab]
    assert tab.store.status == StoreStatus.READY

    asyncio.run(container.service.add_employee(NewEmployee(full_name="Rico Lim")))

    assert "Rico Lim" in [e.full_name for e in tab.snapshot.employees]


def test_build_storage_rejects_unknown_backend():
    with pytest.raises(ValueError):
        build_storage("redis")


def test_mysql_backend_needs_db_config():
    with pytest.raises(ValueError):
        build_storage("mysql")


def test_memory_backend_applies_quota():
    storage = build_storage("memory", quota_bytes=16)

    with pytest.raises(PersistenceQuotaError):
        storage.set_item("key", "x" * 32)
