from __future__ import annotations

from datetime import datetime

import pytest

from src.attendance_dashboard.attendance_dashboard.service import DataService
from src.attendance_dashboard.attendance_dashboard.storage.adapter import DurableStore
from src.attendance_dashboard.attendance_dashboard.storage.backends import MemoryStorage
from src.attendance_dashboard.attendance_dashboard.sync.channel import BroadcastHub

FAST_HASH = "pbkdf2:sha256:1000"


@pytest.fixture
def fixed_now():
    # Monday
    return datetime(2026, 10, 19, 9, 30, 0)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def hub():
    return BroadcastHub()


@pytest.fixture
def make_service(storage, hub, fixed_now, tmp_path):
    """Build a DataService ("tab") on the shared storage and hub.

    Defaults to the built-in dataset: the fixture path points at a missing file.
    """

    def _make(*, fixture_path=None, channel=True, backing=None, clock=None, latency=(0.0, 0.0)):
        store = DurableStore(
            backing if backing is not None else storage,
            channel=hub.channel() if channel else None,
            clock=clock or (lambda: fixed_now),
        )
        return DataService(
            store,
            clock=clock or (lambda: fixed_now),
            fixture_path=fixture_path or tmp_path / "missing.json",
            hash_method=FAST_HASH,
            latency=latency,
        )

    return _make
