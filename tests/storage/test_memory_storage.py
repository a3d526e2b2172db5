import pytest

from src.attendance_dashboard.attendance_dashboard.core.exceptions import PersistenceQuotaError
from src.attendance_dashboard.attendance_dashboard.storage.backends import MemoryStorage


def test_get_set_remove():
    storage = MemoryStorage()
    storage.set_item("k", "v")

    assert storage.get_item("k") == "v"
    storage.remove_item("k")
    assert storage.get_item("k") is None
    storage.remove_item("k")


def test_quota_counts_keys_and_values():
    storage = MemoryStorage(quota_bytes=10)
    storage.set_item("ab", "cdef")

    with pytest.raises(PersistenceQuotaError):
        storage.set_item("gh", "ijklm")

    assert storage.get_item("gh") is None


def test_overwrite_does_not_count_previous_value():
    storage = MemoryStorage(quota_bytes=10)
    storage.set_item("ab", "cdefgh")
    storage.set_item("ab", "12345678")

    assert storage.get_item("ab") == "12345678"
