from __future__ import annotations

from typing import Dict, Optional, Protocol

from ..core.exceptions import PersistenceQuotaError


class KeyValueStorage(Protocol):
    """String key/value storage with local-storage semantics."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage:
    """Dict-backed storage. One instance shared by several tabs models one origin.

    ``quota_bytes`` caps the total size of keys plus values (counted in
    characters); a write that would exceed it raises ``PersistenceQuotaError``
    and leaves the previous value in place.
    """

    def __init__(self, *, quota_bytes: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
            if used + len(key) + len(value) > self._quota_bytes:
                raise PersistenceQuotaError(f"Writing {key!r} exceeds the storage quota of {self._quota_bytes}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
