"""Durable store adapter.

Persists the whole snapshot under one key and pings other tabs after a write.
Nothing here raises to the caller: storage failures are logged and turned into
a ``None`` load or a non-OK ``SaveOutcome``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from ..common.datetime_utils import epoch_millis, now_local
from ..core.constants import DATA_KEY, MINIMAL_DATA_KEY, SYNC_KEY
from ..core.enums import SaveOutcome, StoreStatus
from ..core.exceptions import CorruptedStateError, PersistenceQuotaError, StorageError
from ..sync.channel import BroadcastChannel
from .backends import KeyValueStorage

logger = logging.getLogger(__name__)


def _decode(raw: str, key: str) -> Dict[str, Any]:
    try:
        document = json.loads(raw)
    except ValueError as e:
        raise CorruptedStateError(f"{key} is not valid JSON: {e}")
    if not isinstance(document, dict):
        raise CorruptedStateError(f"{key} does not hold an object")
    return document


class DurableStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        channel: Optional[BroadcastChannel] = None,
        clock: Callable = now_local,
        data_key: str = DATA_KEY,
    ):
        self._storage = storage
        self._channel = channel
        self._clock = clock
        self._data_key = data_key
        self._minimal_key = MINIMAL_DATA_KEY if data_key == DATA_KEY else data_key + "_minimal"
        self._status = StoreStatus.NOT_FOUND

    @property
    def status(self) -> StoreStatus:
        return self._status

    @property
    def channel(self) -> Optional[BroadcastChannel]:
        return self._channel

    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self._storage.get_item(key)
        except StorageError as e:
            logger.error("Failed to read %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return _decode(raw, key)
        except CorruptedStateError as e:
            logger.error("Ignoring corrupted snapshot: %s", e)
            return None

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the persisted document, or ``None`` when there is nothing usable."""

        document = self._read(self._data_key)
        if document is not None:
            return document

        minimal = self._read(self._minimal_key)
        if minimal is not None:
            logger.warning("Full snapshot missing; loading reduced snapshot from %s", self._minimal_key)
            return {
                "employees": minimal.get("employees") or [],
                "attendanceRecords": [],
                "payrollRecords": [],
                "settings": minimal.get("settings") or {},
                "analytics": {},
            }
        return None

    def save(self, document: Mapping[str, Any], *, minimal: Optional[Mapping[str, Any]] = None) -> SaveOutcome:
        """Write the whole document with one key write.

        When the quota is exceeded the reduced document (``minimal``, or the
        employees and settings of ``document``) is written instead.
        """

        try:
            self._storage.set_item(self._data_key, json.dumps(document))
        except PersistenceQuotaError as e:
            logger.warning("Storage quota exceeded, saving reduced snapshot: %s", e)
            return self._save_minimal(minimal or {
                "employees": document.get("employees", []),
                "settings": document.get("settings", {}),
            })
        except (StorageError, TypeError, ValueError) as e:
            logger.error("Failed to save snapshot: %s", e)
            return SaveOutcome.FAILED

        if self._status == StoreStatus.QUOTA_DEGRADED:
            self._remove(self._minimal_key)
        self._status = StoreStatus.READY
        return SaveOutcome.OK

    def _save_minimal(self, minimal: Mapping[str, Any]) -> SaveOutcome:
        try:
            self._storage.set_item(self._minimal_key, json.dumps(minimal))
        except (StorageError, TypeError, ValueError) as e:
            logger.error("Failed to save reduced snapshot: %s", e)
            return SaveOutcome.FAILED
        # load() prefers the full key, which now holds older data.
        self._remove(self._data_key)
        self._status = StoreStatus.QUOTA_DEGRADED
        return SaveOutcome.DEGRADED

    def broadcast_sync(self, action: str) -> None:
        """Ping other tabs that the data key changed."""

        token = json.dumps({"timestamp": epoch_millis(self._clock()), "action": action})
        try:
            # Write-then-remove so storage listeners see a change event.
            self._storage.set_item(SYNC_KEY, token)
            self._storage.remove_item(SYNC_KEY)
        except StorageError as e:
            logger.warning("Failed to write sync key: %s", e)

        if self._channel is not None:
            self._channel.publish(SYNC_KEY, token)

    def mark_fixture_loaded(self) -> None:
        self._status = StoreStatus.FIXTURE_LOADED

    def mark_ready(self) -> None:
        self._status = StoreStatus.READY

    def _remove(self, key: str) -> None:
        try:
            self._storage.remove_item(key)
        except StorageError as e:
            logger.error("Failed to remove %s: %s", key, e)

    def clear(self) -> None:
        for key in (self._data_key, self._minimal_key):
            self._remove(key)
        self._status = StoreStatus.NOT_FOUND
