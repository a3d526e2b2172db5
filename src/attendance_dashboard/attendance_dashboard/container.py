from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .common.datetime_utils import now_local
from .core.constants import DEFAULT_PASSWORD_HASH_METHOD
from .database.connection import DatabaseConnection, DBConfig
from .service import DataService
from .storage.adapter import DurableStore
from .storage.backends import KeyValueStorage, MemoryStorage
from .storage.mysql_storage import MySQLStorage
from .sync.channel import BroadcastHub


@dataclass(frozen=True)
class Container:
    storage: KeyValueStorage
    hub: BroadcastHub
    service: DataService

    clock: Callable = now_local
    latency: Tuple[float, float] = (0.0, 0.0)
    fixture_path: Union[str, Path, None] = None
    hash_method: str = DEFAULT_PASSWORD_HASH_METHOD
    tabs: List[DataService] = field(default_factory=list)

    def open_tab(self) -> DataService:
        """Another context on the same storage origin, e.g. a second browser tab."""

        tab = _build_service(
            self.storage,
            self.hub,
            clock=self.clock,
            latency=self.latency,
            fixture_path=self.fixture_path,
            hash_method=self.hash_method,
        )
        self.tabs.append(tab)
        return tab


def build_storage(
    backend: str = "memory",
    *,
    db_config: Optional[dict] = None,
    quota_bytes: Optional[int] = None,
) -> KeyValueStorage:
    if backend == "memory":
        return MemoryStorage(quota_bytes=quota_bytes)
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql storage backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        return MySQLStorage(conn, quota_bytes=quota_bytes)
    raise ValueError(f"Unknown storage backend {backend!r}")


def _build_service(storage: KeyValueStorage, hub: BroadcastHub, **kwargs) -> DataService:
    store = DurableStore(storage, channel=hub.channel(), clock=kwargs.get("clock", now_local))
    return DataService(store, **kwargs)


def build_container(
    *,
    storage: Optional[KeyValueStorage] = None,
    backend: str = "memory",
    db_config: Optional[dict] = None,
    quota_bytes: Optional[int] = None,
    clock: Callable = now_local,
    latency: Tuple[float, float] = (0.0, 0.0),
    fixture_path: Union[str, Path, None] = None,
    hash_method: str = DEFAULT_PASSWORD_HASH_METHOD,
) -> Container:
    storage = storage if storage is not None else build_storage(backend, db_config=db_config, quota_bytes=quota_bytes)
    hub = BroadcastHub()
    service = _build_service(
        storage,
        hub,
        clock=clock,
        latency=latency,
        fixture_path=fixture_path,
        hash_method=hash_method,
    )

    return Container(
        storage=storage,
        hub=hub,
        service=service,
        clock=clock,
        latency=latency,
        fixture_path=fixture_path,
        hash_method=hash_method,
    )
