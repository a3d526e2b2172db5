from __future__ import annotations

import logging
from typing import Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import PersistenceQuotaError, StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

QUOTA_ERRNOS = frozenset({errorcode.ER_DATA_TOO_LONG, errorcode.ER_NET_PACKET_TOO_LARGE})


def _translate(e: mysql.connector.Error, key: str) -> StorageError:
    if getattr(e, "errno", None) in QUOTA_ERRNOS:
        return PersistenceQuotaError(f"Value for {key!r} is too large: {e}")
    return StorageError(f"Storage operation on {key!r} failed: {e}")


class MySQLStorage:
    """Key/value storage kept in the ``local_storage`` table."""

    def __init__(self, conn: DatabaseConnection, *, quota_bytes: Optional[int] = None):
        self._conn = conn
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        try:
            with db_cursor(self._conn) as (_, cur):
                cur.execute("SELECT storage_value FROM local_storage WHERE storage_key=%s", (key,))
                row = fetchone(cur)
        except mysql.connector.Error as e:
            raise _translate(e, key) from e
        return row["storage_value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            with db_cursor(self._conn) as (_, cur):
                if self._quota_bytes is not None:
                    cur.execute(
                        """
                        SELECT COALESCE(SUM(CHAR_LENGTH(storage_key) + CHAR_LENGTH(storage_value)), 0) AS used
                        FROM local_storage
                        WHERE storage_key <> %s
                        """,
                        (key,),
                    )
                    row = fetchone(cur)
                    used = int(row["used"]) if row else 0
                    if used + len(key) + len(value) > self._quota_bytes:
                        raise PersistenceQuotaError(
                            f"Writing {key!r} exceeds the storage quota of {self._quota_bytes}"
                        )

                cur.execute(
                    """
                    INSERT INTO local_storage (storage_key, storage_value)
                    VALUES (%s, %s)
                    ON DUPLICATE KEY UPDATE storage_value=VALUES(storage_value)
                    """,
                    (key, value),
                )
        except mysql.connector.Error as e:
            raise _translate(e, key) from e

    def remove_item(self, key: str) -> None:
        try:
            with db_cursor(self._conn) as (_, cur):
                cur.execute("DELETE FROM local_storage WHERE storage_key=%s", (key,))
        except mysql.connector.Error as e:
            raise _translate(e, key) from e
