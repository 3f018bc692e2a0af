"""
Day Planner: SQLite key/value storage.

The persistence backend behind every planner store: one table of string
keys to JSON string values, surviving restarts. Planner days live under
``planner-YYYY-MM-DD``, reminders under ``reminders`` and the schedule
range under ``schedule-config``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from dayplanner.ports.storage_port import StorageError, StorageQuotaExceededError

logger = logging.getLogger(__name__)


class SQLiteKeyValueStorage:
    """SQLite-backed implementation of KeyValueStorage.

    ``quota_bytes`` caps the total size of all keys plus values (measured
    in characters, the way browser storage counts them). None or 0 means
    no quota.
    """

    def __init__(self, db_path: str | None = None, quota_bytes: int | None = None) -> None:
        if db_path is None:
            from dayplanner.config import settings
            db_path = settings.PLANNER_DATABASE_PATH
            if quota_bytes is None:
                quota_bytes = settings.PLANNER_STORAGE_QUOTA_BYTES

        self._db_path = db_path
        self._quota_bytes = quota_bytes or None
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the kv_store table if it doesn't exist, and migrate schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key        TEXT PRIMARY KEY,
                    value      TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT ''
                )
            """)
            # Migrate existing DBs: add new columns if missing
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(kv_store)").fetchall()
            }
            if "updated_at" not in existing_cols:
                conn.execute(
                    "ALTER TABLE kv_store ADD COLUMN updated_at TEXT NOT NULL DEFAULT ''"
                )
        logger.debug("kv_store table initialized at %s", self._db_path)

    def get(self, key: str) -> str | None:
        """Return the stored string for key, or None if absent."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value under key.

        Raises StorageQuotaExceededError when the quota (or the disk) is
        full, StorageError on any other SQLite failure.
        """
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._connect() as conn:
                if self._quota_bytes is not None:
                    self._check_quota(conn, key, value)
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
        except StorageQuotaExceededError:
            raise
        except sqlite3.Error as exc:
            if _is_disk_full(exc):
                raise StorageQuotaExceededError(f"Storage full writing {key!r}") from exc
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc
        logger.debug("Stored %s (%d chars)", key, len(value))

    def remove(self, key: str) -> None:
        """Delete key if present."""
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to remove {key!r}: {exc}") from exc

    def _check_quota(self, conn: sqlite3.Connection, key: str, value: str) -> None:
        row = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) AS used "
            "FROM kv_store WHERE key != ?",
            (key,),
        ).fetchone()
        needed = row["used"] + len(key) + len(value)
        if needed > self._quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing {key!r} needs {needed} chars, quota is {self._quota_bytes}"
            )


def _is_disk_full(exc: sqlite3.Error) -> bool:
    if getattr(exc, "sqlite_errorname", None) == "SQLITE_FULL":
        return True
    return "full" in str(exc).lower()
