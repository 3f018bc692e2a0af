"""Storage adapter factory: creates the right backend based on config."""

from __future__ import annotations

from dayplanner.config import settings
from dayplanner.ports.storage_port import KeyValueStorage


def create_storage(db_path: str | None = None) -> KeyValueStorage:
    """Return the storage adapter matching PLANNER_STORAGE_BACKEND setting.

    Args:
        db_path: Overrides PLANNER_DATABASE_PATH for the sqlite backend.
    """
    backend = settings.PLANNER_STORAGE_BACKEND.lower()
    quota = settings.PLANNER_STORAGE_QUOTA_BYTES or None

    if backend == "sqlite":
        from dayplanner.data.db import SQLiteKeyValueStorage

        return SQLiteKeyValueStorage(
            db_path=db_path or settings.PLANNER_DATABASE_PATH,
            quota_bytes=quota,
        )

    if backend == "memory":
        from dayplanner.adapters.memory_storage import MemoryKeyValueStorage

        return MemoryKeyValueStorage(quota_bytes=quota)

    raise ValueError(f"Unknown PLANNER_STORAGE_BACKEND: {backend!r}")
