"""In-memory key/value adapter: implements KeyValueStorage.

Used for ephemeral sessions and as the test double for the SQLite store.
Quota accounting matches SQLiteKeyValueStorage (characters of key + value).
"""

from __future__ import annotations

import logging

from dayplanner.ports.storage_port import StorageQuotaExceededError

logger = logging.getLogger(__name__)


class MemoryKeyValueStorage:
    """Dict-backed implementation of KeyValueStorage."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes or None

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            if used + len(key) + len(value) > self._quota_bytes:
                raise StorageQuotaExceededError(
                    f"Writing {key!r} exceeds quota of {self._quota_bytes}"
                )
        self._data[key] = value
        logger.debug("Stored %s (%d chars)", key, len(value))

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
