"""Storage port: abstract interface for the key/value persistence backend.

Core stores depend on this protocol, never on a specific backend.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    """Raised when a storage backend fails to read or write a value."""


class StorageQuotaExceededError(StorageError):
    """Raised when a write would exceed the backend's storage quota."""


class KeyValueStorage(Protocol):
    """Abstract string key/value storage used by the planner stores."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...
