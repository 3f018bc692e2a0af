"""Shared test fixtures and configuration.

Sets up environment variables so dayplanner.config loads predictable
settings, and provides common fixtures like a temp DB and a manual
scheduler for debounce tests.
"""

import os

# Patch env vars BEFORE any dayplanner imports
os.environ.setdefault("PLANNER_STORAGE_BACKEND", "memory")
os.environ.setdefault("PLANNER_STORAGE_QUOTA_BYTES", "0")
os.environ.setdefault("PLANNER_DEBOUNCE_MS", "500")

import pytest


class FakeTimerHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock with the asyncio ``call_later`` shape."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeTimerHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds):
        self.now += seconds
        due = [h for h in self.handles if not h.cancelled and h.when <= self.now]
        for handle in sorted(due, key=lambda h: h.when):
            self.handles.remove(handle)
            handle.callback()

    @property
    def active(self):
        return [h for h in self.handles if not h.cancelled]


class RecordingStorage:
    """Memory storage that remembers every write, in order."""

    def __init__(self):
        from dayplanner.adapters.memory_storage import MemoryKeyValueStorage
        self._inner = MemoryKeyValueStorage()
        self.writes = []

    def get(self, key):
        return self._inner.get(key)

    def set(self, key, value):
        self.writes.append((key, value))
        self._inner.set(key, value)

    def remove(self, key):
        self._inner.remove(key)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_planner.db")


@pytest.fixture
def sqlite_storage(tmp_db_path):
    """Return a SQLiteKeyValueStorage backed by a temp file."""
    from dayplanner.data.db import SQLiteKeyValueStorage
    return SQLiteKeyValueStorage(db_path=tmp_db_path)


@pytest.fixture
def storage():
    """Return an in-memory key/value storage."""
    from dayplanner.adapters.memory_storage import MemoryKeyValueStorage
    return MemoryKeyValueStorage()


@pytest.fixture
def recording_storage():
    return RecordingStorage()


@pytest.fixture
def planner_store(storage):
    from dayplanner.core.planner_store import PlannerStore
    return PlannerStore(storage)


@pytest.fixture
def reminder_store(storage):
    from dayplanner.core.reminder_store import ReminderStore
    return ReminderStore(storage)


@pytest.fixture
def scheduler():
    return FakeScheduler()
