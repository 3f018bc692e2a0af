"""
Day Planner: planner session.

Keeps the record of the active date in memory and writes it back after a
quiet period, so typing does not cause a write per keystroke. Switching
the date or closing the session cancels the pending write and saves the
latest in-memory record of the outgoing date immediately, so nothing is
lost across a hand-off.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable, Union

from dayplanner.config import settings
from dayplanner.core.planner_store import default_record, storage_key
from dayplanner.data.models import PlannerDayRecord

if TYPE_CHECKING:
    from dayplanner.core.planner_store import PlannerStore
    from dayplanner.ports.scheduler_port import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

RecordUpdate = Union[PlannerDayRecord, Callable[[PlannerDayRecord], PlannerDayRecord]]


class PlannerSession:
    """Stateful view of one date's planner record with debounced persistence.

    Args:
        store: Where records are loaded from and saved to.
        day: Initially active date, or None for a dateless session.
        debounce_seconds: Quiet period before a write-back. Defaults to
            PLANNER_DEBOUNCE_MS.
        scheduler: Anything with ``call_later(delay, callback)``. Defaults
            to the running asyncio event loop, looked up when the first
            write is scheduled.
    """

    def __init__(
        self,
        store: PlannerStore,
        day: date | None = None,
        *,
        debounce_seconds: float | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        if debounce_seconds is None:
            debounce_seconds = settings.PLANNER_DEBOUNCE_MS / 1000
        self._debounce_seconds = debounce_seconds

        self._day: date | None = None
        self._data = default_record()
        self._pending: TimerHandle | None = None
        self._closed = False
        self.is_loading = True

        self.set_date(day)

    @property
    def data(self) -> PlannerDayRecord:
        return self._data

    @property
    def date(self) -> date | None:
        return self._day

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None

    def set_date(self, day: date | None) -> None:
        """Make day the active date, flushing the outgoing one first."""
        if isinstance(day, datetime):
            day = day.date()

        if day is not None and day == self._day:
            return

        if self._day is not None:
            self._cancel_pending()
            self._store.save(self._day, self._data)
            logger.debug("Flushed %s before switching date", storage_key(self._day))

        self.is_loading = True
        if day is None:
            self._data = default_record()
        else:
            self._data = self._store.load_or_default(day)
        self._day = day
        self.is_loading = False

    def set_data(self, update: RecordUpdate) -> PlannerDayRecord:
        """Replace the record (or apply an updater to it) and schedule a save.

        The in-memory record changes immediately; the write happens once
        no further update arrives for the quiet period. Raises RuntimeError,
        with the record left unchanged, if no scheduler was given and no
        event loop is running.
        """
        if self._closed:
            raise RuntimeError("Planner session is closed")

        scheduler = self._resolve_scheduler() if self._day is not None else None
        new_data = update(self._data) if callable(update) else update
        self._data = new_data
        if scheduler is not None:
            self._schedule_save(scheduler)
        return new_data

    def flush(self) -> bool:
        """Cancel any pending write and save the current record now."""
        self._cancel_pending()
        if self._day is None:
            return False
        return self._store.save(self._day, self._data)

    def close(self) -> None:
        """Flush and stop accepting updates. Safe to call more than once."""
        if self._closed:
            return
        self.flush()
        self._closed = True

    def __enter__(self) -> PlannerSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _resolve_scheduler(self) -> Scheduler:
        # Raises RuntimeError when no scheduler was given and no loop is running
        return self._scheduler or asyncio.get_running_loop()

    def _schedule_save(self, scheduler: Scheduler) -> None:
        self._cancel_pending()
        self._pending = scheduler.call_later(self._debounce_seconds, self._on_quiet_period)

    def _on_quiet_period(self) -> None:
        self._pending = None
        # Save whatever is current now, not what was current when scheduled
        if self._day is not None:
            self._store.save(self._day, self._data)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
