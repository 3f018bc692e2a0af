"""Scheduler port: deferred-callback interface used for debounced writes.

Shaped after asyncio's ``loop.call_later`` so a running event loop can be
passed in directly; tests substitute a manual clock.
"""

from __future__ import annotations

from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Abstract deferred-callback interface."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle: ...
