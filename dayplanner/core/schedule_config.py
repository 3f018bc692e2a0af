"""
Day Planner: schedule configuration store.

Holds the visible hour range of the schedule grid under one global key.
Loading never fails: anything missing, corrupt or out of range falls back
to the default 7 AM to 11 PM window.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from dayplanner.data.models import ScheduleConfig
from dayplanner.ports.storage_port import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

STORAGE_KEY = "schedule-config"
_REQUIRED_KEYS = {"startHour", "endHour"}

_HOUR_LABEL_RE = re.compile(r"^(\d+)\s+(AM|PM)$")


def default_config() -> ScheduleConfig:
    return ScheduleConfig(start_hour=7, end_hour=23)


def hour_to_display(hour: int) -> str:
    """Convert a 24h hour to its row label, e.g. 7 -> "7 AM", 13 -> "1 PM"."""
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    if hour < 12:
        return f"{hour} AM"
    return f"{hour - 12} PM"


def display_to_hour(display: str) -> int:
    """Inverse of hour_to_display: "7 AM" -> 7, "1 PM" -> 13.

    Returns 0 for anything that is not an "<H> <AM|PM>" label.
    """
    match = _HOUR_LABEL_RE.match(display)
    if not match:
        return 0

    num = int(match.group(1))
    if match.group(2) == "AM":
        return 0 if num == 12 else num
    return 12 if num == 12 else num + 12


def hours_in_range(start_hour: int, end_hour: int) -> list[str]:
    """Row labels for every hour in [start_hour, end_hour], inclusive."""
    return [hour_to_display(h) for h in range(start_hour, end_hour + 1)]


def load_schedule_config(storage: KeyValueStorage) -> ScheduleConfig:
    """Return the stored config if present and valid, else the default."""
    try:
        stored = storage.get(STORAGE_KEY)
        if not stored:
            return default_config()
        parsed = json.loads(stored)
        if not isinstance(parsed, dict) or not _REQUIRED_KEYS <= parsed.keys():
            logger.debug("Ignoring incomplete schedule config: %r", parsed)
            return default_config()
        config = ScheduleConfig.model_validate(parsed, strict=True)
    except (StorageError, ValueError, TypeError, ValidationError) as exc:
        logger.debug("Ignoring unreadable schedule config: %s", exc)
        return default_config()

    if not config.is_valid():
        logger.debug(
            "Ignoring out-of-range schedule config %d-%d",
            config.start_hour, config.end_hour,
        )
        return default_config()
    return config


def save_schedule_config(storage: KeyValueStorage, config: ScheduleConfig) -> bool:
    """Persist config as-is; validation is the caller's job.

    Returns False (after logging) if the backend rejected the write.
    """
    try:
        storage.set(STORAGE_KEY, json.dumps(config.to_json_dict()))
    except StorageError as exc:
        logger.error("Failed to save schedule config: %s", exc)
        return False
    return True


class ScheduleConfigStore:
    """Schedule range state plus persistence, loaded once on construction."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self.is_loading = True
        self.config = load_schedule_config(storage)
        self.is_loading = False

    def update_config(self, config: ScheduleConfig) -> None:
        """Replace the in-memory config and save it."""
        self.config = config
        save_schedule_config(self._storage, config)
        logger.info(
            "Schedule range set to %s - %s",
            hour_to_display(config.start_hour), hour_to_display(config.end_hour),
        )

    def visible_hours(self) -> list[str]:
        return hours_in_range(self.config.start_hour, self.config.end_hour)
