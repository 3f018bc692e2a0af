"""
Day Planner: planner day store.

Resolves the PlannerDayRecord of a calendar date from key/value storage,
upgrading older persisted layouts on every read. There is no explicit
version tag: the layout is recognized by which fields are present.

Layouts understood, newest first:

* current:  topPriorities (objects) + hourlySlots (key -> list of items)
* legacy 3: hourlyPlans (key -> text) + hourlyStatuses (key -> status)
* legacy 2: hourlyPlans + hourlyCompleted (key -> bool)
* legacy 1: priorities (list of plain strings)

Priorities and hourly data are sniffed independently, so a record may mix
a current priority list with legacy hourly plans and vice versa.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone

from pydantic import ValidationError

from dayplanner.core.time_slots import ALL_SLOT_KEYS, format_date_key
from dayplanner.data.models import (
    MAX_TOP_PRIORITIES,
    HourlyItem,
    PlannerDayRecord,
    SubTask,
    TaskStatus,
    TopPriority,
    new_id,
)
from dayplanner.ports.storage_port import (
    KeyValueStorage,
    StorageError,
    StorageQuotaExceededError,
)

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "planner-"

_STATUSES: tuple[TaskStatus, ...] = ("pending", "completed", "error")


def storage_key(day: date) -> str:
    """Storage key of a date: planner-YYYY-MM-DD."""
    return f"{STORAGE_PREFIX}{format_date_key(day)}"


def default_hourly_slots() -> dict[str, list[HourlyItem]]:
    return {key: [] for key in ALL_SLOT_KEYS}


def default_record() -> PlannerDayRecord:
    """Empty record with every slot of the full 5 AM to 11 PM range present.

    All 38 keys are always initialized, even if the user has configured a
    narrower visible range.
    """
    return PlannerDayRecord(
        top_priorities=[],
        brain_dump="",
        hourly_slots=default_hourly_slots(),
    )


# ---------------------------------------------------------------------------
# Migration steps
# ---------------------------------------------------------------------------


def migrate_hourly_completed(completed: dict[str, bool]) -> dict[str, TaskStatus]:
    """Translate the boolean hourlyCompleted map into task statuses."""
    return {key: "completed" if value else "pending" for key, value in completed.items()}


def migrate_to_hourly_slots(
    hourly_plans: dict[str, str],
    hourly_statuses: dict[str, str],
) -> dict[str, list[HourlyItem]]:
    """Turn legacy free-text plans into one HourlyItem per non-blank slot.

    Blank or whitespace-only text becomes an empty list, never an item
    with empty text.
    """
    hourly_slots: dict[str, list[HourlyItem]] = {}

    for key, text in hourly_plans.items():
        if isinstance(text, str) and text.strip():
            status = hourly_statuses.get(key)
            hourly_slots[key] = [
                HourlyItem(
                    id=new_id(),
                    text=text.strip(),
                    status=status if status in _STATUSES else "pending",
                )
            ]
        else:
            hourly_slots[key] = []

    return hourly_slots


def migrate_legacy_priorities(priorities: object) -> list[TopPriority]:
    """Convert the legacy list of priority strings into TopPriority objects.

    Anything that is not a list yields no priorities.
    """
    if not isinstance(priorities, list):
        return []

    migrated: list[TopPriority] = []
    for name in priorities:
        if isinstance(name, str) and name.strip():
            migrated.append(
                TopPriority(id=new_id(), name=name.strip(), completed=False, subtasks=[])
            )
    return migrated[:MAX_TOP_PRIORITIES]


def _as_bool(value: object) -> bool:
    # Only real booleans count; "false" or 1 from hand-edited data do not
    return value if isinstance(value, bool) else False


def ensure_priority_fields(priority: dict) -> TopPriority:
    """Fill fields that older current-format records did not write yet."""
    subtasks: list[SubTask] = []
    raw_subtasks = priority.get("subtasks")
    if isinstance(raw_subtasks, list):
        for sub in raw_subtasks:
            if not isinstance(sub, dict):
                logger.warning("Dropping malformed subtask: %r", sub)
                continue
            subtasks.append(
                SubTask(
                    id=str(sub.get("id") or new_id()),
                    name=str(sub.get("name") or ""),
                    completed=_as_bool(sub.get("completed")),
                )
            )

    return TopPriority(
        id=str(priority.get("id") or new_id()),
        name=str(priority.get("name") or ""),
        completed=_as_bool(priority.get("completed")),
        subtasks=subtasks,
    )


def _migrate_priorities(raw: dict) -> list[TopPriority]:
    top_priorities = raw.get("topPriorities")
    if isinstance(top_priorities, list):
        result = []
        for priority in top_priorities[:MAX_TOP_PRIORITIES]:
            if not isinstance(priority, dict):
                logger.warning("Dropping malformed priority: %r", priority)
                continue
            result.append(ensure_priority_fields(priority))
        return result

    if isinstance(raw.get("priorities"), list):
        return migrate_legacy_priorities(raw["priorities"])

    return []


def _parse_slot_items(key: str, items: object) -> list[HourlyItem]:
    if not isinstance(items, list):
        logger.warning("Slot %s is not a list, resetting it", key)
        return []

    parsed: list[HourlyItem] = []
    for item in items:
        try:
            parsed.append(HourlyItem.model_validate(item))
        except ValidationError as exc:
            logger.warning("Dropping malformed item in slot %s: %s", key, exc)
    return parsed


def _migrate_hourly(raw: dict) -> dict[str, list[HourlyItem]]:
    hourly_slots = default_hourly_slots()

    if raw.get("hourlySlots") is not None:
        stored = raw["hourlySlots"]
        if not isinstance(stored, dict):
            logger.warning("hourlySlots is not a mapping, using empty schedule")
            return hourly_slots
        for key, items in stored.items():
            hourly_slots[key] = _parse_slot_items(key, items)
        return hourly_slots

    plans = raw.get("hourlyPlans")
    if isinstance(plans, dict):
        statuses: dict[str, str] = {}
        if isinstance(raw.get("hourlyStatuses"), dict):
            statuses = raw["hourlyStatuses"]
        elif isinstance(raw.get("hourlyCompleted"), dict):
            statuses = migrate_hourly_completed(raw["hourlyCompleted"])
        hourly_slots.update(migrate_to_hourly_slots(plans, statuses))

    return hourly_slots


def migrate_record(raw: dict) -> PlannerDayRecord:
    """Upgrade any known persisted layout into a fully populated record."""
    brain_dump = raw.get("brainDump")
    last_saved = raw.get("lastSaved")
    return PlannerDayRecord(
        top_priorities=_migrate_priorities(raw),
        brain_dump=brain_dump if isinstance(brain_dump, str) else "",
        hourly_slots=_migrate_hourly(raw),
        last_saved=last_saved if isinstance(last_saved, str) else None,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class PlannerStore:
    """Reads and writes per-date planner records."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def load(self, day: date) -> PlannerDayRecord | None:
        """Return the migrated record for day, or None if nothing usable is stored.

        Corrupt data is logged and reported as None; this never raises.
        """
        key = storage_key(day)
        try:
            stored = self._storage.get(key)
        except StorageError as exc:
            logger.error("Failed to load planner data for %s: %s", key, exc)
            return None

        if not stored:
            return None

        try:
            parsed = json.loads(stored)
        except ValueError as exc:
            logger.error("Failed to load planner data for %s: %s", key, exc)
            return None

        if not isinstance(parsed, dict):
            logger.error("Failed to load planner data for %s: not a JSON object", key)
            return None

        return migrate_record(parsed)

    def load_or_default(self, day: date) -> PlannerDayRecord:
        record = self.load(day)
        return record if record is not None else default_record()

    def save(self, day: date, record: PlannerDayRecord) -> bool:
        """Stamp lastSaved and write the record under the date's key.

        Failed writes are logged and dropped (no retry). Returns whether
        the write went through.
        """
        key = storage_key(day)
        to_save = record.model_copy(update={"last_saved": _utcnow().isoformat()})
        try:
            self._storage.set(key, json.dumps(to_save.to_json_dict()))
        except StorageQuotaExceededError:
            logger.warning("Storage quota exceeded. Planner data for %s not saved.", key)
            return False
        except (StorageError, TypeError, ValueError) as exc:
            logger.error("Failed to save planner data for %s: %s", key, exc)
            return False
        logger.debug("Planner data saved for %s", key)
        return True


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
