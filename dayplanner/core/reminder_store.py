"""
Day Planner: reminder store.

CRUD over one flat list of reminders persisted under the ``reminders``
key, plus the past-due / upcoming classification. Dates are YYYY-MM-DD
strings, which compare correctly as plain strings; times are the
"H:MM AM/PM" display slots.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timezone

from pydantic import ValidationError

from dayplanner.core.time_slots import (
    format_date_key,
    is_display_time_slot,
    parse_time_slot_hour,
    parse_time_slot_minutes,
)
from dayplanner.data.models import NewReminder, Reminder, new_id
from dayplanner.ports.storage_port import (
    KeyValueStorage,
    StorageError,
    StorageQuotaExceededError,
)

logger = logging.getLogger(__name__)

STORAGE_KEY = "reminders"

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Fields update() may never touch
_IMMUTABLE_FIELDS = {"id", "created_at", "createdAt"}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_past_due(reminder: Reminder, now: datetime | None = None) -> bool:
    """True if the reminder's slot start lies strictly before now.

    Dismissed reminders are never past due.
    """
    if reminder.dismissed:
        return False

    now = now or datetime.now()
    today_key = format_date_key(now)

    if reminder.date < today_key:
        return True
    if reminder.date > today_key:
        return False

    reminder_hour = parse_time_slot_hour(reminder.time_slot)
    reminder_minutes = parse_time_slot_minutes(reminder.time_slot)
    return (now.hour, now.minute) > (reminder_hour, reminder_minutes)


def is_upcoming(reminder: Reminder, now: datetime | None = None) -> bool:
    """True for a non-dismissed reminder on a future date, or later today."""
    if reminder.dismissed:
        return False

    now = now or datetime.now()
    today_key = format_date_key(now)

    if reminder.date > today_key:
        return True
    if reminder.date < today_key:
        return False
    return not is_past_due(reminder, now)


def _sort_key(reminder: Reminder) -> tuple[str, int, int]:
    return (
        reminder.date,
        parse_time_slot_hour(reminder.time_slot),
        parse_time_slot_minutes(reminder.time_slot),
    )


def _validate(title: str, day: str, time_slot: str) -> None:
    if not title:
        raise ValueError("Reminder title must not be empty")
    if not _DATE_KEY_RE.match(day):
        raise ValueError(f"Invalid reminder date: {day!r}")
    if not is_display_time_slot(time_slot):
        raise ValueError(f"Invalid reminder time slot: {time_slot!r}")


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def load_reminders(storage: KeyValueStorage) -> list[Reminder]:
    """Read the reminder list; anything unreadable yields an empty list."""
    try:
        stored = storage.get(STORAGE_KEY)
        if not stored:
            return []
        parsed = json.loads(stored)
    except (StorageError, ValueError) as exc:
        logger.error("Failed to load reminders: %s", exc)
        return []

    if not isinstance(parsed, list):
        logger.error("Failed to load reminders: stored value is not a list")
        return []

    reminders: list[Reminder] = []
    for entry in parsed:
        try:
            reminders.append(Reminder.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping malformed reminder %r: %s", entry, exc)
    return reminders


def save_reminders(storage: KeyValueStorage, reminders: list[Reminder]) -> bool:
    """Write the whole list. Failures are logged and dropped."""
    try:
        storage.set(STORAGE_KEY, json.dumps([r.to_json_dict() for r in reminders]))
    except StorageQuotaExceededError:
        logger.warning("Storage quota exceeded. Reminders not saved.")
        return False
    except StorageError as exc:
        logger.error("Failed to save reminders: %s", exc)
        return False
    return True


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class ReminderStore:
    """In-memory reminder list, loaded once and saved after every change."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self.is_loading = True
        self._reminders = load_reminders(storage)
        self.is_loading = False

    @property
    def reminders(self) -> list[Reminder]:
        return list(self._reminders)

    def add(self, new: NewReminder) -> Reminder:
        """Create a reminder with a fresh id, not dismissed, created now.

        Raises ValueError on a blank title, a date that is not YYYY-MM-DD
        or a time slot not in "H:MM AM/PM" form.
        """
        title = new.title.strip()
        _validate(title, new.date, new.time_slot)

        description = (new.description or "").strip() or None
        reminder = Reminder(
            id=new_id(),
            title=title,
            description=description,
            date=new.date,
            time_slot=new.time_slot,
            dismissed=False,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._reminders = [*self._reminders, reminder]
        save_reminders(self._storage, self._reminders)
        logger.info("Reminder added: '%s' on %s at %s", title, new.date, new.time_slot)
        return reminder

    def update(self, reminder_id: str, **changes: object) -> bool:
        """Apply field changes (snake_case names) to one reminder.

        ``id`` and ``created_at`` cannot be changed, and the result must pass
        the same title, date and time slot checks as ``add`` (ValueError
        otherwise, nothing stored). Returns False if no reminder has that id.
        """
        forbidden = _IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Cannot update reminder fields: {sorted(forbidden)}")

        found = False
        updated: list[Reminder] = []
        for reminder in self._reminders:
            if reminder.id == reminder_id:
                reminder = Reminder.model_validate(
                    {**reminder.model_dump(), **changes}
                )
                _validate(reminder.title.strip(), reminder.date, reminder.time_slot)
                found = True
            updated.append(reminder)

        if not found:
            return False

        self._reminders = updated
        save_reminders(self._storage, self._reminders)
        logger.info("Reminder %s updated: %s", reminder_id, ", ".join(sorted(changes)))
        return True

    def delete(self, reminder_id: str) -> bool:
        """Permanently delete a reminder by id."""
        remaining = [r for r in self._reminders if r.id != reminder_id]
        if len(remaining) == len(self._reminders):
            return False
        self._reminders = remaining
        save_reminders(self._storage, self._reminders)
        logger.info("Reminder %s deleted", reminder_id)
        return True

    def dismiss(self, reminder_id: str) -> bool:
        return self.update(reminder_id, dismissed=True)

    def reminders_for_date(self, day: date) -> list[Reminder]:
        date_key = format_date_key(day)
        return [r for r in self._reminders if r.date == date_key]

    def reminders_for_slot(self, day: date, time_slot: str) -> list[Reminder]:
        """Reminders of day attached to a display time slot, e.g. "9:30 AM"."""
        date_key = format_date_key(day)
        return [
            r for r in self._reminders
            if r.date == date_key and r.time_slot == time_slot
        ]

    def past_due_reminders(self, now: datetime | None = None) -> list[Reminder]:
        now = now or datetime.now()
        return [r for r in self._reminders if is_past_due(r, now)]

    def upcoming_reminders(self, now: datetime | None = None) -> list[Reminder]:
        """Upcoming reminders ordered by date, then slot hour and minute."""
        now = now or datetime.now()
        return sorted(
            (r for r in self._reminders if is_upcoming(r, now)),
            key=_sort_key,
        )
