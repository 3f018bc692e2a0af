"""
Day Planner: entry point.

`python main.py` prints today's plan and any past-due reminders from the
configured storage backend.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from dayplanner.adapters.storage_factory import create_storage
from dayplanner.config import configure_logging
from dayplanner.core.planner_ops import is_priority_completed, subtask_progress
from dayplanner.core.planner_store import PlannerStore
from dayplanner.core.reminder_store import ReminderStore
from dayplanner.core.schedule_config import load_schedule_config
from dayplanner.core.time_slots import format_date_key, slot_key_to_display, visible_slot_keys
from dayplanner.ports.storage_port import KeyValueStorage

logger = logging.getLogger(__name__)

_STATUS_MARK = {"pending": " ", "completed": "x", "error": "!"}


def build_agenda(storage: KeyValueStorage, day: date, now: datetime | None = None) -> list[str]:
    """Render the day's record and past-due reminders as plain text lines."""
    record = PlannerStore(storage).load_or_default(day)
    config = load_schedule_config(storage)

    lines = [f"Plan for {format_date_key(day)}", "", "Top priorities:"]
    if not record.top_priorities:
        lines.append("  (none)")
    for priority in record.top_priorities:
        mark = "x" if is_priority_completed(priority) else " "
        line = f"  [{mark}] {priority.name}"
        if priority.subtasks:
            done, total = subtask_progress(priority)
            line += f" ({done}/{total})"
        lines.append(line)

    lines += ["", "Schedule:"]
    scheduled = False
    for key in visible_slot_keys(config):
        for item in record.hourly_slots.get(key, []):
            lines.append(f"  {slot_key_to_display(key):>8} [{_STATUS_MARK[item.status]}] {item.text}")
            scheduled = True
    if not scheduled:
        lines.append("  (nothing scheduled)")

    if record.brain_dump:
        lines += ["", "Notes:", record.brain_dump]

    past_due = ReminderStore(storage).past_due_reminders(now)
    if past_due:
        lines += ["", "Past-due reminders:"]
        lines += [f"  {r.date} {r.time_slot} {r.title}" for r in past_due]
    return lines


def main() -> None:
    configure_logging()
    storage = create_storage()
    logger.info("Day Planner started")
    print("\n".join(build_agenda(storage, date.today())))


if __name__ == "__main__":
    main()
