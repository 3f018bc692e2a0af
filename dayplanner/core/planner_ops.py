"""
Day Planner: record operations.

Pure functions that take a PlannerDayRecord and return a new one; the
input is never mutated. They are meant to be handed to
``PlannerSession.set_data`` as updaters, e.g.::

    session.set_data(lambda r: add_slot_item(r, "9 AM:30", "Standup"))

No I/O: this module only transforms data.
"""

from __future__ import annotations

from dayplanner.core.planner_store import default_record
from dayplanner.data.models import (
    MAX_TOP_PRIORITIES,
    HourlyItem,
    PlannerDayRecord,
    SubTask,
    TaskStatus,
    TopPriority,
    new_id,
)

STATUS_CYCLE: tuple[TaskStatus, ...] = ("pending", "completed", "error")


def cycle_status(status: TaskStatus) -> TaskStatus:
    """pending -> completed -> error -> pending."""
    index = STATUS_CYCLE.index(status) if status in STATUS_CYCLE else -1
    return STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)]


def clear_day(record: PlannerDayRecord) -> PlannerDayRecord:
    """Replace the whole day with a fresh default record."""
    return default_record()


def set_brain_dump(record: PlannerDayRecord, text: str) -> PlannerDayRecord:
    return record.model_copy(update={"brain_dump": text})


# ---------------------------------------------------------------------------
# Priorities
# ---------------------------------------------------------------------------


def is_priority_completed(priority: TopPriority) -> bool:
    """Effective completion: the stored flag only counts without subtasks."""
    if priority.subtasks:
        return all(s.completed for s in priority.subtasks)
    return priority.completed


def subtask_progress(priority: TopPriority) -> tuple[int, int]:
    """(completed, total) subtasks."""
    done = sum(1 for s in priority.subtasks if s.completed)
    return done, len(priority.subtasks)


def _replace_priority(
    record: PlannerDayRecord, priority_id: str, priority: TopPriority | None,
) -> PlannerDayRecord:
    """Swap (or with None, remove) the priority with priority_id."""
    priorities: list[TopPriority] = []
    for p in record.top_priorities:
        if p.id != priority_id:
            priorities.append(p)
        elif priority is not None:
            priorities.append(priority)
    return record.model_copy(update={"top_priorities": priorities})


def _get_priority(record: PlannerDayRecord, priority_id: str) -> TopPriority:
    for p in record.top_priorities:
        if p.id == priority_id:
            return p
    raise KeyError(f"No priority with id {priority_id!r}")


def add_priority(record: PlannerDayRecord, name: str) -> PlannerDayRecord:
    """Append a priority. Blank names are ignored.

    Raises ValueError if the day already holds the maximum of three.
    """
    name = name.strip()
    if not name:
        return record
    if len(record.top_priorities) >= MAX_TOP_PRIORITIES:
        raise ValueError(f"A day holds at most {MAX_TOP_PRIORITIES} top priorities")

    priority = TopPriority(id=new_id(), name=name, completed=False, subtasks=[])
    return record.model_copy(
        update={"top_priorities": [*record.top_priorities, priority]}
    )


def update_priority(record: PlannerDayRecord, priority: TopPriority) -> PlannerDayRecord:
    """Replace the priority that has the same id."""
    return _replace_priority(record, priority.id, priority)


def rename_priority(record: PlannerDayRecord, priority_id: str, name: str) -> PlannerDayRecord:
    """Rename a priority; a blank name keeps the old one."""
    name = name.strip()
    if not name:
        return record
    priority = _get_priority(record, priority_id)
    return _replace_priority(record, priority_id, priority.model_copy(update={"name": name}))


def delete_priority(record: PlannerDayRecord, priority_id: str) -> PlannerDayRecord:
    """Remove a priority together with its subtasks."""
    return _replace_priority(record, priority_id, None)


def toggle_priority(record: PlannerDayRecord, priority_id: str) -> PlannerDayRecord:
    """Flip the stored completion flag of a priority without subtasks.

    Priorities with subtasks derive completion from them, so the call is
    a no-op for those.
    """
    priority = _get_priority(record, priority_id)
    if priority.subtasks:
        return record
    return _replace_priority(
        record, priority_id, priority.model_copy(update={"completed": not priority.completed}),
    )


def add_subtask(record: PlannerDayRecord, priority_id: str, name: str) -> PlannerDayRecord:
    """Append a subtask; blank names are ignored.

    The first subtask resets the parent's stored flag so that it never
    goes stale behind the derived completion.
    """
    name = name.strip()
    if not name:
        return record
    priority = _get_priority(record, priority_id)
    subtask = SubTask(id=new_id(), name=name, completed=False)
    update: dict = {"subtasks": [*priority.subtasks, subtask]}
    if not priority.subtasks:
        update["completed"] = False
    return _replace_priority(record, priority_id, priority.model_copy(update=update))


def _map_subtasks(
    record: PlannerDayRecord, priority_id: str, subtask_id: str, change: dict | None,
) -> PlannerDayRecord:
    priority = _get_priority(record, priority_id)
    subtasks: list[SubTask] = []
    for s in priority.subtasks:
        if s.id != subtask_id:
            subtasks.append(s)
        elif change is not None:
            subtasks.append(s.model_copy(update=change))
    return _replace_priority(
        record, priority_id, priority.model_copy(update={"subtasks": subtasks}),
    )


def toggle_subtask(record: PlannerDayRecord, priority_id: str, subtask_id: str) -> PlannerDayRecord:
    priority = _get_priority(record, priority_id)
    for s in priority.subtasks:
        if s.id == subtask_id:
            return _map_subtasks(record, priority_id, subtask_id, {"completed": not s.completed})
    return record


def rename_subtask(
    record: PlannerDayRecord, priority_id: str, subtask_id: str, name: str,
) -> PlannerDayRecord:
    """Rename a subtask. Clearing the name deletes it."""
    name = name.strip()
    if not name:
        return delete_subtask(record, priority_id, subtask_id)
    return _map_subtasks(record, priority_id, subtask_id, {"name": name})


def delete_subtask(record: PlannerDayRecord, priority_id: str, subtask_id: str) -> PlannerDayRecord:
    return _map_subtasks(record, priority_id, subtask_id, None)


# ---------------------------------------------------------------------------
# Hourly slots
# ---------------------------------------------------------------------------


def _with_slot(record: PlannerDayRecord, key: str, items: list[HourlyItem]) -> PlannerDayRecord:
    return record.model_copy(update={"hourly_slots": {**record.hourly_slots, key: items}})


def _slot_items(record: PlannerDayRecord, key: str) -> list[HourlyItem]:
    if key not in record.hourly_slots:
        raise KeyError(f"Unknown time slot {key!r}")
    return record.hourly_slots[key]


def slot_progress(items: list[HourlyItem]) -> tuple[int, int]:
    """(completed, total) items of a slot."""
    done = sum(1 for item in items if item.status == "completed")
    return done, len(items)


def add_slot_item(record: PlannerDayRecord, key: str, text: str) -> PlannerDayRecord:
    """Append a pending item to a slot. Blank text is ignored.

    Raises KeyError for a slot key outside the grid.
    """
    items = _slot_items(record, key)
    text = text.strip()
    if not text:
        return record
    item = HourlyItem(id=new_id(), text=text, status="pending")
    return _with_slot(record, key, [*items, item])


def drop_text_on_slot(record: PlannerDayRecord, key: str, text: str) -> PlannerDayRecord:
    """Text dragged onto a slot (from notes, a priority, another slot) becomes an item."""
    return add_slot_item(record, key, text)


def edit_slot_item(
    record: PlannerDayRecord, key: str, item_id: str, text: str,
) -> PlannerDayRecord:
    """Change an item's text. Clearing the text deletes the item."""
    text = text.strip()
    if not text:
        return delete_slot_item(record, key, item_id)
    items = [
        item.model_copy(update={"text": text}) if item.id == item_id else item
        for item in _slot_items(record, key)
    ]
    return _with_slot(record, key, items)


def cycle_item_status(record: PlannerDayRecord, key: str, item_id: str) -> PlannerDayRecord:
    items = [
        item.model_copy(update={"status": cycle_status(item.status)})
        if item.id == item_id else item
        for item in _slot_items(record, key)
    ]
    return _with_slot(record, key, items)


def delete_slot_item(record: PlannerDayRecord, key: str, item_id: str) -> PlannerDayRecord:
    items = [item for item in _slot_items(record, key) if item.id != item_id]
    return _with_slot(record, key, items)
