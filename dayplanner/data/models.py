"""
Day Planner: data models.

Every record here is persisted as JSON in the key/value store, so field
names on the wire are camelCase (the aliases) while Python code uses
snake_case attributes. Dump with ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TaskStatus = Literal["pending", "completed", "error"]

MAX_TOP_PRIORITIES = 3


def new_id() -> str:
    """Opaque unique id for priorities, subtasks, items and reminders."""
    return str(uuid.uuid4())


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Serializable dict with wire (camelCase) keys and no null fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SubTask(_Record):
    """A checklist entry owned by exactly one TopPriority."""

    id: str
    name: str
    completed: bool = False


class TopPriority(_Record):
    """One of up to three top priorities of the day.

    ``completed`` is only meaningful while ``subtasks`` is empty; with
    subtasks the effective completion is derived from them
    (see ``planner_ops.is_priority_completed``).
    """

    id: str
    name: str
    completed: bool = False
    subtasks: list[SubTask] = Field(default_factory=list)


class HourlyItem(_Record):
    """A single entry inside a half-hour slot of the schedule grid."""

    id: str
    text: str
    status: TaskStatus = "pending"


class PlannerDayRecord(_Record):
    """Everything the planner stores for one calendar date.

    JSON example:
    {
        "topPriorities": [{"id": "...", "name": "Ship report", "completed": false, "subtasks": []}],
        "brainDump": "call the dentist",
        "hourlySlots": {"7 AM:00": [{"id": "...", "text": "Gym", "status": "pending"}], ...},
        "lastSaved": "2026-01-31T08:15:00+00:00"
    }
    """

    top_priorities: list[TopPriority] = Field(default_factory=list, alias="topPriorities")
    brain_dump: str = Field(default="", alias="brainDump")
    hourly_slots: dict[str, list[HourlyItem]] = Field(default_factory=dict, alias="hourlySlots")
    last_saved: str | None = Field(default=None, alias="lastSaved")


class NewReminder(_Record):
    """Input for ReminderStore.add: a reminder before it gets id/timestamps."""

    title: str
    description: str | None = None
    date: str          # YYYY-MM-DD
    time_slot: str = Field(alias="timeSlot")  # "H:MM AM/PM", e.g. "9:30 AM"


class Reminder(_Record):
    """A date-scoped reminder attached to a time slot.

    Stored in one flat list under the ``reminders`` key. Never expires on
    its own: a past-due reminder stays until dismissed or deleted.
    """

    id: str
    title: str
    description: str | None = None
    date: str                                   # YYYY-MM-DD
    time_slot: str = Field(alias="timeSlot")    # "H:MM AM/PM"
    dismissed: bool = False
    created_at: str = Field(alias="createdAt")  # ISO timestamp


class ScheduleConfig(_Record):
    """Visible hour range of the schedule grid (global, not per date)."""

    start_hour: int = Field(default=7, alias="startHour")   # 5..11
    end_hour: int = Field(default=23, alias="endHour")      # 12..23

    def is_valid(self) -> bool:
        return (
            5 <= self.start_hour <= 11
            and 12 <= self.end_hour <= 23
            and self.start_hour < self.end_hour
        )
