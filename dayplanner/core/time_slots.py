"""
Day Planner: time-slot addressing.

Two string formats name the same half-hour bucket:

* grid key, used inside PlannerDayRecord.hourly_slots: "9 AM:30"
* display string, used by reminders:                   "9:30 AM"

Converting between them only reorders the parts. The grid always covers
5 AM to 11 PM (19 hours x 2 buckets = 38 keys); ScheduleConfig only
narrows what is shown, never what is stored.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re
from datetime import date

from dayplanner.core.schedule_config import hour_to_display, hours_in_range
from dayplanner.data.models import ScheduleConfig

MINUTE_BUCKETS = ("00", "30")

# Full range of available hours (5 AM to 11 PM)
ALL_HOURS: list[str] = hours_in_range(5, 23)

# Default visible hours (7 AM to 11 PM)
HOURS: list[str] = ALL_HOURS[2:]

ALL_SLOT_KEYS: list[str] = [
    f"{hour}:{minute}" for hour in ALL_HOURS for minute in MINUTE_BUCKETS
]

_SLOT_KEY_RE = re.compile(r"^(\d+)\s+(AM|PM):(\d+)$")
_DISPLAY_RE = re.compile(r"^(\d+):(\d+)\s+(AM|PM)$")


def slot_key(hour_label: str, minute: str) -> str:
    """Build a grid key from a row label and minute bucket: ("7 AM", "30") -> "7 AM:30"."""
    return f"{hour_label}:{minute}"


def slot_key_to_display(key: str) -> str:
    """Grid key to display form: "7 AM:00" -> "7:00 AM". Unknown keys pass through."""
    match = _SLOT_KEY_RE.match(key)
    if not match:
        return key
    return f"{match.group(1)}:{match.group(3)} {match.group(2)}"


def display_to_slot_key(display: str) -> str:
    """Display form to grid key: "7:00 AM" -> "7 AM:00". Unknown strings pass through."""
    match = _DISPLAY_RE.match(display)
    if not match:
        return display
    return f"{match.group(1)} {match.group(3)}:{match.group(2)}"


def is_display_time_slot(display: str) -> bool:
    return _DISPLAY_RE.match(display) is not None


def parse_time_slot_hour(display: str) -> int:
    """24h hour of a display slot: "9:00 AM" -> 9, "2:30 PM" -> 14, "12:00 AM" -> 0.

    Returns 0 if the string is not in "H:MM AM/PM" form.
    """
    match = _DISPLAY_RE.match(display)
    if not match:
        return 0

    hour = int(match.group(1))
    period = match.group(3)
    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0
    return hour


def parse_time_slot_minutes(display: str) -> int:
    """Minutes of a display slot: "9:00 AM" -> 0, "2:30 PM" -> 30."""
    match = _DISPLAY_RE.match(display)
    return int(match.group(2)) if match else 0


def time_slot_options(hours: list[str] | None = None) -> list[str]:
    """All "H:MM AM/PM" options a reminder can be attached to."""
    options: list[str] = []
    for hour in hours if hours is not None else HOURS:
        number, period = hour.split(" ")
        for minute in MINUTE_BUCKETS:
            options.append(f"{number}:{minute} {period}")
    return options


def format_date_key(day: date) -> str:
    """Zero-padded YYYY-MM-DD from the date's calendar fields."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def visible_slot_keys(config: ScheduleConfig) -> list[str]:
    """Grid keys for the rows currently shown by the schedule config."""
    return [
        slot_key(hour_to_display(h), minute)
        for h in range(config.start_hour, config.end_hour + 1)
        for minute in MINUTE_BUCKETS
    ]
