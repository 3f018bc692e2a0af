"""Tests for dayplanner.core.reminder_store: CRUD and past-due / upcoming logic."""

import json
import logging
from datetime import date, datetime

import pytest

from dayplanner.core.reminder_store import (
    STORAGE_KEY,
    ReminderStore,
    is_past_due,
    is_upcoming,
    load_reminders,
    save_reminders,
)
from dayplanner.data.models import NewReminder, Reminder
from dayplanner.ports.storage_port import StorageQuotaExceededError

NOW = datetime(2026, 1, 31, 9, 0)


def _reminder(day="2026-01-31", slot="9:00 AM", dismissed=False, rid="r1"):
    return Reminder(
        id=rid, title="Call", date=day, time_slot=slot,
        dismissed=dismissed, created_at="2026-01-01T00:00:00+00:00",
    )


def _new(title="Dentist", day="2026-02-01", slot="9:30 AM", description=None):
    return NewReminder(title=title, date=day, time_slot=slot, description=description)


class TestIsPastDue:
    def test_earlier_date_is_past_due(self):
        assert is_past_due(_reminder(day="2026-01-30", slot="11:30 PM"), NOW) is True

    def test_later_date_is_not_past_due(self):
        assert is_past_due(_reminder(day="2026-02-01", slot="5:00 AM"), NOW) is False

    def test_same_minute_is_not_past_due(self):
        assert is_past_due(_reminder(slot="9:00 AM"), NOW) is False

    def test_one_minute_later_is_past_due(self):
        assert is_past_due(_reminder(slot="9:00 AM"), datetime(2026, 1, 31, 9, 1)) is True

    def test_later_slot_today_is_not_past_due(self):
        assert is_past_due(_reminder(slot="9:30 AM"), NOW) is False

    def test_earlier_hour_today_is_past_due(self):
        assert is_past_due(_reminder(slot="8:30 AM"), NOW) is True

    def test_pm_slot_parsed_as_afternoon(self):
        assert is_past_due(_reminder(slot="1:00 PM"), datetime(2026, 1, 31, 12, 59)) is False
        assert is_past_due(_reminder(slot="1:00 PM"), datetime(2026, 1, 31, 13, 1)) is True

    def test_dismissed_is_never_past_due(self):
        assert is_past_due(_reminder(day="2025-01-01", dismissed=True), NOW) is False


class TestIsUpcoming:
    def test_future_date(self):
        assert is_upcoming(_reminder(day="2026-02-01"), NOW) is True

    def test_past_date(self):
        assert is_upcoming(_reminder(day="2026-01-30"), NOW) is False

    def test_today_not_yet_due(self):
        assert is_upcoming(_reminder(slot="9:00 AM"), NOW) is True

    def test_today_already_due(self):
        assert is_upcoming(_reminder(slot="8:00 AM"), NOW) is False

    def test_dismissed(self):
        assert is_upcoming(_reminder(day="2026-02-01", dismissed=True), NOW) is False

    def test_past_due_and_upcoming_are_exclusive(self):
        for day in ("2026-01-30", "2026-01-31", "2026-02-01"):
            for slot in ("5:00 AM", "9:00 AM", "11:30 PM"):
                r = _reminder(day=day, slot=slot)
                assert is_past_due(r, NOW) != is_upcoming(r, NOW)


class TestLoadSave:
    def test_missing_key_is_empty(self, storage):
        assert load_reminders(storage) == []

    def test_corrupt_json_is_empty(self, storage, caplog):
        storage.set(STORAGE_KEY, "[{oops")
        with caplog.at_level(logging.ERROR, logger="dayplanner.core.reminder_store"):
            assert load_reminders(storage) == []
        assert "Failed to load reminders" in caplog.text

    def test_non_list_is_empty(self, storage):
        storage.set(STORAGE_KEY, json.dumps({"id": "r1"}))
        assert load_reminders(storage) == []

    def test_malformed_entries_skipped(self, storage):
        good = _reminder().to_json_dict()
        storage.set(STORAGE_KEY, json.dumps([good, {"title": "no id"}]))
        assert [r.id for r in load_reminders(storage)] == ["r1"]

    def test_wire_format(self, storage):
        save_reminders(storage, [_reminder()])
        assert json.loads(storage.get(STORAGE_KEY)) == [{
            "id": "r1", "title": "Call", "date": "2026-01-31", "timeSlot": "9:00 AM",
            "dismissed": False, "createdAt": "2026-01-01T00:00:00+00:00",
        }]

    def test_quota_exceeded_returns_false(self, caplog):
        class FullStorage:
            def set(self, key, value):
                raise StorageQuotaExceededError("full")

        with caplog.at_level(logging.WARNING, logger="dayplanner.core.reminder_store"):
            assert save_reminders(FullStorage(), [_reminder()]) is False
        assert "Reminders not saved" in caplog.text


class TestReminderStoreAdd:
    def test_add_assigns_id_and_defaults(self, reminder_store):
        reminder = reminder_store.add(_new())
        assert reminder.id
        assert reminder.dismissed is False
        assert reminder.created_at
        assert reminder_store.reminders == [reminder]

    def test_add_persists(self, reminder_store, storage):
        reminder_store.add(_new())
        assert [r.title for r in ReminderStore(storage).reminders] == ["Dentist"]

    def test_add_trims_and_drops_blank_description(self, reminder_store):
        reminder = reminder_store.add(_new(title="  Dentist  ", description="   "))
        assert reminder.title == "Dentist"
        assert reminder.description is None

    def test_add_keeps_description(self, reminder_store):
        assert reminder_store.add(_new(description=" bring card ")).description == "bring card"

    @pytest.mark.parametrize("kwargs", [
        {"title": "   "},
        {"day": "2026-2-1"},
        {"slot": "9 AM:30"},
    ])
    def test_add_rejects_invalid_input(self, reminder_store, kwargs):
        with pytest.raises(ValueError):
            reminder_store.add(_new(**kwargs))
        assert reminder_store.reminders == []

    def test_in_memory_state_kept_when_save_fails(self):
        class FullStorage:
            def get(self, key):
                return None

            def set(self, key, value):
                raise StorageQuotaExceededError("full")

        store = ReminderStore(FullStorage())
        store.add(_new())
        assert len(store.reminders) == 1


class TestReminderStoreMutations:
    def test_update(self, reminder_store, storage):
        r = reminder_store.add(_new())
        assert reminder_store.update(r.id, title="Dentist (moved)", time_slot="10:00 AM") is True
        updated = ReminderStore(storage).reminders[0]
        assert updated.title == "Dentist (moved)"
        assert updated.time_slot == "10:00 AM"
        assert updated.created_at == r.created_at

    def test_update_unknown_id(self, reminder_store):
        assert reminder_store.update("missing", title="x") is False

    def test_update_cannot_change_identity(self, reminder_store):
        r = reminder_store.add(_new())
        with pytest.raises(ValueError):
            reminder_store.update(r.id, id="other")
        with pytest.raises(ValueError):
            reminder_store.update(r.id, created_at="yesterday")

    @pytest.mark.parametrize("changes", [
        {"title": "  "},
        {"date": "tomorrow"},
        {"time_slot": "nine o'clock"},
    ])
    def test_update_rejects_invalid_input(self, reminder_store, storage, changes):
        r = reminder_store.add(_new())
        with pytest.raises(ValueError):
            reminder_store.update(r.id, **changes)
        assert reminder_store.reminders == [r]
        assert ReminderStore(storage).reminders == [r]

    def test_delete(self, reminder_store, storage):
        r = reminder_store.add(_new())
        keep = reminder_store.add(_new(title="Keep"))
        assert reminder_store.delete(r.id) is True
        assert [x.id for x in ReminderStore(storage).reminders] == [keep.id]

    def test_delete_unknown_id(self, reminder_store):
        assert reminder_store.delete("missing") is False

    def test_dismiss(self, reminder_store, storage):
        r = reminder_store.add(_new(day="2020-01-01"))
        assert reminder_store.dismiss(r.id) is True
        assert ReminderStore(storage).reminders[0].dismissed is True
        assert reminder_store.past_due_reminders(NOW) == []

    def test_reminders_property_is_a_copy(self, reminder_store):
        reminder_store.add(_new())
        reminder_store.reminders.clear()
        assert len(reminder_store.reminders) == 1


class TestReminderStoreQueries:
    def test_reminders_for_date(self, reminder_store):
        a = reminder_store.add(_new(day="2026-01-31"))
        reminder_store.add(_new(day="2026-02-01"))
        assert reminder_store.reminders_for_date(date(2026, 1, 31)) == [a]

    def test_reminders_for_slot(self, reminder_store):
        a = reminder_store.add(_new(day="2026-01-31", slot="9:30 AM"))
        reminder_store.add(_new(day="2026-01-31", slot="10:00 AM"))
        reminder_store.add(_new(day="2026-02-01", slot="9:30 AM"))
        assert reminder_store.reminders_for_slot(date(2026, 1, 31), "9:30 AM") == [a]

    def test_past_due_reminders(self, reminder_store):
        past = reminder_store.add(_new(day="2026-01-30", slot="5:00 PM"))
        reminder_store.add(_new(day="2026-02-01", slot="8:00 AM"))
        assert reminder_store.past_due_reminders(NOW) == [past]

    def test_upcoming_sorted_by_date_then_time(self, reminder_store):
        feb = reminder_store.add(_new(title="Feb", day="2026-02-01", slot="8:00 AM"))
        reminder_store.add(_new(title="Past", day="2026-01-30", slot="5:00 PM"))
        jan = reminder_store.add(_new(title="Jan", day="2026-01-31", slot="9:00 AM"))
        assert reminder_store.upcoming_reminders(NOW) == [jan, feb]

    def test_upcoming_orders_pm_after_am(self, reminder_store):
        late = reminder_store.add(_new(title="Late", slot="1:00 PM"))
        early = reminder_store.add(_new(title="Early", slot="11:30 AM"))
        noon = reminder_store.add(_new(title="Noon", slot="12:00 PM"))
        assert reminder_store.upcoming_reminders(NOW) == [early, noon, late]

    def test_upcoming_is_stable_for_equal_keys(self, reminder_store):
        first = reminder_store.add(_new(title="First"))
        second = reminder_store.add(_new(title="Second"))
        assert reminder_store.upcoming_reminders(NOW) == [first, second]
