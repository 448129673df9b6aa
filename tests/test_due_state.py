"""
Unit tests for the due-state engine.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from waste_reminder.due_state import due_state, find_alert, hours_until, next_pickups
from waste_reminder.models import CanonicalEvent, DueClass

TZ = ZoneInfo("Europe/Berlin")
PICKUP = date(2024, 3, 14)


def at(day, hour, minute=0):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ)


def test_lead_window_upper_bound_is_inclusive():
    state = due_state(PICKUP, at(PICKUP, 8), remind_at_hour=20, lead_hours_before=12)

    assert state.hours_until == 12
    assert state.due_class == DueClass.DUE
    assert state.label == "today"
    assert state.css_class == "due today"


def test_just_inside_lead_window():
    state = due_state(PICKUP, at(PICKUP, 8, 1), remind_at_hour=20, lead_hours_before=12)

    assert state.hours_until == pytest.approx(12 - 1 / 60)
    assert state.due_class == DueClass.DUE


def test_just_outside_lead_window_falls_back_to_day_count():
    state = due_state(PICKUP, at(PICKUP, 7, 59), remind_at_hour=20, lead_hours_before=12)

    assert state.due_class == DueClass.TODAY
    assert state.css_class == "today"


def test_due_for_tomorrow():
    state = due_state(PICKUP, at(date(2024, 3, 13), 20), remind_at_hour=6, lead_hours_before=12)

    assert state.hours_until == 10
    assert state.due_class == DueClass.DUE
    assert state.label == "tomorrow"
    assert state.css_class == "due tomorrow"


def test_tomorrow_outside_lead_window():
    state = due_state(PICKUP, at(date(2024, 3, 13), 8), remind_at_hour=20, lead_hours_before=12)

    assert state.hours_until == 36
    assert state.due_class == DueClass.TOMORROW
    assert state.label == "tomorrow"


def test_day_count_label():
    state = due_state(PICKUP, at(date(2024, 3, 12), 8), remind_at_hour=20, lead_hours_before=12)

    assert state.hours_until == 60
    assert state.due_class == DueClass.FUTURE
    assert state.label == "2d"
    assert state.css_class == ""


def test_grace_period_after_reminder_time():
    state = due_state(PICKUP, at(PICKUP, 22), remind_at_hour=10, lead_hours_before=12)
    assert state.hours_until == -12
    assert state.due_class == DueClass.OVERDUE_GRACE
    assert state.css_class == "due today"

    later = due_state(PICKUP, at(PICKUP, 22, 1), remind_at_hour=10, lead_hours_before=12)
    assert later.due_class == DueClass.TODAY


def test_custom_labels():
    state = due_state(
        PICKUP,
        at(date(2024, 3, 9), 8),
        remind_at_hour=20,
        lead_hours_before=12,
        labels={"days": "in {days} Tagen"},
    )

    assert state.label == "in 5 Tagen"


def test_hours_until_uses_real_elapsed_time_across_dst():
    """Clocks go forward on 2024-03-31 in Berlin, so the day has 23 hours."""
    assert hours_until(date(2024, 3, 31), at(date(2024, 3, 30), 20), remind_at_hour=20) == 23


def test_next_pickups_filters_past_and_limits():
    events = [CanonicalEvent(date(2024, 3, d), ("paper",)) for d in (12, 14, 15, 16, 20, 22)]

    pickups = next_pickups(events, at(PICKUP, 21), group_same_day=True, limit=3)

    assert [p.day for p in pickups] == [date(2024, 3, 14), date(2024, 3, 15), date(2024, 3, 16)]


def test_next_pickups_groups_duplicate_days():
    events = [
        CanonicalEvent(date(2024, 3, 15), ("paper",)),
        CanonicalEvent(date(2024, 3, 15), ("organic", "paper")),
        CanonicalEvent(date(2024, 3, 16), ("glass",)),
    ]

    grouped = next_pickups(events, at(PICKUP, 9), group_same_day=True, limit=5)
    assert [(p.day, p.types) for p in grouped] == [
        (date(2024, 3, 15), ("paper", "organic")),
        (date(2024, 3, 16), ("glass",)),
    ]

    ungrouped = next_pickups(events, at(PICKUP, 9), group_same_day=False, limit=5)
    assert len(ungrouped) == 3


def test_find_alert_returns_first_qualifying_event():
    events = [
        CanonicalEvent(PICKUP, ("general-waste", "organic")),
        CanonicalEvent(date(2024, 3, 15), ("paper",)),
    ]
    labels = {"general-waste": "Restmüll", "organic": "Bio"}

    alert = find_alert(
        events, at(PICKUP, 10), 20, 12, title="Mülltonnen rausstellen", label_for=labels.get
    )

    assert alert is not None
    assert alert.types == ("general-waste", "organic")
    assert alert.scheduled_at == at(PICKUP, 20)
    assert alert.message == "Restmüll, Bio - 20:00"


def test_find_alert_uses_stricter_grace_than_badge():
    events = [CanonicalEvent(PICKUP, ("paper",))]

    # 3 hours after the reminder time: badge still due, alert no longer.
    assert due_state(PICKUP, at(PICKUP, 23), 20, 12).is_due
    assert find_alert(events, at(PICKUP, 23), 20, 12, title="t") is None
    assert find_alert(events, at(PICKUP, 22, 59), 20, 12, title="t") is not None


def test_find_alert_none_when_nothing_in_window():
    events = [CanonicalEvent(date(2024, 3, 16), ("paper",))]

    assert find_alert(events, at(PICKUP, 10), 20, 12, title="t") is None
