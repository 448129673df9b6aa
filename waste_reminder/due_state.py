"""
This module decides which pickups to show, how urgent each one is, and
whether a reminder alert should be raised.

All functions are pure: they read an event snapshot and a clock value and
never mutate shared state.
"""
from datetime import date, datetime, time, timezone
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

from .models import Alert, CanonicalEvent, DueClass, DueState

# Badge window: a pickup stays "due" until 12 hours after its reminder time.
BADGE_GRACE_HOURS = 12
# Alert window: alerts stop 3 hours after the reminder time.
ALERT_GRACE_HOURS = 3

DEFAULT_LABELS = {"today": "today", "tomorrow": "tomorrow", "days": "{days}d"}


def next_pickups(
    events: Iterable[CanonicalEvent],
    now: datetime,
    group_same_day: bool = True,
    limit: int = 5,
) -> List[CanonicalEvent]:
    """Returns at most `limit` events on or after the local day of `now`."""
    today = now.date()
    upcoming = sorted((e for e in events if e.day >= today), key=lambda e: e.day)

    if not group_same_day:
        return upcoming[:limit]

    merged: List[CanonicalEvent] = []
    for event in upcoming:
        if merged and merged[-1].day == event.day:
            last = merged[-1]
            extra = tuple(t for t in event.types if t not in last.types)
            merged[-1] = CanonicalEvent(day=last.day, types=last.types + extra)
        else:
            merged.append(event)
    return merged[:limit]


def reminder_time(day: date, now: datetime, remind_at_hour: int) -> datetime:
    """The reminder instant for `day`, in the zone of `now`."""
    return datetime.combine(day, time(hour=remind_at_hour), tzinfo=now.tzinfo)


def hours_until(day: date, now: datetime, remind_at_hour: int) -> float:
    """Elapsed hours from `now` to the reminder time of `day`."""
    anchor = reminder_time(day, now, remind_at_hour)
    delta = anchor.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return delta.total_seconds() / 3600


def due_state(
    day: date,
    now: datetime,
    remind_at_hour: int,
    lead_hours_before: float,
    labels: Optional[Mapping[str, str]] = None,
) -> DueState:
    """
    Classifies a pickup day for its badge.

    Within `lead_hours_before` before the reminder time and up to 12 hours
    after it the pickup is due; otherwise it falls back to the day count.
    """
    labels = {**DEFAULT_LABELS, **(labels or {})}
    hours = hours_until(day, now, remind_at_hour)
    is_today = day == now.date()

    if -BADGE_GRACE_HOURS <= hours <= lead_hours_before:
        due_class = DueClass.DUE if hours >= 0 else DueClass.OVERDUE_GRACE
        label = labels["today"] if is_today else labels["tomorrow"]
        return DueState(due_class, label, hours, is_today=is_today)

    days = (day - now.date()).days
    if days == 0:
        return DueState(DueClass.TODAY, labels["today"], hours, is_today=True)
    if days == 1:
        return DueState(DueClass.TOMORROW, labels["tomorrow"], hours)
    return DueState(DueClass.FUTURE, labels["days"].format(days=days), hours)


def find_alert(
    events: Sequence[CanonicalEvent],
    now: datetime,
    remind_at_hour: int,
    lead_hours_before: float,
    title: str,
    label_for: Callable[[str], str] = str,
) -> Optional[Alert]:
    """
    Returns an alert for the first event inside the alert window, if any.

    `events` must be ascending, so only the earliest qualifying pickup is
    reported. Repeated calls re-raise the same alert.
    """
    for event in events:
        hours = hours_until(event.day, now, remind_at_hour)
        if -ALERT_GRACE_HOURS < hours <= lead_hours_before:
            return Alert(
                title=title,
                types=event.types,
                labels=tuple(label_for(t) for t in event.types),
                scheduled_at=reminder_time(event.day, now, remind_at_hour),
            )
    return None
