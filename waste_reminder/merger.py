"""
This module merges typed occurrences from every source into one event per day.
"""
from datetime import date
from typing import Dict, Iterable, List, Tuple

from .models import CanonicalEvent

DEFAULT_MAX_EVENTS = 200


def merge_occurrences(
    pairs: Iterable[Tuple[date, str]],
    today: date,
    max_events: int = DEFAULT_MAX_EVENTS,
) -> List[CanonicalEvent]:
    """
    Groups (day, waste type) pairs by day and returns the upcoming days.

    Types collected on the same day are unioned in first-seen order. Days
    before `today` are dropped and at most `max_events` days are kept.
    """
    types_by_day: Dict[date, List[str]] = {}
    for day, waste_type in pairs:
        if not day or not waste_type:
            continue
        day_types = types_by_day.setdefault(day, [])
        if waste_type not in day_types:
            day_types.append(waste_type)

    upcoming = [
        CanonicalEvent(day=day, types=tuple(types))
        for day, types in sorted(types_by_day.items())
        if day >= today
    ]
    return upcoming[:max_events]


def flatten(events: Iterable[CanonicalEvent]) -> List[Tuple[date, str]]:
    """Turns merged events back into (day, type) pairs."""
    return [(event.day, waste_type) for event in events for waste_type in event.types]
