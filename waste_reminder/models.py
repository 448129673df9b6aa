"""
This module defines the data models for the waste reminder.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class RawOccurrence:
    """A single (day, label) fact produced by one source, prior to merging."""

    day: date
    label: str


@dataclass(frozen=True)
class CanonicalEvent:
    """One pickup day with every waste type collected on it."""

    day: date
    types: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.day.isoformat(), "types": list(self.types)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalEvent":
        return cls(day=date.fromisoformat(data["date"]), types=tuple(data["types"]))


@dataclass(frozen=True)
class WasteType:
    """Display entry for a canonical waste type."""

    key: str
    label: str
    icon: Optional[str] = None


@dataclass(frozen=True)
class RecurrenceSpec:
    """A recurrence rule for one waste type, e.g. every second Tuesday."""

    waste_type: str
    frequency: str = "MONTHLY"
    interval: int = 1
    by_weekday: Tuple[str, ...] = ()
    by_month_day: Tuple[int, ...] = ()
    by_month: Tuple[int, ...] = ()
    by_set_position: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ManualItem:
    """Explicitly entered pickup dates for one waste type."""

    waste_type: str
    dates: Tuple[str, ...] = field(default_factory=tuple)


class DueClass(str, Enum):
    FUTURE = "future"
    TOMORROW = "tomorrow"
    TODAY = "today"
    DUE = "due"
    OVERDUE_GRACE = "overdue-grace"


@dataclass(frozen=True)
class DueState:
    """Badge classification of a pickup day relative to the current time."""

    due_class: DueClass
    label: str
    hours_until: float
    is_today: bool = False

    @property
    def is_due(self) -> bool:
        return self.due_class in (DueClass.DUE, DueClass.OVERDUE_GRACE)

    @property
    def css_class(self) -> str:
        """Badge CSS classes, e.g. "due today" or "tomorrow"."""
        if self.is_due:
            return "due " + ("today" if self.is_today else "tomorrow")
        if self.due_class in (DueClass.TODAY, DueClass.TOMORROW):
            return self.due_class.value
        return ""


@dataclass(frozen=True)
class PickupRow:
    """A display-ready row: one day, its type labels and its badge."""

    day: date
    types: Tuple[str, ...]
    labels: Tuple[str, ...]
    due_state: DueState
    when: str = ""
    icons: Tuple[Optional[str], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "when": self.when,
            "types": list(self.types),
            "labels": list(self.labels),
            "icons": list(self.icons),
            "badge": {
                "class": self.due_state.css_class,
                "state": self.due_state.due_class.value,
                "text": self.due_state.label,
                "hours_until": round(self.due_state.hours_until, 2),
            },
        }


@dataclass(frozen=True)
class Alert:
    """A one-shot reminder to put the bins out."""

    title: str
    types: Tuple[str, ...]
    labels: Tuple[str, ...]
    scheduled_at: datetime

    @property
    def message(self) -> str:
        return f"{', '.join(self.labels)} - {self.scheduled_at.strftime('%H:%M')}"
