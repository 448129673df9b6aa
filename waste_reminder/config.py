"""
This module contains configuration settings for the application.

Process-level settings come from environment variables. The schedule itself
(sources, thresholds, display table) is read from a JSON file.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from thefuzz import process

from .exceptions import ConfigError
from .models import ManualItem, RecurrenceSpec, WasteType

logger = logging.getLogger(__name__)

# Path to the JSON schedule configuration
WASTE_REMINDER_CONFIG = os.environ.get("WASTE_REMINDER_CONFIG", "waste_reminder.json")

# Root that relative local calendar paths are resolved against
WASTE_REMINDER_ROOT = os.environ.get("WASTE_REMINDER_ROOT", os.getcwd())

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_DB_PATH = os.environ.get("LOG_DB_PATH")

# Telegram alerts
TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")

# Dashboard
DASHBOARD_PORT = int(os.environ.get("DASHBOARD_PORT", 8080))

DEFAULT_TYPE_MAP: Dict[str, WasteType] = {
    "general-waste": WasteType("general-waste", "Restmüll"),
    "organic": WasteType("organic", "Bio"),
    "paper": WasteType("paper", "Papier"),
    "recyclable-bag": WasteType("recyclable-bag", "Gelber Sack"),
    "plastic": WasteType("plastic", "Plastik"),
    "glass": WasteType("glass", "Glas"),
}

DEFAULT_BADGE_LABELS = {"today": "today", "tomorrow": "tomorrow", "days": "{days}d"}

# Short weekday names, Monday first
DEFAULT_WEEKDAY_NAMES = ["Mo.", "Di.", "Mi.", "Do.", "Fr.", "Sa.", "So."]


@dataclass
class ReminderConfig:
    """Everything one aggregation cycle and the due-state engine need."""

    timezone: str = "Europe/Berlin"
    ical_urls: List[str] = field(default_factory=list)
    ical_local_paths: List[str] = field(default_factory=list)
    items: List[ManualItem] = field(default_factory=list)
    rules: List[RecurrenceSpec] = field(default_factory=list)

    show_count: int = 5
    group_same_day: bool = True
    remind_at_hour: int = 20
    lead_hours_before: float = 12
    notify: bool = True
    alert_title: str = "Mülltonnen rausstellen"

    update_interval: float = 3600
    horizon_months: int = 6
    max_events: int = 200
    fetch_timeout: float = 12
    cycle_timeout: float = 60

    holiday_country: Optional[str] = None
    holiday_subdiv: Optional[str] = None

    header: str = "Abfallkalender"
    weekday_names: List[str] = field(default_factory=lambda: list(DEFAULT_WEEKDAY_NAMES))
    type_map: Dict[str, WasteType] = field(default_factory=lambda: dict(DEFAULT_TYPE_MAP))
    badge_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BADGE_LABELS))

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def label_for(self, waste_type: str) -> str:
        entry = self.type_map.get(waste_type)
        return entry.label if entry and entry.label else waste_type

    def icon_for(self, waste_type: str) -> Optional[str]:
        entry = self.type_map.get(waste_type)
        return entry.icon if entry else None

    def format_day(self, day: date) -> str:
        """Formats a pickup day as e.g. "Do. 14.03."."""
        return f"{self.weekday_names[day.weekday()]} {day.strftime('%d.%m.')}"

    def validate(self) -> None:
        """Raises ConfigError for values the engine cannot work with."""
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone: {self.timezone}") from e
        for name in ("remind_at_hour", "show_count", "max_events", "horizon_months"):
            if not _is_int(getattr(self, name)):
                raise ConfigError(f"{name} must be an integer, got {getattr(self, name)!r}")
        for name in ("lead_hours_before", "update_interval", "fetch_timeout", "cycle_timeout"):
            if not _is_number(getattr(self, name)):
                raise ConfigError(f"{name} must be a number, got {getattr(self, name)!r}")
        if not isinstance(self.header, str) or not isinstance(self.alert_title, str):
            raise ConfigError("header and alert_title must be strings")
        names = self.weekday_names
        if not isinstance(names, (list, tuple)) or len(names) != 7 or not all(
            isinstance(n, str) for n in names
        ):
            raise ConfigError("weekday_names must list seven names, Monday first")
        if not 0 <= self.remind_at_hour <= 23:
            raise ConfigError(f"remind_at_hour must be 0-23, got {self.remind_at_hour}")
        if self.show_count < 0:
            raise ConfigError("show_count must not be negative")
        if self.max_events < 1:
            raise ConfigError("max_events must be at least 1")
        if self.horizon_months < 1:
            raise ConfigError("horizon_months must be at least 1")
        if self.update_interval <= 0 or self.fetch_timeout <= 0 or self.cycle_timeout <= 0:
            raise ConfigError("update_interval, fetch_timeout and cycle_timeout must be positive")
        if self.holiday_subdiv and not self.holiday_country:
            raise ConfigError("holiday_subdiv requires holiday_country")

        for item in self.items:
            self._check_type(item.waste_type, "manual item")
        for rule in self.rules:
            self._check_type(rule.waste_type, "rule")

    def _check_type(self, waste_type: str, where: str) -> None:
        if waste_type in self.type_map:
            return
        choices = list(self.type_map)
        suggestion = process.extractOne(waste_type, choices, score_cutoff=60) if waste_type else None
        if suggestion:
            logger.warning(
                f"Unknown waste type '{waste_type}' in {where}; did you mean '{suggestion[0]}'?"
            )
        else:
            logger.warning(f"Unknown waste type '{waste_type}' in {where}; it will be shown as-is.")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReminderConfig":
        """Builds a validated config from the JSON structure of the config file."""
        data = dict(data)
        try:
            items = [
                ManualItem(waste_type=it.get("type", ""), dates=_as_tuple(it.get("dates")))
                for it in data.pop("items", None) or []
            ]
            rules = [_parse_rule(r) for r in data.pop("rules", None) or []]
            type_map = dict(DEFAULT_TYPE_MAP)
            for key, entry in (data.pop("type_map", None) or {}).items():
                type_map[key] = WasteType(key, entry.get("label") or key, entry.get("icon"))
            badge_labels = dict(DEFAULT_BADGE_LABELS)
            badge_labels.update(data.pop("badge_labels", None) or {})
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigError(f"Malformed configuration: {e}") from e

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        config = cls(items=items, rules=rules, type_map=type_map, badge_labels=badge_labels, **data)
        config.validate()
        return config


def _parse_rule(raw: Dict[str, Any]) -> RecurrenceSpec:
    """Turns {"type": ..., "rrule": {"freq": ..., ...}} into a RecurrenceSpec."""
    rrule = raw.get("rrule") or {}
    return RecurrenceSpec(
        waste_type=raw.get("type", ""),
        frequency=str(rrule.get("freq", "MONTHLY")).upper(),
        interval=int(rrule.get("interval", 1)),
        by_weekday=_as_tuple(rrule.get("byweekday")),
        by_month_day=_as_tuple(rrule.get("bymonthday")),
        by_month=_as_tuple(rrule.get("bymonth")),
        by_set_position=_as_tuple(rrule.get("bysetpos")),
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_tuple(value: Any) -> Tuple:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def load_config(path: str = WASTE_REMINDER_CONFIG) -> ReminderConfig:
    """
    Loads the reminder configuration from a JSON file.

    Raises:
        ConfigError: If the file cannot be read or holds invalid values.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file '{path}' is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a JSON object")
    logger.info(f"Loaded reminder configuration from {path}")
    return ReminderConfig.from_dict(data)
