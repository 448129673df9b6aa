"""
Unit tests for loading the reminder configuration.
"""

import json
import logging
from datetime import date

import pytest

from waste_reminder.config import ReminderConfig, load_config
from waste_reminder.exceptions import ConfigError
from waste_reminder.models import ManualItem, RecurrenceSpec

SAMPLE_CONFIG = {
    "timezone": "Europe/Berlin",
    "ical_urls": ["https://example.org/a.ics"],
    "items": [{"type": "glass", "dates": ["2024-03-04"]}],
    "rules": [
        {"type": "paper", "rrule": {"freq": "monthly", "byweekday": ["TU"], "bysetpos": 2}},
        {"type": "organic", "rrule": {"freq": "WEEKLY", "interval": 2, "byweekday": "FR"}},
    ],
    "remind_at_hour": 19,
    "type_map": {"glass": {"label": "Altglas", "icon": "glass.svg"}},
    "badge_labels": {"today": "heute"},
}


def test_defaults():
    config = ReminderConfig()

    assert config.timezone == "Europe/Berlin"
    assert config.show_count == 5
    assert config.remind_at_hour == 20
    assert config.lead_hours_before == 12
    assert config.max_events == 200
    assert config.horizon_months == 6
    assert config.label_for("recyclable-bag") == "Gelber Sack"
    assert config.label_for("Sperrmüll") == "Sperrmüll"


def test_from_dict_parses_items_rules_and_display_table():
    config = ReminderConfig.from_dict(SAMPLE_CONFIG)

    assert config.items == [ManualItem("glass", ("2024-03-04",))]
    assert config.rules == [
        RecurrenceSpec("paper", frequency="MONTHLY", by_weekday=("TU",), by_set_position=(2,)),
        RecurrenceSpec("organic", frequency="WEEKLY", interval=2, by_weekday=("FR",)),
    ]
    assert config.remind_at_hour == 19
    assert config.label_for("glass") == "Altglas"
    assert config.type_map["glass"].icon == "glass.svg"
    assert config.label_for("paper") == "Papier"
    assert config.badge_labels == {"today": "heute", "tomorrow": "tomorrow", "days": "{days}d"}


@pytest.mark.parametrize(
    "overrides",
    [
        {"timezone": "Mars/Olympus_Mons"},
        {"remind_at_hour": 24},
        {"max_events": 0},
        {"holiday_subdiv": "SN"},
        {"colour": "green"},
        {"rules": [{"type": "paper", "rrule": {"interval": "often"}}]},
        {"show_count": "5"},
        {"remind_at_hour": 20.5},
        {"remind_at_hour": True},
        {"horizon_months": 1.5},
        {"fetch_timeout": "12"},
        {"lead_hours_before": None},
        {"header": ["Abfall"]},
        {"weekday_names": ["Mo", "Di"]},
        {"weekday_names": "MoDiMiDoFrSaSo"},
    ],
)
def test_invalid_values_raise_config_error(overrides):
    with pytest.raises(ConfigError):
        ReminderConfig.from_dict(overrides)


def test_unknown_waste_type_suggests_closest_match(caplog):
    with caplog.at_level(logging.WARNING):
        ReminderConfig.from_dict({"items": [{"type": "general waste", "dates": []}]})

    assert "did you mean 'general-waste'" in caplog.text


def test_load_config_from_file(tmp_path):
    path = tmp_path / "waste_reminder.json"
    path.write_text(json.dumps(SAMPLE_CONFIG), encoding="utf-8")

    config = load_config(str(path))

    assert config.ical_urls == ["https://example.org/a.ics"]


def test_load_config_errors(tmp_path):
    with pytest.raises(ConfigError, match="Could not read"):
        load_config(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_config(str(broken))

    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError, match="JSON object"):
        load_config(str(listing))


def test_single_manual_date_is_not_split_into_characters():
    config = ReminderConfig.from_dict({"items": [{"type": "glass", "dates": "2024-03-14"}]})

    assert config.items == [ManualItem("glass", ("2024-03-14",))]


def test_display_options():
    config = ReminderConfig.from_dict(
        {
            "header": "Müllabfuhr",
            "weekday_names": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
            "type_map": {"glass": {"label": "Altglas", "icon": "glass.svg"}},
        }
    )

    assert config.header == "Müllabfuhr"
    assert config.format_day(date(2024, 3, 14)) == "Thu 14.03."
    assert config.icon_for("glass") == "glass.svg"
    assert config.icon_for("paper") is None
    assert config.icon_for("Sperrmüll") is None


def test_default_weekday_names_are_german():
    assert ReminderConfig().format_day(date(2024, 3, 17)) == "So. 17.03."
