"""
Unit tests for the iCal parser.
"""

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from waste_reminder.exceptions import ParsingError
from waste_reminder.ics_parser import parse_ics

TZ = ZoneInfo("Europe/Berlin")

SAMPLE_ICS_CONTENT = """
BEGIN:VCALENDAR
BEGIN:VEVENT
UID:1@test.com
DTSTART;VALUE=DATE:20240314
SUMMARY:  Restmüll 
END:VEVENT
BEGIN:VEVENT
UID:2@test.com
DTSTART:20240314T230000Z
SUMMARY:Biotonne
END:VEVENT
BEGIN:VTODO
UID:3@test.com
DTSTART;VALUE=DATE:20240316
SUMMARY:Not an event
END:VTODO
END:VCALENDAR
"""

MISSING_DTSTART_ICS_CONTENT = """
BEGIN:VCALENDAR
BEGIN:VEVENT
UID:123@test.com
SUMMARY:Rest-Tonne
END:VEVENT
BEGIN:VEVENT
UID:124@test.com
DTSTART;VALUE=DATE:20240320
END:VEVENT
END:VCALENDAR
"""


def test_parse_events():
    occurrences = parse_ics(SAMPLE_ICS_CONTENT, TZ)

    assert len(occurrences) == 2
    assert occurrences[0].day == date(2024, 3, 14)
    assert occurrences[0].label == "Restmüll"
    # 23:00 UTC is already the next day in Berlin
    assert occurrences[1].day == date(2024, 3, 15)
    assert occurrences[1].label == "Biotonne"


def test_event_without_dtstart_is_skipped():
    occurrences = parse_ics(MISSING_DTSTART_ICS_CONTENT, TZ)

    assert len(occurrences) == 1
    assert occurrences[0].day == date(2024, 3, 20)
    assert occurrences[0].label == ""


def test_invalid_content_raises_parsing_error():
    with pytest.raises(ParsingError):
        parse_ics("INVALID ICS CONTENT", TZ)
