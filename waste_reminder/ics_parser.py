"""
This module provides functionality for parsing iCal files.

It uses the icalendar library to parse the iCal files.
"""
import logging
from datetime import date, datetime
from typing import List
from zoneinfo import ZoneInfo

from icalendar import Calendar

from .exceptions import ParsingError
from .models import RawOccurrence

# Get a logger instance for this module
logger = logging.getLogger(__name__)


def event_day(start, tz: ZoneInfo) -> date:
    """Truncates a DTSTART value to its calendar day in the given zone."""
    if isinstance(start, datetime):
        if start.tzinfo is None:
            # Floating times are wall-clock times of the configured zone
            return start.date()
        return start.astimezone(tz).date()
    if isinstance(start, date):
        return start
    raise ValueError(f"Unsupported DTSTART value: {start!r}")


def parse_ics(ics_text: str, tz: ZoneInfo) -> List[RawOccurrence]:
    """
    Parse an ICS document and return one RawOccurrence per VEVENT.

    Raises:
        ParsingError: If the text is not a readable iCal document.
    """
    try:
        cal = Calendar.from_ical(ics_text)
    except ValueError as e:
        raise ParsingError(f"Failed to parse ICS file: {e}") from e

    occurrences = []
    for component in cal.walk("VEVENT"):
        uid = str(component.get("UID", "Unknown UID"))
        try:
            dt_start = component.get("DTSTART")
            if dt_start is None:
                logger.warning(f"Skipping event with UID {uid} due to missing DTSTART.")
                continue

            summary = str(component.get("SUMMARY", "")).strip()
            occurrences.append(RawOccurrence(day=event_day(dt_start.dt, tz), label=summary))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping event with UID {uid} due to an error: {e}")
            continue
    return occurrences
