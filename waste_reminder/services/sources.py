"""
This module defines the schedule sources that feed the aggregation cycle.

Every source exposes `produce(now)` and returns whatever occurrences it could
read. A broken entry is logged and skipped; it never aborts the source.
"""
import logging
import os
import re
from datetime import date, datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

import holidays
import requests
from dateutil.parser import isoparse

from ..exceptions import ConfigError, DownloadError, ParsingError
from ..ics_parser import parse_ics
from ..models import ManualItem, RawOccurrence, RecurrenceSpec
from ..recurrence import DEFAULT_HORIZON_MONTHS, expand

# Get a logger instance for this module
logger = logging.getLogger(__name__)

HTTP_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


class ScheduleSource:
    """Base class for anything that produces raw pickup occurrences."""

    name = "source"
    # Free-text labels go through the classifier; canonical ones do not.
    needs_classification = True

    def __init__(self, tz: ZoneInfo):
        self.tz = tz

    def produce(self, now: datetime) -> List[RawOccurrence]:
        raise NotImplementedError


class RemoteCalendarSource(ScheduleSource):
    """Fetches iCal feeds over HTTP(S)."""

    name = "ical-url"

    def __init__(self, urls: Iterable[str], tz: ZoneInfo, timeout: float = 12):
        super().__init__(tz)
        self.urls = list(urls)
        self.timeout = timeout

    def produce(self, now: datetime) -> List[RawOccurrence]:
        occurrences = []
        for url in self.urls:
            if not url or not HTTP_URL_PATTERN.match(url):
                logger.warning(f"Ignoring calendar URL without http(s) scheme: {url!r}")
                continue
            try:
                ics_text = self._download_ical_text(url)
                occurrences.extend(parse_ics(ics_text, self.tz))
            except (DownloadError, ParsingError) as e:
                logger.error(f"iCal download failed for {url}: {e}")
        return occurrences

    def _download_ical_text(self, url: str) -> str:
        """Downloads the iCal content as a string."""
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            logger.info(f"Successfully downloaded iCal data from {url}")
            return response.text
        except requests.exceptions.RequestException as e:
            raise DownloadError(f"Error downloading iCal file from {url}: {e}") from e


class LocalCalendarSource(ScheduleSource):
    """Reads iCal files from disk, resolving relative paths against `root`."""

    name = "ical-local"

    def __init__(self, paths: Iterable[str], tz: ZoneInfo, root: str):
        super().__init__(tz)
        self.paths = list(paths)
        self.root = root

    def resolve(self, path: str) -> str:
        if os.path.isabs(path):
            return path
        return os.path.normpath(os.path.join(self.root, path))

    def produce(self, now: datetime) -> List[RawOccurrence]:
        occurrences = []
        for path in self.paths:
            if not path:
                continue
            resolved = self.resolve(path)
            try:
                with open(resolved, "r", encoding="utf-8") as f:
                    ics_text = f.read()
                occurrences.extend(parse_ics(ics_text, self.tz))
            except (OSError, UnicodeDecodeError, ParsingError) as e:
                logger.error(f"Local iCal read failed for {resolved}: {e}")
        return occurrences


class ManualSource(ScheduleSource):
    """Explicit dates entered in the configuration, already typed."""

    name = "manual"
    needs_classification = False

    def __init__(self, items: Iterable[ManualItem], tz: ZoneInfo):
        super().__init__(tz)
        self.items = list(items)

    def _to_day(self, value: str) -> date:
        parsed = isoparse(value)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(self.tz)
        return parsed.date()

    def produce(self, now: datetime) -> List[RawOccurrence]:
        occurrences = []
        for item in self.items:
            if not item.waste_type:
                logger.warning(f"Skipping manual item without a waste type: {item}")
                continue
            for value in item.dates:
                try:
                    occurrences.append(RawOccurrence(day=self._to_day(value), label=item.waste_type))
                except (ValueError, TypeError, OverflowError) as e:
                    logger.warning(f"Skipping malformed date {value!r} for {item.waste_type}: {e}")
        return occurrences


class RecurrenceSource(ScheduleSource):
    """Expands recurrence rules, optionally skipping public holidays."""

    name = "rules"
    needs_classification = False

    def __init__(
        self,
        rules: Iterable[RecurrenceSpec],
        tz: ZoneInfo,
        horizon_months: int = DEFAULT_HORIZON_MONTHS,
        holiday_calendar: Optional[holidays.HolidayBase] = None,
    ):
        super().__init__(tz)
        self.rules = list(rules)
        self.horizon_months = horizon_months
        self.holiday_calendar = holiday_calendar

    def produce(self, now: datetime) -> List[RawOccurrence]:
        occurrences = []
        for rule in self.rules:
            if not rule.waste_type:
                logger.warning(f"Skipping rule without a waste type: {rule}")
                continue
            try:
                days = expand(rule, self.tz, now, self.horizon_months)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed rule for {rule.waste_type}: {e}")
                continue

            for day in days:
                if self.holiday_calendar is not None and day in self.holiday_calendar:
                    logger.info(
                        f"Dropping {rule.waste_type} on {day} ({self.holiday_calendar.get(day)})."
                    )
                    continue
                occurrences.append(RawOccurrence(day=day, label=rule.waste_type))
        return occurrences


def build_holiday_calendar(country: Optional[str], subdiv: Optional[str] = None):
    """Returns a holidays calendar for the country, or None when unset."""
    if not country:
        return None
    try:
        return holidays.country_holidays(country, subdiv=subdiv)
    except NotImplementedError as e:
        raise ConfigError(f"No holiday calendar for {country}/{subdiv}: {e}") from e
