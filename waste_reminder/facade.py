"""
This module defines the central facade for the waste reminder.

The facade is the long-lived aggregation session: it owns the current
configuration and the sources built from it, runs refresh cycles, and
publishes every result through the snapshot channel.
"""

import asyncio
import logging
import threading
from datetime import datetime
from typing import List, Optional

from .channel import SnapshotChannel
from .config import WASTE_REMINDER_ROOT, ReminderConfig
from .models import CanonicalEvent
from .services.aggregation_service import AggregationService
from .services.sources import (
    LocalCalendarSource,
    ManualSource,
    RecurrenceSource,
    RemoteCalendarSource,
    ScheduleSource,
    build_holiday_calendar,
)

logger = logging.getLogger(__name__)


def build_sources(config: ReminderConfig, root: str = WASTE_REMINDER_ROOT) -> List[ScheduleSource]:
    """Creates one source per configured kind of schedule input."""
    tz = config.tz
    return [
        RemoteCalendarSource(config.ical_urls, tz, timeout=config.fetch_timeout),
        LocalCalendarSource(config.ical_local_paths, tz, root=root),
        ManualSource(config.items, tz),
        RecurrenceSource(
            config.rules,
            tz,
            horizon_months=config.horizon_months,
            holiday_calendar=build_holiday_calendar(config.holiday_country, config.holiday_subdiv),
        ),
    ]


class WasteReminderFacade:
    """
    The central entry point for the aggregation side of the reminder.

    Lifecycle: `configure` (initial or changed config), `refresh` (one
    cycle), `run` (periodic loop) and `stop`.
    """

    def __init__(
        self,
        channel: Optional[SnapshotChannel] = None,
        root: str = WASTE_REMINDER_ROOT,
    ):
        self.channel = channel or SnapshotChannel()
        self.root = root
        self.config: Optional[ReminderConfig] = None
        self.aggregation_service: Optional[AggregationService] = None
        self._wake = threading.Event()
        self._stopped = threading.Event()
        self._running = False

    def configure(self, config: ReminderConfig, refresh: bool = True) -> None:
        """
        Installs a new configuration and, unless `refresh` is False,
        refreshes right away.

        Raises:
            ConfigError: If sources cannot be built from the configuration.
        """
        sources = build_sources(config, self.root)
        self.config = config
        self.aggregation_service = AggregationService(
            sources,
            config.tz,
            max_events=config.max_events,
            cycle_timeout=config.cycle_timeout,
        )
        logger.info(f"Configured {len(sources)} schedule sources for {config.timezone}.")
        if not refresh:
            return
        if self._running:
            self._wake.set()
        else:
            self.refresh()

    def refresh(self, now: Optional[datetime] = None) -> List[CanonicalEvent]:
        """
        Runs one aggregation cycle and publishes the result.

        Any error escaping the cycle publishes an empty list, so readers
        never keep showing a stale snapshot.
        """
        try:
            if self.aggregation_service is None:
                raise RuntimeError("WasteReminderFacade.refresh() called before configure().")
            events = self.aggregation_service.run_cycle(now)
        except Exception as e:
            logger.exception(f"Aggregation cycle failed: {e}")
            events = []
        self.channel.publish(events)
        return events

    async def run(self) -> None:
        """
        Runs refresh cycles every `update_interval` seconds until `stop`.

        A call to `configure` while running wakes the loop early.
        """
        self._running = True
        self._stopped.clear()
        logger.info("Waste reminder refresh loop started.")
        try:
            while not self._stopped.is_set():
                await asyncio.to_thread(self.refresh)
                interval = self.config.update_interval if self.config else 3600
                logger.info(f"Sleeping for {interval} seconds...")
                await asyncio.to_thread(self._wake.wait, interval)
                self._wake.clear()
        finally:
            self._running = False
            logger.info("Waste reminder refresh loop stopped.")

    def stop(self) -> None:
        self._stopped.set()
        self._wake.set()

    def latest_events(self) -> List[CanonicalEvent]:
        return list(self.channel.latest())
