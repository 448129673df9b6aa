"""
This module defines the PresentationService, the read side of the reminder.

It keeps the last snapshot pushed through the channel and turns it into
display rows and reminder alerts for the current time.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..channel import SnapshotChannel
from ..config import ReminderConfig
from ..due_state import due_state, find_alert, next_pickups
from ..models import Alert, CanonicalEvent, PickupRow

logger = logging.getLogger(__name__)

AlertSink = Callable[[Alert], None]


class PresentationService:
    """Builds display rows and fires alerts from the latest snapshot."""

    def __init__(self, config: ReminderConfig, channel: Optional[SnapshotChannel] = None):
        self.config = config
        self._events: Tuple[CanonicalEvent, ...] = ()
        self.ready = False
        self._alert_sinks: List[AlertSink] = []
        if channel is not None:
            channel.subscribe(self.on_events)
            if channel.published:
                self.on_events(channel.latest())

    def on_events(self, events: Tuple[CanonicalEvent, ...]) -> None:
        """Channel callback: replaces the snapshot."""
        self._events = tuple(events)
        self.ready = True

    @property
    def events(self) -> Tuple[CanonicalEvent, ...]:
        return self._events

    def add_alert_sink(self, sink: AlertSink) -> None:
        self._alert_sinks.append(sink)

    def _now(self, now: Optional[datetime]) -> datetime:
        return (now or datetime.now(self.config.tz)).astimezone(self.config.tz)

    def rows(self, now: Optional[datetime] = None) -> List[PickupRow]:
        """Returns the next pickups with their labels and badges."""
        now = self._now(now)
        config = self.config
        pickups = next_pickups(self._events, now, config.group_same_day, config.show_count)
        return [
            PickupRow(
                day=event.day,
                types=event.types,
                labels=tuple(config.label_for(t) for t in event.types),
                due_state=due_state(
                    event.day,
                    now,
                    config.remind_at_hour,
                    config.lead_hours_before,
                    config.badge_labels,
                ),
                when=config.format_day(event.day),
                icons=tuple(config.icon_for(t) for t in event.types),
            )
            for event in pickups
        ]

    def evaluate(self, now: Optional[datetime] = None) -> Tuple[List[PickupRow], Optional[Alert]]:
        """
        Computes the rows and, when notifications are on, the reminder alert.

        Every call that finds a qualifying pickup re-sends the alert; how
        often this happens is up to the caller's refresh cadence.
        """
        now = self._now(now)
        rows = self.rows(now)
        if not self.config.notify or not rows:
            return rows, None

        displayed = [CanonicalEvent(day=row.day, types=row.types) for row in rows]
        alert = find_alert(
            displayed,
            now,
            self.config.remind_at_hour,
            self.config.lead_hours_before,
            self.config.alert_title,
            self.config.label_for,
        )
        if alert is not None:
            logger.info(f"Raising reminder alert: {alert.message}")
            for sink in list(self._alert_sinks):
                try:
                    sink(alert)
                except Exception:
                    logger.exception(f"Alert sink {sink!r} failed.")
        return rows, alert
