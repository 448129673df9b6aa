"""
This module provides the push channel between aggregation and presentation.
"""
import logging
from typing import Callable, Iterable, List, Tuple

from .models import CanonicalEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[Tuple[CanonicalEvent, ...]], None]


class SnapshotChannel:
    """
    Holds the latest complete event list.

    `publish` swaps the whole snapshot reference at once, so readers always
    see either the previous or the new list, never a partial one.
    """

    def __init__(self):
        self._snapshot: Tuple[CanonicalEvent, ...] = ()
        self._published = False
        self._subscribers: List[Subscriber] = []

    @property
    def published(self) -> bool:
        """True once at least one cycle has been published."""
        return self._published

    def latest(self) -> Tuple[CanonicalEvent, ...]:
        return self._snapshot

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def publish(self, events: Iterable[CanonicalEvent]) -> None:
        snapshot = tuple(events)
        self._snapshot = snapshot
        self._published = True
        logger.info(f"Published {len(snapshot)} waste events.")
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception(f"Snapshot subscriber {callback!r} failed.")
