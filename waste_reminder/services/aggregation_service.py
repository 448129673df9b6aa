"""
This module defines the AggregationService, which runs one refresh cycle:
fan out to every source, classify, and merge into the canonical event list.
"""
import concurrent.futures
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..classifier import classify
from ..merger import DEFAULT_MAX_EVENTS, merge_occurrences
from ..models import CanonicalEvent, RawOccurrence
from .sources import ScheduleSource

logger = logging.getLogger(__name__)


class AggregationService:
    """Collects occurrences from all sources and merges them."""

    def __init__(
        self,
        sources: Iterable[ScheduleSource],
        tz: ZoneInfo,
        max_events: int = DEFAULT_MAX_EVENTS,
        cycle_timeout: float = 60,
        classifier: Callable[[str], str] = classify,
    ):
        self.sources = list(sources)
        self.tz = tz
        self.max_events = max_events
        self.cycle_timeout = cycle_timeout
        self.classifier = classifier

    def run_cycle(self, now: Optional[datetime] = None) -> List[CanonicalEvent]:
        """
        Runs every source concurrently and merges their output.

        Sources that fail are logged and contribute nothing. Sources still
        running when `cycle_timeout` expires are abandoned for this cycle.
        Their threads are not interrupted: they finish on their own, bounded
        by `fetch_timeout`, and interpreter exit waits for them.
        """
        now = (now or datetime.now(self.tz)).astimezone(self.tz)
        logger.info(f"Starting aggregation cycle over {len(self.sources)} sources.")

        pairs: List[Tuple] = []
        if self.sources:
            executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=len(self.sources), thread_name_prefix="waste-source"
            )
            try:
                future_to_source = {
                    executor.submit(source.produce, now): source for source in self.sources
                }
                done, not_done = concurrent.futures.wait(
                    future_to_source, timeout=self.cycle_timeout
                )
                for future in not_done:
                    logger.error(
                        f"Source '{future_to_source[future].name}' did not finish within "
                        f"{self.cycle_timeout}s; skipping it this cycle."
                    )
                # Keep the configured source order so merges are reproducible.
                for future, source in future_to_source.items():
                    if future in done:
                        pairs.extend(self._collect(source, future))
            finally:
                executor.shutdown(wait=False, cancel_futures=True)

        events = merge_occurrences(pairs, today=now.date(), max_events=self.max_events)
        logger.info(f"Aggregation cycle finished with {len(events)} pickup days.")
        return events

    def _collect(self, source: ScheduleSource, future: concurrent.futures.Future) -> List[Tuple]:
        try:
            occurrences: List[RawOccurrence] = future.result()
        except Exception as e:
            logger.exception(f"Source '{source.name}' failed: {e}")
            return []

        logger.info(f"Source '{source.name}' produced {len(occurrences)} occurrences.")
        if source.needs_classification:
            return [(o.day, self.classifier(o.label)) for o in occurrences]
        return [(o.day, o.label) for o in occurrences]
