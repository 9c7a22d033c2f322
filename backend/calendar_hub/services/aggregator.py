"""Concurrent fan-out over calendar sources.

Every source is fetched concurrently and the join always succeeds: a failing
source contributes zero events. Final order is by start instant, stable on
ties, so it does not depend on which fetch finishes first.
"""
from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from ..domain.models import AggregationResult, CalendarSource, Event, TimeWindow
from .normalizer import normalize, parse_instant
from .source_client import SourceClient

logger = logging.getLogger(__name__)

_UNPARSEABLE = datetime.max.replace(tzinfo=timezone.utc)


def _start_key(event: Event) -> datetime:
    # unparseable starts sort after everything else
    return parse_instant(event.start) or _UNPARSEABLE


class Aggregator:
    def __init__(self, source_client: SourceClient, clock: Optional[Callable[[], datetime]] = None):
        self.source_client = source_client
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def aggregate(
        self,
        sources: Sequence[CalendarSource],
        window: TimeWindow,
        limit: int,
        date_filter: Optional[str] = None,
    ) -> AggregationResult:
        results = await asyncio.gather(
            *(self.source_client.fetch(src, window, limit) for src in sources)
        )

        events: List[Event] = []
        failed: List[str] = []
        for res in results:
            if not res.ok:
                failed.append(res.source.id)
                continue
            events.extend(normalize(record, res.source) for record in res.records)

        events.sort(key=_start_key)

        if date_filter:
            # literal prefix match on the start string, not a date comparison
            events = [e for e in events if e.start.startswith(date_filter)]

        logger.debug(
            "Aggregated %d events from %d sources (%d failed)", len(events), len(sources), len(failed)
        )
        return AggregationResult(
            events=tuple(events),
            total_events=len(events),
            total_sources=len(sources),
            computed_at=self.clock(),
            failed_sources=tuple(failed),
        )


def count_upcoming(result: AggregationResult, cutoff: datetime) -> int:
    """Events whose start instant is at or before ``cutoff``."""
    count = 0
    for event in result.events:
        start = parse_instant(event.start)
        if start is not None and start <= cutoff:
            count += 1
    return count
