from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError
from prometheus_client import Counter, Histogram

from ..domain.models import CalendarSource, TimeWindow
from ..ports.calendar_provider import CalendarProvider

logger = logging.getLogger(__name__)

SOURCE_FETCH_COUNT = Counter(
    "calendar_hub_source_fetch_total", "Per-source fetch attempts", ["outcome"]
)
SOURCE_FETCH_LATENCY = Histogram(
    "calendar_hub_source_fetch_duration_seconds", "Latency of a single source fetch"
)


@dataclass
class FetchResult:
    source: CalendarSource
    records: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceClient:
    """Fetches one calendar's events; provider failures become an empty FetchResult."""

    def __init__(self, provider: CalendarProvider, timeout_seconds: Optional[float] = None):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def _run_in_executor(self, func, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def fetch(self, source: CalendarSource, window: TimeWindow, limit: int) -> FetchResult:
        time_min, time_max = window.iso_bounds()
        call = self._run_in_executor(
            self.provider.list_events,
            source.id,
            time_min,
            time_max,
            limit,
        )
        try:
            with SOURCE_FETCH_LATENCY.time():
                if self.timeout_seconds:
                    records = await asyncio.wait_for(call, timeout=self.timeout_seconds)
                else:
                    records = await call
        except asyncio.TimeoutError:
            SOURCE_FETCH_COUNT.labels(outcome="timeout").inc()
            logger.warning("Timed out fetching calendar %s after %ss", source.display_name, self.timeout_seconds)
            return FetchResult(source=source, error="timeout")
        except HttpError as e:
            SOURCE_FETCH_COUNT.labels(outcome="error").inc()
            logger.warning("Error fetching calendar %s: HTTP %s", source.display_name, getattr(e.resp, "status", "?"))
            return FetchResult(source=source, error=f"Google API error: {e}")
        except Exception as e:
            SOURCE_FETCH_COUNT.labels(outcome="error").inc()
            logger.warning("Error fetching calendar %s: %s", source.display_name, e)
            return FetchResult(source=source, error=str(e) or e.__class__.__name__)
        SOURCE_FETCH_COUNT.labels(outcome="ok").inc()
        return FetchResult(source=source, records=list(records or []))
