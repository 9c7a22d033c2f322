from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence, Tuple
from urllib.parse import quote

from ..domain.models import CalendarSource, TimeWindow

DEFAULT_DAYS = 30
STATS_DAYS = 30
STATS_UPCOMING_DAYS = 7
STATS_CACHE_KEY = "stats"
MAX_DAYS = 3660
# absent filter marker; quote(..., safe="") always encodes "*", so no value can produce it
ANY = "*"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class QueryPlan:
    window: TimeWindow
    sources: Tuple[CalendarSource, ...]
    cache_key: str
    date_filter: Optional[str]


@dataclass(frozen=True)
class StatsPlan:
    window: TimeWindow
    sources: Tuple[CalendarSource, ...]
    cache_key: str
    upcoming_days: int


def parse_days(days: Optional[str], default: int = DEFAULT_DAYS) -> int:
    """Leading-integer parse; anything unparseable or outside ``1..MAX_DAYS`` yields ``default``."""
    if days is None:
        return default
    match = _LEADING_INT.match(str(days))
    if not match:
        return default
    value = int(match.group(1))
    return value if 0 < value <= MAX_DAYS else default


def events_cache_key(person: Optional[str], date: Optional[str], days: int) -> str:
    # present values are percent-encoded so neither the separator nor ANY can appear in them
    parts = [quote(p, safe="") if p else ANY for p in (person, date)]
    return "events|" + "|".join(parts + [str(days)])


class QueryPlanner:
    def __init__(
        self,
        sources: Sequence[CalendarSource],
        default_days: int = DEFAULT_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.sources = tuple(sources)
        self.default_days = default_days
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _window(self, days: int) -> TimeWindow:
        now = self.clock()
        return TimeWindow(start=now, end=now + timedelta(days=days))

    def plan(self, person: Optional[str] = None, date: Optional[str] = None, days: Optional[str] = None) -> QueryPlan:
        effective_days = parse_days(days, self.default_days)
        if person:
            subset = tuple(s for s in self.sources if s.id == person)
        else:
            subset = self.sources
        return QueryPlan(
            window=self._window(effective_days),
            sources=subset,
            cache_key=events_cache_key(person, date, effective_days),
            date_filter=date or None,
        )

    def stats_plan(self) -> StatsPlan:
        return StatsPlan(
            window=self._window(STATS_DAYS),
            sources=self.sources,
            cache_key=STATS_CACHE_KEY,
            upcoming_days=STATS_UPCOMING_DAYS,
        )
