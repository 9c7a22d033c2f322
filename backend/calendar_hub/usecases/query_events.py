from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from prometheus_client import Counter

from ..domain.models import AggregationResult
from ..services.aggregator import Aggregator, count_upcoming
from ..services.cache import AggregationCache
from ..services.query_planner import QueryPlanner

logger = logging.getLogger(__name__)

CACHE_LOOKUP_COUNT = Counter(
    "calendar_hub_cache_lookups_total", "Aggregation cache lookups", ["result"]
)


@dataclass
class EventsQueryResult:
    result: AggregationResult
    cached: bool


@dataclass
class StatsResult:
    total_events: int
    total_people: int
    upcoming_week: int
    computed_at: datetime
    cached: bool


class _CachedAggregation:
    def __init__(self, planner: QueryPlanner, aggregator: Aggregator, cache: AggregationCache, max_results: int):
        self.planner = planner
        self.aggregator = aggregator
        self.cache = cache
        self.max_results = max_results

    def _lookup(self, key: str) -> Optional[AggregationResult]:
        hit = self.cache.get(key)
        CACHE_LOOKUP_COUNT.labels(result="hit" if hit is not None else "miss").inc()
        logger.debug("Cache %s for %s", "hit" if hit is not None else "miss", key)
        return hit


class QueryEventsUseCase(_CachedAggregation):
    async def execute(
        self,
        person: Optional[str] = None,
        date: Optional[str] = None,
        days: Optional[str] = None,
    ) -> EventsQueryResult:
        plan = self.planner.plan(person=person, date=date, days=days)
        hit = self._lookup(plan.cache_key)
        if hit is not None:
            return EventsQueryResult(result=hit, cached=True)
        # concurrent misses on one key may both compute; last write wins
        result = await self.aggregator.aggregate(plan.sources, plan.window, self.max_results, plan.date_filter)
        self.cache.set(plan.cache_key, result)
        return EventsQueryResult(result=result, cached=False)


class StatsUseCase(_CachedAggregation):
    async def execute(self) -> StatsResult:
        plan = self.planner.stats_plan()
        result = self._lookup(plan.cache_key)
        cached = result is not None
        if result is None:
            result = await self.aggregator.aggregate(plan.sources, plan.window, self.max_results)
            self.cache.set(plan.cache_key, result)
        cutoff = result.computed_at + timedelta(days=plan.upcoming_days)
        return StatsResult(
            total_events=result.total_events,
            total_people=len(plan.sources),
            upcoming_week=count_upcoming(result, cutoff),
            computed_at=result.computed_at,
            cached=cached,
        )
