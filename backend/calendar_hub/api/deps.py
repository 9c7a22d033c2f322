from fastapi import Request

from ..config import Settings
from ..services.cache import AggregationCache
from ..usecases.query_events import QueryEventsUseCase, StatsUseCase


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> AggregationCache:
    return request.app.state.cache


def get_events_usecase(request: Request) -> QueryEventsUseCase:
    return request.app.state.events_usecase


def get_stats_usecase(request: Request) -> StatsUseCase:
    return request.app.state.stats_usecase
