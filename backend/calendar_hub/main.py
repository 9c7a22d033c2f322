"""FastAPI application entrypoint.

Responsibilities kept minimal:
  * App factory / lifespan (builds provider, cache, planner, aggregator)
  * Router registration (events, people, stats, cache)
  * Cross-cutting concerns: metrics middleware, CORS & exception handlers
"""

from contextlib import asynccontextmanager
import logging
import os
import time
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, Request, Response
try:  # Optional OpenTelemetry
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    _otel_available = True
except Exception:  # pragma: no cover
    _otel_available = False
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from . import __version__
from .adapters.google_calendar_provider import GoogleCalendarProvider
from .api.events import router as events_router
from .api.people import router as people_router
from .api.stats import router as stats_router
from .api.cache import router as cache_router
from .config import Settings
from .errors import BaseAppException, AggregationUnavailableError
from .ports.calendar_provider import CalendarProvider
from .services.aggregator import Aggregator
from .services.cache import AggregationCache, build_cache
from .services.query_planner import QueryPlanner
from .services.source_client import SourceClient
from .usecases.query_events import QueryEventsUseCase, StatsUseCase

logger = logging.getLogger(__name__)

# --- Optional .env loading (opt-in via APP_LOAD_DOTENV) ---
if os.getenv("APP_LOAD_DOTENV") in {"1", "true", "TRUE", "yes", "on"}:  # pragma: no cover
    from dotenv import load_dotenv
    # Respect existing env (override=False). Default search walks up from CWD.
    load_dotenv(override=False)

# --- OpenTelemetry Tracing (optional) ---
if _otel_available and os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):  # pragma: no cover
    resource = Resource.create({"service.name": "calendar-hub"})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"))))
    trace.set_tracer_provider(tracer_provider)
    tracer = trace.get_tracer(__name__)
else:
    tracer = None

# --- Metrics setup ---
REQUEST_COUNT = Counter(
    "calendar_hub_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "calendar_hub_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)

UNMATCHED_PATH = "<unmatched>"

ENDPOINTS = (
    "GET  /api/events",
    "GET  /api/people",
    "GET  /api/stats",
    "POST /api/cache/clear",
)


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[CalendarProvider] = None,
    cache: Optional[AggregationCache] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        calendar_provider = provider or GoogleCalendarProvider(
            api_key=settings.google_api_key,
            service_account_file=settings.google_service_account_json or None,
        )
        app_cache = cache or build_cache(settings.cache_backend, settings.cache_ttl_seconds, settings.redis_url)
        planner = QueryPlanner(settings.sources, settings.days_to_show)
        aggregator = Aggregator(SourceClient(calendar_provider, settings.source_fetch_timeout_seconds))

        app.state.settings = settings
        app.state.cache = app_cache
        app.state.events_usecase = QueryEventsUseCase(planner, aggregator, app_cache, settings.max_results)
        app.state.stats_usecase = StatsUseCase(planner, aggregator, app_cache, settings.max_results)

        logger.info("Calendar Hub started with %d calendars (%s cache)", len(settings.sources), app_cache.backend)
        for line in ENDPOINTS:
            logger.info("  - %s", line)
        try:
            yield
        finally:
            app_cache.close()

    app = FastAPI(title="Calendar Hub API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(events_router)
    app.include_router(people_router)
    app.include_router(stats_router)
    app.include_router(cache_router)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        method = request.method
        start = time.perf_counter()
        if tracer:
            with tracer.start_as_current_span(f"HTTP {method} {request.url.path}"):
                response: Response = await call_next(request)
        else:
            response: Response = await call_next(request)
        # route is only known after routing; unknown paths share one label
        route = request.scope.get("route")
        path_label = getattr(route, "path", None) or UNMATCHED_PATH
        REQUEST_LATENCY.labels(method=method, path=path_label).observe(time.perf_counter() - start)
        REQUEST_COUNT.labels(method=method, path=path_label, status=str(response.status_code)).inc()
        return response

    @app.exception_handler(AggregationUnavailableError)
    async def aggregation_exception_handler(request: Request, exc: AggregationUnavailableError):
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": exc.error, "message": exc.message},
        )

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):  # pragma: no cover
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "unexpected error"},
        )

    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "cacheBackend": request.app.state.cache.backend,
        }

    @app.get("/metrics")
    def metrics():  # pragma: no cover - external scrape
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
