"""Process configuration, read once from the environment at startup."""
from __future__ import annotations
import json
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .domain.models import CalendarSource
from .errors import ConfigurationError

DEFAULT_SOURCES = [
    {
        "id": "en.usa#holiday@group.v.calendar.google.com",
        "name": "US Holidays",
        "color": "#4285f4",
    }
]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def parse_sources(raw: Any) -> Tuple[CalendarSource, ...]:
    if not isinstance(raw, list):
        raise ConfigurationError("calendar sources must be a JSON list")
    sources: List[CalendarSource] = []
    seen = set()
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ConfigurationError(f"calendar source without an id: {entry!r}")
        src = CalendarSource.from_config(entry)
        if src.id in seen:
            raise ConfigurationError(f"duplicate calendar source id: {src.id}")
        seen.add(src.id)
        sources.append(src)
    return tuple(sources)


def _load_sources() -> Tuple[CalendarSource, ...]:
    path = os.getenv("CALENDAR_SOURCES_FILE")
    try:
        if path:
            with open(path, encoding="utf-8") as f:
                return parse_sources(json.load(f))
        raw = os.getenv("CALENDAR_SOURCES")
        if raw:
            return parse_sources(json.loads(raw))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot load calendar sources: {e}")
    return parse_sources(DEFAULT_SOURCES)


@dataclass(frozen=True)
class Settings:
    sources: Tuple[CalendarSource, ...] = field(default_factory=lambda: parse_sources(DEFAULT_SOURCES))
    google_api_key: str = ""
    google_service_account_json: str = ""
    days_to_show: int = 30
    max_results: int = 50
    cache_ttl_seconds: int = 300
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    source_fetch_timeout_seconds: Optional[float] = None
    cors_allow_origins: Tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "INFO"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        return cls(
            sources=_load_sources(),
            google_api_key=os.getenv("GOOGLE_API_KEY", ""),
            google_service_account_json=os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", ""),
            days_to_show=_int_env("DAYS_TO_SHOW", 30),
            max_results=_int_env("MAX_RESULTS", 50),
            cache_ttl_seconds=_int_env("CACHE_TTL_SECONDS", 300),
            cache_backend=os.getenv("CACHE_BACKEND", "memory").lower(),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            source_fetch_timeout_seconds=_float_env("SOURCE_FETCH_TIMEOUT_SECONDS"),
            cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip())
            if origins
            else ("http://localhost:3000",),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=_int_env("PORT", 3000),
        )
