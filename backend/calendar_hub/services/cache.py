"""Aggregation result cache.

Allows swapping the in-process store for Redis when several workers should
share one cache.
"""
from __future__ import annotations
from typing import Protocol, Optional, Dict, Tuple, Callable
import json
import logging
import threading
import time

from ..domain.models import AggregationResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class AggregationCache(Protocol):
    backend: str

    def get(self, key: str) -> Optional[AggregationResult]: ...
    def set(self, key: str, value: AggregationResult) -> None: ...
    def clear(self) -> None: ...
    def close(self) -> None: ...


class MemoryCache:
    backend = "memory"

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, time_provider: Optional[Callable[[], float]] = None):
        # key -> (expires_at, value)
        self._data: Dict[str, Tuple[float, AggregationResult]] = {}
        self._lock = threading.Lock()
        self.ttl_seconds = ttl_seconds
        self.time_provider = time_provider or time.monotonic

    def get(self, key: str) -> Optional[AggregationResult]:
        now_ts = self.time_provider()
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if now_ts >= expires_at:
                self._data.pop(key, None)
                return None
            return value

    def set(self, key: str, value: AggregationResult) -> None:
        now_ts = self.time_provider()
        with self._lock:
            self._prune(now_ts)
            self._data[key] = (now_ts + self.ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def close(self) -> None:
        self.clear()

    def _prune(self, now_ts: float) -> None:
        expired = [k for k, (exp, _) in self._data.items() if now_ts >= exp]
        for k in expired:
            self._data.pop(k, None)

    def size(self) -> int:
        with self._lock:
            return len(self._data)


class RedisCache:
    """Redis-backed implementation.

    Key layout:
      calhub:cache:<key> -> JSON-encoded AggregationResult (TTL applied by Redis)

    clear() deletes every key under the prefix, leaving other data untouched.
    """
    backend = "redis"
    KEY_PREFIX = "calhub:cache:"

    def __init__(self, redis_client, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def get(self, key: str) -> Optional[AggregationResult]:
        raw = self.redis.get(self.KEY_PREFIX + key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return AggregationResult.from_dict(json.loads(raw))

    def set(self, key: str, value: AggregationResult) -> None:
        self.redis.set(self.KEY_PREFIX + key, json.dumps(value.to_dict()), ex=int(self.ttl_seconds))

    def clear(self) -> None:
        keys = list(self.redis.scan_iter(match=self.KEY_PREFIX + "*"))
        if keys:
            pipe = self.redis.pipeline()
            for k in keys:
                pipe.delete(k)
            pipe.execute()

    def close(self) -> None:
        self.redis.close()


def build_cache(backend: str, ttl_seconds: float = DEFAULT_TTL_SECONDS, redis_url: Optional[str] = None) -> AggregationCache:
    if backend.lower() == "redis":
        try:
            import redis  # type: ignore
            client = redis.from_url(redis_url or "redis://localhost:6379/0")
            return RedisCache(client, int(ttl_seconds))
        except Exception as e:
            logger.warning("Redis cache unavailable (%s); falling back to in-memory cache", e)
    return MemoryCache(ttl_seconds)
