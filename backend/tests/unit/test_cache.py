import json
from datetime import datetime, timezone

from calendar_hub.domain.models import AggregationResult, Event
from calendar_hub.services.cache import MemoryCache, RedisCache, build_cache


def make_result(title="Standup"):
    ev = Event(
        title=title,
        start="2030-03-01T10:00:00Z",
        end="2030-03-01T11:00:00Z",
        description="",
        location="",
        source_id="alice@example.com",
        source_name="Alice",
        color_tag="#ff0000",
        all_day=False,
    )
    return AggregationResult(
        events=(ev,),
        total_events=1,
        total_sources=2,
        computed_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        failed_sources=("bob@example.com",),
    )


def test_memory_cache_get_after_set_returns_value():
    cache = MemoryCache(ttl_seconds=300)
    value = make_result()
    cache.set("k", value)
    assert cache.get("k") == value
    assert cache.get("missing") is None


def test_memory_cache_entries_expire_after_ttl():
    virtual = [0.0]
    cache = MemoryCache(ttl_seconds=300, time_provider=lambda: virtual[0])
    cache.set("k", make_result())
    virtual[0] = 299.9
    assert cache.get("k") is not None
    virtual[0] = 300.0
    assert cache.get("k") is None
    assert cache.size() == 0


def test_memory_cache_set_overwrites_and_refreshes_expiry():
    virtual = [0.0]
    cache = MemoryCache(ttl_seconds=10, time_provider=lambda: virtual[0])
    cache.set("k", make_result("old"))
    virtual[0] = 8
    cache.set("k", make_result("new"))
    virtual[0] = 15
    assert cache.get("k").events[0].title == "new"


def test_memory_cache_set_prunes_expired_entries():
    virtual = [0.0]
    cache = MemoryCache(ttl_seconds=10, time_provider=lambda: virtual[0])
    cache.set("a", make_result())
    virtual[0] = 20
    cache.set("b", make_result())
    assert cache.size() == 1


def test_memory_cache_clear_removes_everything():
    cache = MemoryCache()
    cache.set("a", make_result())
    cache.set("b", make_result())
    cache.clear()
    assert cache.get("a") is None
    assert cache.size() == 0


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.expiry = {}
        self.closed = False

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value.encode()
        self.expiry[key] = ex

    def scan_iter(self, match=None):
        prefix = match.rstrip("*")
        return iter([k for k in self.data if k.startswith(prefix)])

    def pipeline(self):
        return FakePipeline(self)

    def close(self):
        self.closed = True


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.ops = []

    def delete(self, key):
        self.ops.append(key)

    def execute(self):
        for key in self.ops:
            self.redis.data.pop(key, None)


def test_redis_cache_round_trip_applies_ttl():
    client = FakeRedis()
    cache = RedisCache(client, ttl_seconds=300)
    value = make_result()
    cache.set("events|all|all|30", value)
    stored_key = RedisCache.KEY_PREFIX + "events|all|all|30"
    assert client.expiry[stored_key] == 300
    assert json.loads(client.data[stored_key])["totalEvents"] == 1
    assert cache.get("events|all|all|30") == value
    assert cache.get("other") is None


def test_redis_cache_clear_only_touches_own_prefix():
    client = FakeRedis()
    client.data["unrelated"] = b"keep"
    cache = RedisCache(client)
    cache.set("stats", make_result())
    cache.clear()
    assert cache.get("stats") is None
    assert client.data == {"unrelated": b"keep"}
    cache.close()
    assert client.closed


def test_build_cache_defaults_to_memory():
    assert isinstance(build_cache("memory", 300), MemoryCache)
    assert build_cache("memory", 42).ttl_seconds == 42
