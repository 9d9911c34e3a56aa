from analyzers.cache import MemoryTTLCache, RedisTTLCache
from analyzers.models import PerformanceScores
from conftest import FakeRedis


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


async def test_memory_cache_returns_stored_object_until_ttl():
    clock = FakeClock()
    cache = MemoryTTLCache(ttl=3600, clock=clock)
    scores = PerformanceScores(mobile=80, desktop=90)

    await cache.set("https://example.com/", scores)
    clock.now += 3599

    assert await cache.get("https://example.com/") is scores

    clock.now += 1
    assert await cache.get("https://example.com/") is None
    assert len(cache) == 0


async def test_memory_cache_last_writer_wins():
    cache = MemoryTTLCache(ttl=60)
    await cache.set("k", PerformanceScores(mobile=1, desktop=2))
    await cache.set("k", PerformanceScores(mobile=3, desktop=4))

    assert await cache.get("k") == PerformanceScores(mobile=3, desktop=4)


async def test_memory_cache_miss():
    assert await MemoryTTLCache(ttl=60).get("absent") is None


async def test_redis_cache_round_trip_with_expiry():
    client = FakeRedis()
    cache = RedisTTLCache(client, PerformanceScores, ttl=3600, prefix="t:")
    scores = PerformanceScores(mobile=70, desktop=None)

    await cache.set("https://example.com/", scores)

    assert client.expiries["t:https://example.com/"] == 3600
    assert await cache.get("https://example.com/") == scores


async def test_redis_outage_reads_as_miss():
    cache = RedisTTLCache(FakeRedis(fail=True), PerformanceScores, ttl=60)

    await cache.set("k", PerformanceScores(mobile=1, desktop=1))
    assert await cache.get("k") is None


async def test_redis_entry_that_no_longer_validates_is_a_miss():
    client = FakeRedis()
    client.store["t:k"] = b'{"mobile":250,"desktop":90}'
    client.store["t:junk"] = b"not json"
    cache = RedisTTLCache(client, PerformanceScores, ttl=60, prefix="t:")

    assert await cache.get("k") is None
    assert await cache.get("junk") is None
