import pytest

from services.cache import InMemoryCache, RedisCache, build_cache, content_hash


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_content_hash_is_stable_and_order_sensitive():
    a = content_hash("resume", "general", "jd")
    assert a == content_hash("resume", "general", "jd")
    assert a != content_hash("jd", "general", "resume")
    assert len(a) == 64


def test_content_hash_treats_none_as_empty():
    assert content_hash("resume", None) == content_hash("resume", "")


def test_content_hash_separates_parts():
    assert content_hash("ab", "c") != content_hash("a", "bc")


@pytest.mark.asyncio
async def test_in_memory_get_and_set():
    cache = InMemoryCache()
    assert await cache.get("k") is None
    await cache.set_with_ttl("k", "v", 60)
    assert await cache.get("k") == "v"
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_in_memory_entries_expire():
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    await cache.set_with_ttl("k", "v", 10)

    clock.now += 9
    assert await cache.get("k") == "v"
    clock.now += 1
    assert await cache.get("k") is None
    assert len(cache) == 0


def test_build_cache():
    assert isinstance(build_cache(""), InMemoryCache)
    assert isinstance(build_cache("redis://localhost:6379/0"), RedisCache)


@pytest.mark.asyncio
async def test_in_memory_sweeps_expired_entries_past_capacity():
    clock = FakeClock()
    cache = InMemoryCache(max_entries=1000, clock=clock)
    for i in range(1000):
        await cache.set_with_ttl(f"k{i}", "v", 1)
    assert len(cache) == 1000

    clock.now += 10
    await cache.set_with_ttl("fresh", "v", 60)
    assert len(cache) == 1
    assert await cache.get("fresh") == "v"


@pytest.mark.asyncio
async def test_in_memory_evicts_oldest_when_all_live():
    cache = InMemoryCache(max_entries=2, clock=FakeClock())
    await cache.set_with_ttl("a", "1", 60)
    await cache.set_with_ttl("b", "2", 60)
    await cache.set_with_ttl("a", "3", 60)
    await cache.set_with_ttl("c", "4", 60)

    assert len(cache) == 2
    assert await cache.get("b") is None
    assert await cache.get("a") == "3"
    assert await cache.get("c") == "4"


@pytest.mark.asyncio
async def test_redis_outage_falls_back_to_memory():
    # nothing listens on this port, so every call fails with a RedisError
    cache = RedisCache("redis://127.0.0.1:1/0")
    assert await cache.get("k") is None
    await cache.set_with_ttl("k", "v", 60)
    assert await cache.get("k") == "v"
    assert len(cache.fallback) == 1


@pytest.mark.asyncio
async def test_redis_fallback_honours_ttl():
    clock = FakeClock()
    cache = RedisCache("redis://127.0.0.1:1/0", fallback=InMemoryCache(clock=clock))
    await cache.set_with_ttl("k", "v", 5)
    clock.now += 5
    assert await cache.get("k") is None
