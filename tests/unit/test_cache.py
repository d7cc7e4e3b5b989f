"""
Unit Tests - Response Cache
"""
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from merchant_analytics.serving import cache
from merchant_analytics.serving.cache import CacheManager


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.store = {}
        self.ttls = {}
        self.fail = fail

    async def get(self, key):
        if self.fail:
            raise RedisConnectionError("down")
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        if self.fail:
            raise RedisConnectionError("down")
        self.store[key] = value
        self.ttls[key] = ttl


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr(cache, "_redis_client", client)
    return client


class TestCacheManager:

    def test_unavailable_without_redis(self, monkeypatch):
        monkeypatch.setattr(cache, "_redis_client", None)

        assert CacheManager("analytics").available is False

    async def test_round_trip_with_namespace_and_ttl(self, fake_redis):
        manager = CacheManager("analytics", default_ttl=60)

        assert await manager.set("charts:7d", {"period": "7d"}) is True

        assert fake_redis.ttls == {"analytics:charts:7d": 60}
        assert await manager.get("charts:7d") == {"period": "7d"}

    async def test_miss(self, fake_redis):
        assert await CacheManager("analytics").get("charts:1y") is None

    async def test_undecodable_entry_is_a_miss(self, fake_redis):
        fake_redis.store["analytics:charts:7d"] = "{not json"

        assert await CacheManager("analytics").get("charts:7d") is None

    async def test_unserializable_value(self, fake_redis):
        assert await CacheManager("analytics").set("bad", object()) is False
        assert fake_redis.store == {}

    async def test_redis_errors_degrade_to_miss(self, monkeypatch):
        monkeypatch.setattr(cache, "_redis_client", FakeRedis(fail=True))
        manager = CacheManager("analytics")

        assert await manager.get("charts:7d") is None
        assert await manager.set("charts:7d", {"a": 1}) is False
