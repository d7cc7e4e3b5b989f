"""
Redis Cache Module

Optional response cache for the analytics endpoints. Redis is connected at
start-up when caching is enabled; when it is absent or failing, callers get
cache misses and compute responses directly.
"""

import json
from datetime import timedelta
from typing import Any, Optional, Union

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from merchant_analytics.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=settings.redis.decode_responses,
    )
    client = Redis(connection_pool=_redis_pool)

    try:
        await client.ping()
    except Exception as e:
        logger.error("Redis connection failed", error=str(e))
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
    logger.info("Redis connection established")
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def is_redis_ready() -> bool:
    return _redis_client is not None


class CacheManager:
    """
    JSON values under a key namespace.

    Redis errors are logged and reported as a miss (get) or False (set).

    Example:
        cache = CacheManager("analytics", default_ttl=60)
        await cache.set("charts:30d", payload)
        payload = await cache.get("charts:30d")
    """

    def __init__(self, namespace: str, default_ttl: int = 3600):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @property
    def available(self) -> bool:
        return is_redis_ready()

    async def get(self, key: str) -> Optional[Any]:
        """Decoded value, or None on a miss"""
        try:
            value = await get_redis().get(self._key(key))
        except RedisError as e:
            logger.warning("Cache read failed", key=key, error=str(e))
            return None

        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Discarding undecodable cache entry", key=key)
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[Union[int, timedelta]] = None,
    ) -> bool:
        """Store `value` as JSON for `ttl` (default_ttl when omitted)"""
        ttl = ttl or self.default_ttl
        if isinstance(ttl, timedelta):
            ttl = int(ttl.total_seconds())

        try:
            await get_redis().setex(self._key(key), ttl, json.dumps(value))
        except (TypeError, ValueError) as e:
            logger.warning("Failed to serialize value for cache", key=key, error=str(e))
            return False
        except RedisError as e:
            logger.warning("Cache write failed", key=key, error=str(e))
            return False
        return True


analytics_cache = CacheManager("analytics", default_ttl=settings.analytics.cache_ttl_seconds)
