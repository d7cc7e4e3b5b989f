"""
Serving Module
"""
from .cache import CacheManager, analytics_cache, close_redis, init_redis, is_redis_ready

__all__ = [
    "CacheManager",
    "analytics_cache",
    "close_redis",
    "init_redis",
    "is_redis_ready",
]
