"""
Redis Cache Module

Response cache for generated reports:
- Connection pooling
- Automatic serialization
- TTL management
- Graceful degradation when Redis is down
"""

import json
from typing import Any, Optional, Union
from datetime import timedelta

import structlog
from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from src.config import get_settings

logger = structlog.get_logger(__name__)

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=settings.redis.decode_responses,
    )

    client = Redis(connection_pool=_redis_pool)

    # Test connection
    try:
        await client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        logger.error("Redis connection failed", error=str(e))
        await client.aclose()
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
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


def is_cache_available() -> bool:
    """Whether a Redis client has been initialized"""
    return _redis_client is not None


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Args:
        key: Cache key

    Returns:
        Cached value or None if not found
    """
    client = get_redis()
    value = await client.get(key)

    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time-to-live in seconds or timedelta

    Returns:
        True if successful
    """
    client = get_redis()

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    if ttl:
        if isinstance(ttl, timedelta):
            ttl = int(ttl.total_seconds())
        await client.setex(key, ttl, serialized)
    else:
        await client.set(key, serialized)

    return True


class CacheManager:
    """
    Cache manager with namespace support.

    Lookups are skipped while Redis is unavailable, and Redis errors are
    logged rather than raised, so a cache outage only costs a recompute.

    Example:
        cache = CacheManager("reports")
        await cache.set("30days", report_data, ttl=60)
        report = await cache.get("30days")
    """

    def __init__(self, namespace: str, default_ttl: int = 60):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        """Generate namespaced key"""
        return f"{self.namespace}:{key}"

    @property
    def enabled(self) -> bool:
        return self.default_ttl > 0 and get_settings().redis.enabled and is_cache_available()

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        if not self.enabled:
            return None
        try:
            return await cache_get(self._key(key))
        except RedisError as e:
            logger.warning("Cache read failed", key=self._key(key), error=str(e))
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        """Set value in cache"""
        if not self.enabled:
            return False
        try:
            return await cache_set(self._key(key), value, ttl or self.default_ttl)
        except RedisError as e:
            logger.warning("Cache write failed", key=self._key(key), error=str(e))
            return False


# Pre-configured cache managers
_ttl = get_settings().reporting.cache_ttl_seconds
reports_cache = CacheManager("reports", default_ttl=_ttl)
dashboard_cache = CacheManager("dashboard", default_ttl=_ttl)
statistics_cache = CacheManager("statistics", default_ttl=_ttl)
