"""Optional Redis cache for short-lived aggregates such as channel stats.

When no ``REDIS_URL`` is configured, or Redis is unreachable, every call is a
no-op miss and callers fall through to the database.
"""

import json
from datetime import timedelta
from typing import Any

import redis.asyncio as redis

from vidtube.config import get_settings
from vidtube.constants import CACHE_TTL_CHANNEL_STATS
from vidtube.utils.logging import get_logger

logger = get_logger(__name__)


class RedisCache:
    """Async Redis cache client with JSON serialization."""

    def __init__(self, url: str | None = None) -> None:
        self._url = url
        self._client: redis.Redis | None = None
        self._connected = False

    @property
    def enabled(self) -> bool:
        return self._url is not None

    @property
    def connected(self) -> bool:
        return self._connected

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                str(self._url),
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def connect(self) -> bool:
        """Test Redis connection."""
        if not self.enabled:
            return False
        try:
            await self._get_client().ping()
            self._connected = True
        except redis.RedisError as e:
            logger.warning(f"Redis cache unavailable: {e}")
            self._connected = False
        return self._connected

    async def ping(self) -> bool:
        """Ping Redis to check connection health."""
        return await self._get_client().ping()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            self._connected = False

    async def get(self, key: str) -> Any | None:
        """Get value from cache, None on miss or error."""
        if not self._connected:
            return None
        try:
            data = await self._get_client().get(key)
        except redis.RedisError as e:
            logger.debug(f"Cache get error for {key}: {e}")
            return None
        return json.loads(data) if data else None

    async def set(self, key: str, value: Any, ttl: timedelta) -> bool:
        if not self._connected:
            return False
        try:
            await self._get_client().setex(key, int(ttl.total_seconds()), json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.debug(f"Cache set error for {key}: {e}")
            return False
        return True

    async def delete(self, key: str) -> bool:
        if not self._connected:
            return False
        try:
            await self._get_client().delete(key)
        except redis.RedisError as e:
            logger.debug(f"Cache delete error for {key}: {e}")
            return False
        return True


# Global cache instance
cache = RedisCache(get_settings().redis_url)

CHANNEL_STATS_TTL = timedelta(seconds=CACHE_TTL_CHANNEL_STATS)


def channel_stats_key(owner_id: str) -> str:
    return f"channel:stats:{owner_id}"


async def invalidate_channel_stats(owner_id: str) -> None:
    """Drop cached stats after a change to the channel's videos or subscribers."""
    await cache.delete(channel_stats_key(owner_id))
