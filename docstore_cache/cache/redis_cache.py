"""
Redis-backed cache adapter.
"""

from typing import Any, Optional

import redis.asyncio as redis
from bson import json_util

from shared.errors import CacheBackendError
from shared.logging import get_logger
from ..sentinels import NOT_FOUND
from .base import CacheAdapter

# Reserved document standing in for NOT_FOUND on the wire
NOT_FOUND_MARKER = {"$docstoreCacheNotFound": True}

# Naive UTC datetimes on decode, matching the drivers' default codec options
JSON_OPTIONS = json_util.JSONOptions(json_mode=json_util.JSONMode.RELAXED, tz_aware=False)


def encode_value(value: Any) -> str:
    """Encode a record, record list or NOT_FOUND as extended JSON."""
    if value is NOT_FOUND:
        return json_util.dumps(NOT_FOUND_MARKER, json_options=JSON_OPTIONS)
    return json_util.dumps(value, json_options=JSON_OPTIONS)


def decode_value(payload: Any) -> Any:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    value = json_util.loads(payload, json_options=JSON_OPTIONS)
    if value == NOT_FOUND_MARKER:
        return NOT_FOUND
    return value


class RedisCache(CacheAdapter):
    """Cache adapter over ``redis.asyncio``.

    Entries survive process restarts, so keys stay stable across deployments.
    Errors from Redis are raised to the caller; the loaders decide whether a
    failure matters.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("datasource.cache.redis")
        self.redis: Optional[redis.Redis] = client

    def _client(self) -> redis.Redis:
        if self.redis is None:
            self.redis = redis.from_url(
                self.redis_url,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )
        return self.redis

    async def start(self):
        """Connect and verify the server answers."""
        try:
            await self._client().ping()
            self.logger.info("Redis cache started", redis_url=self.redis_url)
        except Exception as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise CacheBackendError("redis", str(e)) from e

    async def close(self):
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def get(self, key: str) -> Optional[Any]:
        payload = await self._client().get(key)
        if payload is None:
            return None
        return decode_value(payload)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        payload = encode_value(value)
        if ttl:
            await self._client().set(key, payload, ex=ttl)
        else:
            await self._client().set(key, payload)

    async def delete(self, key: str) -> None:
        await self._client().delete(key)

    async def clear_prefix(self, prefix: str) -> int:
        client = self._client()
        keys = [key async for key in client.scan_iter(match=f"{prefix}*")]
        if keys:
            await client.delete(*keys)
        self.logger.info("Cleared cache prefix", prefix=prefix, keys_count=len(keys))
        return len(keys)

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client().ping()
            return True
        except Exception as e:
            self.logger.warning("Redis health check failed", error=str(e))
            return False
