"""
Redis-backed key/value cache used by the workspace storage.

Architecture (Single DB + Key Prefix Pattern):
- All data lives in db=0, concerns are isolated by key prefix
- Redis Cluster compatible (Cluster only supports db=0)
- MULTI/EXEC pipelines available within the single DB

Usage:
    from getman.db.redis_cache import get_redis_cache
    from getman.db.redis_db import RedisKeyPrefix

    cache = get_redis_cache()

    key = RedisKeyPrefix.item_key("item_abc123")
    cache.set(key, {"name": "Users"})
    data = cache.get(key)
    cache.delete(key)

    # Set operations (for indexes)
    ids = cache.smembers(RedisKeyPrefix.item_index_key())
"""

from __future__ import annotations

import json
from typing import Any

import redis

from getman.db.redis_factory import create_redis_client
from getman.utils import get_logger

logger = get_logger(__name__)


class RedisCache:
    """
    Redis cache with JSON serialization.

    Every operation catches redis.RedisError, logs it and returns a
    neutral value (None / False / empty) instead of raising.
    """

    def __init__(self, client: redis.Redis | None = None):
        """
        Initialize Redis cache

        Args:
            client: Optional pre-configured Redis client (for testing with fakeredis)
        """
        self._client: redis.Redis | None = client

    @property
    def client(self) -> redis.Redis:
        """Lazy initialization of the Redis client"""
        if self._client is None:
            self._client = create_redis_client()
        return self._client

    # ==================== String Operations ====================

    def get(self, key: str) -> Any | None:
        """
        Get cached value

        Returns:
            Cached value (deserialized from JSON), or None if not found or expired
        """
        try:
            data = self.client.get(key)
            if data:
                return json.loads(data)
            logger.debug(f"Cache miss: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"Redis get error for key {key}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error for key {key}: {e}")
            return None

    def mget(self, keys: list[str]) -> list[Any | None]:
        """Get several values in one round trip, None for missing keys."""
        if not keys:
            return []
        try:
            raw_values = self.client.mget(keys)
        except redis.RedisError as e:
            logger.error(f"Redis mget error for {len(keys)} keys: {e}")
            return [None] * len(keys)

        values = []
        for key, data in zip(keys, raw_values):
            if not data:
                values.append(None)
                continue
            try:
                values.append(json.loads(data))
            except json.JSONDecodeError as e:
                logger.error(f"JSON decode error for key {key}: {e}")
                values.append(None)
        return values

    def set(self, key: str, value: Any, expire_seconds: int | None = None) -> bool:
        """
        Set cached value with optional TTL

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            expire_seconds: TTL in seconds (None for no expiry)

        Returns:
            True if successful, False otherwise
        """
        try:
            serialized = json.dumps(value, default=str)

            if expire_seconds:
                result = self.client.setex(key, expire_seconds, serialized)
            else:
                result = self.client.set(key, serialized)

            logger.debug(f"Cache set: {key}" + (f", expires in {expire_seconds}s" if expire_seconds else ""))
            return bool(result)
        except redis.RedisError as e:
            logger.error(f"Redis set error for key {key}: {e}")
            return False
        except (TypeError, ValueError) as e:
            logger.error(f"Serialization error for key {key}: {e}")
            return False

    def delete(self, *keys: str) -> bool:
        """
        Delete cached values

        Returns:
            True if at least one key was deleted, False otherwise
        """
        if not keys:
            return False
        try:
            result = self.client.delete(*keys)
            if result:
                logger.debug(f"Cache deleted: {', '.join(keys)}")
            return bool(result)
        except redis.RedisError as e:
            logger.error(f"Redis delete error for keys {keys}: {e}")
            return False

    def exists(self, key: str) -> bool:
        """Check if key exists in cache"""
        try:
            return bool(self.client.exists(key))
        except redis.RedisError as e:
            logger.error(f"Redis exists error for key {key}: {e}")
            return False

    def ttl(self, key: str) -> int:
        """
        Get remaining TTL for a key

        Returns:
            TTL in seconds, -1 if key has no expiry, -2 if key doesn't exist
        """
        try:
            return self.client.ttl(key)
        except redis.RedisError as e:
            logger.error(f"Redis TTL error for key {key}: {e}")
            return -2

    # ==================== Set Operations (for indexes) ====================

    def smembers(self, key: str) -> set[str]:
        """Members of a set, empty on error."""
        try:
            return set(self.client.smembers(key))
        except redis.RedisError as e:
            logger.error(f"Redis smembers error for key {key}: {e}")
            return set()

    def srem(self, key: str, *members: str) -> int:
        """Remove members from a set, returns how many were removed."""
        if not members:
            return 0
        try:
            return self.client.srem(key, *members)
        except redis.RedisError as e:
            logger.error(f"Redis srem error for key {key}: {e}")
            return 0

    # ==================== Utility Methods ====================

    def ping(self) -> bool:
        """Check Redis connection"""
        try:
            return self.client.ping()
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    def close(self) -> None:
        """Close Redis connection"""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("RedisCache closed")


# ==================== Singleton Instance ====================

_redis_cache: RedisCache | None = None


def get_redis_cache() -> RedisCache:
    """Get singleton Redis cache instance."""
    global _redis_cache
    if _redis_cache is None:
        _redis_cache = RedisCache()
    return _redis_cache


def reset_redis_cache() -> None:
    """Drop the singleton cache (for testing)."""
    global _redis_cache
    if _redis_cache is not None:
        _redis_cache.close()
    _redis_cache = None
