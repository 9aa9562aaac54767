"""Database module for the Getman backend.

Components:
- Redis: persisted workspace tree records (single DB + key prefix pattern)
"""

from getman.db.redis_cache import RedisCache, get_redis_cache, reset_redis_cache
from getman.db.redis_db import RedisKeyPrefix
from getman.db.redis_factory import create_redis_client

__all__ = [
    "RedisCache",
    "RedisKeyPrefix",
    "create_redis_client",
    "get_redis_cache",
    "reset_redis_cache",
]
