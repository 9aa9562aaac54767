"""Redis-backed storage for workspace tree records.

Architecture (Single DB + Key Prefix Pattern):
- Each item is a JSON string under getman:workspace:item:{id}
- getman:workspace:index:items is a set of every stored item id
- A save writes all records and the index in one MULTI/EXEC pipeline

Parent/child links are stored on the records themselves (``parentId`` and
``children``), so the tree can be rebuilt from a plain listing.
"""

from collections.abc import Iterable

import redis
from pydantic import ValidationError

from getman.components.workspace.models import Item
from getman.db.redis_cache import RedisCache, get_redis_cache
from getman.db.redis_db import RedisKeyPrefix
from getman.settings import settings
from getman.utils import get_logger

logger = get_logger(__name__)


class WorkspaceRedisStorage:
    """Redis-backed storage for workspace items.

    Designed for deployments where several backend instances share one Redis.
    """

    def __init__(self, cache: RedisCache | None = None, ttl: int | None = None):
        """Initialize with optional cache instance and TTL (for testing)."""
        self._cache = cache
        self._ttl = settings.workspace_ttl if ttl is None else ttl

    @property
    def cache(self) -> RedisCache:
        """Lazy initialization of Redis cache."""
        if self._cache is None:
            self._cache = get_redis_cache()
        return self._cache

    def _item_key(self, item_id: str) -> str:
        return RedisKeyPrefix.item_key(item_id)

    def save_items(self, items: Iterable[Item]) -> bool:
        """Save or update item records atomically."""
        items = list(items)
        if not items:
            return True

        index_key = RedisKeyPrefix.item_index_key()
        try:
            pipe = self.cache.client.pipeline(transaction=True)
            for item in items:
                data = item.model_dump_json()
                if self._ttl:
                    pipe.setex(self._item_key(item.id), self._ttl, data)
                else:
                    pipe.set(self._item_key(item.id), data)
            pipe.sadd(index_key, *[item.id for item in items])
            pipe.execute()
        except redis.RedisError as e:
            logger.error(f"Failed to save {len(items)} workspace item(s): {e}")
            return False

        logger.debug(f"Saved {len(items)} workspace item(s)")
        return True

    def get_item(self, item_id: str) -> Item | None:
        """Get an item record by ID."""
        data = self.cache.get(self._item_key(item_id))
        if not data:
            return None
        try:
            return Item(**data)
        except ValidationError as e:
            logger.error(f"Invalid workspace item record {item_id}: {e}")
            return None

    def list_items(self) -> list[Item]:
        """List every stored item record, cleaning stale index entries.

        Raises:
            redis.RedisError: If the index or the records cannot be read. A
                failed read must not look like an empty workspace.
        """
        index_key = RedisKeyPrefix.item_index_key()
        try:
            item_ids = sorted(self.cache.client.smembers(index_key))
            raw_values = self.cache.client.mget([self._item_key(item_id) for item_id in item_ids]) if item_ids else []
        except redis.RedisError as e:
            logger.error(f"Failed to list workspace items: {e}")
            raise

        items: list[Item] = []
        stale: list[str] = []
        for item_id, data in zip(item_ids, raw_values):
            if not data:
                stale.append(item_id)
                continue
            try:
                items.append(Item.model_validate_json(data))
            except ValidationError as e:
                logger.error(f"Invalid workspace item record {item_id}: {e}")

        if stale:
            self.cache.srem(index_key, *stale)
            logger.debug(f"Removed {len(stale)} stale index entries")
        return items

    def delete_items(self, item_ids: Iterable[str]) -> bool:
        """Delete item records. Missing ids are ignored."""
        item_ids = list(item_ids)
        if not item_ids:
            return True

        try:
            pipe = self.cache.client.pipeline(transaction=True)
            pipe.delete(*[self._item_key(item_id) for item_id in item_ids])
            pipe.srem(RedisKeyPrefix.item_index_key(), *item_ids)
            pipe.execute()
        except redis.RedisError as e:
            logger.error(f"Failed to delete {len(item_ids)} workspace item(s): {e}")
            return False

        logger.debug(f"Deleted {len(item_ids)} workspace item(s)")
        return True

    def clear_all(self) -> None:
        """Clear all workspace data (useful for testing)."""
        index_key = RedisKeyPrefix.item_index_key()
        ids = self.cache.smembers(index_key)
        if ids:
            self.cache.delete(*[self._item_key(item_id) for item_id in ids])
        self.cache.delete(index_key)
        logger.warning("Cleared all workspace data from Redis")


# Singleton instance (lazy initialized)
_workspace_redis_storage: WorkspaceRedisStorage | None = None


def get_workspace_redis_storage() -> WorkspaceRedisStorage:
    """Get singleton instance of WorkspaceRedisStorage."""
    global _workspace_redis_storage
    if _workspace_redis_storage is None:
        _workspace_redis_storage = WorkspaceRedisStorage()
    return _workspace_redis_storage


def reset_workspace_redis_storage() -> None:
    """Drop the singleton (for testing)."""
    global _workspace_redis_storage
    _workspace_redis_storage = None
