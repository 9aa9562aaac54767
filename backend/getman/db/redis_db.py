"""
Redis Key Prefix Strategy (Single DB + Key Prefix Pattern)

Getman keeps all of its Redis data in db=0 and isolates concerns through key
prefixes.

Usage:
    from getman.db.redis_db import RedisKeyPrefix

    key = RedisKeyPrefix.item_key(item_id)
    # -> "getman:workspace:item:item_abc123"

Environment isolation is achieved with separate Redis instances, not
separate databases.
"""

from enum import Enum


class RedisKeyPrefix(str, Enum):
    """Redis key prefixes.

    Every key starts with 'getman:' to avoid collisions with other apps.

    Key format:
        {prefix}:{entity_type}:{entity_id}

    Examples:
        getman:workspace:item:item_xyz789
        getman:workspace:index:items
    """

    # === Workspace ===
    WORKSPACE_ITEM = "getman:workspace:item"  # Item record (String/JSON)
    WORKSPACE_INDEX = "getman:workspace:index"  # Index sets (Set)

    # ==================== Helpers ====================

    @classmethod
    def item_key(cls, item_id: str) -> str:
        """Key of a persisted tree item."""
        return f"{cls.WORKSPACE_ITEM.value}:{item_id}"

    @classmethod
    def item_index_key(cls) -> str:
        """Key of the set holding every persisted item id."""
        return f"{cls.WORKSPACE_INDEX.value}:items"

    @classmethod
    def get_description(cls, prefix: "RedisKeyPrefix") -> str:
        """Describe what a key prefix is used for."""
        descriptions = {
            cls.WORKSPACE_ITEM: "Workspace tree item records",
            cls.WORKSPACE_INDEX: "Workspace entity indexes",
        }
        return descriptions.get(prefix, "undefined")

    @classmethod
    def list_all(cls) -> dict:
        """List every defined key prefix and its purpose."""
        return {member.name: {"prefix": member.value, "description": cls.get_description(member)} for member in cls}
