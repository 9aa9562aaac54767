"""Unified storage provider for workspace tree records.

Selects between in-memory storage (single instance) and Redis storage
(multi-instance) from settings.

Usage:
    from getman.components.workspace.storage_provider import get_workspace_storage

    storage = get_workspace_storage()
    storage.save_items(tree.records())
    items = storage.list_items()
"""

from collections.abc import Iterable
from typing import Protocol

from getman.components.workspace.models import Item
from getman.settings import settings
from getman.utils import get_logger

logger = get_logger(__name__)


class WorkspaceStorageProtocol(Protocol):
    """Protocol defining the workspace storage interface."""

    def save_items(self, items: Iterable[Item]) -> bool: ...
    def get_item(self, item_id: str) -> Item | None: ...
    def list_items(self) -> list[Item]: ...  # raises on read failure, never returns [] instead
    def delete_items(self, item_ids: Iterable[str]) -> bool: ...
    def clear_all(self) -> None: ...


_workspace_storage: WorkspaceStorageProtocol | None = None
_storage_type: str | None = None


def get_workspace_storage() -> WorkspaceStorageProtocol:
    """Get the appropriate workspace storage based on configuration.

    Returns:
        WorkspaceStorage when settings.use_memory_store is true
        WorkspaceRedisStorage otherwise
    """
    global _workspace_storage, _storage_type

    if _workspace_storage is not None:
        return _workspace_storage

    if settings.use_memory_store:
        from getman.components.workspace.storage import workspace_storage

        _storage_type = "memory"
        _workspace_storage = workspace_storage
        logger.info("WorkspaceStorage: Using in-memory storage (single instance only)")
    else:
        from getman.components.workspace.redis_storage import get_workspace_redis_storage

        _storage_type = "redis"
        _workspace_storage = get_workspace_redis_storage()
        logger.info("WorkspaceStorage: Using Redis storage (multi-instance safe)")

    return _workspace_storage


def get_storage_type() -> str:
    """Get the current storage type ('memory' or 'redis')."""
    if _storage_type is None:
        get_workspace_storage()
    return _storage_type or "unknown"


def reset_workspace_storage() -> None:
    """Reset the storage singleton (for testing)."""
    global _workspace_storage, _storage_type
    _workspace_storage = None
    _storage_type = None
