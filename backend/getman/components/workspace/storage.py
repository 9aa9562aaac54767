"""Thread-safe in-memory storage for workspace tree records.

Records are deep copies of the live items, so later in-memory mutations
never leak into storage without an explicit save.
"""

import threading
from collections.abc import Iterable

from getman.components.workspace.models import Item


class WorkspaceStorage:
    """Thread-safe in-memory storage for workspace items.

    Uses a reentrant lock (RLock) to ensure thread safety for all operations.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._items: dict[str, Item] = {}

    def save_items(self, items: Iterable[Item]) -> bool:
        """Save or update item records."""
        with self._lock:
            for item in items:
                self._items[item.id] = item.model_copy(deep=True)
            return True

    def get_item(self, item_id: str) -> Item | None:
        """Get an item record by ID."""
        with self._lock:
            item = self._items.get(item_id)
            return item.model_copy(deep=True) if item else None

    def list_items(self) -> list[Item]:
        """List every stored item record."""
        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]

    def delete_items(self, item_ids: Iterable[str]) -> bool:
        """Delete item records. Missing ids are ignored."""
        with self._lock:
            for item_id in item_ids:
                self._items.pop(item_id, None)
            return True

    def clear_all(self) -> None:
        """Clear all data (useful for testing)."""
        with self._lock:
            self._items.clear()


# Singleton instance
workspace_storage = WorkspaceStorage()
