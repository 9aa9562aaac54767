"""Workspace model.

``WorkspaceModel`` owns the workspace tree and is the only writer of its
structure. Every entry point (create, rename, delete, drag and drop, request
edits) runs inside ``batch()``, which serializes writers and publishes one
change event per logical operation. Each mutation is followed by a save to
the storage collaborator; a failed save is logged and the in-memory tree
keeps the new state.
"""

import threading
from collections.abc import Awaitable, Callable, Iterable, Iterator
from contextlib import contextmanager

from getman.components.workspace.events import TreeChangedEvent, TreeChangeKind, TreeEvents, TreeListener
from getman.components.workspace.models import APIRequest, DragPayload, Item, WorkspaceSnapshot
from getman.components.workspace.planner import MovePlanner
from getman.components.workspace.storage_provider import WorkspaceStorageProtocol, get_workspace_storage
from getman.components.workspace.tree import WorkspaceTree
from getman.settings import settings
from getman.utils import get_logger, get_timestamp_ms

logger = get_logger(__name__)

DEFAULT_REQUEST_NAME = "New Request"
DEFAULT_FOLDER_NAME = "New Folder"

PAYLOAD_SEPARATOR = ","

# APIRequest fields a client may edit
EDITABLE_REQUEST_FIELDS = frozenset(
    {"name", "method", "url", "headers", "params", "form", "bodyType", "bodyContent"}
)


class WorkspaceLoadError(RuntimeError):
    """Persisted records could not be turned into a workspace tree."""


class WorkspaceModel:
    """Owner of the workspace tree and single entry point for its mutations."""

    def __init__(
        self,
        storage: WorkspaceStorageProtocol | None = None,
        events: TreeEvents | None = None,
        root_name: str | None = None,
    ):
        self.storage = storage if storage is not None else get_workspace_storage()
        self.events = events if events is not None else TreeEvents()
        self.selected_request_id: str | None = None
        self.revision = 0

        self._lock = threading.RLock()
        self._batch_depth = 0
        self._pending_kinds: list[TreeChangeKind] = []
        self._pending_ids: list[str] = []
        self._pending_deletes: set[str] = set()

        self.tree = self._load(root_name or settings.bootstrap_root_name)
        self.planner = MovePlanner(self.tree)
        self.is_empty = not self.root.children

    def _load(self, root_name: str) -> WorkspaceTree:
        """Rebuild the persisted tree, or bootstrap a fresh root.

        A root is only bootstrapped when storage holds no records at all.
        Storage read errors propagate.

        Raises:
            WorkspaceLoadError: If records exist but none of them is a root
        """
        records = self.storage.list_items()
        tree = WorkspaceTree.from_records(records)
        if tree is not None:
            logger.info(f"Loaded workspace {tree.root.id} with {len(tree.records())} item(s)")
            return tree
        if records:
            raise WorkspaceLoadError(f"Found {len(records)} workspace record(s) but no root folder")

        tree = WorkspaceTree(Item(name=root_name, isFolder=True))
        logger.info(f"Bootstrapped new workspace root {tree.root.id}")
        self._persist(tree)
        return tree

    @property
    def root(self) -> Item:
        return self.tree.root

    # ==================== Notification ====================

    @contextmanager
    def batch(self) -> Iterator["WorkspaceModel"]:
        """Group mutations into a single change event.

        Nested batches join the outermost one. The event is published when
        the outermost batch exits, after ``is_empty`` is refreshed.
        """
        with self._lock:
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                if self._batch_depth == 0:
                    self._flush()

    def subscribe(self, listener: TreeListener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    def _record(self, kind: TreeChangeKind, item_ids: Iterable[str]) -> None:
        if kind not in self._pending_kinds:
            self._pending_kinds.append(kind)
        self._pending_ids.extend(item_id for item_id in item_ids if item_id not in self._pending_ids)

    def _flush(self) -> None:
        if not self._pending_kinds:
            return
        self._update_is_empty()
        self.revision += 1
        event = TreeChangedEvent(revision=self.revision, kinds=self._pending_kinds, itemIds=self._pending_ids)
        self._pending_kinds = []
        self._pending_ids = []
        self.events.publish(event)

    def _update_is_empty(self) -> None:
        self.is_empty = not self.root.children

    # ==================== Persistence ====================

    def save(self) -> bool:
        """Persist the tree. Failures are logged and reported as False.

        Deletions that could not be persisted are retried on the next save.
        """
        with self._lock:
            return self._persist(self.tree)

    def _persist(self, tree: WorkspaceTree) -> bool:
        deletes = sorted(self._pending_deletes)
        try:
            saved = self.storage.save_items(tree.records())
            deleted = self.storage.delete_items(deletes) if deletes else True
        except Exception as e:
            logger.error(f"Failed to save workspace: {e}", exc_info=True)
            return False

        if not (saved and deleted):
            logger.error(f"Failed to save workspace (saved={saved}, deleted={deleted})")
            return False

        self._pending_deletes.difference_update(deletes)
        return True

    # ==================== Lookup ====================

    def find(self, item_id: str | None) -> Item | None:
        """Live item reachable from the root, or None."""
        return self.tree.find(item_id)

    def find_many(self, item_ids: Iterable[str]) -> list[Item]:
        return self.planner.items_find(item_ids)

    def ancestors(self, item: Item, up_to: Item | None = None) -> list[Item]:
        """Ancestors of ``item``, nearest first, up to and including ``up_to``."""
        return self.tree.find_ancestors(item, back_to=up_to)

    def find_request(self, request_id: str) -> Item | None:
        """Leaf item carrying the request ``request_id``."""
        for item in self.tree.walk(self.root):
            if item.request is not None and item.request.id == request_id:
                return item
        return None

    def search(self, text: str) -> list[Item]:
        """Requests whose name or URL contains ``text`` (case-insensitive), in tree order."""
        needle = text.strip().casefold()
        if not needle:
            return []
        return [
            item
            for item in self.tree.walk(self.root)
            if not item.isFolder
            and (needle in item.name.casefold() or (item.request is not None and needle in item.request.url.casefold()))
        ]

    def snapshot(self) -> WorkspaceSnapshot:
        with self._lock:
            return WorkspaceSnapshot(
                root=self.tree.to_node(self.root),
                isEmpty=self.is_empty,
                revision=self.revision,
                selectedRequestId=self.selected_request_id,
            )

    # ==================== Creation ====================

    def add_child(self, item: Item) -> bool:
        """Adopt ``item`` directly under the root."""
        with self.batch():
            adopted = self.tree.adopt(self.root, item)
            if adopted:
                self._record(TreeChangeKind.created, [item.id])
        return adopted

    def _resolve_parent(self, parent: Item | None) -> Item:
        if parent is None:
            return self.root
        live = self.find(parent.id)
        if live is None:
            raise ValueError(f"Parent {parent.id} is not in the workspace")
        if not live.isFolder:
            # New items created from a request's menu land next to it
            return self.tree.parent_of(live) or self.root
        return live

    def create_new_request(self, parent: Item | None = None) -> APIRequest:
        """Create a leaf with a blank request under ``parent`` (root by default)."""
        request = APIRequest.new(DEFAULT_REQUEST_NAME)
        item = Item(name=DEFAULT_REQUEST_NAME, request=request)
        with self.batch():
            target = self._resolve_parent(parent)
            if self.tree.adopt(target, item):
                self._record(TreeChangeKind.created, [item.id])
        logger.info(f"Created request {request.id} in {target.id}")
        self.save()
        return request

    def create_new_folder(self, parent: Item | None = None) -> Item:
        """Create an empty folder under ``parent`` (root by default)."""
        folder = Item(name=DEFAULT_FOLDER_NAME, isFolder=True)
        with self.batch():
            target = self._resolve_parent(parent)
            if self.tree.adopt(target, folder):
                self._record(TreeChangeKind.created, [folder.id])
        logger.info(f"Created folder {folder.id} in {target.id}")
        self.save()
        return folder

    # ==================== Editing ====================

    def rename(self, item: Item, new_name: str) -> bool:
        """Rename ``item``. Blank names and the root are left unchanged."""
        if not new_name.strip():
            logger.debug(f"Ignoring blank rename of {item.id}")
            return False

        with self.batch():
            live = self.find(item.id)
            if live is None:
                logger.warning(f"Ignoring rename of {item.id}: not in the workspace")
                return False
            if live.id == self.root.id:
                logger.warning("Ignoring rename of the workspace root")
                return False
            live.name = new_name
            self._record(TreeChangeKind.renamed, [live.id])
        self.save()
        return True

    def update_request(self, request_id: str, **changes) -> APIRequest | None:
        """Store edits to a saved request and stamp ``lastModified``.

        Returns the updated request, or None if no leaf carries it.
        """
        unknown = set(changes) - EDITABLE_REQUEST_FIELDS
        if unknown:
            raise ValueError(f"Cannot update request fields: {sorted(unknown)}")

        with self.batch():
            item = self.find_request(request_id)
            if item is None or item.request is None:
                logger.warning(f"Ignoring update of request {request_id}: not in the workspace")
                return None
            updated = APIRequest.model_validate(
                {**item.request.model_dump(), **changes, "lastModified": get_timestamp_ms()}
            )
            item.request = updated
            self._record(TreeChangeKind.updated, [item.id])
        self.save()
        return updated

    def delete(self, item: Item) -> list[str]:
        """Remove ``item`` and its subtree.

        Returns the ids of every request that was removed, so open views on
        them can be closed. The root cannot be deleted.
        """
        with self.batch():
            live = self.find(item.id)
            if live is None:
                logger.warning(f"Ignoring delete of {item.id}: not in the workspace")
                return []
            parent = self.tree.parent_of(live)
            if parent is None:
                logger.warning("Ignoring delete of the workspace root")
                return []

            request_ids = self.tree.collect_request_ids(live)
            removed = self.tree.prune(parent, live)
            self._pending_deletes.update(removed_item.id for removed_item in removed)
            if self.selected_request_id in request_ids:
                self.selected_request_id = None
            self._record(TreeChangeKind.deleted, [removed_item.id for removed_item in removed])

        logger.info(f"Deleted {len(removed)} item(s) under {live.id}, closing {len(request_ids)} request(s)")
        self.save()
        return request_ids

    # ==================== Moving ====================

    def items_to_move(self, drag_item_id: str, selection_ids: Iterable[str]) -> list[Item]:
        return self.planner.items_to_move(drag_item_id, selection_ids)

    def item_ids_to_move(self, drag_item_id: str, selection_ids: Iterable[str]) -> list[str]:
        return self.planner.item_ids_to_move(drag_item_id, selection_ids)

    def items_to_move_is_valid(self, mover_ids: Iterable[str], target_folder: Item) -> bool:
        return self.planner.items_to_move_is_valid(mover_ids, target_folder)

    def items_move(self, mover_ids: Iterable[str], target_folder: Item) -> list[Item]:
        """Commit a batch move as one change event."""
        with self.batch():
            target = self.find(target_folder.id) or target_folder
            moved = self.planner.items_move(mover_ids, target)
            if moved:
                self._record(TreeChangeKind.moved, [item.id for item in moved])
        if moved:
            self.save()
        return moved

    def begin_drag(self, item_id: str, selection_ids: Iterable[str] = ()) -> DragPayload:
        """Payload for a drag starting on ``item_id`` with the current selection."""
        with self._lock:
            return DragPayload(itemIds=self.item_ids_to_move(item_id, selection_ids))

    def decode_payload(self, raw: DragPayload | str | None) -> list[Item]:
        """Live items named by a drag payload, in payload order.

        Blank, repeated and stale ids are dropped.
        """
        if raw is None:
            return []
        if isinstance(raw, DragPayload):
            raw = raw.data

        items: list[Item] = []
        for item_id in (part.strip() for part in raw.split(PAYLOAD_SEPARATOR)):
            if not item_id:
                continue
            item = self.find(item_id)
            if item is not None and item not in items:
                items.append(item)
        return items

    def complete_drop(self, payload: DragPayload | str | None, target_folder: Item) -> list[Item]:
        """Move the items named by ``payload`` into ``target_folder``."""
        with self.batch():
            items = self.decode_payload(payload)
            if not items:
                logger.debug(f"Drop on {target_folder.id} resolved to no live items")
                return []
            return self.items_move([item.id for item in items], target_folder)

    async def complete_drop_async(
        self,
        load_payload: Callable[[], Awaitable[DragPayload | str | None]],
        target_folder: Item,
    ) -> list[Item]:
        """Await a delayed drop payload, then move against the current tree.

        Ids are resolved only once the payload has arrived; anything removed
        in the meantime is skipped. Cancelling before then changes nothing.
        """
        payload = await load_payload()
        return self.complete_drop(payload, target_folder)


# ==================== Singleton ====================

_workspace_model: WorkspaceModel | None = None
_workspace_model_lock = threading.Lock()


def get_workspace_model() -> WorkspaceModel:
    """Get the process-wide workspace model, loading it on first use."""
    global _workspace_model
    with _workspace_model_lock:
        if _workspace_model is None:
            _workspace_model = WorkspaceModel()
        return _workspace_model


def reset_workspace_model() -> None:
    """Drop the singleton (for testing)."""
    global _workspace_model
    with _workspace_model_lock:
        _workspace_model = None
