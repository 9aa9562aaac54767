"""Selection-aware batch moves.

When an item is dragged while several items are selected, the planner
decides which items really move, validates the batch against the tree and
commits it through ``WorkspaceTree.adopt``.

Validation happens before the first adoption, so a batch is either applied
in full or not at all. Ids that no longer resolve to live items are dropped
silently: a drop payload may arrive after the tree has changed.
"""

from collections.abc import Iterable
from enum import Enum

from getman.components.workspace.models import Item
from getman.components.workspace.tree import WorkspaceTree
from getman.utils import get_logger

logger = get_logger(__name__)


class MoveRejection(str, Enum):
    """Why a batch move was refused."""

    SELF_TARGET = "self_target"
    ROOT_MOVE = "root_move"
    DESCENDANT_TARGET = "descendant_target"
    TARGET_NOT_FOLDER = "target_not_folder"
    TARGET_MISSING = "target_missing"


class MovePlanner:
    """Plans and commits batch moves on a ``WorkspaceTree``."""

    def __init__(self, tree: WorkspaceTree):
        self.tree = tree

    def items_find(self, ids: Iterable[str]) -> list[Item]:
        """Live items for ``ids`` in tree order. Stale and repeated ids are dropped."""
        wanted = set(ids)
        if not wanted:
            return []
        return [item for item in self.tree.walk(self.tree.root) if item.id in wanted]

    def top_level(self, items: list[Item]) -> list[Item]:
        """Drop items that are descendants of other items in the same list."""
        return [item for item in items if not self.tree.is_descendant_of_any(item, items)]

    def items_to_move(self, drag_item_id: str, selection_ids: Iterable[str]) -> list[Item]:
        """Items that actually move when ``drag_item_id`` is dragged.

        A drag that starts outside the selection (or with nothing selected)
        moves only the dragged item. Otherwise the whole selection moves,
        minus items already carried along by a selected ancestor.
        """
        selection = set(selection_ids)
        if not selection or drag_item_id not in selection:
            candidate_ids = {drag_item_id}
        else:
            candidate_ids = selection

        return self.top_level(self.items_find(candidate_ids))

    def item_ids_to_move(self, drag_item_id: str, selection_ids: Iterable[str]) -> list[str]:
        return [item.id for item in self.items_to_move(drag_item_id, selection_ids)]

    def validate(self, mover_ids: Iterable[str], target_folder: Item) -> MoveRejection | None:
        """Check a batch before anything is mutated. Returns None when valid."""
        if self.tree.find(target_folder.id) is None:
            return MoveRejection.TARGET_MISSING
        if not target_folder.isFolder:
            return MoveRejection.TARGET_NOT_FOLDER

        for mover_id in mover_ids:
            if mover_id == target_folder.id:
                return MoveRejection.SELF_TARGET
            mover = self.tree.find(mover_id)
            if mover is None:
                continue
            if mover.parentId is None:
                return MoveRejection.ROOT_MOVE
            if self.tree.is_descendant(target_folder, mover):
                return MoveRejection.DESCENDANT_TARGET
        return None

    def items_to_move_is_valid(self, mover_ids: Iterable[str], target_folder: Item) -> bool:
        return self.validate(mover_ids, target_folder) is None

    def items_move(self, mover_ids: Iterable[str], target_folder: Item) -> list[Item]:
        """Move a batch into ``target_folder``.

        Returns the items that were adopted, in order. An invalid batch
        returns an empty list and leaves the tree untouched. Items already in
        ``target_folder`` stay where they are while the rest still move.
        """
        mover_ids = list(mover_ids)
        rejection = self.validate(mover_ids, target_folder)
        if rejection is not None:
            logger.warning(f"Rejecting move of {mover_ids} into {target_folder.id}: {rejection.value}")
            return []

        extant = self.items_find(mover_ids)
        not_existing_child = [item for item in extant if item.parentId != target_folder.id]
        movers = self.top_level(not_existing_child)

        moved = [item for item in movers if self.tree.adopt(target_folder, item)]
        if moved:
            logger.info(f"Moved {len(moved)} item(s) into {target_folder.name!r} ({target_folder.id})")
        return moved
