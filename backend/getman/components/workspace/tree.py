"""Workspace tree arena.

Items live in a dict keyed by id. A parent's ``children`` list of ids is the
ownership link, ``parentId`` is only used to walk upwards. ``adopt`` is the
one operation allowed to change parent/child links; everything else
(creation, drag and drop, batch moves) goes through it.

Rejected structural operations (self adoption, cycles, adopting into a leaf)
are no-ops that log a warning and return False. They are never raised.
"""

from collections.abc import Iterable, Iterator

from getman.components.workspace.models import APIRequest, Item, ItemNode
from getman.utils import get_logger

logger = get_logger(__name__)


class WorkspaceTree:
    """Arena of workspace items anchored by a single root folder."""

    def __init__(self, root: Item):
        if not root.isFolder:
            raise ValueError("workspace root must be a folder")
        if root.parentId is not None:
            raise ValueError("workspace root cannot have a parent")
        self.root = root
        self._items: dict[str, Item] = {root.id: root}

    # ==================== Lookup ====================

    def get(self, item_id: str | None) -> Item | None:
        """Item registered under ``item_id``, or None.

        Registered items include detached subtrees still being assembled;
        use ``find`` for items reachable from the root.
        """
        if item_id is None:
            return None
        return self._items.get(item_id)

    def children_of(self, item: Item) -> list[Item]:
        """Child items in display order. Leaves have none."""
        return [self._items[child_id] for child_id in item.children or [] if child_id in self._items]

    def parent_of(self, item: Item) -> Item | None:
        return self._items.get(item.parentId) if item.parentId else None

    def walk(self, item: Item) -> Iterator[Item]:
        """Pre-order traversal of ``item``'s subtree, ``item`` first."""
        stack = [item]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self.children_of(current)))

    def find_descendant(self, item_id: str | None, roots: Iterable[Item]) -> Item | None:
        """Depth-first search for ``item_id`` across a forest.

        Roots are searched in order, each subtree pre-order. The first match
        is returned and the search stops there.
        """
        if item_id is None:
            return None
        for root in roots:
            for candidate in self.walk(root):
                if candidate.id == item_id:
                    return candidate
        return None

    def find(self, item_id: str | None) -> Item | None:
        """Find an item reachable from the root."""
        return self.find_descendant(item_id, [self.root])

    def is_descendant(self, item: Item, possible_parent: Item) -> bool:
        """True if ``item`` sits somewhere below ``possible_parent``.

        Asymmetric: an item is never its own descendant.
        """
        if not possible_parent.children:
            return False
        return self.find_descendant(item.id, self.children_of(possible_parent)) is not None

    def is_descendant_of_any(self, item: Item, possible_parents: Iterable[Item]) -> bool:
        return any(self.is_descendant(item, parent) for parent in possible_parents)

    def find_ancestors(self, item: Item, back_to: Item | None = None) -> list[Item]:
        """Ancestors of ``item``, nearest first.

        Stops at the root, or right after including ``back_to``.
        """
        ancestors: list[Item] = []
        parent = self.parent_of(item)
        while parent is not None:
            ancestors.append(parent)
            if back_to is not None and parent.id == back_to.id:
                break
            parent = self.parent_of(parent)
        return ancestors

    def collect_request_ids(self, item: Item) -> list[str]:
        """Ids of every request attached in ``item``'s subtree."""
        return [node.request.id for node in self.walk(item) if node.request is not None]

    def records(self) -> list[Item]:
        """Every item reachable from the root, pre-order."""
        return list(self.walk(self.root))

    def to_node(self, item: Item) -> ItemNode:
        """Nested read model of ``item``'s subtree."""
        return ItemNode(
            id=item.id,
            name=item.name,
            isFolder=item.isFolder,
            parentId=item.parentId,
            request=item.request,
            children=[self.to_node(child) for child in self.children_of(item)],
        )

    # ==================== Mutation ====================

    def adopt(self, parent: Item, child: Item) -> bool:
        """Reparent ``child`` under ``parent``, appending it last.

        Returns False without touching the tree when the adoption would make
        an item its own parent, create a cycle, or give a leaf children.
        """
        if parent.id == child.id:
            logger.warning(f"Rejecting adoption of {child.name!r} ({child.id}): tried to adopt self")
            return False

        if child.id == self.root.id:
            logger.warning(f"Rejecting adoption of the workspace root into {parent.name!r} ({parent.id})")
            return False

        if self.is_descendant(parent, child):
            logger.warning(
                f"Rejecting adoption of {child.name!r} ({child.id}): "
                f"{parent.name!r} ({parent.id}) is one of its descendants"
            )
            return False

        if not parent.isFolder:
            logger.warning(f"Rejecting adoption of {child.name!r} ({child.id}): {parent.name!r} is not a folder")
            return False

        old_parent = self.parent_of(child)
        if old_parent is not None:
            old_parent.children = [child_id for child_id in old_parent.children or [] if child_id != child.id]

        parent.children = [*(parent.children or []), child.id]
        child.parentId = parent.id
        self._items[parent.id] = parent
        self._items[child.id] = child

        logger.debug(f"Adopted {child.id} into {parent.id}" + (f" (from {old_parent.id})" if old_parent else ""))
        return True

    def new_item(
        self,
        name: str,
        *,
        is_folder: bool = False,
        request: APIRequest | None = None,
        children: Iterable[Item] = (),
    ) -> Item:
        """Create a detached item and adopt ``children`` under it.

        The item is reachable from the root once it is itself adopted.
        Children that already have a parent are skipped with a warning; move
        live items with ``adopt`` instead.
        """
        pending = []
        for child in children:
            if child.parentId is not None or self.find(child.id) is not None:
                logger.warning(f"Not adopting {child.name!r} ({child.id}) into new item {name!r}: already attached")
                continue
            pending.append(child)
        item = Item(name=name, isFolder=is_folder or bool(pending), request=request)
        for child in pending:
            self.adopt(item, child)
        return item

    def prune(self, parent: Item, child: Item) -> list[Item]:
        """Detach ``child`` from ``parent`` and drop its whole subtree.

        Returns the removed items, or an empty list if ``child`` is not one of
        ``parent``'s children.
        """
        if child.id not in (parent.children or []):
            logger.warning(f"Cannot prune {child.id}: not a child of {parent.id}")
            return []

        removed = list(self.walk(child))
        parent.children = [child_id for child_id in parent.children or [] if child_id != child.id]
        for item in removed:
            self._items.pop(item.id, None)
        child.parentId = None

        logger.debug(f"Pruned {len(removed)} item(s) under {child.id} from {parent.id}")
        return removed

    # ==================== Persistence ====================

    @classmethod
    def from_records(cls, records: Iterable[Item]) -> "WorkspaceTree | None":
        """Rebuild a tree from persisted records.

        The root is the folder record without a parent. Dangling child ids
        and records unreachable from the root are dropped. Returns None when
        no root record exists.
        """
        by_id = {record.id: record for record in records}
        roots = [record for record in by_id.values() if record.parentId is None and record.isFolder]
        if not roots:
            return None
        if len(roots) > 1:
            logger.warning(f"Found {len(roots)} root records, using {roots[0].id}")

        tree = cls(roots[0])
        seen = {tree.root.id}
        stack = [tree.root]
        while stack:
            current = stack.pop()
            kept: list[str] = []
            for child_id in current.children or []:
                child = by_id.get(child_id)
                if child is None or child_id in seen:
                    logger.warning(f"Dropping dangling child id {child_id} from {current.id}")
                    continue
                seen.add(child_id)
                child.parentId = current.id
                tree._items[child_id] = child
                kept.append(child_id)
                stack.append(child)
            if current.isFolder:
                current.children = kept

        unreachable = set(by_id) - seen
        if unreachable:
            logger.warning(f"Dropping {len(unreachable)} unreachable record(s): {sorted(unreachable)}")
        return tree
