"""Tests for MovePlanner.

Test cases for:
- Which items move for a drag with a selection
- Batch validation before any mutation
- Committing batch moves
"""

import pytest

from getman.components.workspace.models import Item
from getman.components.workspace.planner import MovePlanner, MoveRejection
from getman.components.workspace.tree import WorkspaceTree


@pytest.fixture
def planner(tree: WorkspaceTree) -> MovePlanner:
    return MovePlanner(tree)


class TestItemsToMove:
    """Selection-aware mover computation."""

    def test_drag_without_selection(self, planner: MovePlanner, sample_tree):
        """Nothing selected: only the dragged item moves."""
        r2 = sample_tree["R2"]

        assert planner.items_to_move(r2.id, []) == [r2]

    def test_drag_outside_selection(self, planner: MovePlanner, sample_tree):
        """Dragging an unselected item ignores the selection."""
        r1, r2, f2 = sample_tree["R1"], sample_tree["R2"], sample_tree["F2"]

        assert planner.items_to_move(r2.id, [r1.id, f2.id]) == [r2]

    def test_drag_inside_selection(self, planner: MovePlanner, sample_tree):
        """Dragging a selected item moves the whole selection, in tree order."""
        r1, r2 = sample_tree["R1"], sample_tree["R2"]

        assert planner.items_to_move(r2.id, [r2.id, r1.id]) == [r1, r2]

    def test_selected_descendants_ride_along(self, planner: MovePlanner, sample_tree):
        """F1 and its grandchild R3 selected: only F1 is a mover."""
        f1, r3 = sample_tree["F1"], sample_tree["R3"]

        assert planner.items_to_move(f1.id, [f1.id, r3.id]) == [f1]
        assert planner.items_to_move(r3.id, [f1.id, r3.id]) == [f1]

    def test_selected_child_rides_along(self, planner: MovePlanner, sample_tree):
        """Dragging F1 with its child R1 selected moves F1 only."""
        f1, r1 = sample_tree["F1"], sample_tree["R1"]

        assert planner.item_ids_to_move(f1.id, [f1.id, r1.id]) == [f1.id]

    def test_stale_ids_dropped(self, planner: MovePlanner, sample_tree):
        """Ids no longer in the tree are skipped."""
        r1 = sample_tree["R1"]

        assert planner.items_to_move(r1.id, [r1.id, "item_gone"]) == [r1]
        assert planner.items_to_move("item_gone", []) == []

    def test_item_ids_to_move(self, planner: MovePlanner, sample_tree):
        f2, r2 = sample_tree["F2"], sample_tree["R2"]

        assert planner.item_ids_to_move(f2.id, [r2.id, f2.id]) == [f2.id, r2.id]

    def test_items_find_dedupes(self, planner: MovePlanner, sample_tree):
        r1 = sample_tree["R1"]

        assert planner.items_find([r1.id, r1.id]) == [r1]
        assert planner.items_find([]) == []


class TestValidate:
    """Batch validation."""

    def test_valid_batch(self, planner: MovePlanner, sample_tree):
        r1, r2, f2 = sample_tree["R1"], sample_tree["R2"], sample_tree["F2"]

        assert planner.validate([r1.id, r2.id], f2) is None
        assert planner.items_to_move_is_valid([r1.id, r2.id], f2) is True

    def test_move_into_self(self, planner: MovePlanner, sample_tree):
        f2 = sample_tree["F2"]

        assert planner.validate([f2.id], f2) is MoveRejection.SELF_TARGET
        assert planner.items_to_move_is_valid([f2.id], f2) is False

    def test_move_root(self, planner: MovePlanner, tree: WorkspaceTree, sample_tree):
        assert planner.validate([tree.root.id], sample_tree["F2"]) is MoveRejection.ROOT_MOVE

    def test_move_into_descendant(self, planner: MovePlanner, sample_tree):
        """F1 cannot be dropped on F3, which lives inside it."""
        f1, f3 = sample_tree["F1"], sample_tree["F3"]

        assert planner.validate([f1.id], f3) is MoveRejection.DESCENDANT_TARGET

    def test_target_not_folder(self, planner: MovePlanner, sample_tree):
        r1, r2 = sample_tree["R1"], sample_tree["R2"]

        assert planner.validate([r1.id], r2) is MoveRejection.TARGET_NOT_FOLDER

    def test_target_missing(self, planner: MovePlanner, sample_tree):
        detached = Item(name="Detached", isFolder=True)

        assert planner.validate([sample_tree["R1"].id], detached) is MoveRejection.TARGET_MISSING

    def test_stale_movers_ignored(self, planner: MovePlanner, sample_tree):
        """Stale ids do not invalidate the batch."""
        f2 = sample_tree["F2"]

        assert planner.validate(["item_gone", sample_tree["R2"].id], f2) is None


class TestItemsMove:
    """Committing batch moves."""

    def test_moves_batch_in_order(self, planner: MovePlanner, sample_tree):
        """Selection {R1, R2} dropped on F2 lands in tree order."""
        f1, f2, r1, r2 = sample_tree["F1"], sample_tree["F2"], sample_tree["R1"], sample_tree["R2"]

        moved = planner.items_move([r2.id, r1.id], f2)

        assert moved == [r1, r2]
        assert f2.children == [r1.id, r2.id]
        assert r1.id not in f1.children

    def test_descendant_reduction(self, planner: MovePlanner, tree: WorkspaceTree, sample_tree):
        """Moving {F1, R3} into F2 moves F1 only; R3 stays inside F3."""
        f1, f2, f3, r3 = sample_tree["F1"], sample_tree["F2"], sample_tree["F3"], sample_tree["R3"]

        moved = planner.items_move([f1.id, r3.id], f2)

        assert moved == [f1]
        assert f2.children == [f1.id]
        assert r3.parentId == f3.id
        assert tree.find_ancestors(r3) == [f3, f1, f2, tree.root]

    def test_invalid_batch_changes_nothing(self, planner: MovePlanner, tree: WorkspaceTree, sample_tree):
        """One bad mover rejects the whole batch."""
        f1, f3, r2 = sample_tree["F1"], sample_tree["F3"], sample_tree["R2"]
        before = [(item.id, item.parentId, list(item.children or [])) for item in tree.records()]

        assert planner.items_move([r2.id, f1.id], f3) == []

        after = [(item.id, item.parentId, list(item.children or [])) for item in tree.records()]
        assert after == before

    def test_existing_children_stay_put(self, planner: MovePlanner, sample_tree):
        """Items already in the target keep their position, the others still move."""
        f1, r1, r2, f3 = sample_tree["F1"], sample_tree["R1"], sample_tree["R2"], sample_tree["F3"]

        moved = planner.items_move([r1.id, r2.id], f1)

        assert moved == [r2]
        assert f1.children == [r1.id, f3.id, r2.id]

    def test_all_stale_moves_nothing(self, planner: MovePlanner, sample_tree):
        assert planner.items_move(["item_gone"], sample_tree["F2"]) == []
