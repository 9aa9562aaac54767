"""Workspace API endpoints.

Exposes the request workspace tree to clients: creating requests and
folders, renaming, deleting, editing saved requests, searching, and
drag-and-drop moves.

Structural rejections (moving an item into itself, into its own
descendant, or moving the root) are not errors: the drop endpoint answers
200 with an empty ``moved`` list and the tree is unchanged.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from getman.components.workspace.models import (
    APIRequest,
    BeginDragRequest,
    CompleteDropRequest,
    CreateItemRequest,
    DeleteResult,
    DragPayload,
    DropResult,
    Item,
    RenameItemRequest,
    UpdateAPIRequestRequest,
    WorkspaceSnapshot,
)
from getman.components.workspace.service import WorkspaceModel, get_workspace_model

router = APIRouter()

Workspace = Annotated[WorkspaceModel, Depends(get_workspace_model)]


def _get_item_or_404(model: WorkspaceModel, item_id: str) -> Item:
    item = model.find(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


def _get_parent_or_404(model: WorkspaceModel, parent_id: str | None) -> Item | None:
    if parent_id is None:
        return None
    return _get_item_or_404(model, parent_id)


@router.get("", response_model=WorkspaceSnapshot)
async def get_workspace(model: Workspace) -> WorkspaceSnapshot:
    """Get the whole workspace tree.

    Returns:
        Nested tree, emptiness flag and current revision
    """
    return model.snapshot()


@router.get("/search", response_model=list[Item])
async def search_requests(model: Workspace, q: str = Query(default="")) -> list[Item]:
    """Search saved requests by name or URL.

    Args:
        q: Case-insensitive text to look for

    Returns:
        Matching request items in tree order
    """
    return model.search(q)


@router.get("/items/{item_id}", response_model=Item)
async def get_item(item_id: str, model: Workspace) -> Item:
    """Get a single item.

    Raises:
        HTTPException: If item not found
    """
    return _get_item_or_404(model, item_id)


@router.get("/items/{item_id}/ancestors", response_model=list[Item])
async def get_ancestors(item_id: str, model: Workspace, upTo: str | None = None) -> list[Item]:
    """Get an item's ancestors, nearest first.

    Args:
        item_id: The item ID
        upTo: Optional ancestor ID to stop at (included)

    Raises:
        HTTPException: If either item is not found
    """
    item = _get_item_or_404(model, item_id)
    up_to = _get_parent_or_404(model, upTo)
    return model.ancestors(item, up_to=up_to)


@router.post("/requests", response_model=APIRequest)
async def create_request(body: CreateItemRequest, model: Workspace) -> APIRequest:
    """Create a blank request.

    A request created on another request lands next to it.

    Raises:
        HTTPException: If the parent is not found
    """
    parent = _get_parent_or_404(model, body.parentId)
    request = model.create_new_request(parent)
    model.selected_request_id = request.id
    return request


@router.post("/folders", response_model=Item)
async def create_folder(body: CreateItemRequest, model: Workspace) -> Item:
    """Create an empty folder.

    Raises:
        HTTPException: If the parent is not found
    """
    parent = _get_parent_or_404(model, body.parentId)
    return model.create_new_folder(parent)


@router.patch("/items/{item_id}", response_model=Item)
async def rename_item(item_id: str, body: RenameItemRequest, model: Workspace) -> Item:
    """Rename an item. Blank names leave it unchanged.

    Raises:
        HTTPException: If item not found
    """
    item = _get_item_or_404(model, item_id)
    model.rename(item, body.name)
    return item


@router.delete("/items/{item_id}", response_model=DeleteResult)
async def delete_item(item_id: str, model: Workspace) -> DeleteResult:
    """Delete an item and everything below it.

    Returns:
        The ids of removed requests, so open tabs can close

    Raises:
        HTTPException: If item not found, 400 for the root
    """
    item = _get_item_or_404(model, item_id)
    if item.id == model.root.id:
        raise HTTPException(status_code=400, detail="The workspace root cannot be deleted")
    return DeleteResult(id=item.id, closedRequestIds=model.delete(item))


@router.put("/requests/{request_id}", response_model=APIRequest)
async def update_request(request_id: str, body: UpdateAPIRequestRequest, model: Workspace) -> APIRequest:
    """Save edits to a request.

    Raises:
        HTTPException: If the request is not found
    """
    updated = model.update_request(request_id, **body.model_dump(exclude_none=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Request not found")
    return updated


@router.post("/drag", response_model=DragPayload)
async def begin_drag(body: BeginDragRequest, model: Workspace) -> DragPayload:
    """Start dragging an item with the current selection.

    Raises:
        HTTPException: If the dragged item is not found
    """
    _get_item_or_404(model, body.itemId)
    return model.begin_drag(body.itemId, body.selectionIds)


@router.post("/drop", response_model=DropResult)
async def complete_drop(body: CompleteDropRequest, model: Workspace) -> DropResult:
    """Drop a drag payload onto a folder.

    Stale ids in the payload are skipped.

    Raises:
        HTTPException: If the target folder is not found
    """
    target = _get_item_or_404(model, body.targetId)
    moved = model.complete_drop(body.payload, target)
    return DropResult(moved=[item.id for item in moved], revision=model.revision)
