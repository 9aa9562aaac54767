"""Workspace Management Module.

This module provides the request workspace: a tree of folders and saved
requests, its batch-move planner, the model that owns it, and the storage
backends that persist it.

Components:
- models.py: Item, APIRequest, KeyValuePair and API schemas
- tree.py: WorkspaceTree arena (adopt, descendant/ancestor search)
- planner.py: MovePlanner for selection-aware drag and drop
- events.py: TreeEvents change notifications
- service.py: WorkspaceModel, the single writer of the tree
- storage.py / redis_storage.py: in-memory and Redis persistence

Usage:
    from getman.components.workspace import WorkspaceModel

    model = WorkspaceModel()
    folder = model.create_new_folder()
    request = model.create_new_request(parent=folder)
"""

from getman.components.workspace.events import TreeChangedEvent, TreeChangeKind, TreeEvents
from getman.components.workspace.models import (
    APIRequest,
    BodyType,
    DragPayload,
    HTTPMethod,
    Item,
    ItemNode,
    KeyValuePair,
    WorkspaceSnapshot,
)
from getman.components.workspace.planner import MovePlanner, MoveRejection
from getman.components.workspace.service import (
    WorkspaceLoadError,
    WorkspaceModel,
    get_workspace_model,
    reset_workspace_model,
)
from getman.components.workspace.storage import WorkspaceStorage, workspace_storage
from getman.components.workspace.storage_provider import get_workspace_storage, reset_workspace_storage
from getman.components.workspace.tree import WorkspaceTree

__all__ = [
    # Models
    "APIRequest",
    "BodyType",
    "DragPayload",
    "HTTPMethod",
    "Item",
    "ItemNode",
    "KeyValuePair",
    "WorkspaceSnapshot",
    # Tree
    "WorkspaceTree",
    "MovePlanner",
    "MoveRejection",
    # Events
    "TreeChangedEvent",
    "TreeChangeKind",
    "TreeEvents",
    # Model
    "WorkspaceLoadError",
    "WorkspaceModel",
    "get_workspace_model",
    "reset_workspace_model",
    # Storage
    "WorkspaceStorage",
    "workspace_storage",
    "get_workspace_storage",
    "reset_workspace_storage",
]
