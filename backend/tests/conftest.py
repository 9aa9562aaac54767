#!/usr/bin/env python
"""
pytest configuration file

This file contains shared fixtures for all tests.
"""

import os

os.environ.setdefault("GETMAN_ENVIRONMENT", "test")
os.environ.setdefault("GETMAN_USE_MEMORY_STORE", "true")
os.environ.setdefault("GETMAN_REDIS_TYPE", "fake")

import fakeredis  # noqa: E402
import pytest  # noqa: E402

from getman.components.workspace.events import TreeChangedEvent  # noqa: E402
from getman.components.workspace.models import Item  # noqa: E402
from getman.components.workspace.service import WorkspaceModel, reset_workspace_model  # noqa: E402
from getman.components.workspace.storage import WorkspaceStorage, workspace_storage  # noqa: E402
from getman.components.workspace.storage_provider import reset_workspace_storage  # noqa: E402
from getman.components.workspace.tree import WorkspaceTree  # noqa: E402


@pytest.fixture
def fake_redis_client():
    """
    Create a fakeredis client for unit tests.

    This provides an in-memory Redis implementation that allows
    unit tests to run without a real Redis server.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.close()


@pytest.fixture
def tree() -> WorkspaceTree:
    """Empty tree with a bootstrap root."""
    return WorkspaceTree(Item(name="__BOOTSTRAP_ROOT_ITEM", isFolder=True))


@pytest.fixture
def sample_tree(tree: WorkspaceTree) -> dict[str, Item]:
    """
    root
    ├── F1
    │   ├── R1
    │   └── F3
    │       └── R3
    ├── F2
    └── R2
    """
    f1 = Item(name="F1", isFolder=True)
    f2 = Item(name="F2", isFolder=True)
    f3 = Item(name="F3", isFolder=True)
    r1 = Item(name="R1", request={"name": "R1", "url": "https://api.example.com/users"})
    r2 = Item(name="R2", request={"name": "R2", "url": "https://api.example.com/health"})
    r3 = Item(name="R3", request={"name": "R3", "url": "https://api.example.com/orders"})

    tree.adopt(tree.root, f1)
    tree.adopt(f1, r1)
    tree.adopt(f1, f3)
    tree.adopt(f3, r3)
    tree.adopt(tree.root, f2)
    tree.adopt(tree.root, r2)

    return {"root": tree.root, "F1": f1, "F2": f2, "F3": f3, "R1": r1, "R2": r2, "R3": r3}


@pytest.fixture
def storage() -> WorkspaceStorage:
    """Fresh in-memory storage."""
    return WorkspaceStorage()


@pytest.fixture
def model(storage: WorkspaceStorage) -> WorkspaceModel:
    """Workspace model over fresh in-memory storage."""
    return WorkspaceModel(storage=storage)


@pytest.fixture
def events(model: WorkspaceModel) -> list[TreeChangedEvent]:
    """Every change event the model publishes during the test."""
    received: list[TreeChangedEvent] = []
    model.subscribe(received.append)
    return received


@pytest.fixture
def fresh_singletons():
    """Reset the process-wide storage and model (for API tests)."""
    workspace_storage.clear_all()
    reset_workspace_storage()
    reset_workspace_model()
    yield
    workspace_storage.clear_all()
    reset_workspace_storage()
    reset_workspace_model()
