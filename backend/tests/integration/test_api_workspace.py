"""Integration tests for Workspace API.

Test cases for:
- Workspace snapshot and health
- Request and folder creation
- Rename, update and delete
- Drag and drop through the API
"""

import pytest
from fastapi.testclient import TestClient

from getman.main import app

client = TestClient(app)

BASE = "/api/v1/workspace"


@pytest.fixture(autouse=True)
def _fresh_workspace(fresh_singletons):
    """Every test starts from an empty workspace."""
    yield


def create_folder(parent_id: str | None = None) -> dict:
    response = client.post(f"{BASE}/folders", json={"parentId": parent_id})
    assert response.status_code == 200
    return response.json()


def create_request(parent_id: str | None = None) -> dict:
    response = client.post(f"{BASE}/requests", json={"parentId": parent_id})
    assert response.status_code == 200
    return response.json()


class TestHealth:
    """Health endpoint."""

    def test_health(self):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "storage": "memory"}


class TestWorkspaceSnapshot:
    """Reading the tree."""

    def test_empty_workspace(self):
        response = client.get(BASE)

        assert response.status_code == 200
        data = response.json()
        assert data["isEmpty"] is True
        assert data["root"]["isFolder"] is True
        assert data["root"]["children"] == []

    def test_snapshot_nests_children(self):
        folder = create_folder()
        create_request(folder["id"])

        data = client.get(BASE).json()

        assert data["isEmpty"] is False
        [folder_node] = data["root"]["children"]
        assert folder_node["id"] == folder["id"]
        assert folder_node["children"][0]["request"]["name"] == "New Request"


class TestCreate:
    """Creating requests and folders."""

    def test_create_request(self):
        data = create_request()

        assert data["id"].startswith("req_")
        assert data["method"] == "GET"
        assert client.get(BASE).json()["selectedRequestId"] == data["id"]

    def test_create_folder(self):
        data = create_folder()

        assert data["id"].startswith("item_")
        assert data["isFolder"] is True
        assert data["name"] == "New Folder"
        assert data["children"] == []

    def test_create_in_missing_parent(self):
        response = client.post(f"{BASE}/folders", json={"parentId": "item_gone"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Item not found"


class TestItems:
    """Reading, renaming and deleting items."""

    def test_get_item(self):
        folder = create_folder()

        response = client.get(f"{BASE}/items/{folder['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == folder["id"]

    def test_get_missing_item(self):
        assert client.get(f"{BASE}/items/item_gone").status_code == 404

    def test_ancestors(self):
        outer = create_folder()
        inner = create_folder(outer["id"])

        response = client.get(f"{BASE}/items/{inner['id']}/ancestors")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()][0] == outer["id"]
        assert len(response.json()) == 2

    def test_rename(self):
        folder = create_folder()

        response = client.patch(f"{BASE}/items/{folder['id']}", json={"name": "Users API"})

        assert response.status_code == 200
        assert response.json()["name"] == "Users API"

    def test_blank_rename_keeps_name(self):
        folder = create_folder()

        response = client.patch(f"{BASE}/items/{folder['id']}", json={"name": " "})

        assert response.json()["name"] == "New Folder"

    def test_delete_returns_closed_requests(self):
        folder = create_folder()
        first = create_request(folder["id"])
        second = create_request(folder["id"])

        response = client.delete(f"{BASE}/items/{folder['id']}")

        assert response.status_code == 200
        assert response.json()["closedRequestIds"] == [first["id"], second["id"]]
        assert client.get(f"{BASE}/items/{folder['id']}").status_code == 404
        assert client.get(BASE).json()["isEmpty"] is True

    def test_delete_root(self):
        root_id = client.get(BASE).json()["root"]["id"]

        response = client.delete(f"{BASE}/items/{root_id}")

        assert response.status_code == 400


class TestRequests:
    """Editing saved requests."""

    def test_update_request(self):
        request = create_request()

        response = client.put(
            f"{BASE}/requests/{request['id']}",
            json={"url": "https://api.example.com/users", "method": "POST", "bodyType": "JSON"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["url"] == "https://api.example.com/users"
        assert data["method"] == "POST"
        assert data["bodyType"] == "JSON"
        assert data["name"] == "New Request"

    def test_update_missing_request(self):
        response = client.put(f"{BASE}/requests/req_gone", json={"url": "https://example.com"})

        assert response.status_code == 404

    def test_search(self):
        request = create_request()
        client.put(f"{BASE}/requests/{request['id']}", json={"url": "https://api.example.com/orders"})

        response = client.get(f"{BASE}/search", params={"q": "orders"})

        assert response.status_code == 200
        assert [item["request"]["id"] for item in response.json()] == [request["id"]]


class TestDragAndDrop:
    """Moving items through drag payloads."""

    def test_drag_and_drop(self):
        target = create_folder()
        create_request()
        create_request()
        leaves = [node for node in client.get(BASE).json()["root"]["children"] if not node["isFolder"]]
        leaf_ids = [leaf["id"] for leaf in leaves]

        drag = client.post(f"{BASE}/drag", json={"itemId": leaf_ids[1], "selectionIds": leaf_ids})
        assert drag.status_code == 200
        payload = drag.json()
        assert payload["itemIds"] == leaf_ids
        assert payload["data"] == ",".join(leaf_ids)

        drop = client.post(f"{BASE}/drop", json={"payload": payload["data"], "targetId": target["id"]})

        assert drop.status_code == 200
        assert drop.json()["moved"] == leaf_ids
        assert client.get(f"{BASE}/items/{target['id']}").json()["children"] == leaf_ids

    def test_drop_into_descendant_is_noop(self):
        outer = create_folder()
        inner = create_folder(outer["id"])
        revision = client.get(BASE).json()["revision"]

        drop = client.post(f"{BASE}/drop", json={"payload": outer["id"], "targetId": inner["id"]})

        assert drop.status_code == 200
        assert drop.json() == {"moved": [], "revision": revision}

    def test_drop_on_missing_target(self):
        folder = create_folder()

        drop = client.post(f"{BASE}/drop", json={"payload": folder["id"], "targetId": "item_gone"})

        assert drop.status_code == 404

    def test_drag_missing_item(self):
        assert client.post(f"{BASE}/drag", json={"itemId": "item_gone"}).status_code == 404
