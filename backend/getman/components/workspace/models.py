"""Workspace data models.

Defines the core entities of the request workspace:
- Item: a folder or a saved request in the workspace tree
- APIRequest: the request payload attached to a leaf item
- KeyValuePair: a header, query parameter or form field row
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field, model_validator

from getman.utils import generate_id, get_timestamp_ms


class HTTPMethod(str, Enum):
    """HTTP request method."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class BodyType(str, Enum):
    """Request body editor mode."""

    urlEncoded = "Url Encoded"
    multiPart = "Multi-Part"
    json = "JSON"
    graphQL = "GraphQL"
    xml = "XML"
    other = "Other"
    binaryFile = "Binary File"
    noBody = "No Body"


class KeyValuePair(BaseModel):
    """A single editable key/value row."""

    id: str = Field(default_factory=lambda: generate_id("kv"))
    key: str
    value: str
    isEnabled: bool = True
    isHidden: bool = False


def default_headers() -> list[KeyValuePair]:
    """Headers every new request starts with (hidden in the editor)."""
    return [
        KeyValuePair(key="Cache-Control", value="no-cache", isHidden=True),
        KeyValuePair(key="User-Agent", value="Getman/1.0", isHidden=True),
        KeyValuePair(key="Accept", value="*/*", isHidden=True),
        KeyValuePair(key="Accept-Encoding", value="gzip, deflate, br", isHidden=True),
        KeyValuePair(key="Connection", value="keep-alive", isHidden=True),
    ]


class APIRequest(BaseModel):
    """Saved HTTP request.

    The workspace only stores this payload, it never sends it.
    """

    id: str = Field(default_factory=lambda: generate_id("req"), frozen=True)
    name: str = "New Request"
    method: HTTPMethod = HTTPMethod.GET
    url: str = ""
    headers: list[KeyValuePair] = Field(default_factory=list)
    params: list[KeyValuePair] = Field(default_factory=list)
    form: list[KeyValuePair] = Field(default_factory=list)
    bodyType: BodyType = BodyType.noBody
    bodyContent: str = ""
    lastModified: int = Field(default_factory=get_timestamp_ms)

    @classmethod
    def new(cls, name: str = "New Request") -> APIRequest:
        """Build a blank GET request with the default headers."""
        return cls(name=name, headers=default_headers())


class Item(BaseModel):
    """A node of the workspace tree: a folder or a leaf carrying a request.

    ``children`` holds child ids and is the only ownership link;
    ``parentId`` is a lookup-only back reference. Items compare and hash
    by id.
    """

    id: str = Field(default_factory=lambda: generate_id("item"), frozen=True)
    name: str
    isFolder: bool = Field(default=False, frozen=True)
    children: list[str] | None = None
    parentId: str | None = None
    request: APIRequest | None = None
    read: bool = False

    @model_validator(mode="after")
    def _check_shape(self) -> Item:
        if self.isFolder:
            if self.children is None:
                self.children = []
            if self.request is not None:
                raise ValueError("folders cannot carry a request")
        elif self.children:
            raise ValueError("leaf items cannot have children")
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        kind = "folder" if self.isFolder else "leaf"
        return f"Item({self.id!r}, {self.name!r}, {kind})"


# Read models


class ItemNode(BaseModel):
    """Nested view of a subtree, for clients that render the tree."""

    id: str
    name: str
    isFolder: bool
    parentId: str | None = None
    request: APIRequest | None = None
    children: list[ItemNode] = Field(default_factory=list)


class WorkspaceSnapshot(BaseModel):
    """Whole workspace state as seen by a client."""

    root: ItemNode
    isEmpty: bool
    revision: int
    selectedRequestId: str | None = None


class DragPayload(BaseModel):
    """Id-bearing payload produced when a drag starts.

    ``data`` is the comma-separated wire form of ``itemIds``.
    """

    itemIds: list[str]

    @computed_field  # type: ignore[misc]
    @property
    def data(self) -> str:
        return ",".join(self.itemIds)


# Request models


class CreateItemRequest(BaseModel):
    """Request to create a request or folder, under the root by default."""

    parentId: str | None = None


class RenameItemRequest(BaseModel):
    """Request to rename an item."""

    name: str


class UpdateAPIRequestRequest(BaseModel):
    """Partial update of a saved request. Omitted fields are unchanged."""

    name: str | None = None
    method: HTTPMethod | None = None
    url: str | None = None
    headers: list[KeyValuePair] | None = None
    params: list[KeyValuePair] | None = None
    form: list[KeyValuePair] | None = None
    bodyType: BodyType | None = None
    bodyContent: str | None = None


class BeginDragRequest(BaseModel):
    """Request to start dragging an item, with the current selection."""

    itemId: str
    selectionIds: list[str] = Field(default_factory=list)


class CompleteDropRequest(BaseModel):
    """Request to drop a drag payload onto a folder."""

    payload: str
    targetId: str


class DropResult(BaseModel):
    """Outcome of a drop. An empty ``moved`` means nothing changed."""

    moved: list[str]
    revision: int


class DeleteResult(BaseModel):
    """Outcome of a delete: request ids whose open views must close."""

    id: str
    closedRequestIds: list[str]
