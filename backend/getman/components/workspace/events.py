"""Tree change notifications.

The workspace model publishes one ``TreeChangedEvent`` per logical
operation. Batch moves and other multi-step mutations are wrapped so that
observers only ever see the state before and after, never in between.
"""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, Field

from getman.utils import generate_id, get_logger, get_timestamp_ms

logger = get_logger(__name__)


class TreeChangeKind(str, Enum):
    """What kind of operation produced a change."""

    created = "created"
    renamed = "renamed"
    deleted = "deleted"
    moved = "moved"
    updated = "updated"


class TreeChangedEvent(BaseModel):
    """Emitted after a structural or content change to the workspace tree."""

    eventId: str = Field(default_factory=lambda: generate_id("evt"))
    revision: int
    kinds: list[TreeChangeKind]
    itemIds: list[str] = Field(default_factory=list)
    ts: int = Field(default_factory=get_timestamp_ms)


TreeListener = Callable[[TreeChangedEvent], None]


class TreeEvents:
    """Synchronous publisher for tree change events.

    Listeners run on the mutating thread, in subscription order. A failing
    listener is logged and skipped; it never undoes the mutation.
    """

    def __init__(self):
        self._listeners: list[TreeListener] = []

    def subscribe(self, listener: TreeListener) -> Callable[[], None]:
        """Register ``listener``. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: TreeChangedEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Tree listener {listener!r} failed on {event.eventId}: {e}", exc_info=True)

    def __len__(self) -> int:
        return len(self._listeners)
