"""Port interfaces using Python Protocol for structural subtyping."""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from localgraph.domain.schema import DomainEvent, StorageItem, StorageQuery

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class IStorageAdapter(Protocol):
    """Port for a generic document store.

    The graph engine treats the store as a single logical document slot:
    it scans items of one kind for the snapshot tag and never assumes
    indexing, transactions or a schema from the adapter.
    """

    async def initialize(self) -> None:
        """Prepare the backend. Safe to call more than once."""
        ...

    async def query(self, query: StorageQuery) -> List[StorageItem]:
        """List items matching a filter."""
        ...

    async def create(
        self,
        kind: str,
        content: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StorageItem:
        """Create a new item and return it."""
        ...

    async def read(self, item_id: str) -> Optional[StorageItem]:
        """Read an item by id."""
        ...

    async def update(
        self,
        item_id: str,
        content: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[StorageItem]:
        """Replace an item's content. Returns None if the item is absent."""
        ...

    async def delete(self, item_id: str) -> bool:
        """Delete an item. Returns True if it existed."""
        ...


class IEventBus(Protocol):
    """Port for publishing domain events."""

    async def publish(self, event: DomainEvent) -> None:
        """Publish a single domain event."""
        ...

    async def publish_many(self, events: List[DomainEvent]) -> None:
        """Publish multiple domain events."""
        ...

    async def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event type ("*" for all types)."""
        ...

    async def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a handler. Returns True if it was registered."""
        ...
