"""In-memory storage adapter implementation."""

from typing import Any, Dict, List, Optional

from localgraph.domain.interfaces import IStorageAdapter
from localgraph.domain.schema import StorageItem, StorageItemMetadata, StorageQuery, utcnow
from localgraph.infrastructure.storage.filters import calculate_checksum, filter_items, generate_item_id


class InMemoryStorageAdapter(IStorageAdapter):
    """Simple in-memory document store. Contents vanish with the process."""

    def __init__(self) -> None:
        self._items: Dict[str, StorageItem] = {}

    async def initialize(self) -> None:
        """Nothing to prepare."""
        return

    async def query(self, query: StorageQuery) -> List[StorageItem]:
        """List items matching a filter."""
        return filter_items(self._items.values(), query)

    async def create(
        self,
        kind: str,
        content: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StorageItem:
        """Create a new item."""
        item = StorageItem(
            id=generate_item_id(),
            kind=kind,
            content=content,
            metadata=StorageItemMetadata(**(metadata or {})),
            checksum=calculate_checksum(content),
        )
        self._items[item.id] = item
        return item

    async def read(self, item_id: str) -> Optional[StorageItem]:
        """Read an item by id."""
        return self._items.get(item_id)

    async def update(
        self,
        item_id: str,
        content: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[StorageItem]:
        """Replace an item's content."""
        existing = self._items.get(item_id)
        if existing is None:
            return None

        merged = existing.metadata.model_dump()
        merged.update(metadata or {})
        merged["updated"] = utcnow()
        merged["version"] = existing.metadata.version + 1

        updated = existing.model_copy(
            update={
                "content": content,
                "metadata": StorageItemMetadata(**merged),
                "checksum": calculate_checksum(content),
            }
        )
        self._items[item_id] = updated
        return updated

    async def delete(self, item_id: str) -> bool:
        """Delete an item by id."""
        return self._items.pop(item_id, None) is not None
