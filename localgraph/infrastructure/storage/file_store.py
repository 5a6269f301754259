"""Local JSON-file storage adapter.

Layout under ``base_path``:

- ``index.json``: every item, used for queries without touching item files
- ``<kind>/<id>.json``: one file per item, re-read on ``read``
- ``backups/<id>_<millis>.json``: copy taken before each update or delete

Blocking file I/O runs in the default executor.
"""

import asyncio
import json
import time
from datetime import timedelta
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from localgraph.config import settings
from localgraph.domain.errors import StorageError
from localgraph.domain.interfaces import IStorageAdapter
from localgraph.domain.schema import (
    StorageItem,
    StorageItemMetadata,
    StorageQuery,
    StorageStats,
    utcnow,
)
from localgraph.infrastructure.storage.filters import calculate_checksum, filter_items, generate_item_id
from localgraph.utils.logger import get_logger

logger = get_logger(__name__)

BACKUP_DIR = "backups"
INDEX_FILE = "index.json"


class LocalFileStorageAdapter(IStorageAdapter):
    """Document store persisted as JSON files on local disk."""

    def __init__(self, base_path: Optional[Union[str, Path]] = None):
        """Initialize adapter.

        Args:
            base_path: Storage root, defaults to ``settings.storage_path``.
        """
        self.base_path = Path(base_path or settings.storage_path).expanduser()
        self.index_path = self.base_path / INDEX_FILE
        self.backup_path = self.base_path / BACKUP_DIR
        self._index: Dict[str, StorageItem] = {}
        self._initialized = False

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the directory tree and load the index."""
        if self._initialized:
            return
        await self._run(self._initialize_sync)
        self._initialized = True
        logger.info(
            "file_storage.initialized",
            base_path=str(self.base_path),
            item_count=len(self._index),
        )

    def _initialize_sync(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            self.backup_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self.base_path}: {exc}") from exc
        self._index = self._load_index_sync()

    def _load_index_sync(self) -> Dict[str, StorageItem]:
        if not self.index_path.exists():
            return {}
        try:
            raw = json.loads(self.index_path.read_text(encoding="utf-8"))
            items = [StorageItem.model_validate(entry) for entry in raw]
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("file_storage.index_unreadable", path=str(self.index_path), error=str(exc))
            return {}
        return {item.id: item for item in items}

    # ------------------------------------------------------------------
    # Disk helpers
    # ------------------------------------------------------------------

    def _item_path(self, item: StorageItem) -> Path:
        return self.base_path / item.kind / f"{item.id}.json"

    @staticmethod
    def _write_json(path: Path, data: Any) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc

    def _save_index_sync(self) -> None:
        self._write_json(
            self.index_path,
            [item.model_dump(mode="json") for item in self._index.values()],
        )

    def _persist_item_sync(self, item: StorageItem) -> None:
        self._write_json(self._item_path(item), item.model_dump(mode="json"))
        self._index[item.id] = item
        self._save_index_sync()

    def _backup_sync(self, item: StorageItem) -> Path:
        millis = int(time.time() * 1000)
        path = self.backup_path / f"{item.id}_{millis}.json"
        self._write_json(path, item.model_dump(mode="json"))
        return path

    def _read_item_sync(self, item: StorageItem) -> Optional[StorageItem]:
        path = self._item_path(item)
        try:
            return StorageItem.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("file_storage.read_failed", item_id=item.id, path=str(path), error=str(exc))
            return None

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create(
        self,
        kind: str,
        content: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StorageItem:
        """Create a new item on disk."""
        await self.initialize()

        item = StorageItem(
            id=generate_item_id(),
            kind=kind,
            content=content,
            metadata=StorageItemMetadata(**(metadata or {})),
            checksum=calculate_checksum(content),
        )
        await self._run(self._persist_item_sync, item)
        return item

    async def read(self, item_id: str) -> Optional[StorageItem]:
        """Read an item fresh from disk."""
        await self.initialize()

        item = self._index.get(item_id)
        if item is None:
            return None
        return await self._run(self._read_item_sync, item)

    async def update(
        self,
        item_id: str,
        content: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[StorageItem]:
        """Replace an item's content, keeping a backup of the previous version.

        An unreadable item file is rewritten from its index entry, so the
        item keeps its id.
        """
        await self.initialize()

        indexed = self._index.get(item_id)
        if indexed is None:
            return None
        existing = await self._run(self._read_item_sync, indexed) or indexed

        await self._run(self._backup_sync, existing)

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
        await self._run(self._persist_item_sync, updated)
        return updated

    async def delete(self, item_id: str) -> bool:
        """Delete an item, keeping a backup."""
        await self.initialize()

        item = self._index.get(item_id)
        if item is None:
            return False

        await self._run(self._delete_sync, item)
        return True

    def _delete_sync(self, item: StorageItem) -> None:
        self._backup_sync(item)
        try:
            self._item_path(item).unlink(missing_ok=True)
        except OSError as exc:
            logger.error("file_storage.unlink_failed", item_id=item.id, error=str(exc))
        self._index.pop(item.id, None)
        self._save_index_sync()

    async def query(self, query: StorageQuery) -> List[StorageItem]:
        """List items matching a filter, served from the index."""
        await self.initialize()
        return filter_items(self._index.values(), query)

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    async def restore_from_backup(self, item_id: str, timestamp: int) -> bool:
        """Restore an item from ``backups/<item_id>_<timestamp>.json``.

        Returns:
            True if restored, False if the backup is missing or unreadable.
        """
        await self.initialize()
        return await self._run(self._restore_sync, item_id, timestamp)

    def _restore_sync(self, item_id: str, timestamp: int) -> bool:
        path = self.backup_path / f"{item_id}_{timestamp}.json"
        try:
            item = StorageItem.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("file_storage.restore_failed", item_id=item_id, timestamp=timestamp, error=str(exc))
            return False
        self._persist_item_sync(item)
        return True

    async def cleanup_backups(self, days_to_keep: Optional[int] = None) -> int:
        """Delete backups older than ``days_to_keep`` days.

        Returns:
            Number of backup files removed.
        """
        await self.initialize()
        if days_to_keep is None:
            days_to_keep = settings.storage_backup_retention_days
        return await self._run(self._cleanup_sync, days_to_keep)

    def _cleanup_sync(self, days_to_keep: int) -> int:
        cutoff = time.time() - timedelta(days=days_to_keep).total_seconds()
        deleted = 0
        for path in self.backup_path.glob("*.json"):
            if path.stat().st_mtime < cutoff:
                path.unlink(missing_ok=True)
                deleted += 1
        return deleted

    # ------------------------------------------------------------------
    # Export / Import / Stats
    # ------------------------------------------------------------------

    async def export_all(self) -> str:
        """Serialize every indexed item to a JSON string."""
        await self.initialize()
        return json.dumps(
            [item.model_dump(mode="json") for item in self._index.values()],
            indent=2,
            ensure_ascii=False,
        )

    async def import_data(self, json_data: str) -> int:
        """Write every item from an ``export_all`` payload.

        Raises:
            StorageError: If the payload is not a list of items.
        """
        await self.initialize()
        try:
            items = [StorageItem.model_validate(entry) for entry in json.loads(json_data)]
        except (TypeError, ValueError, ValidationError) as exc:
            raise StorageError(f"Invalid import payload: {exc}") from exc

        await self._run(self._import_sync, items)
        return len(items)

    def _import_sync(self, items: List[StorageItem]) -> None:
        for item in items:
            self._write_json(self._item_path(item), item.model_dump(mode="json"))
            self._index[item.id] = item
        self._save_index_sync()

    async def get_stats(self) -> StorageStats:
        """Count items per kind and sum their file sizes."""
        await self.initialize()
        return await self._run(self._stats_sync)

    def _stats_sync(self) -> StorageStats:
        by_kind: Dict[str, int] = {}
        total_size = 0
        for item in self._index.values():
            by_kind[item.kind] = by_kind.get(item.kind, 0) + 1
            path = self._item_path(item)
            if path.exists():
                total_size += path.stat().st_size
        return StorageStats(total_items=len(self._index), by_kind=by_kind, storage_size=total_size)
