"""Snapshot persistence of the whole graph through a storage adapter."""

from typing import Optional

from localgraph.config import Settings, settings as default_settings
from localgraph.domain.interfaces import IStorageAdapter
from localgraph.domain.schema import GraphSnapshot, StorageItem, StorageQuery
from localgraph.utils.logger import get_logger
from localgraph.utils.tracing import get_tracer

logger = get_logger(__name__)
tracer = get_tracer(__name__)

PAGE_SIZE = 100


class GraphPersistence:
    """Reads and writes the single snapshot document.

    The snapshot lives in the first item of kind ``graph_item_kind`` whose
    content ``type`` equals ``graph_document_type``.
    """

    def __init__(self, storage: IStorageAdapter, settings: Optional[Settings] = None):
        self._storage = storage
        self._settings = settings or default_settings

    @property
    def item_kind(self) -> str:
        return self._settings.graph_item_kind

    @property
    def document_type(self) -> str:
        return self._settings.graph_document_type

    async def _find_snapshot_item(self) -> Optional[StorageItem]:
        offset = 0
        while True:
            page = await self._storage.query(
                StorageQuery(kind=self.item_kind, offset=offset, limit=PAGE_SIZE)
            )
            for item in page:
                if item.content.get("type") == self.document_type:
                    return item
            if len(page) < PAGE_SIZE:
                return None
            offset += PAGE_SIZE

    async def load(self) -> Optional[GraphSnapshot]:
        """Fetch the persisted snapshot.

        Any adapter or decode failure is logged and reported as no snapshot,
        so the caller starts from an empty graph.
        """
        with tracer.start_as_current_span("graph.snapshot.load") as span:
            try:
                await self._storage.initialize()
                item = await self._find_snapshot_item()
                if item is None:
                    logger.info("graph.snapshot.not_found", kind=self.item_kind)
                    return None
                snapshot = GraphSnapshot.model_validate(item.content)
            except ValueError as exc:
                logger.warning("graph.snapshot.invalid", error=str(exc))
                return None
            except Exception as exc:
                logger.warning("graph.snapshot.load_failed", error=str(exc), error_type=type(exc).__name__)
                return None

            span.set_attribute("graph.node_count", len(snapshot.data.nodes))
            span.set_attribute("graph.edge_count", len(snapshot.data.edges))
            return snapshot

    async def save(self, snapshot: GraphSnapshot) -> StorageItem:
        """Write ``snapshot`` over the existing slot, or create the slot.

        Adapter failures propagate to the caller.
        """
        snapshot.type = self.document_type
        content = snapshot.to_document()

        with tracer.start_as_current_span("graph.snapshot.save") as span:
            span.set_attribute("graph.node_count", snapshot.stats.node_count)
            span.set_attribute("graph.edge_count", snapshot.stats.edge_count)

            existing = await self._find_snapshot_item()
            saved: Optional[StorageItem] = None
            if existing is not None:
                saved = await self._storage.update(existing.id, content)
            if saved is None:
                saved = await self._storage.create(self.item_kind, content)

        logger.debug(
            "graph.snapshot.saved",
            item_id=saved.id,
            node_count=snapshot.stats.node_count,
            edge_count=snapshot.stats.edge_count,
        )
        return saved
