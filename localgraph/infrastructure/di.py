"""Dependency Injection container."""

import importlib
from typing import Optional

from localgraph.config import settings
from localgraph.domain.interfaces import IEventBus, IStorageAdapter
from localgraph.engine.graph_store import LocalGraphStore
from localgraph.infrastructure.messaging.event_bus import InMemoryEventBus
from localgraph.utils.logger import setup_logging


def _load_adapter_class(adapter_path: str) -> type:
    """Load an adapter class from a module path.

    Args:
        adapter_path: Import path in the form "module.path:ClassName".

    Returns:
        Adapter class object.
    """
    module_path, _, class_name = adapter_path.partition(":")
    if not module_path or not class_name:
        raise ValueError(
            f"Invalid adapter path '{adapter_path}'. Expected 'module.path:ClassName'."
        )
    module = importlib.import_module(module_path)
    try:
        return getattr(module, class_name)
    except AttributeError as exc:
        raise ValueError(
            f"Adapter class '{class_name}' not found in module '{module_path}'."
        ) from exc


class DIContainer:
    """Simple dependency injection container."""

    def __init__(self, configure_logging: bool = True):
        """Initialize container with empty slots.

        Args:
            configure_logging: Apply ``setup_logging()`` from settings.
        """
        if configure_logging:
            setup_logging()
        self._storage_adapter: Optional[IStorageAdapter] = None
        self._event_bus: Optional[IEventBus] = None
        self._graph_store: Optional[LocalGraphStore] = None

    def get_storage_adapter(self) -> IStorageAdapter:
        """Get storage adapter.

        Returns:
            Configured storage adapter instance.
        """
        if self._storage_adapter is None:
            backend = settings.storage_backend.strip().lower()
            adapter_path = settings.storage_adapter_path.strip()
            if not adapter_path:
                adapter_path = settings.storage_adapters.get(backend, "")
            if not adapter_path:
                raise ValueError(f"Unsupported storage backend: {backend}")
            adapter_cls = _load_adapter_class(adapter_path)
            self._storage_adapter = adapter_cls()
        return self._storage_adapter

    def get_event_bus(self) -> IEventBus:
        """Get event bus instance."""
        if self._event_bus is None:
            self._event_bus = InMemoryEventBus()
        return self._event_bus

    def get_graph_store(self) -> LocalGraphStore:
        """Get graph store wired to the configured storage and event bus.

        The store initializes lazily on its first async call.
        """
        if self._graph_store is None:
            self._graph_store = LocalGraphStore(
                storage=self.get_storage_adapter(),
                event_bus=self.get_event_bus(),
                settings=settings,
            )
        return self._graph_store

    async def dispose(self) -> None:
        """Dispose the graph store and drop every cached instance."""
        if self._graph_store is not None:
            await self._graph_store.dispose()
        self._graph_store = None
        self._event_bus = None
        self._storage_adapter = None
