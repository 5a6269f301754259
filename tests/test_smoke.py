"""Smoke tests to verify the package wires together."""

import pytest

from localgraph.config import Settings
from localgraph.engine.graph_store import LocalGraphStore
from localgraph.infrastructure import di
from localgraph.infrastructure.di import DIContainer, _load_adapter_class
from localgraph.infrastructure.storage.file_store import LocalFileStorageAdapter
from localgraph.infrastructure.storage.in_memory_store import InMemoryStorageAdapter


def test_imports():
    """Test that all critical imports work."""
    from localgraph.domain.interfaces import IEventBus, IStorageAdapter
    from localgraph.domain.schema import GraphNode, GraphEdge, GraphQuery, GraphSnapshot
    from localgraph.engine import GraphIndex, GraphPersistence, PathFinder, QueryEngine
    from localgraph.utils.logger import get_logger, setup_logging
    from localgraph.utils.tracing import get_tracer, get_trace_id, setup_tracing

    setup_logging(level="DEBUG", json_output=True)
    get_logger(__name__).debug("smoke.logger_ready")
    assert get_trace_id() == ""


def test_get_logger_keeps_host_logging_config():
    """Test module loggers do not reconfigure structlog."""
    import structlog

    from localgraph.utils.logger import get_logger

    def marker(logger, method_name, event_dict):
        return event_dict

    structlog.configure(processors=[marker, structlog.processors.JSONRenderer()])
    try:
        get_logger("localgraph.engine.graph_store").info("graph.disposed")

        assert structlog.get_config()["processors"][0] is marker
    finally:
        structlog.reset_defaults()


def test_container_applies_logging_setup(monkeypatch):
    """Test the container configures logging unless told not to."""
    calls = []
    monkeypatch.setattr(di, "setup_logging", lambda: calls.append(True))

    DIContainer(configure_logging=False)
    assert calls == []

    DIContainer()
    assert calls == [True]


def test_load_adapter_class():
    """Test adapter paths resolve and bad paths are rejected."""
    cls = _load_adapter_class("localgraph.infrastructure.storage.in_memory_store:InMemoryStorageAdapter")
    assert cls is InMemoryStorageAdapter

    with pytest.raises(ValueError):
        _load_adapter_class("no-colon")
    with pytest.raises(ValueError):
        _load_adapter_class("localgraph.infrastructure.storage.in_memory_store:Missing")


def test_container_builds_memory_backend(monkeypatch):
    """Test the container wires a graph store over the memory backend."""
    monkeypatch.setattr(di, "settings", Settings(_env_file=None, storage_backend="memory"))
    container = DIContainer()

    graph = container.get_graph_store()

    assert isinstance(graph, LocalGraphStore)
    assert isinstance(container.get_storage_adapter(), InMemoryStorageAdapter)
    assert container.get_graph_store() is graph


def test_container_builds_file_backend(monkeypatch, tmp_path):
    """Test the file backend reads its root from settings."""
    file_settings = Settings(_env_file=None, storage_backend="file", storage_path=str(tmp_path))
    monkeypatch.setattr(di, "settings", file_settings)
    monkeypatch.setattr("localgraph.infrastructure.storage.file_store.settings", file_settings)

    adapter = DIContainer().get_storage_adapter()

    assert isinstance(adapter, LocalFileStorageAdapter)
    assert adapter.base_path == tmp_path


def test_container_rejects_unknown_backend(monkeypatch):
    """Test an unregistered backend name fails loudly."""
    monkeypatch.setattr(di, "settings", Settings(_env_file=None, storage_backend="postgres"))

    with pytest.raises(ValueError):
        DIContainer().get_storage_adapter()


@pytest.mark.asyncio
async def test_container_end_to_end(monkeypatch):
    """Test two people joined by one edge are one hop apart."""
    monkeypatch.setattr(di, "settings", Settings(_env_file=None, storage_backend="memory"))
    container = DIContainer()
    graph = container.get_graph_store()

    a = await graph.create_node(["Person"], {"name": "A"})
    b = await graph.create_node(["Person"], {"name": "B"})
    await graph.create_edge("KNOWS", a.id, b.id)
    path = await graph.find_path(a.id, b.id, 5)

    assert path.length == 1
    assert path.node_ids == [a.id, b.id]

    await container.dispose()
    assert not graph.is_initialized
