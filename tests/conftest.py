"""Shared pytest fixtures and configuration."""

import sys
from pathlib import Path
from typing import List

import pytest
import pytest_asyncio

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from localgraph.config import Settings
from localgraph.domain.schema import DomainEvent
from localgraph.engine.graph_store import LocalGraphStore
from localgraph.infrastructure.messaging.event_bus import InMemoryEventBus
from localgraph.infrastructure.storage.file_store import LocalFileStorageAdapter
from localgraph.infrastructure.storage.in_memory_store import InMemoryStorageAdapter


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment and home directory."""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        storage_path=str(tmp_path / "storage"),
        graph_default_max_depth=5,
        graph_default_traverse_depth=2,
    )


@pytest.fixture
def storage() -> InMemoryStorageAdapter:
    """Create an empty in-memory storage adapter."""
    return InMemoryStorageAdapter()


@pytest.fixture
def file_storage(tmp_path) -> LocalFileStorageAdapter:
    """Create a file storage adapter rooted in a temporary directory."""
    return LocalFileStorageAdapter(base_path=tmp_path / "storage")


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    """Create an event bus."""
    return InMemoryEventBus()


@pytest_asyncio.fixture
async def recorded_events(event_bus) -> List[DomainEvent]:
    """List filled with every event published on ``event_bus``."""
    events: List[DomainEvent] = []

    async def record(event: DomainEvent) -> None:
        events.append(event)

    await event_bus.subscribe("*", record)
    return events


@pytest.fixture
def graph(storage, event_bus, test_settings) -> LocalGraphStore:
    """Create a graph store over in-memory storage."""
    return LocalGraphStore(storage, event_bus, settings=test_settings)
