"""Local graph store: nodes, typed edges, indices, search and persistence.

Every mutating call writes a full snapshot through ``GraphPersistence``
before returning and then publishes a ``DomainEvent`` on the caller-owned
event bus. Reads consult in-memory state only.

Not safe for concurrent use: callers serialize access per process.
"""

import asyncio
from typing import Any, Dict, Iterator, List, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from localgraph.config import Settings, settings as default_settings
from localgraph.domain.errors import InvalidImportError
from localgraph.domain.interfaces import EventHandler, IEventBus, IStorageAdapter
from localgraph.domain.schema import (
    DomainEvent,
    GraphEdge,
    GraphEventType,
    GraphExport,
    GraphNode,
    GraphPath,
    GraphQuery,
    GraphSnapshot,
    GraphStats,
    SnapshotStats,
    Subgraph,
    utcnow,
)
from localgraph.engine.index import GraphIndex
from localgraph.engine.paths import PathFinder
from localgraph.engine.persistence import GraphPersistence
from localgraph.engine.query import QueryEngine
from localgraph.utils.logger import get_logger
from localgraph.utils.tracing import get_trace_id

logger = get_logger(__name__)


class LocalGraphStore:
    """In-process labeled property graph with snapshot persistence.

    Usage:
        async with LocalGraphStore(storage, event_bus) as graph:
            alice = await graph.create_node(["Person"], {"name": "Alice"})
            bob = await graph.create_node(["Person"], {"name": "Bob"})
            await graph.create_edge("KNOWS", alice.id, bob.id)
            path = await graph.find_path(alice.id, bob.id)
    """

    def __init__(
        self,
        storage: IStorageAdapter,
        event_bus: IEventBus,
        settings: Optional[Settings] = None,
    ):
        """Initialize store.

        Args:
            storage: Document store holding the snapshot.
            event_bus: Bus receiving lifecycle events.
            settings: Overrides the module-level settings.
        """
        self._settings = settings or default_settings
        self._event_bus = event_bus
        self._persistence = GraphPersistence(storage, self._settings)
        self._index = GraphIndex()
        self._query_engine = QueryEngine(self._index)
        self._path_finder = PathFinder(self._index)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Load the persisted snapshot once. Later calls are no-ops.

        Overlapping first calls share a single load.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            snapshot = await self._persistence.load()
            self._index.reset()
            if snapshot is not None:
                self._index.load(snapshot.data.nodes, snapshot.data.edges)
            self._initialized = True

        logger.info(
            "graph.initialized",
            node_count=len(self._index.nodes),
            edge_count=len(self._index.edges),
        )
        await self._emit(
            GraphEventType.INITIALIZED,
            node_count=len(self._index.nodes),
            edge_count=len(self._index.edges),
        )

    async def dispose(self) -> None:
        """Drop in-memory state. The next async call reloads from storage."""
        self._index.reset()
        self._initialized = False
        logger.info("graph.disposed")

    async def __aenter__(self) -> "LocalGraphStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    async def subscribe(self, event_type: Union[GraphEventType, str], handler: EventHandler) -> None:
        """Register ``handler`` on the event bus ("*" for every event)."""
        await self._event_bus.subscribe(_event_name(event_type), handler)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    async def create_node(
        self,
        labels: List[str],
        properties: Optional[Dict[str, Any]] = None,
    ) -> GraphNode:
        """Create a node and index it under each label."""
        await self.initialize()

        now = utcnow()
        node = GraphNode(
            id=_generate_id(),
            labels=list(labels),
            properties=dict(properties or {}),
            created_at=now,
            updated_at=now,
        )
        self._index.add_node(node)

        await self._save()
        await self._emit(GraphEventType.NODE_CREATED, node=node.to_document())
        return node

    async def update_node(self, node_id: str, properties: Dict[str, Any]) -> Optional[GraphNode]:
        """Shallow-merge ``properties`` into a node.

        Returns:
            The updated node, or None if it does not exist.
        """
        await self.initialize()

        node = self._index.nodes.get(node_id)
        if node is None:
            return None

        node.properties = {**node.properties, **properties}
        node.updated_at = utcnow()

        await self._save()
        await self._emit(GraphEventType.NODE_UPDATED, node=node.to_document())
        return node

    async def delete_node(self, node_id: str) -> bool:
        """Delete a node and, first, every edge touching it.

        Returns:
            True if deleted, False if not found.
        """
        await self.initialize()

        node = self._index.nodes.get(node_id)
        if node is None:
            return False

        for edge in self._index.incident_edges(node_id):
            await self.delete_edge(edge.id)

        self._index.remove_node(node)

        await self._save()
        await self._emit(GraphEventType.NODE_DELETED, node=node.to_document())
        return True

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._index.nodes.get(node_id)

    def get_nodes_by_label(self, label: str) -> List[GraphNode]:
        return self._index.nodes_with_label(label)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    async def create_edge(
        self,
        edge_type: str,
        from_id: str,
        to_id: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Optional[GraphEdge]:
        """Create a directed edge between two existing nodes.

        Returns:
            The new edge, or None (with no side effects) if either endpoint
            is missing.
        """
        await self.initialize()

        if from_id not in self._index.nodes or to_id not in self._index.nodes:
            logger.debug("graph.edge.endpoint_missing", from_id=from_id, to_id=to_id, edge_type=edge_type)
            return None

        edge = GraphEdge(
            id=_generate_id(),
            type=edge_type,
            from_id=from_id,
            to_id=to_id,
            properties=dict(properties or {}),
        )
        self._index.add_edge(edge)

        await self._save()
        await self._emit(GraphEventType.EDGE_CREATED, edge=edge.to_document())
        return edge

    async def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge.

        The adjacency entry for its (from, to) pair is dropped even when a
        parallel edge of another type remains.

        Returns:
            True if deleted, False if not found.
        """
        await self.initialize()

        edge = self._index.edges.get(edge_id)
        if edge is None:
            return False

        self._index.remove_edge(edge)

        await self._save()
        await self._emit(GraphEventType.EDGE_DELETED, edge=edge.to_document())
        return True

    def get_edge(self, edge_id: str) -> Optional[GraphEdge]:
        return self._index.edges.get(edge_id)

    def get_edges_by_type(self, edge_type: str) -> List[GraphEdge]:
        return self._index.edges_with_type(edge_type)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def query(self, query: Union[GraphQuery, Dict[str, Any], None] = None) -> Iterator[GraphNode]:
        """Filter nodes by labels, incident edge types and exact properties.

        Args:
            query: GraphQuery or a dict of its fields.

        Returns:
            One-shot iterator over matching nodes.
        """
        await self.initialize()
        if not isinstance(query, GraphQuery):
            query = GraphQuery.model_validate(query or {})
        return self._query_engine.run(query)

    async def find_path(
        self,
        from_id: str,
        to_id: str,
        max_depth: Optional[int] = None,
    ) -> Optional[GraphPath]:
        """Shortest directed path of at most ``max_depth`` hops."""
        await self.initialize()
        if max_depth is None:
            max_depth = self._settings.graph_default_max_depth
        return self._path_finder.find_path(from_id, to_id, max_depth)

    async def traverse(self, start_id: str, depth: Optional[int] = None) -> Subgraph:
        """Nodes and edges within ``depth`` hops of ``start_id`` in either direction."""
        await self.initialize()
        if depth is None:
            depth = self._settings.graph_default_traverse_depth
        return self._path_finder.traverse(start_id, depth)

    # ------------------------------------------------------------------
    # Whole-graph operations
    # ------------------------------------------------------------------

    def get_stats(self) -> GraphStats:
        node_count = len(self._index.nodes)
        return GraphStats(
            node_count=node_count,
            edge_count=len(self._index.edges),
            labels=list(self._index.nodes_by_label),
            edge_types=list(self._index.edges_by_type),
            avg_degree=self._index.total_degree() / node_count if node_count else 0.0,
        )

    async def clear(self) -> None:
        """Remove every node, edge and index entry, then persist the empty graph."""
        await self.initialize()

        self._index.reset()

        await self._save()
        await self._emit(GraphEventType.GRAPH_CLEARED)

    def export_graph(self) -> GraphExport:
        """List current nodes and edges. The models are live, not copies."""
        return GraphExport(
            nodes=list(self._index.nodes.values()),
            edges=list(self._index.edges.values()),
        )

    async def import_graph(self, data: Union[GraphExport, Dict[str, Any]]) -> None:
        """Replace the whole graph with ``data``.

        Edge endpoints are not checked against the imported nodes.

        Raises:
            InvalidImportError: If ``data`` does not parse as nodes and edges.
        """
        if not isinstance(data, GraphExport):
            try:
                data = GraphExport.model_validate(data)
            except ValidationError as exc:
                raise InvalidImportError(f"Invalid graph import payload: {exc}") from exc

        await self.clear()

        self._index.load(data.nodes, data.edges)

        await self._save()
        logger.info("graph.imported", node_count=len(data.nodes), edge_count=len(data.edges))
        await self._emit(
            GraphEventType.GRAPH_IMPORTED,
            node_count=len(data.nodes),
            edge_count=len(data.edges),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            data=self.export_graph(),
            stats=SnapshotStats(
                node_count=len(self._index.nodes),
                edge_count=len(self._index.edges),
                labels=list(self._index.nodes_by_label),
                edge_types=list(self._index.edges_by_type),
            ),
        )

    async def _save(self) -> None:
        await self._persistence.save(self._snapshot())

    async def _emit(self, event_type: GraphEventType, **payload: Any) -> None:
        event = DomainEvent(
            event_type=event_type.value,
            payload=payload,
            trace_id=get_trace_id() or None,
        )
        await self._event_bus.publish(event)


def _generate_id() -> str:
    return uuid4().hex


def _event_name(event_type: Union[GraphEventType, str]) -> str:
    if isinstance(event_type, GraphEventType):
        return event_type.value
    return event_type
