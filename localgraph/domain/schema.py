"""Canonical data models for the graph engine and its storage slot."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GraphModel(BaseModel):
    """Base for models persisted in the snapshot document (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Dump to a JSON-compatible dict using wire aliases."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================
# Graph Models
# ============================================


class GraphNode(GraphModel):
    """A labeled, property-bearing vertex."""

    id: str = Field(description="Globally unique node identifier")
    labels: List[str] = Field(default_factory=list, description="Classification tags, immutable after creation")
    properties: Dict[str, Any] = Field(default_factory=dict, description="Arbitrary key/value payload")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class GraphEdge(GraphModel):
    """A typed, directed, property-bearing connection between two nodes."""

    id: str = Field(description="Globally unique edge identifier")
    type: str = Field(description="Edge type tag")
    from_id: str = Field(description="Source node id")
    to_id: str = Field(description="Target node id")
    properties: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)


class GraphQuery(GraphModel):
    """Typed node filter. Every given criterion must hold."""

    node_labels: Optional[List[str]] = Field(None, description="Match nodes carrying any of these labels")
    edge_types: Optional[List[str]] = Field(
        None, description="Match nodes incident to a live edge of any of these types"
    )
    properties: Optional[Dict[str, Any]] = Field(None, description="Exact-match property values")
    limit: Optional[int] = Field(None, ge=0, description="Result cap (0 or None means unlimited)")


class GraphPath(GraphModel):
    """Result of a shortest-path search."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    length: int = Field(0, description="Number of hops from source to target")

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]


class Subgraph(GraphModel):
    """Nodes and edges reached by a bounded traversal."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class GraphExport(GraphModel):
    """Raw listing of every node and edge."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class SnapshotStats(GraphModel):
    """Summary persisted alongside a snapshot."""

    node_count: int = 0
    edge_count: int = 0
    labels: List[str] = Field(default_factory=list)
    edge_types: List[str] = Field(default_factory=list)


class GraphStats(SnapshotStats):
    """Live statistics for the in-memory graph."""

    avg_degree: float = 0.0


class GraphSnapshot(GraphModel):
    """The single document holding the whole persisted graph."""

    type: str = "graph"
    data: GraphExport = Field(default_factory=GraphExport)
    stats: SnapshotStats = Field(default_factory=SnapshotStats)


# ============================================
# Storage Models
# ============================================


class StorageItemMetadata(BaseModel):
    """Bookkeeping attached to every stored item."""

    created: datetime = Field(default_factory=utcnow)
    updated: datetime = Field(default_factory=utcnow)
    version: int = Field(1, ge=1)
    tags: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None


class StorageItem(BaseModel):
    """An opaque document held by a storage adapter."""

    id: str
    kind: str = Field(description="Item kind, e.g. 'memory', 'config'")
    content: Dict[str, Any] = Field(default_factory=dict)
    metadata: StorageItemMetadata = Field(default_factory=StorageItemMetadata)
    checksum: Optional[str] = Field(None, description="SHA-256 of the JSON content")


class StorageQuery(BaseModel):
    """Filter and pagination for storage lookups."""

    kind: Optional[str] = None
    tags: Optional[List[str]] = None
    user_id: Optional[str] = None
    order_by: Literal["created", "updated"] = "updated"
    order: Literal["asc", "desc"] = "desc"
    offset: int = Field(0, ge=0)
    limit: int = Field(100, ge=0)


class StorageStats(BaseModel):
    """Aggregate numbers for a storage backend."""

    total_items: int = 0
    by_kind: Dict[str, int] = Field(default_factory=dict)
    storage_size: int = Field(0, description="Bytes on disk")


# ============================================
# Events
# ============================================


class GraphEventType(str, Enum):
    """Lifecycle notifications emitted by the graph store."""

    INITIALIZED = "initialized"
    NODE_CREATED = "node-created"
    NODE_UPDATED = "node-updated"
    NODE_DELETED = "node-deleted"
    EDGE_CREATED = "edge-created"
    EDGE_DELETED = "edge-deleted"
    GRAPH_CLEARED = "graph-cleared"
    GRAPH_IMPORTED = "graph-imported"


class DomainEvent(BaseModel):
    """Domain event emitted after a graph mutation."""

    id: UUID = Field(default_factory=uuid4, description="Event identifier")
    event_type: str = Field(description="Event type")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Event payload")
    trace_id: Optional[str] = Field(None, description="Trace identifier")
    occurred_at: datetime = Field(default_factory=utcnow, description="Event timestamp")
