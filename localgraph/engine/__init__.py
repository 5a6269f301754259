"""Graph engine: store, indices, query, path finding and persistence."""

from localgraph.engine.graph_store import LocalGraphStore
from localgraph.engine.index import GraphIndex
from localgraph.engine.paths import PathFinder
from localgraph.engine.persistence import GraphPersistence
from localgraph.engine.query import QueryEngine

__all__ = [
    "GraphIndex",
    "GraphPersistence",
    "LocalGraphStore",
    "PathFinder",
    "QueryEngine",
]
