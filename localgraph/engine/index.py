"""In-memory node/edge collections and their derived indices."""

from typing import Dict, Iterable, Iterator, List, Optional, Set

from localgraph.domain.schema import GraphEdge, GraphNode


class GraphIndex:
    """Primary collections plus label, edge-type and adjacency indices.

    The collections are the source of truth. Indices are kept in step by the
    ``add_*``/``remove_*`` methods and never mutated elsewhere.

    Adjacency stores only target ids, so parallel edges between the same
    ordered pair share one entry and removing any one of them drops it.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, GraphNode] = {}
        self.edges: Dict[str, GraphEdge] = {}
        self.nodes_by_label: Dict[str, Set[str]] = {}
        self.edges_by_type: Dict[str, Set[str]] = {}
        self.adjacency: Dict[str, Set[str]] = {}

    def reset(self) -> None:
        self.nodes.clear()
        self.edges.clear()
        self.nodes_by_label.clear()
        self.edges_by_type.clear()
        self.adjacency.clear()

    def load(self, nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]) -> None:
        """Insert nodes and edges without checking endpoints."""
        for node in nodes:
            self.add_node(node)
        for edge in edges:
            self.add_edge(edge)

    # Nodes

    def add_node(self, node: GraphNode) -> None:
        self.nodes[node.id] = node
        for label in node.labels:
            self.nodes_by_label.setdefault(label, set()).add(node.id)

    def remove_node(self, node: GraphNode) -> None:
        for label in node.labels:
            self.nodes_by_label.get(label, set()).discard(node.id)
        self.nodes.pop(node.id, None)
        self.adjacency.pop(node.id, None)

    def nodes_with_label(self, label: str) -> List[GraphNode]:
        return [self.nodes[node_id] for node_id in self.nodes_by_label.get(label, ()) if node_id in self.nodes]

    # Edges

    def add_edge(self, edge: GraphEdge) -> None:
        self.edges[edge.id] = edge
        self.edges_by_type.setdefault(edge.type, set()).add(edge.id)
        self.adjacency.setdefault(edge.from_id, set()).add(edge.to_id)

    def remove_edge(self, edge: GraphEdge) -> None:
        self.edges_by_type.get(edge.type, set()).discard(edge.id)
        self.adjacency.get(edge.from_id, set()).discard(edge.to_id)
        self.edges.pop(edge.id, None)

    def edges_with_type(self, edge_type: str) -> List[GraphEdge]:
        return [self.edges[edge_id] for edge_id in self.edges_by_type.get(edge_type, ()) if edge_id in self.edges]

    def incident_edges(self, node_id: str) -> List[GraphEdge]:
        return [edge for edge in self.edges.values() if edge.from_id == node_id or edge.to_id == node_id]

    def first_edge_between(self, from_id: str, to_id: str) -> Optional[GraphEdge]:
        """First edge from ``from_id`` to ``to_id`` in edge insertion order."""
        for edge in self.edges.values():
            if edge.from_id == from_id and edge.to_id == to_id:
                return edge
        return None

    def neighbors(self, node_id: str) -> Iterator[str]:
        yield from self.adjacency.get(node_id, ())

    def total_degree(self) -> int:
        return sum(len(targets) for targets in self.adjacency.values())
