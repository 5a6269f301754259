"""Breadth-first path finding and bounded neighbourhood traversal."""

from collections import deque
from typing import Deque, List, Optional, Set, Tuple

from localgraph.domain.schema import GraphEdge, GraphPath, Subgraph
from localgraph.engine.index import GraphIndex


class PathFinder:
    """Read-only graph search over a ``GraphIndex``.

    ``find_path`` follows outgoing adjacency only. ``traverse`` also walks
    incoming edges, so it reaches nodes that ``find_path`` cannot.
    """

    def __init__(self, index: GraphIndex):
        self._index = index

    def find_path(self, from_id: str, to_id: str, max_depth: int) -> Optional[GraphPath]:
        """Shortest directed path by hop count, at most ``max_depth`` hops.

        Nodes are marked visited when dequeued. For each consecutive pair the
        first matching edge in insertion order is reported.

        Returns:
            GraphPath, or None if an endpoint is missing or the target is
            not reachable within the bound.
        """
        nodes = self._index.nodes
        if from_id not in nodes or to_id not in nodes:
            return None

        visited: Set[str] = set()
        queue: Deque[Tuple[str, List[str]]] = deque([(from_id, [from_id])])

        while queue:
            node_id, path = queue.popleft()

            if len(path) > max_depth + 1:
                continue

            if node_id == to_id:
                return self._build_path(path)

            if node_id in visited:
                continue
            visited.add(node_id)

            for neighbor in self._index.neighbors(node_id):
                # dangling adjacency from an unchecked import
                if neighbor not in nodes or neighbor in path:
                    continue
                queue.append((neighbor, path + [neighbor]))

        return None

    def _build_path(self, path: List[str]) -> GraphPath:
        edges: List[GraphEdge] = []
        for source, target in zip(path, path[1:]):
            edge = self._index.first_edge_between(source, target)
            if edge is not None:
                edges.append(edge)
        return GraphPath(
            nodes=[self._index.nodes[node_id] for node_id in path],
            edges=edges,
            length=len(path) - 1,
        )

    def traverse(self, start_id: str, depth: int) -> Subgraph:
        """Collect the neighbourhood of ``start_id`` in both directions.

        Nodes up to ``depth`` hops away are included; only nodes closer than
        ``depth`` are expanded. Outgoing neighbours contribute the first edge
        per target, incoming neighbours contribute every edge.
        """
        if start_id not in self._index.nodes:
            return Subgraph()

        visited_nodes: Set[str] = set()
        visited_edges: Set[str] = set()
        node_order: List[str] = []
        edge_order: List[str] = []
        queue: Deque[Tuple[str, int]] = deque([(start_id, 0)])

        def visit_edge(edge: GraphEdge) -> None:
            if edge.id not in visited_edges:
                visited_edges.add(edge.id)
                edge_order.append(edge.id)

        while queue:
            node_id, level = queue.popleft()

            if node_id in visited_nodes:
                continue
            visited_nodes.add(node_id)
            node_order.append(node_id)

            if level >= depth:
                continue

            for neighbor in self._index.neighbors(node_id):
                edge = self._index.first_edge_between(node_id, neighbor)
                if edge is None:
                    continue
                visit_edge(edge)
                if neighbor not in visited_nodes:
                    queue.append((neighbor, level + 1))

            for edge in list(self._index.edges.values()):
                if edge.to_id != node_id or edge.id in visited_edges:
                    continue
                visit_edge(edge)
                if edge.from_id not in visited_nodes:
                    queue.append((edge.from_id, level + 1))

        return Subgraph(
            nodes=[self._index.nodes[node_id] for node_id in node_order if node_id in self._index.nodes],
            edges=[self._index.edges[edge_id] for edge_id in edge_order if edge_id in self._index.edges],
        )
