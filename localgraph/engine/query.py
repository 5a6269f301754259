"""Label/property filtering over the node collection."""

from typing import Any, Dict, Iterable, Iterator, Optional, Set

from localgraph.domain.schema import GraphNode, GraphQuery
from localgraph.engine.index import GraphIndex


class QueryEngine:
    """Read-only node filter over a ``GraphIndex``."""

    def __init__(self, index: GraphIndex):
        self._index = index

    def run(self, query: GraphQuery) -> Iterator[GraphNode]:
        """Yield nodes matching ``query``.

        Candidates come from the label index when ``node_labels`` is set,
        otherwise from every node. A node carrying several requested labels
        is yielded once. Property matching is exact equality per key.

        Returns:
            A one-shot iterator in index order.
        """
        if query.node_labels:
            candidates: Iterable[GraphNode] = self._by_labels(query.node_labels)
        else:
            candidates = list(self._index.nodes.values())

        if query.edge_types:
            incident = self._incident_to_types(query.edge_types)
            candidates = (node for node in candidates if node.id in incident)

        if query.properties:
            expected = query.properties
            candidates = (node for node in candidates if _matches(node.properties, expected))

        return self._limited(candidates, query.limit)

    def _by_labels(self, labels: Iterable[str]) -> Iterator[GraphNode]:
        seen: Set[str] = set()
        for label in labels:
            for node in self._index.nodes_with_label(label):
                if node.id in seen:
                    continue
                seen.add(node.id)
                yield node

    def _incident_to_types(self, edge_types: Iterable[str]) -> Set[str]:
        node_ids: Set[str] = set()
        for edge_type in edge_types:
            for edge in self._index.edges_with_type(edge_type):
                node_ids.add(edge.from_id)
                node_ids.add(edge.to_id)
        return node_ids

    @staticmethod
    def _limited(nodes: Iterable[GraphNode], limit: Optional[int]) -> Iterator[GraphNode]:
        if not limit:
            yield from nodes
            return
        for count, node in enumerate(nodes, start=1):
            yield node
            if count >= limit:
                return


_MISSING = object()


def _strict_equal(actual: Any, expected: Any) -> bool:
    # bool is an int subclass; True must not match 1
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def _matches(properties: Dict[str, Any], expected: Dict[str, Any]) -> bool:
    return all(
        _strict_equal(properties.get(key, _MISSING), value) for key, value in expected.items()
    )
