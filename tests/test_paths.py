"""Tests for path finding and traversal."""

import pytest


async def _chain(graph, length):
    """Create nodes n0 -> n1 -> ... -> n{length}."""
    nodes = [await graph.create_node(["Step"], {"i": i}) for i in range(length + 1)]
    for source, target in zip(nodes, nodes[1:]):
        await graph.create_edge("NEXT", source.id, target.id)
    return nodes


class TestFindPath:
    """Tests for breadth-first path search."""

    @pytest.mark.asyncio
    async def test_single_hop(self, graph):
        """Test A -KNOWS-> B gives a path of length 1."""
        a = await graph.create_node(["Person"], {"name": "A"})
        b = await graph.create_node(["Person"], {"name": "B"})
        edge = await graph.create_edge("KNOWS", a.id, b.id)

        path = await graph.find_path(a.id, b.id, 5)

        assert path is not None
        assert path.length == 1
        assert path.node_ids == [a.id, b.id]
        assert path.edges == [edge]

    @pytest.mark.asyncio
    async def test_direction_matters(self, graph):
        """Test the reverse direction is not followed."""
        a = await graph.create_node(["Person"])
        b = await graph.create_node(["Person"])
        await graph.create_edge("KNOWS", a.id, b.id)

        assert await graph.find_path(a.id, b.id, 5) is not None
        assert await graph.find_path(b.id, a.id, 5) is None

    @pytest.mark.asyncio
    async def test_same_node(self, graph):
        """Test a trivial request yields a zero-length path."""
        a = await graph.create_node(["Person"])

        path = await graph.find_path(a.id, a.id, 0)

        assert path.length == 0
        assert path.node_ids == [a.id]
        assert path.edges == []

    @pytest.mark.asyncio
    async def test_missing_endpoint(self, graph):
        """Test unknown ids yield None."""
        a = await graph.create_node(["Person"])

        assert await graph.find_path(a.id, "ghost", 5) is None
        assert await graph.find_path("ghost", a.id, 5) is None

    @pytest.mark.asyncio
    async def test_max_depth_bound(self, graph):
        """Test paths longer than max_depth are not returned."""
        nodes = await _chain(graph, 3)

        assert await graph.find_path(nodes[0].id, nodes[3].id, 2) is None

        path = await graph.find_path(nodes[0].id, nodes[3].id, 3)
        assert path.length == 3
        assert path.node_ids == [n.id for n in nodes]
        assert [e.type for e in path.edges] == ["NEXT"] * 3

    @pytest.mark.asyncio
    async def test_default_max_depth_from_settings(self, graph):
        """Test the configured default bound (5) applies when omitted."""
        nodes = await _chain(graph, 6)

        assert await graph.find_path(nodes[0].id, nodes[5].id) is not None
        assert await graph.find_path(nodes[0].id, nodes[6].id) is None

    @pytest.mark.asyncio
    async def test_shortest_path_wins(self, graph):
        """Test BFS prefers the shortcut over the long way round."""
        nodes = await _chain(graph, 4)
        shortcut = await graph.create_edge("JUMP", nodes[0].id, nodes[3].id)

        path = await graph.find_path(nodes[0].id, nodes[4].id, 5)

        assert path.length == 2
        assert path.node_ids == [nodes[0].id, nodes[3].id, nodes[4].id]
        assert path.edges[0] is shortcut

    @pytest.mark.asyncio
    async def test_cycle_terminates(self, graph):
        """Test cycles do not loop forever."""
        a = await graph.create_node(["N"])
        b = await graph.create_node(["N"])
        c = await graph.create_node(["N"])
        await graph.create_edge("E", a.id, b.id)
        await graph.create_edge("E", b.id, a.id)
        await graph.create_edge("E", b.id, b.id)

        assert await graph.find_path(a.id, c.id, 10) is None

    @pytest.mark.asyncio
    async def test_parallel_edges_report_first_created(self, graph):
        """Test the first edge in creation order is picked for a pair."""
        a = await graph.create_node(["N"])
        b = await graph.create_node(["N"])
        first = await graph.create_edge("KNOWS", a.id, b.id)
        await graph.create_edge("LIKES", a.id, b.id)

        path = await graph.find_path(a.id, b.id, 1)

        assert path.edges == [first]


class TestTraverse:
    """Tests for bidirectional bounded traversal."""

    @pytest.mark.asyncio
    async def test_traverse_includes_both_directions(self, graph):
        """Test traversal reaches outgoing and incoming neighbours."""
        a = await graph.create_node(["Person"], {"name": "A"})
        b = await graph.create_node(["Person"], {"name": "B"})
        c = await graph.create_node(["Person"], {"name": "C"})
        ab = await graph.create_edge("KNOWS", a.id, b.id)
        ca = await graph.create_edge("FOLLOWS", c.id, a.id)

        subgraph = await graph.traverse(a.id, 1)

        assert {n.id for n in subgraph.nodes} == {a.id, b.id, c.id}
        assert {e.id for e in subgraph.edges} == {ab.id, ca.id}
        # path finding stays directional
        assert await graph.find_path(a.id, c.id, 5) is None

    @pytest.mark.asyncio
    async def test_traverse_depth_bound(self, graph):
        """Test nodes beyond depth hops are not reached."""
        nodes = await _chain(graph, 4)

        subgraph = await graph.traverse(nodes[0].id, 2)

        assert [n.id for n in subgraph.nodes] == [n.id for n in nodes[:3]]
        assert len(subgraph.edges) == 2

    @pytest.mark.asyncio
    async def test_traverse_from_middle(self, graph):
        """Test traversal from the middle of a chain goes both ways."""
        nodes = await _chain(graph, 4)

        subgraph = await graph.traverse(nodes[2].id, 1)

        assert {n.id for n in subgraph.nodes} == {nodes[1].id, nodes[2].id, nodes[3].id}

    @pytest.mark.asyncio
    async def test_traverse_depth_zero(self, graph):
        """Test depth 0 returns only the start node."""
        a = await graph.create_node(["N"])
        b = await graph.create_node(["N"])
        await graph.create_edge("E", a.id, b.id)

        subgraph = await graph.traverse(a.id, 0)

        assert [n.id for n in subgraph.nodes] == [a.id]
        assert subgraph.edges == []

    @pytest.mark.asyncio
    async def test_traverse_unknown_start(self, graph):
        """Test an unknown start yields an empty subgraph."""
        subgraph = await graph.traverse("ghost", 3)

        assert subgraph.nodes == [] and subgraph.edges == []

    @pytest.mark.asyncio
    async def test_traverse_default_depth(self, graph):
        """Test the configured default depth (2) applies when omitted."""
        nodes = await _chain(graph, 3)

        subgraph = await graph.traverse(nodes[0].id)

        assert len(subgraph.nodes) == 3
