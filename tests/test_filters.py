"""Tests for attribute filters over the heap graph."""

import pytest

from heaptrace.analyzers import filters
from heaptrace.render import format_node
from tests.helpers import edge, node


@pytest.fixture
def labelled_graph(graph_factory):
    return graph_factory(
        [
            node(1, 40),
            node(2, 0, type="Closure", position={"line": 3}),
            node(3, 8, type="String", repr="myStringVariable"),
            node(0x1000001, 24, type="Code", repr="myOuterFunction"),
            node(9, 0),
        ],
        [
            edge(1, 2, type="variable", name="mySumArrayFunction"),
            edge(1, 3, name="myStringVariable"),
            edge(2, 3),
            edge(0x1000001, 3, type="context"),
        ],
    )


class TestNodeFilters:
    """Tests for node scans."""

    def test_nodes_with_repr(self, labelled_graph) -> None:
        assert [n.id for n in filters.nodes_with_repr(labelled_graph)] == [3, 0x1000001]

    def test_nodes_with_repr_in(self, labelled_graph) -> None:
        found = filters.nodes_with_repr_in(labelled_graph, ["myOuterFunction", "unknown"])

        assert [n.id for n in found] == [0x1000001]

    def test_nodes_with_position(self, labelled_graph) -> None:
        assert [n.id for n in filters.nodes_with_position(labelled_graph)] == [2]

    @pytest.mark.parametrize("position", [{}, "", 0])
    def test_empty_position_not_listed(self, graph_factory, position) -> None:
        graph = graph_factory([node(1, position=position), node(2, position={"line": 7})], [])

        assert [n.id for n in filters.nodes_with_position(graph)] == [2]
        assert "position=" not in format_node(graph, graph.node(1))
        assert 'position={"line":7}' in format_node(graph, graph.node(2))

    def test_nodes_with_type(self, labelled_graph) -> None:
        assert [n.id for n in filters.nodes_with_type(labelled_graph, "Closure")] == [2]
        assert filters.nodes_with_type(labelled_graph, "Sourcemap") == []

    def test_roots_leaves_unlinked(self, labelled_graph) -> None:
        assert [n.id for n in filters.root_nodes(labelled_graph)] == [1, 0x1000001, 9]
        assert [n.id for n in filters.leaf_nodes(labelled_graph)] == [3, 9]
        assert [n.id for n in filters.unlinked_nodes(labelled_graph)] == [9]

    def test_many_edges(self, labelled_graph) -> None:
        assert [n.id for n in filters.nodes_with_many_to(labelled_graph, 2)] == [1]
        assert [n.id for n in filters.nodes_with_many_from(labelled_graph, 3)] == [3]

    def test_size_above(self, labelled_graph) -> None:
        assert [n.id for n in filters.nodes_with_size_above(labelled_graph, 23)] == [1, 0x1000001]

    def test_is_user_node(self, labelled_graph) -> None:
        assert filters.is_user_node(labelled_graph.node(0x1000001))
        assert not filters.is_user_node(labelled_graph.node(1))
        assert filters.is_user_node(labelled_graph.node(1), threshold=1)


class TestEdgeFilters:
    """Tests for edge scans."""

    def test_edges_with_name(self, labelled_graph) -> None:
        assert [e.key for e in filters.edges_with_name(labelled_graph)] == [(1, 2), (1, 3)]

    def test_edges_with_name_in(self, labelled_graph) -> None:
        found = filters.edges_with_name_in(labelled_graph, {"myStringVariable"})

        assert [e.key for e in found] == [(1, 3)]


class TestGraphMetadata:
    """Tests for graph_metadata."""

    def test_counts(self, labelled_graph) -> None:
        meta = filters.graph_metadata(labelled_graph)

        assert meta["node_count"] == 5
        assert meta["edge_count"] == 4
        assert meta["total_size"] == 72
        assert meta["node_types"]["Object"] == 2
        assert meta["edge_types"] == {"property": 2, "variable": 1, "context": 1}
        assert meta["root_count"] == 3
        assert meta["leaf_count"] == 2
