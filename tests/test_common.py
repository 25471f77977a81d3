"""Tests for common ancestor/descendant intersection."""

import logging

import pytest

from heaptrace.analyzers import find_common, find_common_from, find_common_to, trace_up
from heaptrace.config import QueryConfig
from heaptrace.errors import NodeNotFoundError
from heaptrace.logging import Verbosity
from heaptrace.models.graph import Direction
from tests.helpers import edge, node


class TestFindCommon:
    """Tests for find_common and its direction wrappers."""

    def test_common_ancestor(self, diamond_graph, quiet_config) -> None:
        result = find_common_from(diamond_graph, 2, 3, quiet_config)

        assert result.node_ids == [1]
        assert result.direction == Direction.UP

    def test_common_descendants_follow_first_trace_order(self, diamond_graph, quiet_config) -> None:
        result = find_common_to(diamond_graph, 1, 2, quiet_config)

        assert result.node_ids == [2, 4]

    def test_same_node_twice_gives_its_whole_trace(self, diamond_graph, quiet_config) -> None:
        result = find_common_to(diamond_graph, 1, 1, quiet_config)

        assert result.node_ids == [1, 2, 4, 3]

    def test_equals_set_intersection_regardless_of_order(self, graph_factory, quiet_config) -> None:
        graph = graph_factory(
            [node(i) for i in range(1, 8)],
            [edge(1, 2), edge(1, 3), edge(2, 4), edge(3, 5), edge(6, 4), edge(6, 5), edge(7, 5)],
        )

        forward = find_common_from(graph, 4, 5, quiet_config)
        backward = find_common_from(graph, 5, 4, quiet_config)
        expected = set(trace_up(graph, 4, quiet_config).node_ids) & set(
            trace_up(graph, 5, quiet_config).node_ids
        )

        assert set(forward.node_ids) == expected == {1, 6}
        assert set(backward.node_ids) == expected

    def test_disjoint_traces(self, cyclic_graph, quiet_config) -> None:
        assert find_common(cyclic_graph, 4, 5, "up", quiet_config).node_ids == []

    def test_unknown_id_raises(self, diamond_graph, quiet_config) -> None:
        with pytest.raises(NodeNotFoundError):
            find_common_from(diamond_graph, 2, 99, quiet_config)

    def test_inner_traces_are_silent(self, diamond_graph, caplog: pytest.LogCaptureFixture) -> None:
        """Only the intersection's own lines are logged."""
        config = QueryConfig(verbosity=Verbosity.VERBOSE)
        with caplog.at_level(logging.INFO, logger="heaptrace"):
            find_common_to(diamond_graph, 1, 2, config)

        messages = [r.getMessage() for r in caplog.records]
        assert not any(m.startswith("Tracing node") for m in messages)
        assert any("2 node(s) found" in m for m in messages)
