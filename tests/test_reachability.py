"""Tests for ancestor and descendant tracing."""

import pytest

from heaptrace.analyzers import trace, trace_down, trace_up
from heaptrace.config import QueryConfig
from heaptrace.errors import NodeNotFoundError
from heaptrace.logging import Verbosity
from heaptrace.models.graph import Direction
from tests.helpers import edge, node


class TestTraceDown:
    """Tests for tracing through outgoing edges."""

    def test_discovery_order_is_depth_first(self, diamond_graph, quiet_config) -> None:
        """Shared child 4 is reached through 2 before 3 is visited."""
        result = trace_down(diamond_graph, 1, quiet_config)

        assert result.node_ids == [1, 2, 4, 3]
        assert result.direction == Direction.DOWN

    def test_leaf_returns_only_itself(self, diamond_graph, quiet_config) -> None:
        assert trace_down(diamond_graph, 4, quiet_config).node_ids == [4]

    def test_terminates_on_cycle(self, cyclic_graph, quiet_config) -> None:
        """Each node in the cycle is reported once."""
        result = trace_down(cyclic_graph, 1, quiet_config)

        assert result.node_ids == [1, 2, 3, 4]

    def test_deep_chain_does_not_hit_recursion_limit(self, graph_factory, quiet_config) -> None:
        """A chain far deeper than the interpreter's recursion limit is fine."""
        length = 5000
        graph = graph_factory(
            [node(i) for i in range(length)],
            [edge(i, i + 1) for i in range(length - 1)],
        )

        result = trace_down(graph, 0, quiet_config)

        assert result.node_ids == list(range(length))


class TestTraceUp:
    """Tests for tracing through incoming edges."""

    def test_follows_referrers(self, diamond_graph, quiet_config) -> None:
        result = trace_up(diamond_graph, 4, quiet_config)

        assert result.node_ids == [4, 2, 1, 3]
        assert result.direction == Direction.UP

    def test_root_returns_only_itself(self, diamond_graph, quiet_config) -> None:
        assert trace_up(diamond_graph, 1, quiet_config).node_ids == [1]

    def test_direction_accepts_string(self, diamond_graph, quiet_config) -> None:
        assert trace(diamond_graph, 4, "up", quiet_config) == trace_up(diamond_graph, 4, quiet_config)


class TestTraceIsRestartable:
    """Tests that traces leave no state behind."""

    def test_repeated_calls_match(self, cyclic_graph, quiet_config) -> None:
        first = trace_up(cyclic_graph, 4, quiet_config)
        second = trace_up(cyclic_graph, 4, quiet_config)

        assert first.node_ids == second.node_ids

    def test_graph_attributes_untouched(self, cyclic_graph, quiet_config) -> None:
        """Node attributes should hold only the record after tracing."""
        trace_down(cyclic_graph, 1, quiet_config)
        trace_up(cyclic_graph, 1, quiet_config)

        for _, attrs in cyclic_graph.digraph.nodes(data=True):
            assert set(attrs) == {"record"}

    def test_verbosity_does_not_change_result(self, cyclic_graph) -> None:
        silent = trace_down(cyclic_graph, 1, QueryConfig(verbosity=Verbosity.SILENT))
        debug = trace_down(cyclic_graph, 1, QueryConfig(verbosity=Verbosity.DEBUG))

        assert silent == debug


class TestMissingNode:
    """Tests for unknown start ids."""

    @pytest.mark.parametrize("direction", ["up", "down"])
    def test_unknown_id_raises(self, diamond_graph, quiet_config, direction: str) -> None:
        """An absent id is a failure, not an empty trace."""
        with pytest.raises(NodeNotFoundError) as exc_info:
            trace(diamond_graph, 42, direction, quiet_config)

        assert exc_info.value.node_id == 42
        assert "id=42" in str(exc_info.value)
