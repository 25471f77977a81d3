"""Common ancestors and descendants of two nodes."""

from heaptrace.analyzers.reachability import trace
from heaptrace.config import QueryConfig, resolve_config
from heaptrace.models.graph import CommonNodes, Direction, HeapGraph
from heaptrace.render import format_node


def find_common(
    graph: HeapGraph,
    first_id: int,
    second_id: int,
    direction: Direction | str,
    config: QueryConfig | None = None,
) -> CommonNodes:
    """Find nodes reachable from both ``first_id`` and ``second_id``.

    Both traces run silently; the result keeps the order of the first
    node's trace.

    Raises:
        NodeNotFoundError: If either id is not in the graph.
    """
    direction = Direction(direction)
    config = resolve_config(config)
    log = config.query_log()

    via = "'from'" if direction is Direction.UP else "'to'"
    log.detail("Finding nodes reachable via %s edges of both %s and %s:", via, first_id, second_id)

    quiet = config.silenced()
    first = trace(graph, first_id, direction, quiet)
    second = set(trace(graph, second_id, direction, quiet).node_ids)

    common = [node_id for node_id in first.node_ids if node_id in second]
    for node_id in common:
        log.detail("   %s", format_node(graph, graph.node(node_id)))
    log.detail("   (%d node(s) found.)", len(common))

    return CommonNodes(first=first_id, second=second_id, direction=direction, node_ids=common)


def find_common_from(
    graph: HeapGraph,
    first_id: int,
    second_id: int,
    config: QueryConfig | None = None,
) -> CommonNodes:
    """Common referrers (ancestors) of two nodes."""
    return find_common(graph, first_id, second_id, Direction.UP, config)


def find_common_to(
    graph: HeapGraph,
    first_id: int,
    second_id: int,
    config: QueryConfig | None = None,
) -> CommonNodes:
    """Common referents (descendants) of two nodes."""
    return find_common(graph, first_id, second_id, Direction.DOWN, config)
