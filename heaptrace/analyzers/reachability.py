"""Ancestor and descendant tracing.

Depth-first traversal up through referrers or down through referents.
"""

from heaptrace.config import QueryConfig, resolve_config
from heaptrace.logging import Verbosity
from heaptrace.models.graph import Direction, EdgeRecord, HeapGraph, Trace
from heaptrace.render import format_edge, format_node


def _neighbours(graph: HeapGraph, node_id: int, direction: Direction) -> list[tuple[int, EdgeRecord]]:
    if direction is Direction.UP:
        return [(edge.source, edge) for edge in graph.incoming(node_id)]
    return [(edge.target, edge) for edge in graph.outgoing(node_id)]


def trace(
    graph: HeapGraph,
    node_id: int,
    direction: Direction | str,
    config: QueryConfig | None = None,
) -> Trace:
    """Collect every node reachable from ``node_id`` in one direction.

    Nodes are reported once, in the order a recursive pre-order walk would
    first enter them. The walk uses an explicit stack and a visited set
    local to this call, so deep graphs don't hit the recursion limit and
    repeated calls see an untouched graph.

    Args:
        graph: Heap graph.
        node_id: Start node id.
        direction: UP follows incoming edges, DOWN outgoing edges.
        config: Query configuration.

    Returns:
        Trace with the start node first.

    Raises:
        NodeNotFoundError: If ``node_id`` is not in the graph.
    """
    direction = Direction(direction)
    config = resolve_config(config)
    log = config.query_log()

    label = "upwards (ie, through 'from' edges)" if direction is Direction.UP else (
        "downwards (ie, through 'to' edges)"
    )
    log.detail("Tracing node %s %s:", node_id, label)
    graph.require(node_id)

    visited: set[int] = set()
    order: list[int] = []
    stack: list[tuple[int, int]] = [(node_id, 0)]

    while stack:
        current, depth = stack.pop()
        indent = "   " * (depth + 1)
        if log.enabled(Verbosity.VERBOSE):
            log.detail("%s%s", indent, format_node(graph, graph.node(current)))
        if current in visited:
            log.detail("%sAlready visited this node - not going there again", indent)
            continue

        visited.add(current)
        order.append(current)

        neighbours = _neighbours(graph, current, direction)
        if log.enabled(Verbosity.DEBUG):
            for _, edge in neighbours:
                log.trace("%s   Following %s", indent, format_edge(edge))
        for neighbour, _ in reversed(neighbours):
            stack.append((neighbour, depth + 1))

    log.detail("   Finished: %d node(s) reached.", len(order))
    return Trace(start=node_id, direction=direction, node_ids=order)


def trace_up(graph: HeapGraph, node_id: int, config: QueryConfig | None = None) -> Trace:
    """Trace referrers of ``node_id`` through incoming edges."""
    return trace(graph, node_id, Direction.UP, config)


def trace_down(graph: HeapGraph, node_id: int, config: QueryConfig | None = None) -> Trace:
    """Trace referents of ``node_id`` through outgoing edges."""
    return trace(graph, node_id, Direction.DOWN, config)
