"""Approximate retained-set analysis.

Finds the nodes that are reachable from the rest of the heap only through
a chosen root, i.e. the memory that would be freed if the root went away.

The search is breadth-first over outgoing edges. A child is examined once,
the first time it is reached, and is retained only if every one of its
referrers is already retained at that moment. A genuine retaining parent
that is itself only accepted later in the walk therefore doesn't help:
the result can under-count true retention. That is the intended, cheap
approximation; it is not a dominator-tree computation.
"""

from collections import deque

from heaptrace.config import QueryConfig, resolve_config
from heaptrace.errors import ResourceExhaustedError
from heaptrace.logging import Verbosity
from heaptrace.models.graph import HeapGraph, RetainedSet
from heaptrace.render import format_edge, format_node


def compute_retained(
    graph: HeapGraph,
    root_id: int,
    config: QueryConfig | None = None,
) -> RetainedSet:
    """Compute the approximate retained set of ``root_id``.

    Args:
        graph: Heap graph.
        root_id: Node whose retained set is wanted.
        config: Query configuration; ``max_queue_length`` bounds the work
            queue.

    Returns:
        RetainedSet with the root first and totals for the whole set.

    Raises:
        NodeNotFoundError: If ``root_id`` is not in the graph.
        ResourceExhaustedError: If the work queue grows past
            ``config.max_queue_length``.
    """
    config = resolve_config(config)
    log = config.query_log()

    log.detail("Tracing node %s down through retained children:", root_id)
    root = graph.node(root_id)
    log.detail("   Starting node: %s", format_node(graph, root))

    # Per-call markers: depth doubles as the "retained" flag.
    depths: dict[int, int] = {root_id: 0}
    visited: set[int] = {root_id}
    order: list[int] = [root_id]

    retained_size = root.size
    nonzero_size_count = 1 if root.size else 0
    max_depth = 0
    max_queue_length = 1

    queue: deque[int] = deque([root_id])
    while queue:
        log.trace("   Queue length: %d", len(queue))
        max_queue_length = max(max_queue_length, len(queue))
        if len(queue) > config.max_queue_length:
            log.error("   Queue too big - aborting")
            raise ResourceExhaustedError(
                f"Retained-set queue for node {root_id} exceeded "
                f"{config.max_queue_length} entries",
                limit=config.max_queue_length,
                observed=len(queue),
            )

        current = queue.popleft()
        children = graph.outgoing(current)
        log.detail("   Considering node %d. Searching its %d child(ren).", current, len(children))
        child_depth = depths[current] + 1

        for edge_to_child in children:
            log.trace("      %s", format_edge(edge_to_child))
            child_id = edge_to_child.target

            if child_id in visited:
                log.trace("      Child node %d has already been visited - skipping.", child_id)
                continue
            visited.add(child_id)

            parents = graph.incoming(child_id)
            log.trace(
                "      Checking up to %d parent(s) of %d (all of which must be retained for %d to be retained).",
                len(parents),
                child_id,
                child_id,
            )
            is_retained = all(edge.source in depths for edge in parents)

            child = graph.node(child_id)
            if log.enabled(Verbosity.VERBOSE):
                verdict = "RETAINED" if is_retained else "NOT retained"
                log.detail(
                    "      Conclusion: %d has child %s %s",
                    current,
                    format_node(graph, child, depth=child_depth if is_retained else None),
                    verdict,
                )

            if not is_retained:
                continue

            depths[child_id] = child_depth
            order.append(child_id)
            retained_size += child.size
            if child.size:
                nonzero_size_count += 1
            max_depth = max(max_depth, child_depth)
            queue.append(child_id)

    result = RetainedSet(
        root=root_id,
        node_ids=order,
        depths=depths,
        retained_count=len(order),
        nonzero_size_count=nonzero_size_count,
        retained_size=retained_size,
        max_depth=max_depth,
        max_queue_length=max_queue_length,
    )
    log.detail("   Finished.")
    log.detail("      Nodes retained: %d", result.retained_count)
    log.detail("      Nodes with non-zero size retained: %d", result.nonzero_size_count)
    log.detail("      Memory retained: %d bytes", result.retained_size)
    log.detail("      Maximum node depth: %d", result.max_depth)
    log.detail("      Maximum processing queue length: %d", result.max_queue_length)
    return result
