"""Bounded path search between two heap nodes.

Edges are walked in both directions, so a path can climb to a shared
referrer and come back down. Each node is expanded at most once for the
whole search, which keeps the search linear in the graph size but means
the result is the set of first-discovered paths along one depth-first
tree, not every simple path.
"""

from heaptrace.config import QueryConfig, resolve_config
from heaptrace.logging import Verbosity
from heaptrace.models.graph import HeapGraph, HeapPath, PathSearchResult, PathStep
from heaptrace.render import format_path


def _expansions(graph: HeapGraph, node_id: int) -> list[tuple[int, PathStep]]:
    # Referrers first, then referents.
    steps = [(edge.source, PathStep(edge=edge, along=False)) for edge in graph.incoming(node_id)]
    steps.extend((edge.target, PathStep(edge=edge, along=True)) for edge in graph.outgoing(node_id))
    return steps


def find_paths(
    graph: HeapGraph,
    start_id: int,
    target_id: int,
    max_length: int | None = None,
    config: QueryConfig | None = None,
) -> PathSearchResult:
    """Find paths from ``start_id`` to ``target_id``.

    Args:
        graph: Heap graph.
        start_id: Node the paths begin at.
        target_id: Node the paths must end at. An id that isn't in the
            graph simply yields no paths.
        max_length: Longest path considered, counted in nodes (default:
            ``config.max_path_length``).
        config: Query configuration.

    Returns:
        PathSearchResult with the paths found and the number of partial
        paths expanded.

    Raises:
        NodeNotFoundError: If ``start_id`` is not in the graph.
        ValueError: If ``max_length`` is less than 1.
    """
    config = resolve_config(config)
    log = config.query_log()
    if max_length is None:
        max_length = config.max_path_length
    if max_length < 1:
        raise ValueError(f"max_length must be at least 1, got {max_length}")

    log.detail("Finding paths between %s and %s:", start_id, target_id)
    graph.require(start_id)

    visited: set[int] = set()
    paths: list[HeapPath] = []
    paths_searched = 0

    stack: list[tuple[list[int], list[PathStep]]] = [([start_id], [])]
    while stack:
        node_ids, steps = stack.pop()
        end = node_ids[-1]
        if log.enabled(Verbosity.DEBUG):
            log.trace("   %s", format_path(node_ids))
            log.trace("   Considering %d", end)

        if end in visited:
            log.trace("   Already visited this node - not going there again")
            continue
        visited.add(end)
        paths_searched += 1

        if end == target_id:
            path = HeapPath(node_ids=node_ids, steps=steps)
            log.detail("   Path found: %s", format_path(path))
            paths.append(path)
            continue

        if len(node_ids) >= max_length:
            log.trace("   Not extending because path is at maximum length %d", max_length)
            continue

        for neighbour, step in reversed(_expansions(graph, end)):
            stack.append((node_ids + [neighbour], steps + [step]))

    result = PathSearchResult(
        start=start_id,
        target=target_id,
        max_length=max_length,
        paths=paths,
        paths_searched=paths_searched,
    )
    log.detail("   Finished.")
    log.detail("      %d path(s) searched.", result.paths_searched)
    log.detail("      %d path(s) found between specified nodes.", result.paths_found)
    return result
