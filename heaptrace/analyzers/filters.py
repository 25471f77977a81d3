"""Attribute filters over a built heap graph.

Simple scans used to find interesting starting points for the traversal
queries: user symbols, closures, large objects, roots and leaves.
"""

from collections import Counter
from collections.abc import Iterable
from typing import Any

from heaptrace.config import USER_NODE_THRESHOLD
from heaptrace.models.graph import EdgeRecord, HeapGraph, NodeRecord


def is_user_node(node: NodeRecord, threshold: int = USER_NODE_THRESHOLD) -> bool:
    """Whether a node is likely user code rather than a runtime internal."""
    return node.id >= threshold


def nodes_with_repr(graph: HeapGraph) -> list[NodeRecord]:
    """Nodes with a display label (variable names, string literal values)."""
    return [node for node in graph.nodes() if node.repr]


def nodes_with_repr_in(graph: HeapGraph, values: Iterable[str]) -> list[NodeRecord]:
    wanted = set(values)
    return [node for node in graph.nodes() if node.repr and node.repr in wanted]


def nodes_with_position(graph: HeapGraph) -> list[NodeRecord]:
    """Nodes with a source position; includes anonymous functions."""
    return [node for node in graph.nodes() if node.position]


def nodes_with_type(graph: HeapGraph, node_type: str) -> list[NodeRecord]:
    return [node for node in graph.nodes() if node.type == node_type]


def edges_with_name(graph: HeapGraph) -> list[EdgeRecord]:
    """Named edges; usually hundreds of runtime and API entries."""
    return [edge for edge in graph.edges() if edge.name]


def edges_with_name_in(graph: HeapGraph, values: Iterable[str]) -> list[EdgeRecord]:
    wanted = set(values)
    return [edge for edge in graph.edges() if edge.name and edge.name in wanted]


def root_nodes(graph: HeapGraph) -> list[NodeRecord]:
    """Nodes nothing refers to."""
    return [node for node in graph.nodes() if graph.in_degree(node.id) == 0]


def leaf_nodes(graph: HeapGraph) -> list[NodeRecord]:
    """Nodes that refer to nothing."""
    return [node for node in graph.nodes() if graph.out_degree(node.id) == 0]


def unlinked_nodes(graph: HeapGraph) -> list[NodeRecord]:
    return [
        node
        for node in graph.nodes()
        if graph.in_degree(node.id) == 0 and graph.out_degree(node.id) == 0
    ]


def nodes_with_many_to(graph: HeapGraph, at_least: int) -> list[NodeRecord]:
    """Nodes with at least ``at_least`` outgoing edges."""
    return [node for node in graph.nodes() if graph.out_degree(node.id) >= at_least]


def nodes_with_many_from(graph: HeapGraph, at_least: int) -> list[NodeRecord]:
    """Nodes with at least ``at_least`` incoming edges."""
    return [node for node in graph.nodes() if graph.in_degree(node.id) >= at_least]


def nodes_with_size_above(graph: HeapGraph, above: int) -> list[NodeRecord]:
    return [node for node in graph.nodes() if node.size > above]


def graph_metadata(graph: HeapGraph) -> dict[str, Any]:
    """Summary counts for a heap graph.

    Returns:
        Dict with node/edge counts, total size and type histograms.
    """
    node_types = Counter(node.type for node in graph.nodes())
    edge_types = Counter(edge.type for edge in graph.edges())
    return {
        "node_count": graph.number_of_nodes(),
        "edge_count": graph.number_of_edges(),
        "total_size": graph.total_size,
        "node_types": dict(node_types.most_common()),
        "edge_types": dict(edge_types.most_common()),
        "root_count": len(root_nodes(graph)),
        "leaf_count": len(leaf_nodes(graph)),
    }
