"""Analyzers for heap snapshot graphs."""

from heaptrace.analyzers.builder import build_heap_graph
from heaptrace.analyzers.common import find_common, find_common_from, find_common_to
from heaptrace.analyzers.filters import (
    edges_with_name,
    edges_with_name_in,
    graph_metadata,
    is_user_node,
    leaf_nodes,
    nodes_with_many_from,
    nodes_with_many_to,
    nodes_with_position,
    nodes_with_repr,
    nodes_with_repr_in,
    nodes_with_size_above,
    nodes_with_type,
    root_nodes,
    unlinked_nodes,
)
from heaptrace.analyzers.paths import find_paths
from heaptrace.analyzers.reachability import trace, trace_down, trace_up
from heaptrace.analyzers.retained import compute_retained

__all__ = [
    "build_heap_graph",
    "compute_retained",
    "edges_with_name",
    "edges_with_name_in",
    "find_common",
    "find_common_from",
    "find_common_to",
    "find_paths",
    "graph_metadata",
    "is_user_node",
    "leaf_nodes",
    "nodes_with_many_from",
    "nodes_with_many_to",
    "nodes_with_position",
    "nodes_with_repr",
    "nodes_with_repr_in",
    "nodes_with_size_above",
    "nodes_with_type",
    "root_nodes",
    "trace",
    "trace_down",
    "trace_up",
    "unlinked_nodes",
]
