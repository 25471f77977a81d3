"""Text rendering of heap graph entities and query results."""

import json

from heaptrace.models.graph import (
    BuildReport,
    CommonNodes,
    EdgeRecord,
    HeapGraph,
    HeapPath,
    NodeRecord,
    PathSearchResult,
    RetainedSet,
    Trace,
)


def format_node(
    graph: HeapGraph,
    node: NodeRecord,
    depth: int | None = None,
) -> str:
    """One-line description of a node, including its edge counts."""
    text = (
        f"node id={node.id} type={node.type} size={node.size} "
        f"from={graph.in_degree(node.id)} to={graph.out_degree(node.id)}"
    )
    if node.repr:
        text += f' repr="{node.repr}"'
    if node.position:
        text += f" position={json.dumps(node.position, separators=(',', ':'))}"
    if depth is not None:
        text += f" depth={depth}"
    return text


def format_edge(edge: EdgeRecord) -> str:
    text = f"edge type={edge.type} from={edge.source} to={edge.target}"
    if edge.name:
        text += f" name={edge.name}"
    return text


def format_path(path: HeapPath | list[int]) -> str:
    node_ids = path.node_ids if isinstance(path, HeapPath) else path
    return "path = " + " ".join(str(node_id) for node_id in node_ids)


def format_path_steps(path: HeapPath) -> list[str]:
    """Path as arrows showing the real direction of each edge."""
    if not path.steps:
        return [str(path.node_ids[0])] if path.node_ids else []
    lines = []
    for step in path.steps:
        edge = step.edge
        label = f"{edge.type}" + (f":{edge.name}" if edge.name else "")
        arrow = f"--{label}-->" if step.along else f"<--{label}--"
        left, right = (edge.source, edge.target) if step.along else (edge.target, edge.source)
        lines.append(f"{left} {arrow} {right}")
    return lines


def render_build_report(report: BuildReport) -> list[str]:
    lines = [
        f"Found {report.node_count} nodes.",
        f"   Total heap size: {report.total_size} bytes.",
        f"Found {report.raw_edge_count} edges ({report.unique_edge_count} of which are unique).",
    ]
    if report.conflicts:
        lines.append(f"   {len(report.conflicts)} duplicate edge(s) with conflicting attributes.")
    return lines


def render_trace(graph: HeapGraph, trace: Trace) -> list[str]:
    label = "upwards (ie, through 'from' edges)" if trace.direction == "up" else (
        "downwards (ie, through 'to' edges)"
    )
    lines = [f"Tracing node {trace.start} {label}:"]
    lines.extend(f"   {format_node(graph, graph.node(n))}" for n in trace.node_ids)
    lines.append(f"   ({len(trace.node_ids)} node(s) reached.)")
    return lines


def render_retained(graph: HeapGraph, result: RetainedSet, show_nodes: bool = True) -> list[str]:
    lines = [f"Tracing node {result.root} down through retained children:"]
    if show_nodes:
        lines.extend(
            f"   {format_node(graph, graph.node(n), depth=result.depths.get(n))}"
            for n in result.node_ids
        )
    lines.extend([
        f"   Nodes retained: {result.retained_count}",
        f"   Nodes with non-zero size retained: {result.nonzero_size_count}",
        f"   Memory retained: {result.retained_size} bytes",
        f"   Maximum node depth: {result.max_depth}",
        f"   Maximum processing queue length: {result.max_queue_length}",
    ])
    return lines


def render_paths(result: PathSearchResult, show_steps: bool = False) -> list[str]:
    lines = [f"Finding paths between {result.start} and {result.target}:"]
    for path in result.paths:
        lines.append(f"   Path found: {format_path(path)}")
        if show_steps:
            lines.extend(f"      {step}" for step in format_path_steps(path))
    lines.extend([
        f"   {result.paths_searched} path(s) searched.",
        f"   {result.paths_found} path(s) found between specified nodes.",
    ])
    return lines


def render_common(graph: HeapGraph, result: CommonNodes) -> list[str]:
    via = "'from'" if result.direction == "up" else "'to'"
    lines = [
        f"Finding nodes reachable via {via} edges of both {result.first} and {result.second}:"
    ]
    lines.extend(f"   {format_node(graph, graph.node(n))}" for n in result.node_ids)
    lines.append(f"   ({len(result.node_ids)} node(s) found.)")
    return lines
