"""Heap graph construction.

Turns decoded snapshot records into a HeapGraph: one node per record,
one edge per distinct (from, to) pair, with adjacency in both directions.
"""

from heaptrace.config import QueryConfig, resolve_config
from heaptrace.errors import GraphIntegrityError
from heaptrace.logging import QueryLog, log_operation, progress_bar
from heaptrace.models.graph import (
    BuildReport,
    DuplicateEdgeConflict,
    EdgeRecord,
    HeapGraph,
    HeapSnapshot,
    NodeRecord,
)
from heaptrace.render import format_edge


def _conflicting_fields(kept: EdgeRecord, duplicate: EdgeRecord) -> list[str]:
    fields = []
    if kept.type != duplicate.type:
        fields.append("type")
    if kept.name != duplicate.name:
        fields.append("name")
    return fields


def build_heap_graph(
    snapshot: HeapSnapshot,
    config: QueryConfig | None = None,
) -> tuple[HeapGraph, BuildReport]:
    """Build a deduplicated, bidirectionally linked heap graph.

    The first copy of each (from, to) edge is kept. Later copies that
    disagree on type or name are reported as conflicts and logged as
    warnings; they never abort the build.

    Args:
        snapshot: Decoded snapshot records.
        config: Query configuration (verbosity only).

    Returns:
        Tuple of (graph, build report).

    Raises:
        GraphIntegrityError: If a node id repeats or an edge names a node
            that is not in the snapshot. No graph is returned in that case.
    """
    config = resolve_config(config)
    log = config.query_log()

    details = {"nodes": len(snapshot.nodes), "edges": len(snapshot.edges)}
    with log_operation("build_heap_graph", details, log=log):
        graph = HeapGraph()
        _add_nodes(graph, snapshot.nodes)
        conflicts, duplicates = _add_edges(graph, snapshot.edges, log)

    report = BuildReport(
        node_count=graph.number_of_nodes(),
        raw_edge_count=len(snapshot.edges),
        unique_edge_count=graph.number_of_edges(),
        duplicate_edge_count=duplicates,
        total_size=graph.total_size,
        conflicts=conflicts,
    )
    log.detail("Found %d nodes.", report.node_count)
    log.detail("   Total heap size: %d bytes.", report.total_size)
    log.detail(
        "   Found %d edges (%d of which are unique).",
        report.raw_edge_count,
        report.unique_edge_count,
    )
    return graph, report


def _add_nodes(graph: HeapGraph, records: list[NodeRecord]) -> None:
    for record in progress_bar(records, desc="Reading nodes", total=len(records), unit="nodes"):
        if record.id in graph:
            raise GraphIntegrityError(f"Node id {record.id} appears more than once")
        graph.add_node(record)


def _add_edges(
    graph: HeapGraph,
    records: list[EdgeRecord],
    log: QueryLog,
) -> tuple[list[DuplicateEdgeConflict], int]:
    # Validate every endpoint before linking so a bad edge leaves no
    # half-built graph behind.
    for record in records:
        for endpoint in record.key:
            if endpoint not in graph:
                raise GraphIntegrityError(
                    f"Edge {record.source}->{record.target} references unknown node id {endpoint}"
                )

    conflicts: list[DuplicateEdgeConflict] = []
    duplicates = 0
    for record in progress_bar(records, desc="Linking edges", total=len(records), unit="edges"):
        if not graph.has_edge(record.source, record.target):
            graph.add_edge(record)
            continue

        duplicates += 1
        kept = graph.edge(record.source, record.target)
        log.trace("   Found duplicate edges:")
        log.trace("      %s", format_edge(kept))
        log.trace("      %s", format_edge(record))

        fields = _conflicting_fields(kept, record)
        if fields:
            conflicts.append(DuplicateEdgeConflict(kept=kept, ignored=record, fields=fields))
            for field in fields:
                log.warning(
                    "Edges with different %ss are connecting nodes %d and %d (%r kept, %r ignored)",
                    field,
                    record.source,
                    record.target,
                    getattr(kept, field),
                    getattr(record, field),
                )
    return conflicts, duplicates
