"""Heap snapshot data models.

Pydantic models for the decoded snapshot records and query results, and
``HeapGraph``, the networkx-backed graph every query reads.
"""

from collections.abc import Iterator
from enum import Enum
from typing import Any, Literal

import networkx as nx
from pydantic import BaseModel, Field, computed_field, field_validator

from heaptrace.errors import NodeNotFoundError


class NodeRecord(BaseModel):
    """An allocated object in the heap snapshot."""

    id: int = Field(ge=0, description="Unique node id within the snapshot")
    type: str = Field(description="Node tag (e.g. 'Object', 'Closure', 'Code', 'String')")
    size: int = Field(ge=0, description="Own size in bytes")
    repr: str | None = Field(default=None, description="Display label, if any")
    position: Any | None = Field(default=None, description="Source location, if any")


class EdgeRecord(BaseModel):
    """A reference from one node to another."""

    source: int = Field(alias="from", description="Id of the referencing node")
    target: int = Field(alias="to", description="Id of the referenced node")
    type: str = Field(description="Edge tag (e.g. 'property', 'variable', 'internal')")
    name: str | None = Field(default=None, description="Property or variable name")

    model_config = {"populate_by_name": True}

    @property
    def key(self) -> tuple[int, int]:
        return (self.source, self.target)


def _record_values(value: Any) -> Any:
    # Snapshots may key records by arbitrary strings instead of using a list.
    if isinstance(value, dict):
        return list(value.values())
    return value


class HeapSnapshot(BaseModel):
    """Decoded heap-profiler dump."""

    nodes: list[NodeRecord] = Field(description="Node records")
    edges: list[EdgeRecord] = Field(description="Edge records")

    @field_validator("nodes", "edges", mode="before")
    @classmethod
    def _coerce_records(cls, value: Any) -> Any:
        return _record_values(value)


class Direction(str, Enum):
    """Traversal direction over references."""

    UP = "up"  # through incoming ("from") edges, towards referrers
    DOWN = "down"  # through outgoing ("to") edges, towards referents


class HeapGraph:
    """Deduplicated heap graph with ordered adjacency in both directions.

    Node records live on ``digraph`` nodes under ``record``; edge records on
    ``digraph`` edges under ``record``. Adjacency preserves first-seen edge
    order. The graph is read-only once built: queries keep their traversal
    state in their own containers.
    """

    def __init__(self) -> None:
        self._graph = nx.DiGraph()
        self.total_size = 0

    @property
    def digraph(self) -> nx.DiGraph:
        return self._graph

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def add_node(self, record: NodeRecord) -> None:
        self._graph.add_node(record.id, record=record)
        self.total_size += record.size

    def has_edge(self, source: int, target: int) -> bool:
        return self._graph.has_edge(source, target)

    def add_edge(self, record: EdgeRecord) -> None:
        self._graph.add_edge(record.source, record.target, record=record)

    def node(self, node_id: int) -> NodeRecord:
        """Return the record for ``node_id``.

        Raises:
            NodeNotFoundError: If the id is not in the graph.
        """
        try:
            return self._graph.nodes[node_id]["record"]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def edge(self, source: int, target: int) -> EdgeRecord:
        return self._graph.edges[source, target]["record"]

    def require(self, node_id: int) -> None:
        if node_id not in self._graph:
            raise NodeNotFoundError(node_id)

    def nodes(self) -> Iterator[NodeRecord]:
        for _, record in self._graph.nodes(data="record"):
            yield record

    def edges(self) -> Iterator[EdgeRecord]:
        for _, _, record in self._graph.edges(data="record"):
            yield record

    def outgoing(self, node_id: int) -> list[EdgeRecord]:
        """Edges from ``node_id`` (its "to" list), in first-seen order."""
        return [attrs["record"] for attrs in self._graph.succ[node_id].values()]

    def incoming(self, node_id: int) -> list[EdgeRecord]:
        """Edges into ``node_id`` (its "from" list), in first-seen order."""
        return [attrs["record"] for attrs in self._graph.pred[node_id].values()]

    def out_degree(self, node_id: int) -> int:
        return len(self._graph.succ[node_id])

    def in_degree(self, node_id: int) -> int:
        return len(self._graph.pred[node_id])

    def number_of_nodes(self) -> int:
        return self._graph.number_of_nodes()

    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()


# Build results


class DuplicateEdgeConflict(BaseModel):
    """Two copies of the same (from, to) edge that disagree on attributes."""

    kept: EdgeRecord = Field(description="First-seen copy, kept in the graph")
    ignored: EdgeRecord = Field(description="Later copy, dropped")
    fields: list[Literal["type", "name"]] = Field(
        description="Attributes whose values differ"
    )


class BuildReport(BaseModel):
    """Statistics gathered while building a HeapGraph."""

    node_count: int = Field(description="Number of nodes")
    raw_edge_count: int = Field(description="Edge records in the snapshot")
    unique_edge_count: int = Field(description="Edges kept after deduplication")
    duplicate_edge_count: int = Field(default=0, description="Edge records dropped as duplicates")
    total_size: int = Field(description="Sum of node sizes in bytes")
    conflicts: list[DuplicateEdgeConflict] = Field(
        default_factory=list, description="Duplicates whose type or name differed"
    )


# Query results


class Trace(BaseModel):
    """Nodes reachable from a start node, in depth-first discovery order."""

    start: int = Field(description="Start node id")
    direction: Direction = Field(description="Edges followed")
    node_ids: list[int] = Field(default_factory=list, description="Visited ids in discovery order")


class RetainedSet(BaseModel):
    """Approximate set of nodes kept alive only through a root."""

    root: int = Field(description="Root node id")
    node_ids: list[int] = Field(default_factory=list, description="Retained ids in BFS order")
    depths: dict[int, int] = Field(default_factory=dict, description="Depth of each retained node")
    retained_count: int = Field(default=0, description="Number of retained nodes")
    nonzero_size_count: int = Field(default=0, description="Retained nodes with size > 0")
    retained_size: int = Field(default=0, description="Sum of retained node sizes in bytes")
    max_depth: int = Field(default=0, description="Deepest retained node")
    max_queue_length: int = Field(default=0, description="Largest work queue observed")


class PathStep(BaseModel):
    """One hop of a path, with the real direction of the edge crossed."""

    edge: EdgeRecord = Field(description="The edge crossed")
    along: bool = Field(description="True if walked from edge source to edge target")


class HeapPath(BaseModel):
    """A path from a start node to a target node."""

    node_ids: list[int] = Field(description="Node ids from start to target")
    steps: list[PathStep] = Field(default_factory=list, description="Edges crossed")

    def __len__(self) -> int:
        return len(self.node_ids)


class PathSearchResult(BaseModel):
    """Outcome of a bounded path search."""

    start: int = Field(description="Start node id")
    target: int = Field(description="Target node id")
    max_length: int = Field(description="Longest path considered, in nodes")
    paths: list[HeapPath] = Field(default_factory=list, description="Paths found")
    paths_searched: int = Field(default=0, description="Partial paths expanded")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def paths_found(self) -> int:
        return len(self.paths)


class CommonNodes(BaseModel):
    """Nodes reachable from both of two nodes."""

    first: int = Field(description="First node id")
    second: int = Field(description="Second node id")
    direction: Direction = Field(description="Edges followed")
    node_ids: list[int] = Field(default_factory=list, description="Common ids in first-trace order")
