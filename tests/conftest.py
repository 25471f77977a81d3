"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from heaptrace.analyzers import build_heap_graph
from heaptrace.config import QueryConfig
from heaptrace.logging import Verbosity
from heaptrace.models.graph import HeapGraph, HeapSnapshot
from tests.helpers import edge, node

GraphFactory = Callable[..., HeapGraph]


@pytest.fixture
def quiet_config() -> QueryConfig:
    return QueryConfig(verbosity=Verbosity.SILENT)


@pytest.fixture
def graph_factory(quiet_config: QueryConfig) -> GraphFactory:
    """Build a HeapGraph from raw node and edge dicts."""

    def factory(nodes: list[dict], edges: list[dict]) -> HeapGraph:
        snapshot = HeapSnapshot.model_validate({"nodes": nodes, "edges": edges})
        graph, _ = build_heap_graph(snapshot, quiet_config)
        return graph

    return factory


@pytest.fixture
def diamond_snapshot() -> dict:
    """1 -> 2 -> 4 and 1 -> 3 -> 4; sizes 10, 0, 5, 0."""
    return {
        "nodes": [node(1, 10), node(2, 0), node(3, 5), node(4, 0)],
        "edges": [edge(1, 2), edge(1, 3), edge(2, 4), edge(3, 4)],
    }


@pytest.fixture
def diamond_graph(graph_factory: GraphFactory, diamond_snapshot: dict) -> HeapGraph:
    return graph_factory(diamond_snapshot["nodes"], diamond_snapshot["edges"])


@pytest.fixture
def cyclic_graph(graph_factory: GraphFactory) -> HeapGraph:
    """1 -> 2 -> 3 -> 1, plus 3 -> 4 and an isolated node 5."""
    return graph_factory(
        [node(1, 8), node(2, 4), node(3, 2), node(4, 1), node(5, 16)],
        [edge(1, 2), edge(2, 3), edge(3, 1), edge(3, 4)],
    )


@pytest.fixture
def snapshot_file(tmp_path: Path, diamond_snapshot: dict) -> Path:
    """Diamond snapshot written to disk, with a few labelled nodes."""
    data = {
        "nodes": diamond_snapshot["nodes"]
        + [
            node(0x1000001, 32, type="Closure", repr="myOuterFunction", position={"line": 38}),
            node(0x1000002, 12, type="String", repr="myStringVariable"),
        ],
        "edges": diamond_snapshot["edges"]
        + [edge(0x1000001, 0x1000002, type="variable", name="mySharedVariable")],
    }
    filepath = tmp_path / "heap.json"
    filepath.write_text(json.dumps(data))
    return filepath


@pytest.fixture
def source_map_file(tmp_path: Path) -> Path:
    filepath = tmp_path / "index.js.map"
    filepath.write_text(json.dumps({
        "version": 3,
        "sources": ["index.js"],
        "names": ["myOuterFunction", "mySharedVariable", "myOuterFunction", "length"],
        "mappings": "AAAA",
    }))
    return filepath
