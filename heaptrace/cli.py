"""CLI interface for heaptrace.

Loads a heap snapshot, builds the graph once and runs retention queries
against it. Results go to stdout; progress and per-node detail go to
stderr through the package logger.
"""

import json
import sys
from collections.abc import Callable

import click
from dotenv import load_dotenv

# Load .env before reading HEAPTRACE_* settings
load_dotenv()

from heaptrace import __version__  # noqa: E402
from heaptrace.config import QueryConfig  # noqa: E402
from heaptrace.errors import (  # noqa: E402
    GraphIntegrityError,
    InputError,
    NodeNotFoundError,
    ResourceExhaustedError,
)
from heaptrace.logging import Verbosity  # noqa: E402
from heaptrace.models.graph import EdgeRecord, HeapGraph, NodeRecord  # noqa: E402

DEFAULT_LIST_TYPES = ("Closure", "Code", "Sourcemap")
MANY_EDGES = 7
LARGE_NODE_SIZE = 23


def _config(ctx: click.Context) -> QueryConfig:
    return ctx.obj["config"]


def _load_graph(snapshot_path: str, config: QueryConfig) -> HeapGraph:
    """Load and build the graph, exiting non-zero on failure."""
    from heaptrace.analyzers import build_heap_graph
    from heaptrace.loader import load_snapshot
    from heaptrace.render import render_build_report

    try:
        snapshot = load_snapshot(snapshot_path)
        graph, report = build_heap_graph(snapshot, config)
    except (InputError, GraphIntegrityError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for line in render_build_report(report):
        click.echo(line)
    click.echo()
    return graph


def _run_query(label: str, query: Callable[[], list[str]]) -> bool:
    """Run one query, echoing its output; report recoverable failures."""
    try:
        lines = query()
    except NodeNotFoundError as e:
        click.echo(f"{label}: {e}", err=True)
        return False
    except ResourceExhaustedError as e:
        click.echo(f"{label} aborted: {e}", err=True)
        return False
    for line in lines:
        click.echo(line)
    click.echo()
    return True


@click.group()
@click.version_option(version=__version__, prog_name="heaptrace")
@click.option("-v", "--verbose", count=True, help="More per-node detail (repeat for per-edge detail)")
@click.option("-q", "--quiet", is_flag=True, help="Log nothing; print results only")
@click.option(
    "--max-queue-length",
    type=click.IntRange(min=1),
    default=None,
    help="Abort retained-set searches whose queue grows past this (default: 10000)",
)
@click.option(
    "--max-path-length",
    type=click.IntRange(min=1),
    default=None,
    help="Longest path explored by path search, in nodes (default: 10)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: bool,
    max_queue_length: int | None,
    max_path_length: int | None,
) -> None:
    """heaptrace - find what keeps memory alive in a heap snapshot."""
    verbosity = None
    if quiet:
        verbosity = Verbosity.SILENT
    elif verbose:
        verbosity = Verbosity(min(Verbosity.NORMAL + verbose, Verbosity.DEBUG))

    try:
        config = QueryConfig.from_env(
            verbosity=verbosity,
            max_queue_length=max_queue_length,
            max_path_length=max_path_length,
        )
    except ValueError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from e

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


snapshot_argument = click.argument(
    "snapshot_path", type=click.Path(exists=True, dir_okay=False, resolve_path=True)
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")


@cli.command()
@snapshot_argument
@click.pass_context
def summary(ctx: click.Context, snapshot_path: str) -> None:
    """Summarize a snapshot: counts, sizes and type histograms.

    SNAPSHOT_PATH: Heap snapshot produced by the memory profiler.
    """
    from heaptrace.analyzers import graph_metadata

    graph = _load_graph(snapshot_path, _config(ctx))
    click.echo(json.dumps(graph_metadata(graph), indent=2))


@cli.command()
@snapshot_argument
@click.option("--direction", type=click.Choice(["up", "down"]), default="up", help="Edges to follow")
@click.argument("node_id", type=int)
@json_option
@click.pass_context
def trace(ctx: click.Context, snapshot_path: str, direction: str, node_id: int, as_json: bool) -> None:
    """Trace ancestors (up) or descendants (down) of a node.

    SNAPSHOT_PATH: Heap snapshot produced by the memory profiler.
    NODE_ID: Node to start from.
    """
    from heaptrace.analyzers import trace as run_trace
    from heaptrace.render import render_trace

    config = _config(ctx)
    graph = _load_graph(snapshot_path, config)

    def query() -> list[str]:
        result = run_trace(graph, node_id, direction, config)
        return [result.model_dump_json(indent=2)] if as_json else render_trace(graph, result)

    if not _run_query("Trace", query):
        sys.exit(1)


@cli.command()
@snapshot_argument
@click.argument("node_id", type=int)
@json_option
@click.pass_context
def retained(ctx: click.Context, snapshot_path: str, node_id: int, as_json: bool) -> None:
    """Estimate the memory retained by a node.

    SNAPSHOT_PATH: Heap snapshot produced by the memory profiler.
    NODE_ID: Root of the retained set.
    """
    from heaptrace.analyzers import compute_retained
    from heaptrace.render import render_retained

    config = _config(ctx)
    graph = _load_graph(snapshot_path, config)

    def query() -> list[str]:
        result = compute_retained(graph, node_id, config)
        if as_json:
            return [result.model_dump_json(indent=2)]
        return render_retained(graph, result)

    if not _run_query("Retained set", query):
        sys.exit(1)


@cli.command()
@snapshot_argument
@click.argument("start_id", type=int)
@click.argument("target_id", type=int)
@click.option("--max-length", type=click.IntRange(min=1), default=None, help="Longest path, in nodes")
@json_option
@click.pass_context
def paths(
    ctx: click.Context,
    snapshot_path: str,
    start_id: int,
    target_id: int,
    max_length: int | None,
    as_json: bool,
) -> None:
    """Find paths between two nodes, following edges either way.

    SNAPSHOT_PATH: Heap snapshot produced by the memory profiler.
    """
    from heaptrace.analyzers import find_paths
    from heaptrace.render import render_paths

    config = _config(ctx)
    graph = _load_graph(snapshot_path, config)

    def query() -> list[str]:
        result = find_paths(graph, start_id, target_id, max_length=max_length, config=config)
        if as_json:
            return [result.model_dump_json(indent=2)]
        return render_paths(result, show_steps=config.verbosity >= Verbosity.VERBOSE)

    if not _run_query("Path search", query):
        sys.exit(1)


@cli.command()
@snapshot_argument
@click.argument("first_id", type=int)
@click.argument("second_id", type=int)
@click.option("--direction", type=click.Choice(["up", "down"]), default="up", help="Edges to follow")
@json_option
@click.pass_context
def common(
    ctx: click.Context,
    snapshot_path: str,
    first_id: int,
    second_id: int,
    direction: str,
    as_json: bool,
) -> None:
    """Find ancestors (up) or descendants (down) shared by two nodes.

    SNAPSHOT_PATH: Heap snapshot produced by the memory profiler.
    """
    from heaptrace.analyzers import find_common
    from heaptrace.render import render_common

    config = _config(ctx)
    graph = _load_graph(snapshot_path, config)

    def query() -> list[str]:
        result = find_common(graph, first_id, second_id, direction, config)
        if as_json:
            return [result.model_dump_json(indent=2)]
        return render_common(graph, result)

    if not _run_query("Common nodes", query):
        sys.exit(1)


def _node_listing(
    graph: HeapGraph,
    title: str,
    nodes: list[NodeRecord],
    config: QueryConfig,
    user_only: bool = True,
) -> list[str]:
    from heaptrace.analyzers import is_user_node
    from heaptrace.render import format_node

    show_all = not user_only or config.verbosity >= Verbosity.VERBOSE
    lines = [f"{title}:"]
    lines.extend(
        f"   {format_node(graph, node)}"
        for node in nodes
        if show_all or is_user_node(node, config.user_node_threshold)
    )
    lines.append(f"   ({len(nodes)} nodes found.)")
    return lines


def _edge_listing(title: str, edges: list[EdgeRecord], show: bool) -> list[str]:
    from heaptrace.render import format_edge

    lines = [f"{title}:"]
    if show:
        lines.extend(f"   {format_edge(edge)}" for edge in edges)
    lines.append(f"   ({len(edges)} edges found.)")
    return lines


@cli.command()
@snapshot_argument
@click.option(
    "--symbols",
    "symbols_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Source map whose 'names' are looked up among node reprs and edge names",
)
@click.option("--type", "node_types", multiple=True, help="List nodes of this type (repeatable)")
@click.option("--trace-up", multiple=True, type=int, help="Trace ancestors of a node")
@click.option("--trace-down", multiple=True, type=int, help="Trace descendants of a node")
@click.option("--retained", "retained_ids", multiple=True, type=int, help="Retained set of a node")
@click.option("--common-from", multiple=True, type=(int, int), help="Common ancestors of two nodes")
@click.option("--common-to", multiple=True, type=(int, int), help="Common descendants of two nodes")
@click.option("--path", "path_pairs", multiple=True, type=(int, int), help="Paths between two nodes")
@click.pass_context
def explore(
    ctx: click.Context,
    snapshot_path: str,
    symbols_path: str | None,
    node_types: tuple[str, ...],
    trace_up: tuple[int, ...],
    trace_down: tuple[int, ...],
    retained_ids: tuple[int, ...],
    common_from: tuple[tuple[int, int], ...],
    common_to: tuple[tuple[int, int], ...],
    path_pairs: tuple[tuple[int, int], ...],
) -> None:
    """Run the standard listings, then every requested query.

    SNAPSHOT_PATH: Heap snapshot produced by the memory profiler.

    A query naming an unknown node, or one that exceeds its bounds, is
    reported and skipped; the remaining queries still run.
    """
    from heaptrace import analyzers as an
    from heaptrace.loader import load_symbol_names
    from heaptrace.render import (
        render_common,
        render_paths,
        render_retained,
        render_trace,
    )

    config = _config(ctx)
    symbols: list[str] = []
    if symbols_path:
        try:
            symbols = load_symbol_names(symbols_path)
        except InputError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    graph = _load_graph(snapshot_path, config)
    verbose = config.verbosity >= Verbosity.VERBOSE

    listings = [
        _node_listing(graph, "Node(s) with repr", an.nodes_with_repr(graph), config),
    ]
    if symbols:
        listings.append(
            _node_listing(graph, "Node(s) with repr in symbols", an.nodes_with_repr_in(graph, symbols), config)
        )
    listings.append(
        _node_listing(graph, "Node(s) with position", an.nodes_with_position(graph), config, user_only=False)
    )
    for node_type in node_types or DEFAULT_LIST_TYPES:
        listings.append(
            _node_listing(
                graph,
                f'Node(s) with type=="{node_type}"',
                an.nodes_with_type(graph, node_type),
                config,
                user_only=False,
            )
        )
    listings.append(_edge_listing("Edges with name", an.edges_with_name(graph), show=verbose))
    if symbols:
        listings.append(
            _edge_listing("Edges with name in symbols", an.edges_with_name_in(graph, symbols), show=True)
        )
    listings.extend([
        _node_listing(graph, "Root node(s)", an.root_nodes(graph), config),
        _node_listing(graph, "Leaf node(s)", an.leaf_nodes(graph), config),
        _node_listing(graph, "Unlinked node(s)", an.unlinked_nodes(graph), config),
        _node_listing(
            graph,
            f"Node(s) with at least {MANY_EDGES} edges to other nodes",
            an.nodes_with_many_to(graph, MANY_EDGES),
            config,
        ),
        _node_listing(
            graph,
            f"Node(s) with at least {MANY_EDGES} edges from other nodes",
            an.nodes_with_many_from(graph, MANY_EDGES),
            config,
        ),
        _node_listing(
            graph,
            f"Node(s) with own size above {LARGE_NODE_SIZE} bytes",
            an.nodes_with_size_above(graph, LARGE_NODE_SIZE),
            config,
            user_only=False,
        ),
    ])
    for lines in listings:
        for line in lines:
            click.echo(line)
        click.echo()

    for node_id in trace_up:
        _run_query("Trace up", lambda n=node_id: render_trace(graph, an.trace_up(graph, n, config)))
    for node_id in trace_down:
        _run_query("Trace down", lambda n=node_id: render_trace(graph, an.trace_down(graph, n, config)))
    for node_id in retained_ids:
        _run_query(
            "Retained set",
            lambda n=node_id: render_retained(graph, an.compute_retained(graph, n, config), show_nodes=verbose),
        )
    for first_id, second_id in common_from:
        _run_query(
            "Common ancestors",
            lambda a=first_id, b=second_id: render_common(graph, an.find_common_from(graph, a, b, config)),
        )
    for first_id, second_id in common_to:
        _run_query(
            "Common descendants",
            lambda a=first_id, b=second_id: render_common(graph, an.find_common_to(graph, a, b, config)),
        )
    for start_id, target_id in path_pairs:
        _run_query(
            "Path search",
            lambda a=start_id, b=target_id: render_paths(
                an.find_paths(graph, a, b, config=config), show_steps=verbose
            ),
        )

    click.echo("Finished.")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
