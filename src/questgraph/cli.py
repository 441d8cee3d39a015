"""questgraph CLI - typer application entry point."""

from __future__ import annotations

import atexit
from itertools import islice
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

from questgraph.config import GraphConfig, GraphConfigError, load_graph_config
from questgraph.document import GraphDocument, GraphDocumentError, load_graph_document
from questgraph.graph.paths import (
    compress_by_shared_suffixes,
    enumerate_paths,
    node_path_to_edges,
)
from questgraph.graph.search import breadth_first_search, depth_first_search
from questgraph.graph.sort import has_cycle, topological_sort
from questgraph.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Sequence

    from questgraph.graph.edge import Edge
    from questgraph.graph.graph import DirectedGraph

app = typer.Typer(
    name="qg",
    help="questgraph: inspect branching story graphs.",
    no_args_is_help=True,
)
console = Console()

DEFAULT_CONFIG_DIR = Path()

# Global state for flags set by the callback and read by commands
_config_dir: Path = DEFAULT_CONFIG_DIR


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log: Annotated[
        Path | None,
        typer.Option(
            "--log",
            help="Append all log events to this file as JSON lines.",
        ),
    ] = None,
    config_dir: Annotated[
        Path,
        typer.Option(
            "--config-dir",
            "-c",
            help="Directory containing questgraph.yaml (default: current directory).",
            envvar="QG_CONFIG_DIR",
        ),
    ] = DEFAULT_CONFIG_DIR,
) -> None:
    """questgraph: inspect branching story graphs."""
    global _config_dir
    _config_dir = config_dir

    configure_logging(verbosity=verbose, log_file=log)
    if log is not None:
        atexit.register(close_file_logging)


def _load_config() -> GraphConfig:
    try:
        return load_graph_config(_config_dir)
    except GraphConfigError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1) from e


def _load_document(path: Path) -> GraphDocument:
    try:
        return load_graph_document(path)
    except GraphDocumentError as e:
        console.print(f"[red]Error:[/red] {e.reason}", highlight=False)
        raise typer.Exit(1) from e


def _resolve_root(document: GraphDocument, graph: DirectedGraph, root: str | None) -> str:
    """Pick the start node: explicit flag, then document root, then sole graph root."""
    if root is not None:
        if not graph.contains_node(root):
            console.print(f"[red]Error:[/red] Root node '{root}' not found", highlight=False)
            raise typer.Exit(1)
        return root
    if document.root is not None:
        return document.root

    roots = graph.roots()
    if len(roots) == 1:
        return str(roots[0])
    console.print(
        f"[red]Error:[/red] Cannot infer root: graph has {len(roots)} root node(s). "
        "Use --root or set 'root' in the document.",
        highlight=False,
    )
    raise typer.Exit(1)


def _terminal_predicate(document: GraphDocument) -> Callable[[Hashable], bool] | None:
    if not document.terminals:
        return None
    terminals = frozenset(document.terminals)
    return lambda node: node in terminals


def _format_node_path(path: Sequence[Hashable]) -> str:
    return " -> ".join(str(node) for node in path)


def _format_edge_path(edges: Sequence[Edge]) -> str:
    if not edges:
        return "(no edges)"
    parts = [str(edges[0].from_node)]
    for edge in edges:
        label = f" --[{edge.label}]--> " if edge.label is not None else " --> "
        parts.append(f"{label}{edge.to_node}")
    return "".join(parts)


@app.command()
def version() -> None:
    """Show version information."""
    from questgraph import __version__

    console.print(f"questgraph v{__version__}")


@app.command()
def sort(
    graph_file: Annotated[Path, typer.Argument(help="Graph document (.yaml, .yml or .json).")],
) -> None:
    """Print a topological order of the graph, or report a cycle."""
    log = get_logger(__name__)
    document = _load_document(graph_file)
    graph = document.to_graph()

    result = topological_sort(graph)
    log.info("sort_complete", nodes=len(graph), acyclic=result.is_acyclic)

    if not result.is_acyclic:
        console.print(
            f"[red]Cycle detected:[/red] {len(result.unsorted_nodes)} node(s) could not be ordered",
            highlight=False,
        )
        for node in result.unsorted_nodes:
            console.print(f"  - {node}", markup=False, highlight=False)
        raise typer.Exit(1)

    table = Table(title=f"Topological order ({len(result.sorted_nodes)} nodes)")
    table.add_column("#", justify="right")
    table.add_column("Node")
    for position, node in enumerate(result.sorted_nodes, start=1):
        table.add_row(str(position), str(node))
    console.print(table)


@app.command()
def paths(
    graph_file: Annotated[Path, typer.Argument(help="Graph document (.yaml, .yml or .json).")],
    root: Annotated[
        str | None,
        typer.Option("--root", "-r", help="Start node (default: document root or sole root)."),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", min=0, help="Maximum edges per path (env: QG_MAX_DEPTH)."),
    ] = None,
    max_paths: Annotated[
        int | None,
        typer.Option("--max-paths", min=0, help="Maximum paths to list (env: QG_MAX_PATHS)."),
    ] = None,
    compress: Annotated[
        bool | None,
        typer.Option(
            "--compress/--no-compress",
            help="Drop tails already covered by an earlier path.",
        ),
    ] = None,
    edges: Annotated[
        bool,
        typer.Option("--edges", help="Show paths as labelled edges instead of nodes."),
    ] = False,
) -> None:
    """List root-to-terminal paths through the graph."""
    log = get_logger(__name__)
    config = _load_config()
    document = _load_document(graph_file)
    graph = document.to_graph()

    start = _resolve_root(document, graph, root)
    depth = max_depth if max_depth is not None else config.max_depth
    limit = max_paths if max_paths is not None else config.max_paths
    use_compression = compress if compress is not None else config.compress

    # Without a depth bound, enumeration on a cycle never terminates
    if depth is None and has_cycle(graph):
        console.print(
            "[red]Error:[/red] graph has a cycle; pass --max-depth "
            "(or set QG_MAX_DEPTH or paths.max_depth).",
            highlight=False,
        )
        raise typer.Exit(1)

    enumerated = enumerate_paths(
        graph, start, is_terminal=_terminal_predicate(document), max_depth=depth
    )
    node_paths = list(islice(enumerated, limit) if limit is not None else enumerated)
    truncated = limit is not None and next(enumerated, None) is not None
    enumerated.close()

    if use_compression:
        node_paths = compress_by_shared_suffixes(node_paths)

    log.info(
        "paths_listed",
        root=start,
        paths=len(node_paths),
        compressed=use_compression,
        truncated=truncated,
    )

    for node_path in node_paths:
        if edges:
            line = _format_edge_path(node_path_to_edges(graph, node_path))
        else:
            line = _format_node_path(node_path)
        console.print(line, markup=False, highlight=False, soft_wrap=True)

    summary = f"{len(node_paths)} path(s)"
    if use_compression:
        summary += " after compression"
    console.print(f"[dim]{summary}[/dim]", highlight=False)
    if truncated:
        console.print(
            f"[yellow]Stopped after {limit} paths.[/yellow] Raise --max-paths to see more.",
            highlight=False,
        )


@app.command()
def traverse(
    graph_file: Annotated[Path, typer.Argument(help="Graph document (.yaml, .yml or .json).")],
    start: Annotated[list[str], typer.Option("--start", "-s", help="Start node (repeatable).")],
    depth_first: Annotated[
        bool,
        typer.Option("--depth-first", help="Use depth-first instead of breadth-first order."),
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option("--limit", min=1, help="Stop after visiting this many nodes."),
    ] = None,
) -> None:
    """Print nodes reachable from the start nodes in traversal order."""
    document = _load_document(graph_file)
    graph = document.to_graph()
    order: list[Hashable] = []

    def visit(node: Hashable) -> bool:
        order.append(node)
        return limit is None or len(order) < limit

    search = depth_first_search if depth_first else breadth_first_search
    search(graph, start, visit)

    for node in order:
        marker = "" if graph.contains_node(node) else "  (not in graph)"
        console.print(f"{node}{marker}", markup=False, highlight=False)
