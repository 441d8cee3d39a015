"""Path enumeration and shared-suffix compression.

Algorithm summary:
- enumerate_paths: iterative DFS yielding every start-to-terminal node path
- enumerate_all_paths: simple paths from a start node to one target node
- compress_by_shared_suffixes: drop the redundant tail of paths that rejoin
  an already-seen path, using a trie built over reversed paths
- compress_graph_paths_to_edge_paths: enumerate + compress, then map each
  node path back onto graph edges

Branching stories funnel many choices into the same downstream scenes, so the
full path set repeats long tails. Compression keeps each path only up to the
node where it joins a tail that an earlier path already covers; the tail can
be recovered by following the earlier, longer path from the join node.

Enumeration never recurses. Each stack frame holds a lazily advanced iterator
over a node's successors, so memory grows with path depth rather than with
graph size, and deep graphs cannot exhaust the interpreter stack.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from questgraph.graph.errors import PathReconstructionError
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Hashable, Iterable, Iterator, Sequence

    from questgraph.graph.edge import Edge
    from questgraph.graph.graph import DirectedGraph

log = get_logger(__name__)

# Sentinel returned by next() when a successor iterator is exhausted
_EXHAUSTED = object()

# Trie node not yet claimed by any path
_UNOWNED = -1

# A shared tail must span at least this many nodes before a path is truncated.
# A single shared node (typically the common ending) is not worth a cut.
_MIN_SHARED_SUFFIX = 2


def _default_terminal(graph: DirectedGraph) -> Callable[[Hashable], bool]:
    def is_terminal(node: Hashable) -> bool:
        return graph.out_degree(node) == 0

    return is_terminal


def enumerate_paths(
    graph: DirectedGraph,
    start: Hashable,
    is_terminal: Callable[[Hashable], bool] | None = None,
    max_depth: int | None = None,
) -> Generator[tuple[Hashable, ...], None, None]:
    """Lazily enumerate node paths from *start* to terminal nodes, depth-first.

    A path ends at the first node that satisfies *is_terminal* or sits at
    *max_depth* edges from *start*. A non-terminal node with no successors is
    a dead end and produces no path. If *start* itself is terminal the only
    path is ``(start,)``.

    There is no cycle guard. On a graph with a cycle reachable from *start*,
    callers must bound the walk with *max_depth* or a terminal predicate that
    is eventually met, otherwise enumeration does not terminate.

    Args:
        graph: Graph to explore.
        start: First node of every path.
        is_terminal: Stopping predicate. Defaults to "has no outgoing edges".
        max_depth: Maximum number of edges per path. None means unbounded.

    Yields:
        Each path as a tuple of nodes. Stop iterating to cancel.

    Raises:
        ValueError: If *max_depth* is negative.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if is_terminal is None:
        is_terminal = _default_terminal(graph)

    def stops_at(node: Hashable, depth: int) -> bool:
        return (max_depth is not None and depth >= max_depth) or is_terminal(node)

    if stops_at(start, 0):
        yield (start,)
        return

    path: list[Hashable] = [start]
    stack: list[Iterator[Hashable]] = [graph.get_successors(start)]

    while stack:
        child = next(stack[-1], _EXHAUSTED)
        if child is _EXHAUSTED:
            stack.pop()
            path.pop()
            continue

        path.append(child)
        if stops_at(child, len(path) - 1):
            yield tuple(path)
            path.pop()
            continue

        stack.append(graph.get_successors(child))


def enumerate_all_paths(
    graph: DirectedGraph,
    start: Hashable,
    target: Hashable,
    max_paths: int | None = None,
) -> Generator[tuple[Hashable, ...], None, None]:
    """Lazily enumerate simple paths from *start* that end at *target*.

    Unlike ``enumerate_paths`` a node is never re-entered while it is on the
    current path, so this terminates on cyclic graphs.

    Args:
        graph: Graph to explore.
        start: First node of every path.
        target: Last node of every path. Paths stop when they reach it.
        max_paths: Stop after this many paths. None means all of them.

    Yields:
        Each path as a tuple of nodes. ``(start,)`` if *start* is *target*.

    Raises:
        ValueError: If *max_paths* is negative.
    """
    if max_paths is not None and max_paths < 0:
        raise ValueError(f"max_paths must be non-negative, got {max_paths}")
    if max_paths == 0:
        return
    if start == target:
        yield (start,)
        return

    found = 0
    path: list[Hashable] = [start]
    on_path: set[Hashable] = {start}
    stack: list[Iterator[Hashable]] = [graph.get_successors(start)]

    while stack:
        child = next(stack[-1], _EXHAUSTED)
        if child is _EXHAUSTED:
            stack.pop()
            on_path.discard(path.pop())
            continue
        if child in on_path:
            continue

        if child == target:
            yield (*path, child)
            found += 1
            if max_paths is not None and found >= max_paths:
                return
            continue

        path.append(child)
        on_path.add(child)
        stack.append(graph.get_successors(child))


@dataclass
class _SuffixTrieNode:
    """Node of the reversed-path trie.

    Attributes:
        children: Next trie node keyed by the preceding graph node.
        owner: Index of the first path that reached this trie node.
    """

    children: dict[Hashable, _SuffixTrieNode] = field(default_factory=dict)
    owner: int = _UNOWNED


def compress_by_shared_suffixes(
    paths: Iterable[Sequence[Hashable]],
) -> list[tuple[Hashable, ...]]:
    """Truncate paths that rejoin the tail of an earlier path.

    Paths are inserted into a trie back to front, so trie nodes stand for
    path suffixes. The first path to reach a trie node owns it. When a later
    path reaches a node owned by another path, both share the suffix from
    that point to the end. If the two paths do not also agree on everything
    before the join, the later path is cut right after its join node: the
    rest is recoverable from the owner. A cut needs a shared suffix of at
    least two nodes, and a path that is entirely shared is never cut.

    Truncated paths that end up identical are kept once.

    Args:
        paths: Node paths, typically the output of ``enumerate_paths``.

    Returns:
        Truncated, deduplicated paths in first-seen input order.
    """
    materialized = [tuple(p) for p in paths]
    if not materialized:
        return []

    keep_length = [len(p) for p in materialized]
    root = _SuffixTrieNode()

    for index, path in enumerate(materialized):
        length = len(path)
        trie_node = root
        matched_depth = 0

        for i in range(length - 1, -1, -1):
            symbol = path[i]
            child = trie_node.children.get(symbol)
            if child is None:
                child = _SuffixTrieNode()
                trie_node.children[symbol] = child
            trie_node = child
            matched_depth += 1

            if trie_node.owner == _UNOWNED:
                trie_node.owner = index
                continue
            if trie_node.owner == index:
                continue
            if not (_MIN_SHARED_SUFFIX <= matched_depth < length):
                continue

            # A shorter owner cannot share the same prefix up to i
            owner_path = materialized[trie_node.owner]
            if path[: i + 1] != owner_path[: i + 1]:
                keep_length[index] = min(keep_length[index], i + 1)

    result: list[tuple[Hashable, ...]] = []
    seen: set[tuple[Hashable, ...]] = set()
    for path, length in zip(materialized, keep_length, strict=True):
        if length <= 0:
            continue
        prefix = path[:length]
        if prefix not in seen:
            seen.add(prefix)
            result.append(prefix)

    log.debug(
        "paths_compressed",
        input_paths=len(materialized),
        output_paths=len(result),
        truncated=sum(1 for p, k in zip(materialized, keep_length, strict=True) if k < len(p)),
    )
    return result


def node_path_to_edges(graph: DirectedGraph, node_path: Sequence[Hashable]) -> tuple[Edge, ...]:
    """Map a node path onto graph edges.

    For each consecutive pair the first outgoing edge of the source that
    targets the next node is chosen, so parallel edges resolve to the earliest
    inserted one.

    Raises:
        PathReconstructionError: If two consecutive nodes are not connected.
    """
    edges: list[Edge] = []
    for from_node, to_node in zip(node_path, node_path[1:], strict=False):
        chosen = next(
            (e for e in graph.get_outgoing_edges(from_node) if e.to_node == to_node),
            None,
        )
        if chosen is None:
            raise PathReconstructionError(from_node=from_node, to_node=to_node)
        edges.append(chosen)
    return tuple(edges)


def compress_graph_paths_to_edge_paths(
    graph: DirectedGraph,
    root: Hashable,
    is_terminal: Callable[[Hashable], bool] | None = None,
    max_depth: int | None = None,
) -> list[tuple[Edge, ...]]:
    """Enumerate root-to-terminal paths, compress them, and return edge paths.

    Args:
        graph: Graph to explore.
        root: Start node.
        is_terminal: Stopping predicate. Defaults to "has no outgoing edges".
        max_depth: Maximum number of edges per path.

    Returns:
        One edge tuple per compressed path. A single-node path maps to ``()``.

    Raises:
        PathReconstructionError: If a compressed path contains adjacent nodes
            with no connecting edge. This signals a bug, not bad input.
    """
    node_paths = list(enumerate_paths(graph, root, is_terminal=is_terminal, max_depth=max_depth))
    compressed = compress_by_shared_suffixes(node_paths)
    log.debug(
        "edge_paths_built",
        root=repr(root),
        enumerated=len(node_paths),
        compressed=len(compressed),
    )
    return [node_path_to_edges(graph, node_path) for node_path in compressed]
