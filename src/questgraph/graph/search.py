"""Breadth-first and depth-first traversal.

The generators ``breadth_first`` and ``depth_first`` are the primary API:
they yield each reachable node once and stop when the consumer stops pulling.
``breadth_first_search`` and ``depth_first_search`` wrap them for callers that
prefer a visitor callback returning ``True`` to continue and ``False`` to stop.

Both traversals use an explicit queue or stack, so depth of the graph is not
bounded by the interpreter's recursion limit, and cycles are safe because a
node is marked visited the moment it is discovered.

Start nodes may be given as a single node or as an iterable of nodes. A value
that is itself a node of the graph, or any string, is always one node.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Generator, Hashable

    from questgraph.graph.graph import DirectedGraph

log = get_logger(__name__)


def _as_start_nodes(
    graph: DirectedGraph, start_nodes: Hashable | Iterable[Hashable]
) -> list[Hashable]:
    """Normalize a single start node or an iterable of them to a list."""
    if isinstance(start_nodes, str | bytes) or start_nodes in graph:
        return [start_nodes]
    if isinstance(start_nodes, Iterable):
        return list(start_nodes)
    return [start_nodes]


def breadth_first(
    graph: DirectedGraph, start_nodes: Hashable | Iterable[Hashable]
) -> Generator[Hashable, None, None]:
    """Yield nodes in breadth-first order, without repeats.

    All start nodes are enqueued first, in the order given. A start node
    absent from the graph is still yielded (it simply has no successors).

    Args:
        graph: Graph to traverse.
        start_nodes: A start node, or an iterable of start nodes.

    Yields:
        Nodes in non-decreasing distance from the start set.
    """
    visited: set[Hashable] = set()
    queue: deque[Hashable] = deque()

    for start in _as_start_nodes(graph, start_nodes):
        if start not in visited:
            visited.add(start)
            queue.append(start)

    while queue:
        node = queue.popleft()
        yield node

        for successor in graph.get_successors(node):
            if successor not in visited:
                visited.add(successor)
                queue.append(successor)


def depth_first(
    graph: DirectedGraph, start_nodes: Hashable | Iterable[Hashable]
) -> Generator[Hashable, None, None]:
    """Yield nodes in depth-first order, without repeats.

    Uses an explicit stack: the most recently discovered node is expanded
    next. The first start node is always yielded first.

    Args:
        graph: Graph to traverse.
        start_nodes: A start node, or an iterable of start nodes.

    Yields:
        Nodes in depth-first discovery order.
    """
    visited: set[Hashable] = set()
    starts: list[Hashable] = []

    for start in _as_start_nodes(graph, start_nodes):
        if start not in visited:
            visited.add(start)
            starts.append(start)

    # Reverse so the first start is popped first
    stack: list[Hashable] = starts[::-1]

    while stack:
        node = stack.pop()
        yield node

        for successor in graph.get_successors(node):
            if successor not in visited:
                visited.add(successor)
                stack.append(successor)


def _drive(
    nodes: Generator[Hashable, None, None],
    visitor: Callable[[Hashable], bool],
    kind: str,
) -> int:
    visited = 0
    for node in nodes:
        visited += 1
        if not visitor(node):
            log.debug("traversal_stopped", kind=kind, node=node, visited=visited)
            nodes.close()
            break
    return visited


def breadth_first_search(
    graph: DirectedGraph,
    start_nodes: Hashable | Iterable[Hashable],
    visitor: Callable[[Hashable], bool],
) -> int:
    """Visit nodes breadth-first until the visitor returns False.

    Args:
        graph: Graph to traverse.
        start_nodes: A start node, or an iterable of start nodes.
        visitor: Called once per node; return False to stop immediately.

    Returns:
        Number of nodes passed to the visitor.
    """
    return _drive(breadth_first(graph, start_nodes), visitor, "bfs")


def depth_first_search(
    graph: DirectedGraph,
    start_nodes: Hashable | Iterable[Hashable],
    visitor: Callable[[Hashable], bool],
) -> int:
    """Visit nodes depth-first until the visitor returns False.

    Args:
        graph: Graph to traverse.
        start_nodes: A start node, or an iterable of start nodes.
        visitor: Called once per node; return False to stop immediately.

    Returns:
        Number of nodes passed to the visitor.
    """
    return _drive(depth_first(graph, start_nodes), visitor, "dfs")


def reachable(graph: DirectedGraph, start: Hashable) -> set[Hashable]:
    """Find all nodes reachable from *start*, including *start* itself.

    Returns:
        Reachable node set, or an empty set if *start* is not in the graph.
    """
    if not graph.contains_node(start):
        return set()
    return set(breadth_first(graph, [start]))
