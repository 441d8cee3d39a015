"""Topological ordering and cycle detection.

Kahn's algorithm: nodes with in-degree zero are emitted first; emitting a node
releases its successors. If every node gets emitted the graph is a DAG.
Otherwise the nodes left over are blocked by at least one cycle.

``topological_sort`` reports cycles through a flag on its result.
``topological_sort_strict`` is the wrapper for callers that treat any cycle as
fatal, and ``has_cycle`` is the boolean shorthand.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from questgraph.graph.errors import CycleDetectedError
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Hashable

    from questgraph.graph.graph import DirectedGraph

log = get_logger(__name__)


@dataclass(frozen=True)
class TopologicalSortResult:
    """Outcome of a topological sort.

    Attributes:
        is_acyclic: True if every node could be ordered.
        sorted_nodes: Nodes in topological order. When a cycle exists this is
            only the prefix that could be ordered before progress stopped.
        unsorted_nodes: Nodes blocked by a cycle, in graph order. Empty when
            ``is_acyclic`` is True.
    """

    is_acyclic: bool
    sorted_nodes: tuple[Hashable, ...]
    unsorted_nodes: tuple[Hashable, ...] = field(default=())


def topological_sort(graph: DirectedGraph) -> TopologicalSortResult:
    """Order nodes so that every edge's source precedes its target.

    In-degree counts edges, so parallel edges each release their target once.
    Ties are broken by graph node order, then edge insertion order, which makes
    the output deterministic for a given graph.

    Args:
        graph: Graph to sort.

    Returns:
        Result with ``is_acyclic`` set and the (possibly partial) order.
    """
    in_degree: dict[Hashable, int] = {node: graph.in_degree(node) for node in graph.nodes}
    queue: deque[Hashable] = deque(node for node, deg in in_degree.items() if deg == 0)
    result: list[Hashable] = []

    while queue:
        node = queue.popleft()
        result.append(node)
        for successor in graph.get_successors(node):
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                queue.append(successor)

    if len(result) == len(graph.nodes):
        return TopologicalSortResult(is_acyclic=True, sorted_nodes=tuple(result))

    emitted = set(result)
    remaining = tuple(node for node in graph.nodes if node not in emitted)
    log.debug(
        "cycle_detected",
        sorted=len(result),
        remaining=len(remaining),
        sample=[repr(n) for n in remaining[:5]],
    )
    return TopologicalSortResult(
        is_acyclic=False,
        sorted_nodes=tuple(result),
        unsorted_nodes=remaining,
    )


def topological_sort_strict(graph: DirectedGraph) -> list[Hashable]:
    """Topologically sort *graph*, treating any cycle as an error.

    Returns:
        All nodes in topological order.

    Raises:
        CycleDetectedError: If the graph contains at least one cycle.
    """
    result = topological_sort(graph)
    if not result.is_acyclic:
        raise CycleDetectedError(
            remaining=list(result.unsorted_nodes),
            sorted_prefix=list(result.sorted_nodes),
        )
    return list(result.sorted_nodes)


def has_cycle(graph: DirectedGraph) -> bool:
    """Return True if the graph contains at least one directed cycle."""
    return not topological_sort(graph).is_acyclic
