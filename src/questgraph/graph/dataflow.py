"""Forward "must" data-flow analysis over scene graphs.

Answers: which entities are guaranteed to have been introduced by the time a
reader arrives at a scene, whatever route they took? At a join the sets of
all predecessors are intersected, so an entity only survives if every
incoming route introduced it.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Hashable, Mapping

    from questgraph.graph.graph import DirectedGraph

log = get_logger(__name__)

EntityT = TypeVar("EntityT")


@dataclass
class DataFlowNode(Generic[EntityT]):
    """One scene as seen by the analysis.

    Attributes:
        successor_ids: Scenes reachable in one step.
        predecessor_ids: Scenes that lead here in one step.
        introduced: Entities this scene introduces.
        removed: Entities this scene removes (applied after introductions).
    """

    successor_ids: list[Hashable] = field(default_factory=list)
    predecessor_ids: list[Hashable] = field(default_factory=list)
    introduced: set[EntityT] = field(default_factory=set)
    removed: set[EntityT] = field(default_factory=set)


def dataflow_nodes_from_graph(
    graph: DirectedGraph,
    introduced: Mapping[Hashable, set[EntityT]] | None = None,
    removed: Mapping[Hashable, set[EntityT]] | None = None,
) -> dict[Hashable, DataFlowNode[EntityT]]:
    """Build the analysis input from a graph plus per-node entity changes.

    Parallel edges collapse to a single successor / predecessor entry.
    """
    introduced = introduced or {}
    removed = removed or {}
    return {
        node: DataFlowNode(
            successor_ids=list(dict.fromkeys(graph.get_successors(node))),
            predecessor_ids=list(dict.fromkeys(graph.get_predecessors(node))),
            introduced=set(introduced.get(node, ())),
            removed=set(removed.get(node, ())),
        )
        for node in graph.nodes
    }


def compute_must_introduced_sets(
    nodes: Mapping[Hashable, DataFlowNode[EntityT]],
    start_id: Hashable,
) -> dict[Hashable, set[EntityT]]:
    """Compute, per node, the entities introduced on every path from *start_id*.

    Worklist iteration to a fixed point. A node's set is the intersection of
    its predecessors' sets, plus what it introduces, minus what it removes.
    Nodes without predecessors use only their own changes.
    Ids referenced but missing from *nodes* are ignored. Nodes that the
    worklist never reaches keep an empty set. Every reachable node is
    evaluated at least once, even when its set starts out unchanged.

    Args:
        nodes: All nodes keyed by id.
        start_id: The entry scene.

    Returns:
        Mapping of node id to its must-have-been-introduced set.

    Raises:
        ValueError: If *start_id* is not in *nodes*.
    """
    if start_id not in nodes:
        raise ValueError(f"Start node {start_id!r} not found in node set")

    start = nodes[start_id]
    must: dict[Hashable, set[EntityT]] = {node_id: set() for node_id in nodes}
    must[start_id] = start.introduced - start.removed

    worklist: deque[Hashable] = deque([start_id])
    worklist.extend(s for s in start.successor_ids if s in nodes)
    in_queue: set[Hashable] = set(worklist)
    evaluated: set[Hashable] = set()
    iterations = 0

    while worklist:
        node_id = worklist.popleft()
        in_queue.discard(node_id)
        iterations += 1
        node = nodes[node_id]

        predecessors = [p for p in node.predecessor_ids if p in nodes]
        if not predecessors:
            new_must = set(node.introduced)
        else:
            new_must = set(must[predecessors[0]])
            for pred_id in predecessors[1:]:
                new_must &= must[pred_id]
            new_must |= node.introduced
        new_must -= node.removed

        # Successors must be scheduled at least once even if nothing changed
        if new_must == must[node_id] and node_id in evaluated:
            continue
        evaluated.add(node_id)

        must[node_id] = new_must
        for succ_id in node.successor_ids:
            if succ_id in nodes and succ_id not in in_queue:
                worklist.append(succ_id)
                in_queue.add(succ_id)

    log.debug("dataflow_converged", nodes=len(nodes), iterations=iterations)
    return must
