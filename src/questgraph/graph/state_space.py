"""Frontier-merged state-space graphs.

A story with state (inventory, flags, relationship scores) has far more
concrete play states than scenes. Exploring every concrete state explodes
combinatorially, so states are merged whenever they share a scene and an
abstract *signature* of the state. The first concrete state to reach a merged
node is kept as its representative for downstream checks.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from questgraph.graph.edge import Edge
from questgraph.graph.graph import DirectedGraph
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

log = get_logger(__name__)

SceneT = TypeVar("SceneT")
StateT = TypeVar("StateT")
SigT = TypeVar("SigT")
LabelT = TypeVar("LabelT")


@dataclass(frozen=True)
class StateNode(Generic[SceneT, SigT]):
    """A merged state: scene plus abstract state signature."""

    scene_id: SceneT
    signature: SigT


@dataclass(frozen=True)
class StateTransition(Generic[SceneT, LabelT, StateT]):
    """One outgoing move from a concrete state.

    Attributes:
        to_scene: Scene reached by the move.
        label: Edge label for the merged graph (e.g. the choice taken).
        next_state: Concrete state after the move.
    """

    to_scene: SceneT
    label: LabelT
    next_state: StateT


@dataclass
class FrontierMergedGraph:
    """Result of ``build_frontier_merged_graph``.

    Attributes:
        graph: Directed graph over ``StateNode`` values.
        representative_states: First concrete state seen for each node.
        terminal_nodes: Nodes where exploration stopped, in discovery order.
    """

    graph: DirectedGraph
    representative_states: dict[StateNode, Any] = field(default_factory=dict)
    terminal_nodes: list[StateNode] = field(default_factory=list)

    @property
    def initial_node(self) -> StateNode | None:
        return self.graph.nodes[0] if self.graph.nodes else None


def build_frontier_merged_graph(
    initial_scene: Hashable,
    initial_state: Any,
    get_transitions: Callable[[Any, Any], Iterable[StateTransition] | None],
    state_signature: Callable[[Any], Hashable],
    is_terminal_scene: Callable[[Any], bool] | None = None,
    max_depth: int | None = None,
) -> FrontierMergedGraph:
    """Explore the state space breadth-first, merging equal (scene, signature) pairs.

    A node is terminal (not expanded) when it sits at *max_depth*, when its
    scene satisfies *is_terminal_scene*, or when it has no transitions. Every
    transition from an expanded node becomes an edge, including edges into
    nodes that were already discovered.

    Args:
        initial_scene: Scene where play starts.
        initial_state: Concrete state at the start.
        get_transitions: Returns the moves available from a scene in a state.
        state_signature: Projects a concrete state onto its merge key.
        is_terminal_scene: Scenes to stop at. Defaults to none.
        max_depth: Maximum BFS depth to expand. None means unbounded.

    Returns:
        The merged graph with representatives and terminal nodes.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if is_terminal_scene is None:
        is_terminal_scene = _never_terminal

    initial_node = StateNode(initial_scene, state_signature(initial_state))
    representatives: dict[StateNode, Any] = {initial_node: initial_state}
    edges: list[Edge] = []
    terminals: dict[StateNode, None] = {}
    queue: deque[tuple[StateNode, Any, int]] = deque([(initial_node, initial_state, 0)])

    while queue:
        node, state, depth = queue.popleft()

        if (max_depth is not None and depth >= max_depth) or is_terminal_scene(node.scene_id):
            terminals[node] = None
            continue

        transitions = list(get_transitions(node.scene_id, state) or ())
        if not transitions:
            terminals[node] = None
            continue

        for transition in transitions:
            next_node = StateNode(transition.to_scene, state_signature(transition.next_state))
            if next_node not in representatives:
                representatives[next_node] = transition.next_state
                queue.append((next_node, transition.next_state, depth + 1))
            edges.append(Edge(node, next_node, transition.label))

    graph: DirectedGraph = DirectedGraph(representatives, edges)
    log.debug(
        "state_space_built",
        nodes=len(graph),
        edges=len(edges),
        terminals=len(terminals),
    )
    return FrontierMergedGraph(
        graph=graph,
        representative_states=representatives,
        terminal_nodes=list(terminals),
    )


def _never_terminal(_scene: Any) -> bool:
    return False
