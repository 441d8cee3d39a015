"""Tests for frontier-merged state-space construction."""

from __future__ import annotations

import pytest

from questgraph.graph.sort import has_cycle
from questgraph.graph.state_space import (
    StateNode,
    StateTransition,
    build_frontier_merged_graph,
)

# scene -> [(choice, next scene, gold gained)]
_STORY: dict[str, list[tuple[str, str, int]]] = {
    "hall": [("go_left", "left", 1), ("go_right", "right", 3)],
    "left": [("descend", "vault", 0)],
    "right": [("descend", "vault", 0)],
    "vault": [],
}


def _story_transitions(scene: str, gold: int) -> list[StateTransition[str, str, int]]:
    return [
        StateTransition(to_scene=target, label=choice, next_state=gold + gain)
        for choice, target, gain in _STORY[scene]
    ]


def _has_gold(gold: int) -> bool:
    return gold > 0


class TestBuildFrontierMergedGraph:
    def test_equal_signatures_merge(self) -> None:
        result = build_frontier_merged_graph("hall", 0, _story_transitions, _has_gold)

        assert result.graph.nodes == (
            StateNode("hall", False),
            StateNode("left", True),
            StateNode("right", True),
            StateNode("vault", True),
        )
        assert len(result.graph.edges) == 4
        assert result.graph.in_degree(StateNode("vault", True)) == 2

    def test_first_state_is_representative(self) -> None:
        result = build_frontier_merged_graph("hall", 0, _story_transitions, _has_gold)

        assert result.representative_states[StateNode("vault", True)] == 1
        assert result.representative_states[StateNode("right", True)] == 3

    def test_edge_labels_are_choices(self) -> None:
        result = build_frontier_merged_graph("hall", 0, _story_transitions, _has_gold)
        labels = [e.label for e in result.graph.get_outgoing_edges(StateNode("hall", False))]

        assert labels == ["go_left", "go_right"]

    def test_distinct_signatures_stay_apart(self) -> None:
        result = build_frontier_merged_graph("hall", 0, _story_transitions, lambda gold: gold)

        assert StateNode("vault", 1) in result.graph
        assert StateNode("vault", 3) in result.graph
        assert result.terminal_nodes == [StateNode("vault", 1), StateNode("vault", 3)]

    def test_scene_without_transitions_is_terminal(self) -> None:
        result = build_frontier_merged_graph("hall", 0, _story_transitions, _has_gold)
        assert result.terminal_nodes == [StateNode("vault", True)]

    def test_terminal_scene_predicate(self) -> None:
        result = build_frontier_merged_graph(
            "hall",
            0,
            _story_transitions,
            _has_gold,
            is_terminal_scene=lambda scene: scene == "left",
        )

        assert StateNode("left", True) in result.terminal_nodes
        assert result.graph.out_degree(StateNode("left", True)) == 0

    def test_max_depth_stops_expansion(self) -> None:
        result = build_frontier_merged_graph(
            "hall", 0, _story_transitions, _has_gold, max_depth=1
        )

        assert len(result.graph) == 3
        assert result.terminal_nodes == [StateNode("left", True), StateNode("right", True)]

    def test_initial_node(self) -> None:
        result = build_frontier_merged_graph("hall", 0, _story_transitions, _has_gold)
        assert result.initial_node == StateNode("hall", False)

    def test_none_transitions_mean_terminal(self) -> None:
        result = build_frontier_merged_graph("only", 0, lambda _s, _g: None, _has_gold)

        assert result.graph.nodes == (StateNode("only", False),)
        assert result.terminal_nodes == [StateNode("only", False)]

    def test_loop_in_story_merges_into_cycle(self) -> None:
        def loop(scene: str, count: int) -> list[StateTransition[str, str, int]]:
            return [StateTransition("room", "wait", count + 1)]

        result = build_frontier_merged_graph("room", 0, loop, lambda count: min(count, 2))

        assert len(result.graph) == 3
        assert has_cycle(result.graph)

    def test_negative_max_depth_raises(self) -> None:
        with pytest.raises(ValueError, match="max_depth"):
            build_frontier_merged_graph("hall", 0, _story_transitions, _has_gold, max_depth=-1)
