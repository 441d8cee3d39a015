"""Tests for must-introduced data-flow analysis."""

from __future__ import annotations

import pytest

from questgraph.graph.dataflow import (
    DataFlowNode,
    compute_must_introduced_sets,
    dataflow_nodes_from_graph,
)
from questgraph.graph.edge import Edge
from questgraph.graph.graph import DirectedGraph
from tests.fixtures.graph_fixtures import make_chain_graph, make_diamond_graph


@pytest.fixture
def branch_and_join() -> DirectedGraph[str, str]:
    """start splits into a and b, which rejoin at join."""
    return DirectedGraph.from_edges(
        [
            Edge("start", "a"),
            Edge("start", "b"),
            Edge("a", "join"),
            Edge("b", "join"),
        ]
    )


class TestDataflowNodesFromGraph:
    def test_links_follow_edges(self) -> None:
        nodes = dataflow_nodes_from_graph(make_diamond_graph())

        assert nodes["A"].successor_ids == ["B", "C"]
        assert nodes["D"].predecessor_ids == ["B", "C"]
        assert nodes["A"].introduced == set()

    def test_parallel_edges_collapse(self) -> None:
        graph = DirectedGraph.from_edges([Edge("A", "B", "x"), Edge("A", "B", "y")])
        nodes = dataflow_nodes_from_graph(graph)

        assert nodes["A"].successor_ids == ["B"]
        assert nodes["B"].predecessor_ids == ["A"]

    def test_entity_changes_are_copied(self) -> None:
        introduced = {"A": {"key"}}
        nodes = dataflow_nodes_from_graph(make_chain_graph(), introduced=introduced)
        nodes["A"].introduced.add("extra")

        assert introduced["A"] == {"key"}


class TestComputeMustIntroducedSets:
    def test_join_keeps_only_common_entities(
        self, branch_and_join: DirectedGraph[str, str]
    ) -> None:
        nodes = dataflow_nodes_from_graph(
            branch_and_join,
            introduced={"start": {"key"}, "a": {"sword"}, "b": {"shield"}},
        )

        must = compute_must_introduced_sets(nodes, "start")

        assert must["start"] == {"key"}
        assert must["a"] == {"key", "sword"}
        assert must["b"] == {"key", "shield"}
        assert must["join"] == {"key"}

    def test_removal_on_one_branch_drops_entity_at_join(
        self, branch_and_join: DirectedGraph[str, str]
    ) -> None:
        nodes = dataflow_nodes_from_graph(
            branch_and_join,
            introduced={"start": {"key"}},
            removed={"b": {"key"}},
        )

        must = compute_must_introduced_sets(nodes, "start")

        assert must["a"] == {"key"}
        assert must["b"] == set()
        assert must["join"] == set()

    def test_introduction_far_from_start_propagates(self) -> None:
        """Nodes whose set stays empty still pass the walk on to successors."""
        nodes = dataflow_nodes_from_graph(make_chain_graph(), introduced={"D": {"gem"}})

        must = compute_must_introduced_sets(nodes, "A")

        assert must["C"] == set()
        assert must["D"] == {"gem"}

    def test_chain_accumulates(self) -> None:
        nodes = dataflow_nodes_from_graph(
            make_chain_graph(), introduced={"A": {"a"}, "B": {"b"}, "C": {"c"}}
        )

        must = compute_must_introduced_sets(nodes, "A")

        assert must["D"] == {"a", "b", "c"}

    def test_unreached_nodes_stay_empty(self) -> None:
        graph = DirectedGraph.from_edges([Edge("A", "B")], extra_nodes=["island"])
        nodes = dataflow_nodes_from_graph(graph, introduced={"island": {"gem"}})

        must = compute_must_introduced_sets(nodes, "A")

        assert must["island"] == set()

    def test_unknown_ids_are_ignored(self) -> None:
        nodes = {
            "start": DataFlowNode(successor_ids=["ghost", "end"], introduced={"k"}),
            "end": DataFlowNode(predecessor_ids=["start", "ghost"]),
        }

        must = compute_must_introduced_sets(nodes, "start")

        assert must == {"start": {"k"}, "end": {"k"}}

    def test_cycle_terminates(self) -> None:
        graph = DirectedGraph.from_edges([Edge("s", "a"), Edge("a", "b"), Edge("b", "a")])
        nodes = dataflow_nodes_from_graph(graph, introduced={"s": {"k"}, "b": {"loot"}})

        must = compute_must_introduced_sets(nodes, "s")

        assert must["s"] == {"k"}
        assert set(must) == {"s", "a", "b"}

    def test_missing_start_raises(self) -> None:
        with pytest.raises(ValueError, match="not found"):
            compute_must_introduced_sets({}, "start")
