"""Directed multigraph storage.

Two construction styles are supported:

- ``GraphBuilder`` accumulates nodes and edges incrementally.
- ``DirectedGraph.from_edges`` builds in one pass from an edge batch.

Both produce a ``DirectedGraph``, an immutable snapshot. Every query on it is
lenient: unknown nodes have no edges and degree zero, so algorithms never need
membership checks before asking about a node.

Nodes are opaque hashable keys. Parallel edges between the same ordered pair
are kept as-is (multigraph); nothing is deduplicated.

Thread-safety: a ``GraphBuilder`` must not be shared between threads while
mutating. A built ``DirectedGraph`` holds no mutable state and may be read
concurrently.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Generic

from questgraph.graph.edge import Edge, LabelT, NodeT

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

_NO_EDGES: tuple[Edge, ...] = ()


class DirectedGraph(Generic[NodeT, LabelT]):
    """Immutable directed multigraph over hashable nodes.

    Attributes:
        nodes: All nodes, in first-seen order. Order is stable for a given
            construction sequence but carries no meaning.
        edges: All edges, in insertion order.
    """

    __slots__ = ("_edges", "_incoming", "_node_set", "_nodes", "_outgoing")

    def __init__(
        self,
        nodes: Iterable[NodeT],
        edges: Iterable[Edge[NodeT, LabelT]],
    ) -> None:
        """Build a snapshot from nodes and edges.

        Prefer ``from_edges`` or ``GraphBuilder.build``. Edge endpoints are
        added as nodes if missing from *nodes*.

        Args:
            nodes: Nodes to include (isolated nodes allowed).
            edges: Edges to include.
        """
        node_index: dict[NodeT, None] = dict.fromkeys(nodes)
        edge_list = list(edges)
        outgoing: dict[NodeT, list[Edge[NodeT, LabelT]]] = {}
        incoming: dict[NodeT, list[Edge[NodeT, LabelT]]] = {}

        for edge in edge_list:
            node_index.setdefault(edge.from_node, None)
            node_index.setdefault(edge.to_node, None)
            outgoing.setdefault(edge.from_node, []).append(edge)
            incoming.setdefault(edge.to_node, []).append(edge)

        self._nodes: tuple[NodeT, ...] = tuple(node_index)
        self._node_set: frozenset[NodeT] = frozenset(node_index)
        self._edges: tuple[Edge[NodeT, LabelT], ...] = tuple(edge_list)
        self._outgoing: Mapping[NodeT, tuple[Edge[NodeT, LabelT], ...]] = MappingProxyType(
            {node: tuple(out) for node, out in outgoing.items()}
        )
        self._incoming: Mapping[NodeT, tuple[Edge[NodeT, LabelT], ...]] = MappingProxyType(
            {node: tuple(inc) for node, inc in incoming.items()}
        )

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Edge[NodeT, LabelT]],
        extra_nodes: Iterable[NodeT] = (),
    ) -> DirectedGraph[NodeT, LabelT]:
        """Construct a graph from an edge batch plus optional isolated nodes.

        Args:
            edges: Directed edges defining the structure.
            extra_nodes: Nodes to include even if no edge touches them,
                e.g. known endings with no outgoing transitions.

        Returns:
            New immutable graph.
        """
        edge_list = list(edges)
        nodes: dict[NodeT, None] = {}
        for edge in edge_list:
            nodes.setdefault(edge.from_node, None)
            nodes.setdefault(edge.to_node, None)
        for node in extra_nodes:
            nodes.setdefault(node, None)
        return cls(nodes, edge_list)

    @classmethod
    def empty(cls) -> DirectedGraph[NodeT, LabelT]:
        """Create a graph with no nodes and no edges."""
        return cls((), ())

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[NodeT, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[Edge[NodeT, LabelT], ...]:
        return self._edges

    def contains_node(self, node: NodeT) -> bool:
        """Check whether *node* is part of the graph."""
        return node in self._node_set

    def get_outgoing_edges(self, node: NodeT) -> tuple[Edge[NodeT, LabelT], ...]:
        """Edges leaving *node*, in insertion order. Empty for unknown nodes."""
        return self._outgoing.get(node, _NO_EDGES)

    def get_incoming_edges(self, node: NodeT) -> tuple[Edge[NodeT, LabelT], ...]:
        """Edges entering *node*, in insertion order. Empty for unknown nodes."""
        return self._incoming.get(node, _NO_EDGES)

    def get_successors(self, node: NodeT) -> Iterator[NodeT]:
        """Lazily yield targets of outgoing edges (repeats for parallel edges)."""
        return (edge.to_node for edge in self.get_outgoing_edges(node))

    def get_predecessors(self, node: NodeT) -> Iterator[NodeT]:
        """Lazily yield sources of incoming edges (repeats for parallel edges)."""
        return (edge.from_node for edge in self.get_incoming_edges(node))

    def out_degree(self, node: NodeT) -> int:
        return len(self.get_outgoing_edges(node))

    def in_degree(self, node: NodeT) -> int:
        return len(self.get_incoming_edges(node))

    def roots(self) -> list[NodeT]:
        """Nodes with no incoming edges, in graph order."""
        return [node for node in self._nodes if self.in_degree(node) == 0]

    def terminals(self) -> list[NodeT]:
        """Nodes with no outgoing edges, in graph order."""
        return [node for node in self._nodes if self.out_degree(node) == 0]

    def __contains__(self, node: object) -> bool:
        try:
            return self.contains_node(node)  # type: ignore[arg-type]
        except TypeError:
            # Unhashable values can never be nodes
            return False

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"DirectedGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"


class GraphBuilder(Generic[NodeT, LabelT]):
    """Mutable accumulator that produces ``DirectedGraph`` snapshots.

    Not thread-safe. Build fully, then hand the snapshot to readers.

    Example:
        >>> builder = GraphBuilder().add_edge(Edge("intro", "forest", "go left"))
        >>> graph = builder.add_node("ending").build()
        >>> graph.terminals()
        ['forest', 'ending']
    """

    def __init__(self) -> None:
        self._nodes: dict[NodeT, None] = {}
        self._outgoing: dict[NodeT, list[Edge[NodeT, LabelT]]] = {}
        self._incoming: dict[NodeT, list[Edge[NodeT, LabelT]]] = {}
        self._edges: list[Edge[NodeT, LabelT]] = []

    def add_node(self, node: NodeT) -> GraphBuilder[NodeT, LabelT]:
        """Add *node* if absent. Adding an existing node is a no-op."""
        if node not in self._nodes:
            self._nodes[node] = None
            self._outgoing[node] = []
            self._incoming[node] = []
        return self

    def add_edge(self, edge: Edge[NodeT, LabelT]) -> GraphBuilder[NodeT, LabelT]:
        """Add *edge*, creating its endpoints if needed.

        Identical edges accumulate; there is no deduplication.
        """
        self.add_node(edge.from_node)
        self.add_node(edge.to_node)
        self._outgoing[edge.from_node].append(edge)
        self._incoming[edge.to_node].append(edge)
        self._edges.append(edge)
        return self

    def add_edges(self, edges: Iterable[Edge[NodeT, LabelT]]) -> GraphBuilder[NodeT, LabelT]:
        for edge in edges:
            self.add_edge(edge)
        return self

    def contains_node(self, node: NodeT) -> bool:
        return node in self._nodes

    def out_degree(self, node: NodeT) -> int:
        return len(self._outgoing.get(node, ()))

    def in_degree(self, node: NodeT) -> int:
        return len(self._incoming.get(node, ()))

    def build(self) -> DirectedGraph[NodeT, LabelT]:
        """Freeze the current contents into an immutable graph.

        Later builder mutations do not affect graphs already built.
        """
        return DirectedGraph(self._nodes, self._edges)

    def __len__(self) -> int:
        return len(self._nodes)
