"""Directed, labelled edge value type."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

NodeT = TypeVar("NodeT", bound=Hashable)
LabelT = TypeVar("LabelT")


@dataclass(frozen=True)
class Edge(Generic[NodeT, LabelT]):
    """A directed connection ``from_node -> to_node`` carrying a label.

    The label is metadata for the caller (a choice text, a transition id) and
    is never consulted by the graph algorithms. Labels should be hashable if
    edges are to be used in sets.

    Attributes:
        from_node: Source node.
        to_node: Target node.
        label: Arbitrary edge payload.
    """

    from_node: NodeT
    to_node: NodeT
    label: LabelT | None = None

    def __repr__(self) -> str:
        return f"Edge({self.from_node!r} -> {self.to_node!r}, label={self.label!r})"
