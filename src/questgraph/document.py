"""Edge-list documents used as CLI input.

A document lists edges (and optionally isolated nodes, a root and explicit
terminal nodes) in YAML or JSON:

    root: intro
    terminals: [good_end]
    edges:
      - {from: intro, to: forest, label: "Take the path"}
      - {from: forest, to: good_end}

Documents are read only; graphs are never written back.
"""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from ruamel.yaml import YAML

from questgraph.graph.edge import Edge
from questgraph.graph.graph import DirectedGraph

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def _number_to_str(value: Any) -> Any:
    # YAML and JSON read unquoted ids like 1 or 2.5 as numbers
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class EdgeSpec(BaseModel):
    """One directed edge in a document.

    Numeric node ids and labels are read as their string form.
    """

    from_node: str = Field(min_length=1)
    to_node: str = Field(min_length=1)
    label: str | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_short_keys(cls, data: Any) -> Any:
        """Accept ``from`` / ``to`` as aliases for ``from_node`` / ``to_node``."""
        if isinstance(data, dict):
            data = dict(data)  # Avoid mutating input
            if "from" in data and "from_node" not in data:
                data["from_node"] = data.pop("from")
            if "to" in data and "to_node" not in data:
                data["to_node"] = data.pop("to")
        return data

    @field_validator("from_node", "to_node", "label", mode="before")
    @classmethod
    def numbers_as_text(cls, v: Any) -> Any:
        return _number_to_str(v)

    def to_edge(self) -> Edge[str, str | None]:
        return Edge(self.from_node, self.to_node, self.label)


class GraphDocument(BaseModel):
    """A graph described as edges plus optional isolated nodes.

    Attributes:
        nodes: Extra nodes, typically endings with no outgoing edges.
        edges: Directed edges.
        root: Default start node for path enumeration.
        terminals: Explicit terminal nodes. Empty means "no outgoing edges".
    """

    nodes: list[str] = Field(default_factory=list)
    edges: list[EdgeSpec] = Field(default_factory=list)
    root: str | None = None
    terminals: list[str] = Field(default_factory=list)

    @field_validator("root", mode="before")
    @classmethod
    def root_as_text(cls, v: Any) -> Any:
        return _number_to_str(v)

    @field_validator("nodes", "terminals", mode="before")
    @classmethod
    def node_lists_as_text(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_number_to_str(item) for item in v]
        return v

    @model_validator(mode="after")
    def root_is_a_node(self) -> GraphDocument:
        """Reject a root that no edge or node entry mentions."""
        if self.root is not None and self.root not in self.node_ids():
            msg = f"root '{self.root}' is not a node of the graph"
            raise ValueError(msg)
        return self

    def node_ids(self) -> set[str]:
        ids = set(self.nodes) | set(self.terminals)
        for edge in self.edges:
            ids.add(edge.from_node)
            ids.add(edge.to_node)
        return ids

    def to_graph(self) -> DirectedGraph[str, str | None]:
        return DirectedGraph.from_edges(
            (spec.to_edge() for spec in self.edges),
            extra_nodes=[*self.nodes, *self.terminals],
        )


class GraphDocumentError(Exception):
    """Raised when a graph document cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load graph document at {path}: {reason}")


def load_graph_document(path: Path) -> GraphDocument:
    """Load and validate a graph document from YAML or JSON.

    Args:
        path: Document path. The suffix selects the parser.

    Returns:
        Validated document.

    Raises:
        GraphDocumentError: If the file is missing, unparseable, or invalid.
    """
    if not path.exists():
        raise GraphDocumentError(path, "File not found")

    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES + JSON_SUFFIXES:
        raise GraphDocumentError(path, f"Unsupported file type '{path.suffix}'")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f) if suffix in JSON_SUFFIXES else YAML(typ="safe").load(f)
    except Exception as e:
        raise GraphDocumentError(path, str(e)) from e

    if data is None:
        raise GraphDocumentError(path, "Empty file")
    if not isinstance(data, dict):
        raise GraphDocumentError(path, "Top level must be a mapping")

    try:
        return GraphDocument.model_validate(data)
    except ValidationError as e:
        raise GraphDocumentError(path, str(e)) from e
