"""Graph algorithm error types.

Queries on unknown nodes never raise; these errors cover the two cases the
algorithms treat as fatal:

- A caller explicitly asked for a cycle-free ordering and the graph has a cycle.
- Path compression produced adjacent nodes that are not connected, which
  indicates a code bug rather than bad input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class GraphError(Exception):
    """Base class for questgraph errors."""


@dataclass
class CycleDetectedError(GraphError):
    """Raised by the strict topological sort when the graph has a cycle.

    Attributes:
        remaining: Nodes that could not be ordered because a cycle blocks them.
        sorted_prefix: Nodes that were ordered before progress stopped.
    """

    remaining: list[Any]
    sorted_prefix: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        preview = ", ".join(repr(n) for n in self.remaining[:5])
        if len(self.remaining) > 5:
            preview += f", ... and {len(self.remaining) - 5} more"
        return f"Graph contains at least one cycle involving {len(self.remaining)} node(s): {preview}"


@dataclass
class PathReconstructionError(GraphError):
    """Raised when no edge connects two consecutive nodes of a compressed path.

    Compression only ever truncates enumerated paths, so every adjacent pair
    must still be an edge of the source graph. Hitting this is a bug.

    Attributes:
        from_node: Source of the missing edge.
        to_node: Target of the missing edge.
    """

    from_node: Any
    to_node: Any

    def __post_init__(self) -> None:
        super().__init__(
            f"No edge found from {self.from_node!r} to {self.to_node!r} "
            "when reconstructing edge path"
        )
