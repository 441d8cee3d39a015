"""questgraph: directed-graph algorithms for branching narratives."""

__version__ = "0.1.0"
