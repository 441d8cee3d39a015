"""Graph package - directed multigraph and algorithms over it.

Build a ``DirectedGraph`` (via ``DirectedGraph.from_edges`` or
``GraphBuilder``), then run traversal, ordering, or path algorithms on the
immutable snapshot.
"""

from questgraph.graph.dataflow import (
    DataFlowNode,
    compute_must_introduced_sets,
    dataflow_nodes_from_graph,
)
from questgraph.graph.edge import Edge
from questgraph.graph.errors import CycleDetectedError, GraphError, PathReconstructionError
from questgraph.graph.graph import DirectedGraph, GraphBuilder
from questgraph.graph.paths import (
    compress_by_shared_suffixes,
    compress_graph_paths_to_edge_paths,
    enumerate_all_paths,
    enumerate_paths,
    node_path_to_edges,
)
from questgraph.graph.search import (
    breadth_first,
    breadth_first_search,
    depth_first,
    depth_first_search,
    reachable,
)
from questgraph.graph.sort import (
    TopologicalSortResult,
    has_cycle,
    topological_sort,
    topological_sort_strict,
)
from questgraph.graph.state_space import (
    FrontierMergedGraph,
    StateNode,
    StateTransition,
    build_frontier_merged_graph,
)

__all__ = [
    "CycleDetectedError",
    "DataFlowNode",
    "DirectedGraph",
    "Edge",
    "FrontierMergedGraph",
    "GraphBuilder",
    "GraphError",
    "PathReconstructionError",
    "StateNode",
    "StateTransition",
    "TopologicalSortResult",
    "breadth_first",
    "breadth_first_search",
    "build_frontier_merged_graph",
    "compress_by_shared_suffixes",
    "compress_graph_paths_to_edge_paths",
    "compute_must_introduced_sets",
    "dataflow_nodes_from_graph",
    "depth_first",
    "depth_first_search",
    "enumerate_all_paths",
    "enumerate_paths",
    "has_cycle",
    "node_path_to_edges",
    "reachable",
    "topological_sort",
    "topological_sort_strict",
]
