"""
Graph assembly and validation.
"""
from .builder import GraphBuilder, build_node
from .identity import graph_id, node_id
from .validation import find_dangling_edges, find_forest_violations, validate_graph

__all__ = [
    "GraphBuilder",
    "build_node",
    "graph_id",
    "node_id",
    "find_dangling_edges",
    "find_forest_violations",
    "validate_graph",
]
