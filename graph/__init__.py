"""
graph/
-----
Core data layer.  Public API:

    from graph import Graph, Node, Edge, EdgeState
    from graph import GraphError, UnknownNodeError, InvalidWeightError
"""

from graph.node   import Node
from graph.edge   import Edge, EdgeState
from graph.errors import GraphError, UnknownNodeError, InvalidWeightError
from graph.graph  import Graph

__all__ = [
    "Node",
    "Edge",      "EdgeState",
    "Graph",
    "GraphError", "UnknownNodeError", "InvalidWeightError",
]
