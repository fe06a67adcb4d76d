"""
errors.py — Graph Validation Errors
====================================
Raised synchronously, before any algorithm step exists.  A caller that
catches one of these never receives a partially built trace.
"""


class GraphError(Exception):
    """Base class for graph validation failures."""


class UnknownNodeError(GraphError):
    """A source id or an edge endpoint is missing from the node mapping."""

    def __init__(self, node_id, context: str = ""):
        self.node_id = node_id
        msg = f"Unknown node id {node_id!r}"
        if context:
            msg += f" ({context})"
        super().__init__(msg)


class InvalidWeightError(GraphError):
    """Dijkstra was given an edge with a negative weight."""

    def __init__(self, edge):
        self.edge = edge
        super().__init__(
            f"Edge {edge.id} ({edge.source}→{edge.target}) has negative weight "
            f"{edge.weight}; Dijkstra requires weights ≥ 0"
        )
