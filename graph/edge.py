"""
edge.py — Graph Edge
====================
A single DIRECTED edge.  An undirected connection is two opposing Edge
objects that share a weight (see Graph.build).

Design decisions:
  - `source` and `target` are node ids, NOT Node references.
    This keeps edges serialisable and avoids circular references.
  - Edges are frozen: a Graph is read-only for the lifetime of a run.
  - EdgeState is not stored on the edge.  It travels inside the
    Relaxation record of a Step so replay never touches the graph.
"""

import math
from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Edge State Enum — how a step classifies the edge it examined
# ---------------------------------------------------------------------------
class EdgeState(Enum):
    INCLUDED       = "included"         # relaxation improved the target
    EXCLUDED       = "excluded"         # no improvement (or source unreachable)
    NEGATIVE_CYCLE = "negative_cycle"   # still improves after |V|-1 passes


# ---------------------------------------------------------------------------
# Edge
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Edge:
    """
    Attributes:
        id     : Unique integer identifier within a graph.
        source : ID of the tail node.
        target : ID of the head node.
        weight : Numeric cost.  Negative weights are only legal for Bellman-Ford.
    """

    id:     int
    source: int
    target: int
    weight: float = 1

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id":     self.id,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        return cls(
            id=int(data["id"]),
            source=int(data["source"]),
            target=int(data["target"]),
            weight=_parse_weight(data.get("weight", 1)),
        )

    def __repr__(self) -> str:
        return f"Edge({self.id}: {self.source} → {self.target}, w={self.weight})"


def _parse_weight(value) -> float:
    """JSON weights must be finite numbers; bools and strings are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Edge weight must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"Edge weight must be finite, got {value!r}")
    return value
