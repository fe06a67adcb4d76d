"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every engine the recorder knows about.

    from algorithms import REGISTRY, get_algorithm

REGISTRY is a dict:
    {
        "dijkstra": AlgoInfo(key, label, fn, validate, pseudocode, …),
        …
    }

Every engine is the same capability: validate(graph, source) raises
before anything runs, fn(graph, source) yields Steps.  AlgoInfo.run()
glues the two into a frozen StepTrace, so adding Prim / Kruskal later
is: write the generator, add one entry here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from graph import Graph
from algorithms.step  import Step
from algorithms.trace import StepTrace

# ---------------------------------------------------------------------------
# Import all algorithm modules
# ---------------------------------------------------------------------------
from algorithms.dijkstra     import dijkstra     as _dijkstra, validate as _dij_validate, PSEUDOCODE as _dij_pc
from algorithms.bellman_ford import bellman_ford as _bf,       validate as _bf_validate,  PSEUDOCODE as _bf_pc


# ---------------------------------------------------------------------------
# AlgoInfo — metadata card for each engine
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:               str                    # registry key, e.g. "dijkstra"
    label:             str                    # human label, e.g. "Dijkstra's Algorithm"
    fn:                Callable               # the generator function
    validate:          Callable               # raises GraphError before any step
    pseudocode:        List[str]              # lines for the side-panel
    tags:              List[str] = field(default_factory=list)
    supports_negative: bool     = False       # can handle negative edges?
    options:           List[str] = field(default_factory=list)   # extra kwargs fn accepts
    complexity_time:   str      = ""
    complexity_space:  str      = ""
    description:       str      = ""

    def steps(self, graph: Graph, source: int, **options: Any) -> Iterator[Step]:
        """Validate eagerly, then hand back the lazy step generator."""
        self.validate(graph, source)
        kwargs = {k: v for k, v in options.items() if k in self.options}
        return self.fn(graph, source, **kwargs)

    def run(self, graph: Graph, source: int, **options: Any) -> StepTrace:
        return StepTrace(self.steps(graph, source, **options), algorithm=self.key, source=source)


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "dijkstra": AlgoInfo(
        key="dijkstra", label="Dijkstra's Algorithm", fn=_dijkstra,
        validate=_dij_validate, pseudocode=_dij_pc,
        tags=["weighted", "shortest-path", "min-heap"],
        complexity_time="O((V + E) log V)", complexity_space="O(V + E)",
        description="Greedily finalises the closest node. Requires non-negative weights.",
    ),

    "bellman_ford": AlgoInfo(
        key="bellman_ford", label="Bellman–Ford", fn=_bf,
        validate=_bf_validate, pseudocode=_bf_pc,
        tags=["weighted", "shortest-path", "negative-edges"],
        supports_negative=True, options=["early_stop"],
        complexity_time="O(V · E)", complexity_space="O(V)",
        description="Handles negative edges. Detects negative cycles. Slower than Dijkstra.",
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: str) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    return REGISTRY.get(key)


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


__all__ = [
    "AlgoInfo",
    "REGISTRY",
    "get_algorithm",
    "list_algorithms",
]
