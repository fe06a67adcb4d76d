"""
step.py — Algorithm Step Snapshot
==================================
Every engine is a generator that yields Step objects.
A Step is a frozen-in-time picture of everything a consumer needs to
render one frame:

    • The distance array and best-known predecessors
    • The edge under examination and the outcome of relaxing it
    • The min-heap view and visited set           (Dijkstra)
    • The pass number and pass totals               (Bellman-Ford)
    • Which line of pseudocode is executing right now
    • A plain-English description of the action

Design decisions:
  - Step is a frozen dataclass and its mappings are read-only proxies.
    The engine generator is the only writer; the Stepper and any
    renderer are pure readers.
  - The two engines get their own Step subclasses.  `algorithm` is the
    discriminator and `kind` says which decision point produced it.
  - Infinity is kept as math.inf in memory and only turned into the
    explicit "∞" marker when serialised or formatted for display.
"""

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type

from graph.edge import EdgeState


INF = math.inf
INFINITY_MARKER = "∞"


class StepKind(Enum):
    INIT           = "init"             # distances initialised
    EXAMINE        = "examine"          # about to pop the heap top
    VISIT          = "visit"            # popped node finalised
    SKIP           = "skip"             # popped entry was stale
    RELAX          = "relax"            # one edge examined
    PASS_START     = "pass_start"       # Bellman-Ford pass begins
    PASS_COMPLETE  = "pass_complete"    # Bellman-Ford pass summary
    VERIFY         = "verify"           # negative-cycle check begins
    DONE           = "done"             # terminal, result is final
    NEGATIVE_CYCLE = "negative_cycle"   # terminal, result is NOT valid
    EMPTY          = "empty"            # controller not started


# kinds that open one outer iteration; cancellation is polled on these
OUTER_KINDS = frozenset({StepKind.EXAMINE, StepKind.PASS_START})


def format_distance(value: float) -> str:
    """Display form of a distance: '∞' for unreachable, no trailing '.0'."""
    if value == INF:
        return INFINITY_MARKER
    if value == -INF:
        return "-" + INFINITY_MARKER
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_distance(value: float) -> Any:
    """JSON-safe form of a distance.  Finite values stay numeric."""
    if math.isinf(value):
        return format_distance(value)
    return value


# ---------------------------------------------------------------------------
# Leaf records
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class HeapEntry:
    id:   int
    dist: float

    def to_dict(self) -> dict:
        return {"id": self.id, "dist": encode_distance(self.dist)}


@dataclass(frozen=True)
class Relaxation:
    """
    One edge relaxation attempt.

    before    : dist[target] before the attempt
    candidate : dist[source] + weight (∞ when the source is unreachable)
    after     : dist[target] after the attempt (== before unless improved)
    """

    edge_id:   int
    source:    int
    target:    int
    weight:    float
    before:    float
    candidate: float
    after:     float
    improved:  bool
    status:    EdgeState

    def to_dict(self) -> dict:
        return {
            "edge_id":   self.edge_id,
            "source":    self.source,
            "target":    self.target,
            "weight":    self.weight,
            "before":    encode_distance(self.before),
            "candidate": encode_distance(self.candidate),
            "after":     encode_distance(self.after),
            "improved":  self.improved,
            "status":    self.status.value,
        }


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Step:
    """
    Attributes:
        index           : 0-based position in the trace (trace[i].index == i).
        kind            : Which decision point produced this step.
        description     : Human-readable action label.
        distances       : {node_id: distance}, math.inf for unreachable.
        predecessors    : {node_id: parent_id or None} on the best path so far.
        iteration       : Heap pops so far (Dijkstra) or pass number (Bellman-Ford).
        relaxation      : The edge under examination, if any.
        pseudocode_line : 0-based index into the engine's PSEUDOCODE.
        is_final        : True on the very last step of a run.
    """

    algorithm: ClassVar[str] = ""

    index:           int
    kind:            StepKind
    description:     str
    distances:       Mapping[int, float]           = field(default_factory=dict)
    predecessors:    Mapping[int, Optional[int]]   = field(default_factory=dict)
    iteration:       int                           = 0
    relaxation:      Optional[Relaxation]          = None
    pseudocode_line: int                           = 0
    is_final:        bool                          = False

    def __post_init__(self):
        object.__setattr__(self, "distances", MappingProxyType(dict(self.distances)))
        object.__setattr__(self, "predecessors", MappingProxyType(dict(self.predecessors)))

    @property
    def active_edge(self) -> Optional[int]:
        return self.relaxation.edge_id if self.relaxation else None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "algorithm":       self.algorithm,
            "index":           self.index,
            "kind":            self.kind.value,
            "description":     self.description,
            "distances":       {str(k): encode_distance(v) for k, v in sorted(self.distances.items())},
            "predecessors":    {str(k): v for k, v in sorted(self.predecessors.items())},
            "iteration":       self.iteration,
            "active_edge":     self.active_edge,
            "relaxation":      self.relaxation.to_dict() if self.relaxation else None,
            "pseudocode_line": self.pseudocode_line,
            "is_final":        self.is_final,
        }
        base = {f.name for f in fields(Step)}
        for f in fields(self):
            if f.name not in base:
                out[f.name] = _encode_extra(getattr(self, f.name))
        return out


@dataclass(frozen=True)
class DijkstraStep(Step):
    """
    visited      : Finalised node ids, in finalisation order.
    heap         : Min-heap view, element 0 is the next entry to pop.
                   Ties are broken by ascending node id.
    current_node : Node at the heap top / just popped, if any.
    """

    algorithm: ClassVar[str] = "dijkstra"

    visited:      Tuple[int, ...]       = ()
    heap:         Tuple[HeapEntry, ...] = ()
    current_node: Optional[int]         = None


@dataclass(frozen=True)
class BellmanFordStep(Step):
    """
    total_passes            : |V| - 1, the number of passes planned.
    improvements            : Improvements made in this pass so far.
    negative_cycle_detected : Set on the terminal step only.
    cycle_edges             : Edges that still improve in the verification pass.
    """

    algorithm: ClassVar[str] = "bellman_ford"

    total_passes:            int             = 0
    improvements:            int             = 0
    negative_cycle_detected: bool            = False
    cycle_edges:             Tuple[int, ...] = ()


EMPTY_STEP = Step(index=-1, kind=StepKind.EMPTY, description="Not started.")


def _encode_extra(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_encode_extra(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


# ---------------------------------------------------------------------------
# Builder so engines don't have to spell out every kwarg
# ---------------------------------------------------------------------------
class StepBuilder:
    """
    Scratch-pad that engines use to construct indexed Steps.

    The builder holds references to the engine's live `distances` and
    `predecessors` dicts; every build() snapshots them, so a Step never
    changes after it is yielded.

    Usage inside an engine generator:
        sb = StepBuilder(DijkstraStep, dist, parent)
        yield sb.build(StepKind.VISIT, "Pop 'A' …", pseudocode_line=8, visited=(0,))
    """

    def __init__(
        self,
        step_cls: Type[Step],
        distances: Dict[int, float],
        predecessors: Dict[int, Optional[int]],
    ):
        self.step_cls     = step_cls
        self.distances    = distances
        self.predecessors = predecessors
        self.step_no      = 0

    def build(
        self,
        kind: StepKind,
        description: str,
        is_final: bool = False,
        **extra: Any,
    ) -> Step:
        step = self.step_cls(
            index=self.step_no,
            kind=kind,
            description=description,
            distances=self.distances,
            predecessors=self.predecessors,
            is_final=is_final,
            **extra,
        )
        self.step_no += 1
        return step
