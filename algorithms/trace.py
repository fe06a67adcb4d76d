"""
trace.py — Step Trace
======================
The ordered, frozen record of one engine run.  It is the only contract
between the engines and their consumers (Stepper, Recorder, the API).

Invariants checked on construction:
  • the trace is non-empty
  • trace[i].index == i
  • only the last step has is_final set, and it is set
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, overload

from algorithms.step import INF, Step, StepKind, encode_distance


# ---------------------------------------------------------------------------
# PathResult — the answer, read off the final step
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PathResult:
    """
    valid is False when Bellman-Ford detected a negative cycle.  The
    distances are then the state at detection time, NOT shortest paths,
    and `paths` is empty.
    """

    source:         Optional[int]
    distances:      Dict[int, float]           = field(default_factory=dict)
    predecessors:   Dict[int, Optional[int]]   = field(default_factory=dict)
    paths:          Dict[int, List[int]]       = field(default_factory=dict)
    negative_cycle: bool                       = False

    @property
    def valid(self) -> bool:
        return not self.negative_cycle

    def distance_to(self, node_id: int) -> float:
        return self.distances.get(node_id, INF)

    def is_reachable(self, node_id: int) -> bool:
        return self.distances.get(node_id, INF) != INF

    def to_dict(self) -> dict:
        return {
            "source":         self.source,
            "valid":          self.valid,
            "negative_cycle": self.negative_cycle,
            "distances":      {str(k): encode_distance(v) for k, v in sorted(self.distances.items())},
            "paths":          {str(k): list(v) for k, v in sorted(self.paths.items())},
        }


# ---------------------------------------------------------------------------
# StepTrace
# ---------------------------------------------------------------------------
class StepTrace(Sequence):
    """
    Attributes:
        algorithm : Registry key of the engine that produced it.
        source    : Source node id of the run.
    """

    __slots__ = ("_steps", "algorithm", "source")

    def __init__(self, steps: Iterable[Step], algorithm: str = "", source: Optional[int] = None):
        steps = tuple(steps)
        if not steps:
            raise ValueError("A StepTrace needs at least one step")
        for i, step in enumerate(steps):
            if step.index != i:
                raise ValueError(f"Step at position {i} has index {step.index}")
            if step.is_final != (i == len(steps) - 1):
                raise ValueError(f"Step {i}: is_final must be set on the last step only")
        self._steps    = steps
        self.algorithm = algorithm
        self.source    = source

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------
    @overload
    def __getitem__(self, i: int) -> Step: ...

    @overload
    def __getitem__(self, i: slice) -> Sequence[Step]: ...

    def __getitem__(self, i):
        return self._steps[i]

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    # ------------------------------------------------------------------
    # Outcome
    # ------------------------------------------------------------------
    @property
    def final(self) -> Step:
        return self._steps[-1]

    @property
    def negative_cycle_detected(self) -> bool:
        return self.final.kind is StepKind.NEGATIVE_CYCLE

    def result(self) -> PathResult:
        """The run's answer.  Nothing is recomputed, only read and walked."""
        last = self.final
        distances = dict(last.distances)
        preds = dict(last.predecessors)
        if self.negative_cycle_detected:
            return PathResult(self.source, distances, preds, {}, negative_cycle=True)

        paths: Dict[int, List[int]] = {}
        for nid, d in distances.items():
            if d == INF:
                continue
            path, cur = [], nid
            while cur is not None:
                path.append(cur)
                cur = preds.get(cur)
            path.reverse()
            paths[nid] = path
        return PathResult(self.source, distances, preds, paths, negative_cycle=False)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dicts(self) -> List[dict]:
        return [s.to_dict() for s in self._steps]

    def to_json(self) -> str:
        """Stable JSON form; equal traces give byte-identical output."""
        payload = {
            "algorithm": self.algorithm,
            "source":    self.source,
            "steps":     self.to_dicts(),
        }
        return json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"))

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __eq__(self, other) -> bool:
        return (
            isinstance(other, StepTrace)
            and self.algorithm == other.algorithm
            and self.source == other.source
            and self._steps == other._steps
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"StepTrace(algorithm={self.algorithm}, source={self.source}, steps={len(self)})"
