"""
recorder.py — Run Recorder & Analytics
========================================
Drives one engine to completion, freezes its steps into a StepTrace,
then computes the metrics the analytics and comparison views need.

Usage:
    trace = record("dijkstra", graph, source=0)      # StepTrace or Cancelled

    rec = Recorder()
    rec.start(algo_key="bellman_ford", graph=g, source=0)
    metrics = rec.run_to_completion()
    stepper = rec.stepper()                          # Playback Controller

Comparison Mode:
    Two Recorders run different engines on the SAME graph, then
    compare(rec1, rec2) → ComparisonResult.

Cancellation:
    should_abort() is polled once per outer iteration (each heap pop
    for Dijkstra, each pass for Bellman-Ford).  A True answer closes the
    generator and returns Cancelled; no partial trace escapes.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from graph import Graph, GraphError
from algorithms import AlgoInfo, get_algorithm
from algorithms.step  import OUTER_KINDS, Step, StepKind
from algorithms.trace import StepTrace
from engine.stepper   import Stepper


_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cancelled:
    """Distinguishable result of a run stopped by should_abort()."""

    algo_key:       str
    steps_recorded: int


RunOutcome = Union[StepTrace, Cancelled]


def record(
    algo_key: str,
    graph: Graph,
    source: int,
    should_abort: Optional[Callable[[], bool]] = None,
    **options: Any,
) -> RunOutcome:
    """
    Validate and run one engine.  GraphError subclasses propagate before
    any step exists; an unknown key is a ValueError.
    """
    info = get_algorithm(algo_key)
    if info is None:
        raise ValueError(f"Unknown algorithm: {algo_key}")

    _LOGGER.debug("Running %s from source %s on %r", algo_key, source, graph)
    try:
        gen = info.steps(graph, source, **options)
    except GraphError as exc:
        _LOGGER.info("Validation failed for %s: %s", algo_key, exc)
        raise

    steps: List[Step] = []
    for step in gen:
        if should_abort is not None and step.kind in OUTER_KINDS and should_abort():
            gen.close()
            _LOGGER.warning("%s cancelled after %d steps", algo_key, len(steps))
            return Cancelled(algo_key=algo_key, steps_recorded=len(steps))
        steps.append(step)

    trace = StepTrace(steps, algorithm=algo_key, source=source)
    _LOGGER.debug(
        "%s finished: %d steps, negative_cycle=%s",
        algo_key, len(trace), trace.negative_cycle_detected,
    )
    return trace


# ---------------------------------------------------------------------------
# Metrics dataclass — what the analytics view renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    algo_key:        str   = ""
    algo_label:      str   = ""
    source:          Optional[int] = None
    total_steps:     int   = 0          # number of Steps in the trace
    nodes_finalised: int   = 0          # Dijkstra visited set size
    edges_examined:  int   = 0          # RELAX steps
    improvements:    int   = 0          # RELAX steps that improved
    heap_pops:       int   = 0          # Dijkstra outer iterations
    passes:          int   = 0          # Bellman-Ford passes executed
    reachable:       int   = 0          # nodes with finite distance
    wall_time_ms:    float = 0.0        # wall-clock time to run to completion
    negative_cycle:  bool  = False
    cancelled:       bool  = False


# ---------------------------------------------------------------------------
# ComparisonResult — side-by-side analytics
# ---------------------------------------------------------------------------
@dataclass
class ComparisonResult:
    left:  RunMetrics = field(default_factory=RunMetrics)
    right: RunMetrics = field(default_factory=RunMetrics)
    # derived
    winner_steps:     str  = ""   # which run needed fewer steps
    winner_edges:     str  = ""   # which run examined fewer edges
    distances_agree:  bool = False


def compute_metrics(trace: StepTrace, info: Optional[AlgoInfo] = None, wall_ms: float = 0.0) -> RunMetrics:
    last = trace.final
    relax = [s for s in trace if s.kind is StepKind.RELAX]
    return RunMetrics(
        algo_key=trace.algorithm,
        algo_label=info.label if info else "",
        source=trace.source,
        total_steps=len(trace),
        nodes_finalised=len(getattr(last, "visited", ())),
        edges_examined=len(relax),
        improvements=sum(1 for s in relax if s.relaxation.improved),
        heap_pops=sum(1 for s in trace if s.kind is StepKind.EXAMINE),
        passes=sum(1 for s in trace if s.kind is StepKind.PASS_COMPLETE),
        reachable=sum(1 for d in last.distances.values() if d != float("inf")),
        wall_time_ms=round(wall_ms, 2),
        negative_cycle=trace.negative_cycle_detected,
    )


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        trace   : The frozen StepTrace (after run_to_completion), else None.
        metrics : Computed RunMetrics (after run_to_completion), else None.
    """

    def __init__(self):
        self.trace:   Optional[StepTrace]  = None
        self.metrics: Optional[RunMetrics] = None

        self._algo_info: Optional[AlgoInfo] = None
        self._graph:     Optional[Graph]    = None
        self._source:    Optional[int]      = None
        self._options:   Dict[str, Any]     = {}

    # ------------------------------------------------------------------
    # Setup & run
    # ------------------------------------------------------------------
    def start(self, algo_key: str, graph: Graph, source: int, **options: Any) -> None:
        """Select engine and inputs.  Any earlier trace is dropped."""
        info = get_algorithm(algo_key)
        if info is None:
            raise ValueError(f"Unknown algorithm: {algo_key}")
        self._algo_info = info
        self._graph     = graph
        self._source    = source
        self._options   = options
        self.trace      = None
        self.metrics    = None

    def run_to_completion(self, should_abort: Optional[Callable[[], bool]] = None) -> RunMetrics:
        """Record every step, compute metrics.  Validation errors propagate."""
        if self._algo_info is None:
            raise RuntimeError("Call start() first.")

        t0 = time.monotonic()
        outcome = record(self._algo_info.key, self._graph, self._source, should_abort, **self._options)
        wall_ms = (time.monotonic() - t0) * 1000

        if isinstance(outcome, Cancelled):
            self.metrics = RunMetrics(
                algo_key=self._algo_info.key,
                algo_label=self._algo_info.label,
                source=self._source,
                total_steps=outcome.steps_recorded,
                wall_time_ms=round(wall_ms, 2),
                cancelled=True,
            )
            return self.metrics

        self.trace   = outcome
        self.metrics = compute_metrics(outcome, self._algo_info, wall_ms)
        return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    def stepper(self, **kwargs: Any) -> Stepper:
        """A fresh Playback Controller over the recorded trace."""
        if self.trace is None:
            raise RuntimeError("No completed trace to replay.")
        return Stepper(self.trace, **kwargs)

    # ------------------------------------------------------------------
    # Export (serialisable snapshot)
    # ------------------------------------------------------------------
    def export(self) -> Dict[str, Any]:
        return {
            "algo_key": self._algo_info.key if self._algo_info else "",
            "source":   self._source,
            "graph":    self._graph.to_dict() if self._graph else {},
            "metrics":  asdict(self.metrics) if self.metrics else {},
            "result":   self.trace.result().to_dict() if self.trace else None,
            "steps":    self.trace.to_dicts() if self.trace else [],
        }


# ---------------------------------------------------------------------------
# Comparison helper
# ---------------------------------------------------------------------------
def compare(left: Recorder, right: Recorder) -> ComparisonResult:
    """Given two completed Recorders, produce a ComparisonResult."""
    l = left.metrics  or RunMetrics()
    r = right.metrics or RunMetrics()

    def winner(l_val, r_val, l_key, r_key):
        if l_val == r_val:
            return "tie"
        return l_key if l_val < r_val else r_key

    agree = False
    if left.trace is not None and right.trace is not None:
        lr, rr = left.trace.result(), right.trace.result()
        agree = lr.valid and rr.valid and lr.distances == rr.distances

    return ComparisonResult(
        left=l,
        right=r,
        winner_steps=winner(l.total_steps, r.total_steps, l.algo_label, r.algo_label),
        winner_edges=winner(l.edges_examined, r.edges_examined, l.algo_label, r.algo_label),
        distances_agree=agree,
    )
