"""
bellman_ford.py — Bellman–Ford Algorithm
=========================================
Single-source shortest paths that tolerates NEGATIVE edge weights and
reports negative cycles instead of a wrong answer.

Structure:
  • |V|-1 passes relaxing every edge in graph order.
  • A verification pass (iteration |V|) that applies nothing and flags
    any edge that would still improve its target.

Yields a Step for:
  1. Initialisation                               →  INIT
  2. Start of each pass                           →  PASS_START
  3. Every edge of every pass                     →  RELAX
  4. End-of-pass summary                          →  PASS_COMPLETE
  5. Start of the verification pass               →  VERIFY
  6. Terminal outcome                             →  DONE / NEGATIVE_CYCLE

Early stop: a pass with zero improvements is a fixed point, so the run
ends with DONE right after that pass's summary.  Passes that never ran
produce no steps.
"""

from typing import Dict, Generator, List, Optional

from graph import Graph, EdgeState
from algorithms.step import (
    INF, BellmanFordStep, Relaxation, StepBuilder, StepKind, format_distance,
)
from algorithms.trace import StepTrace


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def BellmanFord(graph, source):",             # 0
    "    dist ← {v: ∞ for v in V}",                # 1
    "    dist[source] ← 0",                        # 2
    "    parent ← {}",                             # 3
    "    for i in 1 … |V|-1:",                     # 4
    "        for each edge (u, v, w):",            # 5
    "            if dist[u] + w < dist[v]:",       # 6
    "                dist[v] ← dist[u] + w",       # 7
    "                parent[v] = u",               # 8
    "    // negative-cycle check:",                # 9
    "    for each edge (u, v, w):",                # 10
    "        if dist[u] + w < dist[v]:",           # 11
    "            return NEGATIVE CYCLE",           # 12
    "    return dist, parent",                     # 13
]


def validate(graph: Graph, source: int) -> None:
    """Only the source needs checking; any weight sign is legal."""
    graph.require_node(source)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
def bellman_ford(
    graph: Graph,
    source: int,
    early_stop: bool = True,
) -> Generator[BellmanFordStep, None, None]:

    ids = graph.node_ids()
    lbl = graph.label
    V   = len(ids)
    total_passes = V - 1

    dist:   Dict[int, float]         = {nid: INF for nid in ids}
    parent: Dict[int, Optional[int]] = {nid: None for nid in ids}
    dist[source] = 0

    sb = StepBuilder(BellmanFordStep, dist, parent)

    # -- init step --
    yield sb.build(
        StepKind.INIT,
        f"Bellman-Ford init: dist['{lbl(source)}'] = 0, all others = ∞. "
        f"Will run up to {total_passes} passes over all {graph.edge_count()} edges.",
        pseudocode_line=2,
        total_passes=total_passes,
    )

    # ==============================================================
    # MAIN PASSES
    # ==============================================================
    for it in range(1, V):
        improvements = 0

        yield sb.build(
            StepKind.PASS_START,
            f"── Pass {it} of {total_passes}: scan all edges ──",
            pseudocode_line=4,
            iteration=it,
            total_passes=total_passes,
        )

        for edge in graph.edges:
            u, v, w = edge.source, edge.target, edge.weight
            before = dist[v]

            if dist[u] == INF:
                candidate = INF
                improved  = False
                desc = f"Edge {lbl(u)}→{lbl(v)} (w={w}): '{lbl(u)}' unreachable so far — skip."
            else:
                candidate = dist[u] + w
                improved  = candidate < before
                if improved:
                    dist[v]   = candidate
                    parent[v] = u
                    improvements += 1
                    desc = (
                        f"Relax {lbl(u)}→{lbl(v)} (w={w}): {format_distance(dist[u])} + {w} = "
                        f"{format_distance(candidate)} < {format_distance(before)} "
                        f"→ UPDATE dist[{lbl(v)}] = {format_distance(candidate)}"
                    )
                else:
                    desc = (
                        f"Edge {lbl(u)}→{lbl(v)} (w={w}): {format_distance(dist[u])} + {w} = "
                        f"{format_distance(candidate)} ≥ {format_distance(before)} — no change."
                    )

            yield sb.build(
                StepKind.RELAX,
                desc,
                pseudocode_line=7 if improved else 6,
                iteration=it,
                relaxation=Relaxation(
                    edge_id=edge.id,
                    source=u,
                    target=v,
                    weight=w,
                    before=before,
                    candidate=candidate,
                    after=dist[v],
                    improved=improved,
                    status=EdgeState.INCLUDED if improved else EdgeState.EXCLUDED,
                ),
                total_passes=total_passes,
                improvements=improvements,
            )

        # -- pass summary --
        converged = improvements == 0
        if converged:
            desc = f"Pass {it} of {total_passes}: no improvement → distances converged."
        else:
            desc = f"Pass {it} of {total_passes} complete: {improvements} improvement(s)."
        yield sb.build(
            StepKind.PASS_COMPLETE,
            desc,
            pseudocode_line=4,
            iteration=it,
            total_passes=total_passes,
            improvements=improvements,
        )

        if converged and early_stop:
            yield sb.build(
                StepKind.DONE,
                f"✅ Converged after {it} of {total_passes} passes; no negative cycle. "
                f"Distances are final.",
                is_final=True,
                pseudocode_line=13,
                iteration=it,
                total_passes=total_passes,
            )
            return

    # ==============================================================
    # VERIFICATION PASS (iteration V): nothing is applied
    # ==============================================================
    yield sb.build(
        StepKind.VERIFY,
        "Negative-cycle check: one more pass over all edges, without updating…",
        pseudocode_line=10,
        iteration=V,
        total_passes=total_passes,
    )

    offending = [
        e for e in graph.edges
        if dist[e.source] != INF and dist[e.source] + e.weight < dist[e.target]
    ]

    if offending:
        first = offending[0]
        u, v, w = first.source, first.target, first.weight
        yield sb.build(
            StepKind.NEGATIVE_CYCLE,
            f"⚠️ NEGATIVE CYCLE detected via edge {lbl(u)}→{lbl(v)} (w={w}): "
            f"{format_distance(dist[u])} + {w} = {format_distance(dist[u] + w)} "
            f"< {format_distance(dist[v])}. Shortest paths are undefined!",
            is_final=True,
            pseudocode_line=12,
            iteration=V,
            relaxation=Relaxation(
                edge_id=first.id,
                source=u,
                target=v,
                weight=w,
                before=dist[v],
                candidate=dist[u] + w,
                after=dist[v],
                improved=True,
                status=EdgeState.NEGATIVE_CYCLE,
            ),
            total_passes=total_passes,
            negative_cycle_detected=True,
            cycle_edges=tuple(e.id for e in offending),
        )
        return

    yield sb.build(
        StepKind.DONE,
        "✅ No negative cycle. Distances are final.",
        is_final=True,
        pseudocode_line=13,
        iteration=V,
        total_passes=total_passes,
    )


# ---------------------------------------------------------------------------
def run(graph: Graph, source: int, early_stop: bool = True) -> StepTrace:
    """Validate, then run to completion (or to cycle detection)."""
    validate(graph, source)
    return StepTrace(
        bellman_ford(graph, source, early_stop=early_stop),
        algorithm="bellman_ford",
        source=source,
    )
