"""
dijkstra.py — Dijkstra's Shortest-Path Algorithm
==================================================
Generator-based Dijkstra over a lazy-deletion min-heap (heapq).

Yields a Step at:
  1. Initialise distances, push every node          →  INIT
  2. About to pop the heap top                       →  EXAMINE
  3a. Popped entry belongs to a finalised node       →  SKIP
  3b. Popped node is finalised                       →  VISIT
  4. Each outgoing edge to an unvisited node         →  RELAX
  5. All nodes finalised or heap empty               →  DONE

Heap entries are (distance, node_id) tuples, so the min-heap order and
the snapshot order agree: lowest distance first, ties by lowest id.

Correctness note: Dijkstra requires non-negative weights.
validate() rejects a negative edge before any step is produced.
"""

import heapq
from typing import Dict, Generator, List, Optional, Set, Tuple

from graph import Graph, EdgeState, InvalidWeightError
from algorithms.step import (
    INF, DijkstraStep, HeapEntry, Relaxation, StepBuilder, StepKind, format_distance,
)
from algorithms.trace import StepTrace


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def Dijkstra(graph, source):",                  # 0
    "    dist ← {v: ∞ for v in V}",                  # 1
    "    dist[source] ← 0",                          # 2
    "    heap ← [(dist[v], v) for v in V]",          # 3
    "    visited ← []",                              # 4
    "    while heap and |visited| < |V|:",           # 5
    "        (d, u) ← heap.pop_min()",               # 6
    "        if u in visited: continue",             # 7
    "        visited.append(u)",                     # 8
    "        for (u, v, w) in out(u), v ∉ visited:", # 9
    "            cand ← dist[u] + w",                # 10
    "            if cand < dist[v]:",                # 11
    "                dist[v] ← cand",                # 12
    "                heap.push((cand, v))",          # 13
    "    return dist",                               # 14
]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate(graph: Graph, source: int) -> None:
    """Raise UnknownNodeError / InvalidWeightError; emits nothing."""
    graph.require_node(source)
    for edge in graph.edges:
        if edge.weight < 0:
            raise InvalidWeightError(edge)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
def dijkstra(graph: Graph, source: int) -> Generator[DijkstraStep, None, None]:
    ids = graph.node_ids()
    lbl = graph.label

    dist:   Dict[int, float]         = {nid: INF for nid in ids}
    parent: Dict[int, Optional[int]] = {nid: None for nid in ids}
    dist[source] = 0

    heap: List[Tuple[float, int]] = [(dist[nid], nid) for nid in ids]
    heapq.heapify(heap)

    visited:     List[int] = []
    visited_set: Set[int]  = set()
    pops = 0

    def snapshot() -> Tuple[HeapEntry, ...]:
        return tuple(HeapEntry(nid, d) for d, nid in sorted(heap))

    sb = StepBuilder(DijkstraStep, dist, parent)

    # --- init step ---
    yield sb.build(
        StepKind.INIT,
        f"Initialise: dist['{lbl(source)}'] = 0, all others = ∞. "
        f"Push all {len(ids)} nodes into the min-heap.",
        pseudocode_line=3,
        heap=snapshot(),
        current_node=source,
    )

    # --- main loop ---
    while heap and len(visited) < len(ids):
        pops += 1
        d, node = heap[0]

        yield sb.build(
            StepKind.EXAMINE,
            f"Examine heap top: '{lbl(node)}' with distance {format_distance(d)}.",
            pseudocode_line=6,
            iteration=pops,
            visited=tuple(visited),
            heap=snapshot(),
            current_node=node,
        )

        heapq.heappop(heap)

        # stale entry (lazy deletion)
        if node in visited_set:
            yield sb.build(
                StepKind.SKIP,
                f"Pop (dist={format_distance(d)}, '{lbl(node)}') — already finalised "
                f"at {format_distance(dist[node])}. Stale entry, skip.",
                pseudocode_line=7,
                iteration=pops,
                visited=tuple(visited),
                heap=snapshot(),
                current_node=node,
            )
            continue

        visited.append(node)
        visited_set.add(node)

        yield sb.build(
            StepKind.VISIT,
            f"Pop '{lbl(node)}' with distance {format_distance(d)}. "
            f"This distance is now FINAL.",
            pseudocode_line=8,
            iteration=pops,
            visited=tuple(visited),
            heap=snapshot(),
            current_node=node,
        )

        # -- relax neighbours --
        for edge in graph.edges_from(node):
            nbr = edge.target
            if nbr in visited_set:
                continue

            before    = dist[nbr]
            candidate = dist[node] + edge.weight
            improved  = candidate < before

            if improved:
                dist[nbr]   = candidate
                parent[nbr] = node
                heapq.heappush(heap, (candidate, nbr))
                desc = (
                    f"Relax {lbl(node)}→{lbl(nbr)}: {format_distance(dist[node])} + {edge.weight} = "
                    f"{format_distance(candidate)} < {format_distance(before)} → UPDATE!"
                )
            else:
                desc = (
                    f"Edge {lbl(node)}→{lbl(nbr)}: {format_distance(dist[node])} + {edge.weight} = "
                    f"{format_distance(candidate)} ≥ {format_distance(before)} → no improvement."
                )

            yield sb.build(
                StepKind.RELAX,
                desc,
                pseudocode_line=13 if improved else 11,
                iteration=pops,
                relaxation=Relaxation(
                    edge_id=edge.id,
                    source=node,
                    target=nbr,
                    weight=edge.weight,
                    before=before,
                    candidate=candidate,
                    after=dist[nbr],
                    improved=improved,
                    status=EdgeState.INCLUDED if improved else EdgeState.EXCLUDED,
                ),
                visited=tuple(visited),
                heap=snapshot(),
                current_node=node,
            )

    # --- done ---
    unreachable = [lbl(nid) for nid in ids if dist[nid] == INF]
    desc = f"Dijkstra complete after {pops} heap pops. Distances finalised."
    if unreachable:
        desc += f" Unreachable: {', '.join(unreachable)}."
    yield sb.build(
        StepKind.DONE,
        desc,
        is_final=True,
        pseudocode_line=14,
        iteration=pops,
        visited=tuple(visited),
        heap=snapshot(),
    )


# ---------------------------------------------------------------------------
def run(graph: Graph, source: int) -> StepTrace:
    """Validate, then run to completion.  No trace exists if validation fails."""
    validate(graph, source)
    return StepTrace(dijkstra(graph, source), algorithm="dijkstra", source=source)
