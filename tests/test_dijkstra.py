"""
Tests for the Dijkstra engine.
"""

import math

import pytest

from graph import EdgeState, Graph, InvalidWeightError, UnknownNodeError
from algorithms import dijkstra
from algorithms.step import DijkstraStep, HeapEntry, StepKind


class TestScenario:
    """A→B(1), A→C(4), B→C(2), B→D(5), C→D(1) from A."""

    def test_final_distances(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        assert dict(trace.final.distances) == {0: 0, 1: 1, 2: 3, 3: 4}

    def test_step_sequence(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        K = StepKind
        assert [s.kind for s in trace] == [
            K.INIT,
            K.EXAMINE, K.VISIT, K.RELAX, K.RELAX,       # A
            K.EXAMINE, K.VISIT, K.RELAX, K.RELAX,       # B
            K.EXAMINE, K.VISIT, K.RELAX,                # C
            K.EXAMINE, K.SKIP,                          # stale (4, C)
            K.EXAMINE, K.VISIT,                         # D
            K.DONE,
        ]

    def test_heap_when_c_is_popped(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        visit_c = next(s for s in trace if s.kind is StepKind.VISIT and s.current_node == 2)
        examine = trace[visit_c.index - 1]
        assert examine.kind is StepKind.EXAMINE
        assert examine.heap[0] == HeapEntry(id=2, dist=3)
        assert examine.heap[:3] == (HeapEntry(2, 3), HeapEntry(2, 4), HeapEntry(3, 6))

    def test_heap_ties_broken_by_id(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        # after C is finalised, (4, C) and (4, D) tie; C has the lower id
        stale = next(s for s in trace if s.kind is StepKind.SKIP)
        examine = trace[stale.index - 1]
        assert [e.id for e in examine.heap[:2]] == [2, 3]
        assert examine.heap[0].dist == examine.heap[1].dist == 4

    def test_visited_in_finalisation_order(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        assert trace.final.visited == (0, 1, 2, 3)

    def test_relaxation_records(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        relax = [s.relaxation for s in trace if s.kind is StepKind.RELAX]
        assert [r.edge_id for r in relax] == [0, 1, 2, 3, 4]
        b_to_c = relax[2]
        assert (b_to_c.before, b_to_c.candidate, b_to_c.after) == (4, 3, 3)
        assert b_to_c.improved
        assert b_to_c.status is EdgeState.INCLUDED

    def test_skip_emits_no_relaxation(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        skip = next(s for s in trace if s.kind is StepKind.SKIP)
        assert skip.relaxation is None
        assert trace[skip.index + 1].kind is StepKind.EXAMINE
        assert trace[skip.index + 1].iteration == skip.iteration + 1

    def test_steps_are_dijkstra_steps(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        assert all(isinstance(s, DijkstraStep) for s in trace)
        assert trace.algorithm == "dijkstra"


class TestNoImprovement:

    def test_non_improving_edge_is_excluded(self):
        g = Graph.build("ABC", [(0, 1, 1), (0, 2, 1), (1, 2, 5)])
        trace = dijkstra.run(g, 0)
        relax = [s.relaxation for s in trace if s.kind is StepKind.RELAX]
        last = relax[-1]
        assert last.edge_id == 2
        assert not last.improved
        assert last.after == last.before == 1
        assert last.status is EdgeState.EXCLUDED

    def test_edges_into_visited_nodes_are_not_examined(self):
        g = Graph.build("AB", [(0, 1, 1)], directed=False)
        trace = dijkstra.run(g, 0)
        relax = [s.relaxation.edge_id for s in trace if s.kind is StepKind.RELAX]
        assert relax == [0]


class TestUnreachable:

    def test_unreachable_keeps_infinity(self, disconnected_graph):
        trace = dijkstra.run(disconnected_graph, 0)
        assert trace.final.distances[2] == math.inf
        assert trace.final.distances[1] == 2
        assert 2 not in trace.result().paths

    def test_description_names_unreachable(self, disconnected_graph):
        trace = dijkstra.run(disconnected_graph, 0)
        assert "Unreachable: C" in trace.final.description


class TestValidation:

    def test_negative_weight_rejected(self, bf_graph):
        with pytest.raises(InvalidWeightError) as err:
            dijkstra.run(bf_graph, 0)
        assert err.value.edge.id == 2

    def test_unknown_source_rejected(self, dijkstra_graph):
        with pytest.raises(UnknownNodeError):
            dijkstra.run(dijkstra_graph, 99)


class TestProperties:

    @pytest.mark.parametrize("seed", range(15))
    def test_matches_brute_force(self, seed, brute_force):
        g = Graph.generate_random(num_nodes=6, edge_probability=0.35, seed=seed)
        trace = dijkstra.run(g, 0)
        assert dict(trace.final.distances) == brute_force(g, 0)

    def test_source_distance_never_changes(self, dijkstra_graph):
        trace = dijkstra.run(dijkstra_graph, 0)
        assert all(s.distances[0] == 0 for s in trace)

    def test_distances_never_increase(self):
        g = Graph.generate_random(num_nodes=7, edge_probability=0.4, seed=21)
        trace = dijkstra.run(g, 0)
        for prev, cur in zip(trace, trace[1:]):
            for nid in g.node_ids():
                assert cur.distances[nid] <= prev.distances[nid]

    def test_deterministic(self, dijkstra_graph):
        a = dijkstra.run(dijkstra_graph, 0)
        b = dijkstra.run(dijkstra_graph, 0)
        assert a == b
        assert a.to_json() == b.to_json()
