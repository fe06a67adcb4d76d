"""
Tests for the immutable Graph model.
"""

import dataclasses

import pytest

from algorithms import bellman_ford
from graph import Edge, Graph, Node, UnknownNodeError


class TestConstruction:

    def test_build_assigns_ids_and_labels(self, dijkstra_graph):
        assert dijkstra_graph.node_ids() == [0, 1, 2, 3]
        assert dijkstra_graph.get_node(2).label == "C"
        assert dijkstra_graph.edge_count() == 5

    def test_unknown_edge_target_rejected(self):
        with pytest.raises(UnknownNodeError) as err:
            Graph([Node(0, "A")], [Edge(0, 0, 7, 1)])
        assert err.value.node_id == 7

    def test_unknown_edge_source_rejected(self):
        with pytest.raises(UnknownNodeError):
            Graph([Node(0, "A")], [Edge(0, 3, 0, 1)])

    def test_duplicate_node_id_rejected(self):
        with pytest.raises(ValueError):
            Graph([Node(0, "A"), Node(0, "B")])

    def test_duplicate_edge_id_rejected(self):
        with pytest.raises(ValueError):
            Graph([Node(0), Node(1)], [Edge(0, 0, 1), Edge(0, 1, 0)])

    def test_require_node(self, dijkstra_graph):
        assert dijkstra_graph.require_node(0).label == "A"
        with pytest.raises(UnknownNodeError):
            dijkstra_graph.require_node(42)

    def test_undirected_build_makes_opposing_edges(self):
        g = Graph.build("AB", [(0, 1, 3)], directed=False)
        assert [(e.source, e.target, e.weight) for e in g.edges] == [(0, 1, 3), (1, 0, 3)]


class TestImmutability:

    def test_nodes_mapping_is_read_only(self, dijkstra_graph):
        with pytest.raises(TypeError):
            dijkstra_graph.nodes[9] = Node(9, "Z")

    def test_edges_are_frozen(self, dijkstra_graph):
        with pytest.raises(dataclasses.FrozenInstanceError):
            dijkstra_graph.edges[0].weight = 100

    def test_edges_is_a_tuple(self, dijkstra_graph):
        assert isinstance(dijkstra_graph.edges, tuple)


class TestAdjacency:

    def test_edges_from_keeps_sequence_order(self, dijkstra_graph):
        assert [e.id for e in dijkstra_graph.edges_from(1)] == [2, 3]
        assert dijkstra_graph.edges_from(3) == ()

    def test_negative_edges(self, bf_graph, dijkstra_graph):
        assert bf_graph.has_negative_edges()
        assert [e.id for e in bf_graph.negative_edges()] == [2]
        assert not dijkstra_graph.has_negative_edges()


class TestSerialisation:

    def test_dict_round_trip(self, bf_graph):
        again = Graph.from_dict(bf_graph.to_dict())
        assert again == bf_graph
        assert again.edges[2].weight == -2

    @pytest.mark.parametrize("weight", ["5", None, False, float("nan"), float("inf")])
    def test_bad_weight_rejected(self, weight):
        data = {"nodes": [{"id": 0}, {"id": 1}], "edges": [{"id": 0, "source": 0, "target": 1, "weight": weight}]}
        with pytest.raises(ValueError):
            Graph.from_dict(data)

    def test_missing_weight_defaults_to_one(self):
        g = Graph.from_dict({"nodes": [{"id": 0}, {"id": 1}], "edges": [{"id": 0, "source": 0, "target": 1}]})
        assert g.edges[0].weight == 1


class TestGenerateRandom:

    def test_seeded_generation_is_deterministic(self):
        a = Graph.generate_random(num_nodes=7, seed=3)
        b = Graph.generate_random(num_nodes=7, seed=3)
        assert a == b

    def test_every_node_reachable_from_zero(self):
        g = Graph.generate_random(num_nodes=9, edge_probability=0.0, seed=11)
        seen, stack = {0}, [0]
        while stack:
            for e in g.edges_from(stack.pop()):
                if e.target not in seen:
                    seen.add(e.target)
                    stack.append(e.target)
        assert seen == set(g.node_ids())

    def test_labels_are_letters(self):
        g = Graph.generate_random(num_nodes=3, seed=1)
        assert [g.label(i) for i in g.node_ids()] == ["A", "B", "C"]

    def test_negative_chance_produces_negative_weights(self):
        g = Graph.generate_random(num_nodes=10, edge_probability=0.5, negative_chance=1.0, seed=5)
        assert all(e.weight < 0 for e in g.edges)

    def test_zero_nodes_rejected(self):
        with pytest.raises(ValueError):
            Graph.generate_random(num_nodes=0)


class TestNegativeCycleGeneration:

    @pytest.mark.parametrize("seed", range(12))
    def test_bellman_ford_detects_injected_cycle(self, seed):
        g = Graph.generate_random(num_nodes=7, edge_probability=0.25, seed=seed, negative_cycle=True)
        assert bellman_ford.run(g, 0).negative_cycle_detected

    @pytest.mark.parametrize("num_nodes", [2, 3])
    def test_small_graphs(self, num_nodes):
        g = Graph.generate_random(num_nodes=num_nodes, seed=4, negative_cycle=True)
        assert bellman_ford.run(g, 0).negative_cycle_detected

    def test_undirected_gets_one_negative_edge_pair(self):
        g = Graph.generate_random(num_nodes=5, seed=8, directed=False, negative_cycle=True)
        negative = g.negative_edges()
        assert len(negative) == 2
        assert negative[0].source == negative[1].target
        assert bellman_ford.run(g, 0).negative_cycle_detected

    def test_deterministic(self):
        a = Graph.generate_random(num_nodes=6, seed=9, negative_cycle=True)
        b = Graph.generate_random(num_nodes=6, seed=9, negative_cycle=True)
        assert a == b

    def test_needs_two_nodes(self):
        with pytest.raises(ValueError):
            Graph.generate_random(num_nodes=1, negative_cycle=True)
