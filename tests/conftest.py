import math

import pytest

from graph import Graph


@pytest.fixture
def dijkstra_graph() -> Graph:
    # A→B(1), A→C(4), B→C(2), B→D(5), C→D(1)
    return Graph.build("ABCD", [(0, 1, 1), (0, 2, 4), (1, 2, 2), (1, 3, 5), (2, 3, 1)])


@pytest.fixture
def bf_graph() -> Graph:
    # A→B(4), A→C(5), B→C(-2)
    return Graph.build("ABC", [(0, 1, 4), (0, 2, 5), (1, 2, -2)])


@pytest.fixture
def cycle_graph() -> Graph:
    # A→B(1), B→C(-3), C→B(1); B↔C is a negative cycle
    return Graph.build("ABC", [(0, 1, 1), (1, 2, -3), (2, 1, 1)])


@pytest.fixture
def disconnected_graph() -> Graph:
    # A→B(2), C isolated
    return Graph.build("ABC", [(0, 1, 2)])


def _brute_force_distances(graph: Graph, source: int) -> dict:
    """Minimum cost over every simple path from source."""
    best = {nid: math.inf for nid in graph.node_ids()}

    def walk(node, cost, on_path):
        best[node] = min(best[node], cost)
        for edge in graph.edges_from(node):
            if edge.target not in on_path:
                walk(edge.target, cost + edge.weight, on_path | {edge.target})

    walk(source, 0, {source})
    return best


@pytest.fixture
def brute_force():
    return _brute_force_distances
