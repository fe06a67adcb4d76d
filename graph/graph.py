"""
graph.py — Immutable Graph Container
=====================================
Single source of truth for the graph an algorithm runs over.

Responsibilities:
  1. Validation at construction            (every endpoint must exist)
  2. Adjacency queries                      (edges_from, get_edge, …)
  3. Factory helpers                        (build, generate_random)
  4. Serialisation round-trip               (to_dict / from_dict)

Design decisions:
  - Nodes are held in a read-only mapping keyed by id; edges in a tuple
    whose order is the canonical relaxation order for Bellman-Ford.
  - A separate adjacency dict `_adj[node_id] → (edge, …)` is built once
    so outgoing-edge queries are O(degree), not O(E).  Outgoing edges
    keep their position from the edge sequence.
  - There are no mutators.  A new run on a changed graph builds a new Graph.
"""

import random
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from graph.edge import Edge
from graph.errors import UnknownNodeError
from graph.node import Node


class Graph:
    """
    Attributes:
        nodes : {node_id: Node}  (read-only view)
        edges : (Edge, …)        in canonical order
        _adj  : {node_id: (Edge, …)} outgoing edges
    """

    __slots__ = ("_nodes", "_edges", "_edge_index", "_adj")

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge] = ()):
        node_map: Dict[int, Node] = {}
        for node in nodes:
            if node.id in node_map:
                raise ValueError(f"Duplicate node id {node.id!r}")
            node_map[node.id] = node

        edge_list = tuple(edges)
        edge_index: Dict[int, Edge] = {}
        adj: Dict[int, List[Edge]] = {nid: [] for nid in node_map}
        for edge in edge_list:
            if edge.id in edge_index:
                raise ValueError(f"Duplicate edge id {edge.id!r}")
            if edge.source not in node_map:
                raise UnknownNodeError(edge.source, f"source of edge {edge.id}")
            if edge.target not in node_map:
                raise UnknownNodeError(edge.target, f"target of edge {edge.id}")
            edge_index[edge.id] = edge
            adj[edge.source].append(edge)

        self._nodes = MappingProxyType(node_map)
        self._edges = edge_list
        self._edge_index = MappingProxyType(edge_index)
        self._adj = MappingProxyType({nid: tuple(out) for nid, out in adj.items()})

    # ==================================================================
    # READ-ONLY ACCESS
    # ==================================================================
    @property
    def nodes(self) -> Mapping[int, Node]:
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    def get_node(self, node_id: int) -> Optional[Node]:
        return self._nodes.get(node_id)

    def require_node(self, node_id: int) -> Node:
        """Like get_node, but raise UnknownNodeError instead of returning None."""
        node = self._nodes.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    def get_edge(self, edge_id: int) -> Optional[Edge]:
        return self._edge_index.get(edge_id)

    def label(self, node_id: int) -> str:
        node = self._nodes.get(node_id)
        return node.display if node else str(node_id)

    # ==================================================================
    # ADJACENCY QUERIES
    # ==================================================================
    def edges_from(self, node_id: int) -> Tuple[Edge, ...]:
        """Outgoing edges of node_id, in edge-sequence order."""
        return self._adj.get(node_id, ())

    def node_ids(self) -> List[int]:
        return sorted(self._nodes)

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    def negative_edges(self) -> List[Edge]:
        return [e for e in self._edges if e.weight < 0]

    def has_negative_edges(self) -> bool:
        return any(e.weight < 0 for e in self._edges)

    # ==================================================================
    # SERIALISATION
    # ==================================================================
    def to_dict(self) -> dict:
        return {
            "nodes": [self._nodes[nid].to_dict() for nid in self.node_ids()],
            "edges": [e.to_dict() for e in self._edges],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Graph":
        return cls(
            nodes=[Node.from_dict(nd) for nd in data.get("nodes", [])],
            edges=[Edge.from_dict(ed) for ed in data.get("edges", [])],
        )

    # ==================================================================
    # FACTORIES
    # ==================================================================
    @classmethod
    def build(
        cls,
        labels: Sequence[str],
        edges: Iterable[Tuple[int, int, float]],
        directed: bool = True,
    ) -> "Graph":
        """
        Compact constructor: node i gets id i and labels[i].

            Graph.build("ABC", [(0, 1, 4), (1, 2, -2)])

        With directed=False each (u, v, w) becomes u→v and v→u, both
        weighted w, so the engines only ever see directed edges.
        """
        nodes = [Node(id=i, label=str(lbl)) for i, lbl in enumerate(labels)]
        edge_objs: List[Edge] = []
        for u, v, w in edges:
            edge_objs.append(Edge(id=len(edge_objs), source=u, target=v, weight=w))
            if not directed:
                edge_objs.append(Edge(id=len(edge_objs), source=v, target=u, weight=w))
        return cls(nodes, edge_objs)

    @classmethod
    def generate_random(
        cls,
        num_nodes: int = 8,
        edge_probability: float = 0.3,
        weight_range: Tuple[int, int] = (1, 10),
        negative_chance: float = 0.0,
        directed: bool = True,
        seed: Optional[int] = None,
        negative_cycle: bool = False,
    ) -> "Graph":
        """
        Erdős–Rényi style random graph on ids 0 … num_nodes-1.

        A random spanning tree rooted at node 0 guarantees every node is
        reachable from 0.  With negative_chance > 0 that fraction of
        weights is negated, which only makes sense for Bellman-Ford.

        With negative_cycle=True a cycle of up to three nodes with negative
        total weight is written over the random edges.  Every node is
        reachable, so Bellman-Ford is guaranteed to report the cycle.
        Undirected graphs get one negative edge, which is a two-node cycle.
        """
        if num_nodes < 1:
            raise ValueError("num_nodes must be at least 1")
        if negative_cycle and num_nodes < 2:
            raise ValueError("a negative cycle needs at least 2 nodes")

        rng = random.Random(seed)
        labels = [_default_label(i) for i in range(num_nodes)]

        def weight() -> int:
            w = rng.randint(*weight_range)
            if negative_chance > 0 and rng.random() < negative_chance:
                w = -w
            return w

        pairs: Dict[Tuple[int, int], int] = {}

        # spanning-tree backbone: attach each new node to an earlier one
        order = list(range(1, num_nodes))
        rng.shuffle(order)
        attached = [0]
        for nid in order:
            parent = rng.choice(attached)
            pairs[(parent, nid)] = weight()
            attached.append(nid)

        for u in range(num_nodes):
            for v in range(num_nodes):
                if u == v or (u, v) in pairs:
                    continue
                if not directed and (v, u) in pairs:
                    continue
                if rng.random() < edge_probability:
                    pairs[(u, v)] = weight()

        if negative_cycle:
            _inject_negative_cycle(pairs, rng, num_nodes, weight_range, directed)

        triples = [(u, v, w) for (u, v), w in sorted(pairs.items())]
        return cls.build(labels, triples, directed=directed)

    # ==================================================================
    # DUNDER
    # ==================================================================
    def __eq__(self, other) -> bool:
        return isinstance(other, Graph) and self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((tuple(self._nodes.values()), self._edges))

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()})"


# ---------------------------------------------------------------------------
def _default_label(i: int) -> str:
    """0 → A, 25 → Z, 26 → AA, …"""
    label = ""
    i += 1
    while i:
        i, rem = divmod(i - 1, 26)
        label = chr(ord("A") + rem) + label
    return label


def _inject_negative_cycle(
    pairs: Dict[Tuple[int, int], int],
    rng: random.Random,
    num_nodes: int,
    weight_range: Tuple[int, int],
    directed: bool,
) -> None:
    """Overwrite `pairs` in place so a negative-weight cycle exists."""
    size = min(3, num_nodes) if directed else 2
    cycle = rng.sample(range(num_nodes), size)

    hops = list(zip(cycle, cycle[1:] + cycle[:1]))
    if not directed:
        hops = hops[:1]

    low = max(1, weight_range[0])
    high = max(low, weight_range[1])
    weights = [rng.randint(low, high) for _ in hops[:-1]]
    # closing edge outweighs the rest of the cycle
    weights.append(-(sum(weights) + rng.randint(1, 3)))

    for (u, v), w in zip(hops, weights):
        if not directed:
            pairs.pop((v, u), None)
        pairs[(u, v)] = w
