"""
graph.py — Directed Graph Input Snapshot
=========================================
The graph a producer receives.  Built once from a node list and an edge
list, validated, then never changed again.

Responsibilities:
  1. Validation                     (duplicate nodes, unknown endpoints)
  2. Adjacency queries              (neighbours in edge-insertion order)
  3. Conversion to a distance matrix (for Floyd-Warshall)
  4. Serialisation round-trip       (to_dict / from_dict)

Design decisions:
  - Nodes keep the caller's order: topological sort starts its DFS from
    each unvisited node in exactly that order.
  - A separate adjacency dict `_adj[node] → (neighbour, …)` is built once
    so neighbour queries are O(degree), not O(E).
  - Edges are (source, target) or (source, target, weight); a missing
    weight means 1.
"""

import math
from numbers import Real
from typing import Any, Dict, Hashable, Iterable, List, Sequence, Tuple

from algorithms.errors import InvalidInput


Edge = Tuple[Hashable, Hashable, float]


class Graph:
    """
    Attributes:
        nodes : tuple of node ids, in input order
        edges : tuple of (source, target, weight)
        _adj  : {node: (neighbour, …)}
    """

    def __init__(self, nodes: Iterable[Hashable], edges: Iterable[Sequence[Any]] = ()):
        self._nodes: Tuple[Hashable, ...] = tuple(_check_nodes(nodes))
        known = set(self._nodes)

        parsed: List[Edge] = []
        adj: Dict[Hashable, List[Hashable]] = {n: [] for n in self._nodes}
        for pos, raw in enumerate(edges):
            u, v, w = _parse_edge(raw, pos)
            for end in (u, v):
                if not _is_known(end, known):
                    raise InvalidInput(f"edge {pos} references unknown node {end!r}")
            parsed.append((u, v, w))
            adj[u].append(v)

        self._edges: Tuple[Edge, ...] = tuple(parsed)
        self._adj:   Dict[Hashable, Tuple[Hashable, ...]] = {n: tuple(vs) for n, vs in adj.items()}

    # ==================================================================
    # READ-ONLY ACCESS
    # ==================================================================
    @property
    def nodes(self) -> Tuple[Hashable, ...]:
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    def neighbours(self, node: Hashable) -> Tuple[Hashable, ...]:
        """Out-neighbours of `node` in edge-insertion order."""
        return self._adj.get(node, ())

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    # ==================================================================
    # CONVERSION
    # ==================================================================
    def distance_matrix(self) -> List[List[float]]:
        """
        NxN matrix in node order: 0 on the diagonal, the lightest edge
        weight between each ordered pair, float("inf") elsewhere.
        """
        idx = {n: i for i, n in enumerate(self._nodes)}
        n = len(self._nodes)
        dist = [[math.inf] * n for _ in range(n)]
        for i in range(n):
            dist[i][i] = 0
        for u, v, w in self._edges:
            if w < dist[idx[u]][idx[v]]:
                dist[idx[u]][idx[v]] = w
        return dist

    # ==================================================================
    # SERIALISATION
    # ==================================================================
    def to_dict(self) -> dict:
        return {
            "nodes": list(self._nodes),
            "edges": [[u, v, w] for u, v, w in self._edges],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Graph":
        if not isinstance(data, dict):
            raise InvalidInput("graph must be an object with 'nodes' and 'edges'")
        return cls(data.get("nodes", []), data.get("edges", []))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _check_nodes(nodes: Iterable[Hashable]) -> List[Hashable]:
    if isinstance(nodes, (str, bytes)):
        raise InvalidInput("nodes must be a list, not a string")
    seen: set = set()
    out = []
    for node in nodes:
        try:
            duplicate = node in seen
        except TypeError:
            raise InvalidInput(f"node {node!r} is not hashable") from None
        if duplicate:
            raise InvalidInput(f"duplicate node {node!r}")
        seen.add(node)
        out.append(node)
    return out


def _is_known(node: Any, known: set) -> bool:
    try:
        return node in known
    except TypeError:
        return False


def _parse_edge(raw: Sequence[Any], pos: int) -> Edge:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence) or len(raw) not in (2, 3):
        raise InvalidInput(f"edge {pos} must be (source, target) or (source, target, weight)")
    u, v = raw[0], raw[1]
    w = raw[2] if len(raw) == 3 else 1
    if isinstance(w, bool) or not isinstance(w, Real) or (isinstance(w, float) and math.isnan(w)):
        raise InvalidInput(f"edge {pos} has a non-numeric weight {w!r}")
    return u, v, w
