"""
floyd_warshall.py — Floyd–Warshall (All-Pairs Shortest Paths)
===============================================================
The signature "matrix algorithm".  Every step carries the full NxN
distance matrix so the UI can render it as a live grid, the single
most important visual for understanding Floyd-Warshall.

Structure:
  for k in nodes:          ← "intermediate" node
      for i in nodes:
          for j in nodes:
              if dist[i][k] + dist[k][j] < dist[i][j]:
                  dist[i][j] = dist[i][k] + dist[k][j]

Yields a Step for:
  1. Initialisation (input matrix as given)
  2. Each (i, j) relaxation that actually changes the matrix
  3. End of each k-round
  4. Final: the converged matrix (terminal)

Unreachable entries are float("inf").  inf + x stays inf and inf < inf
is False, so the sentinel can never turn into a finite distance.
"""

import math
from numbers import Real
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from algorithms.errors import InvalidInput
from algorithms.graph import Graph
from algorithms.step import Step, StepBuilder, StepKind


INF = float("inf")

# accepted spellings of "unreachable" coming from forms / JSON
_UNREACHABLE = {"inf", "infinity", "∞"}


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def FloydWarshall(dist):",                    # 0
    "    n ← len(dist)",                           # 1
    "    for k in 0 … n-1:",                       # 2
    "        for i in 0 … n-1:",                   # 3
    "            for j in 0 … n-1:",               # 4
    "                if dist[i][k]+dist[k][j]",    # 5
    "                      < dist[i][j]:",         # 6
    "                    dist[i][j] = …",          # 7
    "        mark k done",                         # 8
    "    return dist",                             # 9
]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate(
    matrix: Optional[Sequence[Sequence[Any]]] = None,
    graph: Any = None,
) -> Dict[str, Any]:
    """
    Normalise `matrix` to a tuple-of-tuples or raise InvalidInput.
    A Graph (or its dict form) is accepted instead and turned into its
    distance matrix, rows and columns in node order.
    """
    if graph is not None:
        if matrix is not None:
            raise InvalidInput("pass either matrix or graph, not both")
        if not isinstance(graph, Graph):
            graph = Graph.from_dict(graph)
        matrix = graph.distance_matrix()
    elif matrix is None:
        raise InvalidInput("Floyd-Warshall needs a matrix or a graph")

    if isinstance(matrix, (str, bytes)) or not isinstance(matrix, Sequence):
        raise InvalidInput("matrix must be a list of rows")

    n = len(matrix)
    rows: List[Tuple[float, ...]] = []
    for i, row in enumerate(matrix):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise InvalidInput(f"matrix row {i} is not a list")
        if len(row) != n:
            raise InvalidInput(
                f"matrix must be square: row {i} has {len(row)} entries, expected {n}"
            )
        rows.append(tuple(_entry(v, i, j) for j, v in enumerate(row)))
    return {"matrix": tuple(rows)}


def _entry(value: Any, i: int, j: int) -> float:
    if value is None:
        return INF
    if isinstance(value, str):
        if value.strip().lower() in _UNREACHABLE:
            return INF
        raise InvalidInput(f"matrix[{i}][{j}] = {value!r} is not a number")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(f"matrix[{i}][{j}] = {value!r} is not a number")
    if isinstance(value, float) and math.isnan(value):
        raise InvalidInput(f"matrix[{i}][{j}] is NaN")
    if value < 0:
        raise InvalidInput(f"matrix[{i}][{j}] = {value} is negative")
    return value


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
def floyd_warshall(matrix: Sequence[Sequence[float]]) -> Iterator[Step]:
    """`matrix` must already have passed validate()."""
    n    = len(matrix)
    dist = [list(row) for row in matrix]
    total_updates = 0

    # -- init step --
    sb = StepBuilder(StepKind.INIT, matrix=dist, n=n, k=None)
    sb.pseudocode_line = 1
    sb.explanation = (
        f"Floyd-Warshall: start from the {n}×{n} distance matrix. "
        f"Diagonal = 0, direct edges = weight, rest = ∞."
    )
    yield sb.build()

    # ==============================================================
    # MAIN TRIPLE LOOP
    # ==============================================================
    for k in range(n):
        updates_this_round = 0

        for i in range(n):
            for j in range(n):
                via = dist[i][k] + dist[k][j]
                if via < dist[i][j]:
                    old = dist[i][j]
                    dist[i][j] = via
                    updates_this_round += 1

                    sb_r = StepBuilder(
                        StepKind.RELAX,
                        matrix=dist, i=i, j=j, k=k, old=old, value=via,
                    )
                    sb_r.pseudocode_line = 7
                    sb_r.explanation = (
                        f"Update dist[{i}][{j}] via {k}: "
                        f"{_fmt(dist[i][k])} + {_fmt(dist[k][j])} = {_fmt(via)} "
                        f"< {_fmt(old)}"
                    )
                    yield sb_r.build()

        total_updates += updates_this_round

        # -- k-round end --
        sb_k = StepBuilder(StepKind.FINISH, matrix=dist, k=k, updates=updates_this_round)
        sb_k.pseudocode_line = 8
        sb_k.explanation = f"Round k={k} complete: {updates_this_round} update(s)."
        yield sb_k.build()

    sb_fin = StepBuilder(StepKind.DONE, matrix=dist, n=n, updates=total_updates)
    sb_fin.pseudocode_line = 9
    sb_fin.explanation = (
        f"All pairs done after {total_updates} relaxation(s)."
    )
    yield sb_fin.build(terminal=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _fmt(value: float) -> str:
    return "∞" if value == INF else str(value)
