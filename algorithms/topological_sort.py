"""
topological_sort.py — DFS-based Topological Sort
=================================================
Generator-based DFS using an explicit stack of (node, neighbour-iterator)
frames, so pausing between steps never holds a deep Python call stack.
The visiting order is exactly that of the recursive version:

    for node in nodes:
        if node not visited: dfs(node)

    dfs(u):
        mark u visited
        for v in adj(u):
            if v not visited: dfs(v)
        order.push(u)          ← post-order; the answer is its reverse

Yields a Step at:
  1. First visit of a node           →  VISIT   (visited set, DFS stack)
  2. A node's neighbours exhausted   →  FINISH  (reversed post-order so far)
  3. Done                            →  DONE    (final order, terminal)

Cycles are NOT detected.  DFS still terminates (each node is visited
once) but on a cyclic graph the order is not a topological order.
"""

from typing import Any, Dict, Hashable, Iterator, List, Optional, Sequence, Set, Tuple

from algorithms.graph import Graph
from algorithms.errors import InvalidInput
from algorithms.step import Step, StepBuilder, StepKind


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def TopologicalSort(nodes, edges):",       # 0
    "    visited ← {}, order ← []",             # 1
    "    for u in nodes:",                      # 2
    "        if u not in visited: dfs(u)",      # 3
    "    return reverse(order)",                # 4
    "def dfs(u):",                              # 5
    "    visited.add(u)",                       # 6
    "    for v in adj(u):",                     # 7
    "        if v not in visited: dfs(v)",      # 8
    "    order.push(u)",                        # 9
]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate(
    nodes: Optional[Sequence[Hashable]] = None,
    edges: Sequence[Sequence[Any]] = (),
    graph: Any = None,
) -> Dict[str, Any]:
    """Accept either a Graph (or its dict form) or nodes + edges."""
    if graph is not None:
        if nodes is not None or edges:
            raise InvalidInput("pass either graph or nodes/edges, not both")
        if not isinstance(graph, Graph):
            graph = Graph.from_dict(graph)
        return {"graph": graph}
    if nodes is None:
        raise InvalidInput("topological sort needs a node list")
    return {"graph": Graph(nodes, edges)}


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
def topological_sort(graph: Graph) -> Iterator[Step]:
    visited:     Set[Hashable]  = set()
    visit_order: List[Hashable] = []
    post_order:  List[Hashable] = []

    def visit_step(node: Hashable, stack: List[Tuple[Hashable, Iterator]]) -> Step:
        sb = StepBuilder(
            StepKind.VISIT,
            node=node,
            visited=visit_order,
            stack=[n for n, _ in stack],
            order=list(reversed(post_order)),
        )
        sb.pseudocode_line = 6
        sb.explanation = (
            f"Visit {node!r}: first time DFS reaches it. "
            f"Its neighbours are explored before it can finish."
        )
        return sb.build()

    for root in graph.nodes:
        if root in visited:
            continue

        visited.add(root)
        visit_order.append(root)
        stack = [(root, iter(graph.neighbours(root)))]
        yield visit_step(root, stack)

        while stack:
            node, neighbours = stack[-1]
            for nbr in neighbours:
                if nbr not in visited:
                    visited.add(nbr)
                    visit_order.append(nbr)
                    stack.append((nbr, iter(graph.neighbours(nbr))))
                    yield visit_step(nbr, stack)
                    break
            else:
                # -- all neighbours done: post-order push --
                stack.pop()
                post_order.append(node)

                sb_f = StepBuilder(
                    StepKind.FINISH,
                    node=node,
                    visited=visit_order,
                    stack=[n for n, _ in stack],
                    order=list(reversed(post_order)),
                )
                sb_f.pseudocode_line = 9
                sb_f.explanation = (
                    f"Finish {node!r}: every node reachable from it is placed, "
                    f"so it goes in front of them in the order."
                )
                yield sb_f.build()

    sb_fin = StepBuilder(
        StepKind.DONE,
        visited=visit_order,
        order=list(reversed(post_order)),
    )
    sb_fin.pseudocode_line = 4
    sb_fin.explanation = (
        "Topological order: " + " → ".join(repr(n) for n in reversed(post_order))
    )
    yield sb_fin.build(terminal=True)
