"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every algorithm the stepper knows about.

    from algorithms import REGISTRY, get_algorithm, make_producer

REGISTRY is a dict:
    {
        "floyd_warshall": AlgoInfo(key, label, fn, validate, pseudocode, …),
        …
    }

AlgoInfo is a lightweight dataclass.  The engine and the web API both
consume it, so adding a new algorithm is literally: write the validator
and the generator, add one entry here.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

# ---------------------------------------------------------------------------
# Import all algorithm modules
# ---------------------------------------------------------------------------
from algorithms import fibonacci_memo as _fib
from algorithms import floyd_warshall as _fw
from algorithms import topological_sort as _topo
from algorithms import trie_prefix as _trie
from algorithms.errors import InvalidInput, StepperError
from algorithms.graph import Graph
from algorithms.producer import StepProducer
from algorithms.step import Step, StepBuilder, StepKind, freeze, thaw


# ---------------------------------------------------------------------------
# AlgoInfo — metadata card for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:              str                        # registry key, e.g. "floyd_warshall"
    label:            str                        # human label
    fn:               Callable                   # the generator function
    validate:         Callable[..., Dict[str, Any]]  # raw inputs → generator kwargs
    pseudocode:       List[str]                  # lines for the side-panel
    tags:             List[str] = field(default_factory=list)
    complexity_time:  str       = ""
    complexity_space: str       = ""
    description:      str       = ""             # one-liner for the UI card
    example:          Dict[str, Any] = field(default_factory=dict)   # default inputs


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "floyd_warshall": AlgoInfo(
        key="floyd_warshall", label="Floyd–Warshall",
        fn=_fw.floyd_warshall, validate=_fw.validate, pseudocode=_fw.PSEUDOCODE,
        tags=["graph", "all-pairs", "dp"],
        complexity_time="O(V³)", complexity_space="O(V²)",
        description="All-pairs shortest paths via dynamic programming. Watch the matrix evolve!",
        example={"matrix": [
            [0, 3, None, 7],
            [8, 0, 2, None],
            [5, None, 0, 1],
            [2, None, None, 0],
        ]},
    ),

    "topological_sort": AlgoInfo(
        key="topological_sort", label="Topological Sort (DFS)",
        fn=_topo.topological_sort, validate=_topo.validate, pseudocode=_topo.PSEUDOCODE,
        tags=["graph", "traversal", "dag"],
        complexity_time="O(V + E)", complexity_space="O(V)",
        description="Reverse DFS post-order. Valid only when the graph has no cycle.",
        example={
            "nodes": [0, 1, 2, 3, 4, 5],
            "edges": [[5, 2], [5, 0], [4, 0], [4, 1], [2, 3], [3, 1]],
        },
    ),

    "fibonacci_memo": AlgoInfo(
        key="fibonacci_memo", label="Fibonacci (Memoization)",
        fn=_fib.fibonacci_memo, validate=_fib.validate, pseudocode=_fib.PSEUDOCODE,
        tags=["dp", "recursion"],
        complexity_time="O(n)", complexity_space="O(n)",
        description="Top-down recursion that never computes the same fib(k) twice.",
        example={"n": 8},
    ),

    "trie_prefix": AlgoInfo(
        key="trie_prefix", label="Trie Prefix Matching",
        fn=_trie.trie_prefix, validate=_trie.validate, pseudocode=_trie.PSEUDOCODE,
        tags=["string", "tree"],
        complexity_time="O(m)", complexity_space="O(ALPHABET_SIZE · N · M)",
        description="Walk the prefix down a trie; everything below is a match.",
        example={"text": "tree trie algo assoc all also", "prefix": "al"},
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: str) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    return REGISTRY.get(key)


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


def algorithms_by_tag(tag: str) -> List[AlgoInfo]:
    """Filter registry by tag."""
    return [a for a in REGISTRY.values() if tag in a.tags]


def make_producer(key: str, /, **inputs: Any) -> StepProducer:
    """
    Validate `inputs` for algorithm `key` and wrap them in a StepProducer.
    Raises InvalidInput before any Step exists.
    """
    info = get_algorithm(key)
    if info is None:
        raise InvalidInput(f"Unknown algorithm: {key}")
    try:
        inspect.signature(info.validate).bind(**inputs)
    except TypeError as exc:
        raise InvalidInput(f"{key}: {exc}") from None
    return StepProducer(info.fn, info.validate(**inputs), key=info.key)


__all__ = [
    "AlgoInfo",
    "REGISTRY",
    "get_algorithm",
    "list_algorithms",
    "algorithms_by_tag",
    "make_producer",
    "Graph",
    "InvalidInput",
    "StepperError",
    "Step",
    "StepBuilder",
    "StepKind",
    "StepProducer",
    "freeze",
    "thaw",
]
