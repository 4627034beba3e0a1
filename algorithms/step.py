"""
step.py — Algorithm Step Snapshot
==================================
Every algorithm is a generator that yields Step objects.
A Step is a frozen-in-time picture of one observable moment:

    • `kind`     – what just happened ("relax", "visit", "call", …)
    • `payload`  – the algorithm state worth showing (matrix, visited
                   set, memo table, …)
    • `terminal` – True only on the last Step of a run
    • annotations for Learning Mode: the pseudocode line executing and a
      plain-English explanation of *why* this step happened

Design decisions:
  - Step is a frozen dataclass and its payload is deep-frozen on
    construction (lists → tuples, dicts → read-only mappings, sets →
    frozensets).  The algorithm generator is the only writer; the
    controller and renderer are pure readers, and two Steps from the
    same run can always be diffed safely.
  - `index` is stamped by the StepProducer, not by the algorithm, so
    every algorithm gets the 0, 1, 2, … invariant for free.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


# ---------------------------------------------------------------------------
# Step kinds
# ---------------------------------------------------------------------------
class StepKind:
    """String tags for Step.kind.  Consumers switch on these; the controller never does."""

    INIT       = "init"
    RELAX      = "relax"
    FINISH     = "finish"
    VISIT      = "visit"
    CALL       = "call"
    MEMO_HIT   = "memo-hit"
    MEMO_WRITE = "memo-write"
    RETURN     = "return"
    INSERT     = "insert"
    WALK       = "walk"
    MISS       = "miss"
    MATCH      = "match"
    DONE       = "done"


# ---------------------------------------------------------------------------
# Freezing helpers
# ---------------------------------------------------------------------------
def freeze(value: Any) -> Any:
    """Return a deep, immutable copy of `value`."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(v) for v in value)
    return value


def thaw(value: Any, json_safe: bool = False) -> Any:
    """
    Inverse of freeze(): plain dicts and lists again.

    With json_safe=True infinities become None and set members are
    sorted when they can be, so the result goes straight into jsonify().
    """
    if isinstance(value, Mapping):
        return {k: thaw(v, json_safe) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v, json_safe) for v in value]
    if isinstance(value, (set, frozenset)):
        items = [thaw(v, json_safe) for v in value]
        try:
            items.sort()
        except TypeError:
            pass
        return items
    if json_safe and isinstance(value, float) and math.isinf(value):
        return None
    return value


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Step:
    """
    Attributes:
        index           : 0-based position of this step in the run.
        kind            : StepKind tag.
        payload         : Frozen algorithm snapshot.
                            • "matrix"   – distance matrix (Floyd-Warshall)
                            • "visited"  – visited set (topological sort)
                            • "memo"     – memo table (Fibonacci)
                            • "path"     – trie nodes walked (trie search)
        terminal        : True on the very last step of the run.
        pseudocode_line : 0-based index into the algorithm's PSEUDOCODE.
        explanation     : Human-readable "why" text for Learning Mode.
    """

    index:           int                = 0
    kind:            str                = StepKind.INIT
    payload:         Mapping[str, Any]  = field(default_factory=dict)
    terminal:        bool               = False
    pseudocode_line: int                = 0
    explanation:     str                = ""

    def __post_init__(self):
        object.__setattr__(self, "payload", freeze(self.payload))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready copy (∞ → None)."""
        return {
            "index":           self.index,
            "kind":            self.kind,
            "payload":         thaw(self.payload, json_safe=True),
            "terminal":        self.terminal,
            "pseudocode_line": self.pseudocode_line,
            "explanation":     self.explanation,
        }


# ---------------------------------------------------------------------------
# Convenience builder so algorithms don't have to spell out every kwarg
# ---------------------------------------------------------------------------
class StepBuilder:
    """
    Mutable scratch-pad that algorithms use to construct Steps cleanly.

    Usage inside an algorithm generator:
        sb = StepBuilder(StepKind.VISIT)
        sb.payload["visited"] = visited
        sb.pseudocode_line = 3
        sb.explanation = "Node 4 has not been seen yet, so DFS enters it."
        yield sb.build()

    build() snapshots the payload immediately, so the generator may keep
    mutating its own working state after the yield.
    """

    def __init__(self, kind: str = StepKind.INIT, **payload: Any):
        self.kind:            str            = kind
        self.payload:         Dict[str, Any] = dict(payload)
        self.pseudocode_line: int            = 0
        self.explanation:     str            = ""

    def set(self, **payload: Any) -> "StepBuilder":
        self.payload.update(payload)
        return self

    def build(self, terminal: bool = False, index: Optional[int] = None) -> Step:
        return Step(
            index=index if index is not None else 0,
            kind=self.kind,
            payload=self.payload,
            terminal=terminal,
            pseudocode_line=self.pseudocode_line,
            explanation=self.explanation,
        )
