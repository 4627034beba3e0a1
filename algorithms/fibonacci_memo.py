"""
fibonacci_memo.py — Memoized Recursive Fibonacci
=================================================
The classic top-down DP example:

    def fib(k):
        if k in memo: return memo[k]
        if k <= 1:    return k
        memo[k] = fib(k-1) + fib(k-2)
        return memo[k]

The recursion is replayed with an explicit frame stack so the generator
can stop between any two steps without a native call chain.

Yields a Step at:
  1. Every call fib(k)                 →  CALL        (k, depth, call count)
  2. A call answered from the memo     →  MEMO_HIT
  3. A value computed and stored       →  MEMO_WRITE  (memo table)
  4. The top-level call returns        →  RETURN      (result, terminal)

Base cases are not memoized, so there is at most one memo write per k
in 2..n however many calls there are.
"""

from dataclasses import dataclass
from numbers import Integral
from typing import Any, Dict, Iterator, List, Optional

from algorithms.errors import InvalidInput
from algorithms.step import Step, StepBuilder, StepKind


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def fib(k):",                              # 0
    "    if k in memo: return memo[k]",         # 1
    "    if k <= 1: return k",                  # 2
    "    a ← fib(k-1)",                         # 3
    "    b ← fib(k-2)",                         # 4
    "    memo[k] ← a + b",                      # 5
    "    return memo[k]",                       # 6
]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate(n: Any) -> Dict[str, Any]:
    if isinstance(n, bool) or not isinstance(n, Integral):
        raise InvalidInput(f"n must be an integer, got {n!r}")
    if n < 0:
        raise InvalidInput(f"n must be non-negative, got {n}")
    return {"n": int(n)}


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
@dataclass
class _Frame:
    """One suspended fib(k) waiting on its children."""
    k:    int
    left: Optional[int] = None      # fib(k-1) once it has returned


def fibonacci_memo(n: int) -> Iterator[Step]:
    memo:   Dict[int, int] = {}
    frames: List[_Frame]   = []
    calls   = 0
    ret     = 0
    pending: Optional[int] = n      # argument of the next call to make

    while True:
        if pending is not None:
            k, pending = pending, None
            calls += 1

            sb = StepBuilder(
                StepKind.CALL,
                k=k, depth=len(frames), calls=calls,
                stack=[f.k for f in frames], memo=memo,
            )
            sb.pseudocode_line = 0
            sb.explanation = f"Call fib({k}) at depth {len(frames)}."
            yield sb.build()

            if k in memo:
                ret = memo[k]
                sb_h = StepBuilder(
                    StepKind.MEMO_HIT,
                    k=k, value=ret, depth=len(frames), calls=calls,
                    stack=[f.k for f in frames], memo=memo,
                )
                sb_h.pseudocode_line = 1
                sb_h.explanation = f"fib({k}) is already in the memo: reuse {ret}, no recursion."
                yield sb_h.build()
            elif k <= 1:
                ret = k
            else:
                frames.append(_Frame(k))
                pending = k - 1
                continue

        # -- hand `ret` back to the waiting frame --
        if not frames:
            break
        frame = frames[-1]
        if frame.left is None:
            frame.left = ret
            pending = frame.k - 2
            continue

        value = frame.left + ret
        frames.pop()
        memo[frame.k] = value
        ret = value

        sb_w = StepBuilder(
            StepKind.MEMO_WRITE,
            k=frame.k, value=value, depth=len(frames), calls=calls,
            stack=[f.k for f in frames], memo=memo,
        )
        sb_w.pseudocode_line = 5
        sb_w.explanation = (
            f"fib({frame.k}) = fib({frame.k - 1}) + fib({frame.k - 2}) = {value}; stored in memo."
        )
        yield sb_w.build()

    sb_fin = StepBuilder(StepKind.RETURN, n=n, result=ret, calls=calls, memo=memo)
    sb_fin.pseudocode_line = 6
    sb_fin.explanation = f"fib({n}) = {ret} after {calls} call(s) and {len(memo)} memo write(s)."
    yield sb_fin.build(terminal=True)
