"""Memoized Fibonacci producer."""

import pytest
from hypothesis import given, strategies as st

from algorithms import InvalidInput, make_producer
from algorithms.step import StepKind


def _steps(n):
    return list(make_producer("fibonacci_memo", n=n))


def _fib(n):
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return a


@pytest.mark.parametrize("n, expected", [(0, 0), (1, 1), (2, 1), (5, 5), (10, 55), (30, 832040)])
def test_known_values(n, expected):
    last = _steps(n)[-1]
    assert last.kind == StepKind.RETURN and last.terminal
    assert last.payload["result"] == expected


def test_fib_three_trace():
    steps = _steps(3)
    trace = [(s.kind, s.payload["k"]) for s in steps[:-1]]
    assert trace == [
        ("call", 3), ("call", 2), ("call", 1), ("call", 0),
        ("memo-write", 2), ("call", 1), ("memo-write", 3),
    ]
    assert steps[-1].payload["calls"] == 5


def test_memo_hit_reuses_stored_value():
    steps = _steps(5)
    hits = [s for s in steps if s.kind == StepKind.MEMO_HIT]
    assert [s.payload["k"] for s in hits] == [2, 3]
    for s in hits:
        assert s.payload["value"] == _fib(s.payload["k"])
        assert s.payload["memo"][s.payload["k"]] == s.payload["value"]


def test_call_step_shows_depth_and_stack():
    steps = _steps(4)
    deepest = max((s for s in steps if s.kind == StepKind.CALL), key=lambda s: s.payload["depth"])
    assert deepest.payload["depth"] == 3
    assert deepest.payload["stack"] == (4, 3, 2)


def test_memo_is_never_written_twice():
    writes = [s.payload["k"] for s in _steps(12) if s.kind == StepKind.MEMO_WRITE]
    assert writes == list(range(2, 13))


@given(n=st.integers(min_value=0, max_value=40))
def test_value_and_memo_bounds(n):
    steps = _steps(n)
    last = steps[-1]
    writes = sum(1 for s in steps if s.kind == StepKind.MEMO_WRITE)
    hits = sum(1 for s in steps if s.kind == StepKind.MEMO_HIT)

    assert last.payload["result"] == _fib(n)
    assert writes <= n + 1
    assert writes == max(0, n - 1)
    assert hits == max(0, n - 3)
    assert last.payload["calls"] == (2 * n - 1 if n else 1)


@pytest.mark.parametrize("bad", [-1, 2.5, "7", True, None])
def test_invalid_n(bad):
    with pytest.raises(InvalidInput):
        make_producer("fibonacci_memo", n=bad)
