"""Recorder: unpaced run plus analytics."""

import json

import pytest

from algorithms import InvalidInput
from engine import Recorder


def test_records_full_run_and_metrics():
    rec = Recorder()
    rec.start("fibonacci_memo", n=5)
    metrics = rec.run_to_completion()

    assert metrics.algo_key == "fibonacci_memo"
    assert metrics.total_steps == len(rec.steps)
    assert [s.index for s in rec.steps] == list(range(metrics.total_steps))
    assert metrics.steps_by_kind == {"call": 9, "memo-hit": 2, "memo-write": 4, "return": 1}
    assert metrics.result["result"] == 5
    assert metrics.memory_bytes > 0
    assert rec.get_metrics() is metrics


def test_export_is_json_serialisable():
    rec = Recorder()
    rec.start("floyd_warshall", matrix=[[0, None], [4, 0]])
    rec.run_to_completion()
    out = rec.export()

    assert out["algo_key"] == "floyd_warshall"
    assert out["inputs"]["matrix"] == [[0, None], [4, 0]]
    assert out["steps"][-1]["terminal"] is True
    json.dumps(out)


def test_export_graph_inputs():
    rec = Recorder()
    rec.start("topological_sort", nodes=["a", "b"], edges=[["a", "b"]])
    rec.run_to_completion()
    out = rec.export()

    assert out["inputs"]["graph"] == {"nodes": ["a", "b"], "edges": [["a", "b", 1]]}
    assert out["metrics"]["result"]["order"] == ["a", "b"]


def test_run_before_start():
    with pytest.raises(RuntimeError):
        Recorder().run_to_completion()


def test_unknown_algorithm():
    with pytest.raises(InvalidInput):
        Recorder().start("quicksort")


def test_input_named_like_the_algo_key_parameter():
    with pytest.raises(InvalidInput):
        Recorder().start("fibonacci_memo", algo_key=3)
