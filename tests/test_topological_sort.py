"""Topological sort producer: DFS post-order, explicit stack."""

import pytest
from hypothesis import given, settings, strategies as st

from algorithms import Graph, InvalidInput, make_producer
from algorithms.step import StepKind

NODES = [0, 1, 2, 3, 4, 5]
EDGES = [(5, 2), (5, 0), (4, 0), (4, 1), (2, 3), (3, 1)]


def _run(**inputs):
    steps = list(make_producer("topological_sort", **inputs))
    return list(steps[-1].payload["order"]), steps


def test_classic_six_node_dag():
    order, _ = _run(nodes=NODES, edges=EDGES)
    pos = {n: i for i, n in enumerate(order)}

    assert pos[5] < pos[2] < pos[3] < pos[1]
    assert pos[4] < pos[0] and pos[4] < pos[1]
    assert order == [5, 4, 2, 3, 1, 0]


def test_visit_and_finish_sequence_follows_recursive_dfs():
    _, steps = _run(nodes=NODES, edges=EDGES)
    trace = [(s.kind, s.payload.get("node")) for s in steps[:-1]]
    assert trace == [
        ("visit", 0), ("finish", 0),
        ("visit", 1), ("finish", 1),
        ("visit", 2), ("visit", 3), ("finish", 3), ("finish", 2),
        ("visit", 4), ("finish", 4),
        ("visit", 5), ("finish", 5),
    ]


def test_finish_steps_carry_reversed_post_order():
    _, steps = _run(nodes=NODES, edges=EDGES)
    finishes = [s for s in steps if s.kind == StepKind.FINISH]
    assert finishes[2].payload["order"] == (3, 1, 0)
    assert finishes[3].payload["order"] == (2, 3, 1, 0)


def test_visit_step_shows_dfs_stack():
    _, steps = _run(nodes=NODES, edges=EDGES)
    visit3 = next(s for s in steps if s.kind == StepKind.VISIT and s.payload["node"] == 3)
    assert visit3.payload["stack"] == (2, 3)
    assert visit3.payload["visited"] == (0, 1, 2, 3)


def test_accepts_graph_and_dict_forms():
    g = Graph(NODES, EDGES)
    assert _run(graph=g)[0] == _run(graph=g.to_dict())[0] == [5, 4, 2, 3, 1, 0]


def test_cycle_still_terminates():
    order, steps = _run(nodes=["a", "b", "c"], edges=[("a", "b"), ("b", "c"), ("c", "a")])
    assert sorted(order) == ["a", "b", "c"]
    assert sum(1 for s in steps if s.kind == StepKind.VISIT) == 3


@pytest.mark.parametrize("inputs", [
    {"nodes": [0, 1], "edges": [(0, 2)]},
    {"nodes": [0, 0], "edges": []},
    {"nodes": [0, 1], "edges": [(0,)]},
    {"nodes": [[0], 1], "edges": []},
    {"edges": [(0, 1)]},
    {"nodes": [0, 1], "graph": {"nodes": [0, 1], "edges": []}},
])
def test_invalid_graphs(inputs):
    with pytest.raises(InvalidInput):
        make_producer("topological_sort", **inputs)


@st.composite
def _dags(draw):
    n = draw(st.integers(min_value=1, max_value=8))
    labels = draw(st.permutations(list(range(n))))
    pairs = draw(st.lists(
        st.tuples(st.integers(0, n - 1), st.integers(0, n - 1)).filter(lambda p: p[0] != p[1]),
        max_size=16,
    ))
    # orient every edge low → high in a hidden ranking, then relabel
    edges = [(labels[min(a, b)], labels[max(a, b)]) for a, b in pairs]
    nodes = draw(st.permutations(list(range(n))))
    return nodes, edges


@settings(max_examples=80, deadline=None)
@given(dag=_dags())
def test_order_is_topological_for_every_dag(dag):
    nodes, edges = dag
    order, steps = _run(nodes=nodes, edges=edges)
    pos = {n: i for i, n in enumerate(order)}

    assert sorted(order) == sorted(nodes)
    for u, v in edges:
        assert pos[u] < pos[v]
    assert [s.index for s in steps] == list(range(len(steps)))
