"""Trie prefix matching producer."""

import pytest
from hypothesis import given, strategies as st

from algorithms import InvalidInput, make_producer
from algorithms.step import StepKind

TEXT = "tree trie algo assoc all also"


def _steps(**inputs):
    return list(make_producer("trie_prefix", **inputs))


def test_example_text():
    steps = _steps(text=TEXT, prefix="al")
    last = steps[-1]

    assert last.kind == StepKind.DONE and last.terminal
    assert last.payload["matches"] == (2, 4, 5)
    assert last.payload["words"] == ("algo", "all", "also")
    assert last.payload["comparisons"] == 2


def test_step_sequence():
    kinds = [s.kind for s in _steps(text=TEXT, prefix="al")]
    assert kinds == ["insert"] * 6 + ["walk", "walk"] + ["match"] * 3 + ["done"]


def test_shared_prefixes_reuse_nodes():
    inserts = [s for s in _steps(words=["tree", "trie"], prefix="") if s.kind == StepKind.INSERT]
    assert inserts[0].payload["created"] == 4
    assert inserts[1].payload["created"] == 2
    assert inserts[1].payload["node_count"] == 7
    # t-r shared: root, t, r, then the new i, e
    assert inserts[1].payload["path"][:3] == inserts[0].payload["path"][:3]


def test_missing_character_ends_the_walk():
    steps = _steps(text=TEXT, prefix="tx")
    kinds = [s.kind for s in steps]
    assert kinds[-3:] == ["walk", "miss", "done"]
    assert steps[-2].payload["char"] == "x"
    assert steps[-1].payload["matches"] == ()


def test_empty_prefix_matches_everything():
    last = _steps(words=["b", "a", "b"], prefix="")[-1]
    assert last.payload["matches"] == (0, 1, 2)


def test_empty_word_list():
    steps = _steps(words=[], prefix="a")
    assert [s.kind for s in steps] == ["miss", "done"]


@pytest.mark.parametrize("inputs", [
    {"prefix": "a"},
    {"prefix": "a", "text": "a b", "words": ["a"]},
    {"prefix": 3, "text": "a"},
    {"prefix": "a", "words": "abc"},
    {"prefix": "a", "words": ["a", 1]},
    {"prefix": "a", "text": ["a"]},
])
def test_invalid_inputs(inputs):
    with pytest.raises(InvalidInput):
        make_producer("trie_prefix", **inputs)


@given(
    words=st.lists(st.text(alphabet="abc", max_size=4), max_size=12),
    prefix=st.text(alphabet="abc", max_size=3),
)
def test_matches_are_exactly_the_words_with_the_prefix(words, prefix):
    last = _steps(words=words, prefix=prefix)[-1]
    expected = [i for i, w in enumerate(words) if w.startswith(prefix)]
    assert list(last.payload["matches"]) == expected
