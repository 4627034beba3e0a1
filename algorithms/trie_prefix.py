"""
trie_prefix.py — Trie Prefix Matching
======================================
Insert every word of a text into a trie, then walk the prefix down the
trie and report every word stored under the node where the walk ends.

Yields a Step for:
  1. Each inserted word              →  INSERT  (trie node path, nodes created)
  2. Each prefix character found     →  WALK
  3. A prefix character missing      →  MISS    (no word can match)
  4. Each matching word              →  MATCH   (word index, word)
  5. Final                           →  DONE    (matches, comparisons; terminal)

Trie nodes get integer ids in creation order (root = 0) so the renderer
can draw the tree and highlight `path` without walking it again.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence

from algorithms.errors import InvalidInput
from algorithms.step import Step, StepBuilder, StepKind


# ---------------------------------------------------------------------------
# Pseudocode
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def PrefixMatch(words, prefix):",          # 0
    "    for w in words: trie.insert(w)",       # 1
    "    node ← trie.root",                     # 2
    "    for c in prefix:",                     # 3
    "        if c not in node.children:",       # 4
    "            return []",                    # 5
    "        node ← node.children[c]",          # 6
    "    return words below node",              # 7
]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate(
    prefix: str = "",
    text: Optional[str] = None,
    words: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    """Exactly one of `text` (split on whitespace) or `words`."""
    if not isinstance(prefix, str):
        raise InvalidInput(f"prefix must be a string, got {prefix!r}")
    if (text is None) == (words is None):
        raise InvalidInput("pass exactly one of text or words")
    if text is not None:
        if not isinstance(text, str):
            raise InvalidInput(f"text must be a string, got {text!r}")
        word_list = text.split()
    else:
        if isinstance(words, (str, bytes)) or not isinstance(words, Sequence):
            raise InvalidInput("words must be a list of strings")
        for i, w in enumerate(words):
            if not isinstance(w, str):
                raise InvalidInput(f"words[{i}] = {w!r} is not a string")
        word_list = list(words)
    return {"words": tuple(word_list), "prefix": prefix}


# ---------------------------------------------------------------------------
# Trie
# ---------------------------------------------------------------------------
class _TrieNode:
    __slots__ = ("id", "children", "word_ids")

    def __init__(self, node_id: int):
        self.id:       int                     = node_id
        self.children: Dict[str, "_TrieNode"]  = {}
        self.word_ids: List[int]               = []


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
def trie_prefix(words: Sequence[str], prefix: str) -> Iterator[Step]:
    root = _TrieNode(0)
    node_count = 1
    comparisons = 0

    # -- build --
    for w_idx, word in enumerate(words):
        node = root
        path = [root.id]
        created = 0
        for ch in word:
            child = node.children.get(ch)
            if child is None:
                child = _TrieNode(node_count)
                node.children[ch] = child
                node_count += 1
                created += 1
            node = child
            path.append(node.id)
        node.word_ids.append(w_idx)

        sb = StepBuilder(
            StepKind.INSERT,
            word=word, index=w_idx, path=path,
            created=created, node_count=node_count,
        )
        sb.pseudocode_line = 1
        sb.explanation = (
            f"Insert {word!r}: {created} new node(s), "
            f"{len(word) - created} shared with earlier words."
        )
        yield sb.build()

    # -- walk the prefix --
    node = root
    path = [root.id]
    for depth, ch in enumerate(prefix):
        comparisons += 1
        child = node.children.get(ch)
        if child is None:
            sb_m = StepBuilder(StepKind.MISS, char=ch, depth=depth, path=path,
                               comparisons=comparisons)
            sb_m.pseudocode_line = 5
            sb_m.explanation = f"No edge for {ch!r} at depth {depth}: nothing starts with {prefix!r}."
            yield sb_m.build()

            yield _done(prefix, [], words, comparisons, path)
            return

        node = child
        path.append(node.id)
        sb_w = StepBuilder(StepKind.WALK, char=ch, depth=depth, path=path,
                           comparisons=comparisons)
        sb_w.pseudocode_line = 6
        sb_w.explanation = f"Follow {ch!r} to trie node {node.id}."
        yield sb_w.build()

    # -- collect every word below the prefix node --
    matches: List[int] = []
    stack = [node]
    while stack:
        cur = stack.pop()
        matches.extend(cur.word_ids)
        stack.extend(cur.children.values())
    matches.sort()

    found: List[int] = []
    for w_idx in matches:
        found.append(w_idx)
        sb_x = StepBuilder(StepKind.MATCH, index=w_idx, word=words[w_idx],
                           matches=found, path=path)
        sb_x.pseudocode_line = 7
        sb_x.explanation = f"{words[w_idx]!r} (word {w_idx}) starts with {prefix!r}."
        yield sb_x.build()

    yield _done(prefix, matches, words, comparisons, path)


def _done(
    prefix: str,
    matches: List[int],
    words: Sequence[str],
    comparisons: int,
    path: List[int],
) -> Step:
    sb = StepBuilder(
        StepKind.DONE,
        prefix=prefix,
        matches=matches,
        words=[words[i] for i in matches],
        comparisons=comparisons,
        path=path,
    )
    sb.pseudocode_line = 7 if matches else 5
    sb.explanation = f"{len(matches)} word(s) start with {prefix!r}."
    return sb.build(terminal=True)
