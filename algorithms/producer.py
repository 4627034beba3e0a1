"""
producer.py — Step Producer
============================
Wraps one algorithm generator plus one set of validated inputs.

    producer = StepProducer(floyd_warshall, {"matrix": m}, key="floyd_warshall")
    for step in producer:          # a fresh run every time
        ...

Responsibilities:
  1. Hold inputs that were validated BEFORE any Step exists.
  2. Start a brand-new generator on every iteration, so runs never share
     matrices, visited sets or memo tables.
  3. Stamp `index` 0, 1, 2, … on the algorithm's Steps and check that
     exactly one terminal Step arrives, last.
"""

from dataclasses import replace
from typing import Any, Callable, Dict, Iterator, Mapping

from algorithms.step import Step


class StepProducer:
    """
    Attributes:
        key    : Registry key of the wrapped algorithm ("" if built by hand).
        inputs : The validated inputs passed to the generator function.
    """

    def __init__(
        self,
        fn: Callable[..., Iterator[Step]],
        inputs: Mapping[str, Any],
        key: str = "",
    ):
        self.key:    str            = key
        self.inputs: Dict[str, Any] = dict(inputs)
        self._fn = fn

    def __iter__(self) -> Iterator[Step]:
        return self._numbered(self._fn(**self.inputs))

    def __repr__(self) -> str:
        return f"StepProducer({self.key or self._fn.__name__!s})"

    def _numbered(self, steps: Iterator[Step]) -> Iterator[Step]:
        seen_terminal = False
        for index, step in enumerate(steps):
            if seen_terminal:
                raise RuntimeError(f"{self!r} yielded a step after its terminal step")
            seen_terminal = step.terminal
            yield replace(step, index=index)
        if not seen_terminal:
            raise RuntimeError(f"{self!r} finished without a terminal step")
