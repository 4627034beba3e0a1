"""
recorder.py — Run Recorder & Analytics
========================================
Records a complete algorithm run (all Steps) without any pacing, then
computes the analytics the UI shows next to the animation.

Usage:
    rec = Recorder()
    rec.start("floyd_warshall", matrix=m)
    rec.run_to_completion()          # exhausts the run
    metrics = rec.get_metrics()      # the analytics card
    rec.export()                     # serialisable snapshot for save/replay

Under the hood the recorder drives an ordinary PlaybackController on a
ManualScheduler and seeks straight to the end, so recorded runs obey
exactly the same ordering rules as animated ones.
"""

import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from algorithms import AlgoInfo, get_algorithm, make_producer
from algorithms.errors import InvalidInput
from algorithms.producer import StepProducer
from algorithms.step import Step, thaw
from engine.controller import PlaybackController
from engine.scheduler import ManualScheduler


# ---------------------------------------------------------------------------
# Metrics dataclass — what the Analytics panel renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    algo_key:      str            = ""
    algo_label:    str            = ""
    total_steps:   int            = 0          # number of Steps yielded
    steps_by_kind: Dict[str, int] = field(default_factory=dict)
    wall_time_ms:  float          = 0.0        # wall-clock time to run to completion
    memory_bytes:  int            = 0          # approx size of the step buffer
    result:        Dict[str, Any] = field(default_factory=dict)   # terminal payload


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        steps    : Full list of Steps from the run.
        metrics  : Computed RunMetrics (available after run_to_completion).
        producer : The StepProducer being recorded.
    """

    def __init__(self):
        self.steps:    List[Step]              = []
        self.metrics:  Optional[RunMetrics]    = None
        self.producer: Optional[StepProducer]  = None

        self._algo_info: Optional[AlgoInfo] = None

    # ------------------------------------------------------------------
    # Setup & run
    # ------------------------------------------------------------------
    def start(self, algo_key: str, /, **inputs: Any) -> None:
        """Validate inputs and prepare the producer for this run."""
        info = get_algorithm(algo_key)
        if info is None:
            raise InvalidInput(f"Unknown algorithm: {algo_key}")

        self._algo_info = info
        self.producer   = make_producer(algo_key, **inputs)
        self.steps      = []
        self.metrics    = None

    def run_to_completion(self) -> RunMetrics:
        """Exhaust the run, record every step, compute metrics."""
        if self.producer is None:
            raise RuntimeError("Call start() first.")

        controller = PlaybackController(scheduler=ManualScheduler(), default_delay_ms=0)
        started = time.monotonic()
        controller.start(self.producer)
        controller.seek_to_end()
        wall_ms = (time.monotonic() - started) * 1000

        if controller.last_error is not None:
            raise controller.last_error
        self.steps = list(controller.delivered)
        self.metrics = self._compute_metrics(wall_ms)
        return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    # ------------------------------------------------------------------
    # Export (serialisable snapshot)
    # ------------------------------------------------------------------
    def export(self) -> Dict[str, Any]:
        inputs = self.producer.inputs if self.producer else {}
        return {
            "algo_key": self._algo_info.key if self._algo_info else "",
            "inputs":   {k: _jsonable(v) for k, v in inputs.items()},
            "metrics":  asdict(self.metrics) if self.metrics else {},
            "steps":    [s.to_dict() for s in self.steps],
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _compute_metrics(self, wall_ms: float) -> RunMetrics:
        info = self._algo_info
        last = self.steps[-1] if self.steps else None

        # approximate memory: sizeof the steps buffer
        mem = sys.getsizeof(self.steps)
        for s in self.steps:
            mem += sys.getsizeof(s)

        return RunMetrics(
            algo_key=info.key if info else "",
            algo_label=info.label if info else "",
            total_steps=len(self.steps),
            steps_by_kind=dict(Counter(s.kind for s in self.steps)),
            wall_time_ms=round(wall_ms, 2),
            memory_bytes=mem,
            result=thaw(last.payload, json_safe=True) if last else {},
        )


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return thaw(value, json_safe=True)
