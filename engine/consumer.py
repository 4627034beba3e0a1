"""
consumer.py — Consumer Contract
================================
What the controller talks to.  A rendering layer implements (or wraps
callbacks into) a StepConsumer:

    on_step(step)            once per delivered Step, in order
    on_state_change(state)   whenever the ControllerState changes
    on_error(exc)            a producer failed mid-run; the controller is
                             already back in IDLE

Nothing here knows about Flask, HTML or colours.
"""

import threading
from typing import TYPE_CHECKING, Callable, List, Optional

from algorithms.step import Step

if TYPE_CHECKING:
    from engine.controller import ControllerState


class StepConsumer:
    """Base consumer: every hook is a no-op, override what you need."""

    def on_step(self, step: Step) -> None:
        pass

    def on_state_change(self, state: "ControllerState") -> None:
        pass

    def on_error(self, exc: BaseException) -> None:
        pass


class CallbackConsumer(StepConsumer):
    """Adapter for plain callables, e.g. CallbackConsumer(on_step=redraw)."""

    def __init__(
        self,
        on_step: Optional[Callable[[Step], None]] = None,
        on_state_change: Optional[Callable[["ControllerState"], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        self._on_step = on_step
        self._on_state_change = on_state_change
        self._on_error = on_error

    def on_step(self, step: Step) -> None:
        if self._on_step:
            self._on_step(step)

    def on_state_change(self, state: "ControllerState") -> None:
        if self._on_state_change:
            self._on_state_change(state)

    def on_error(self, exc: BaseException) -> None:
        if self._on_error:
            self._on_error(exc)


class RecordingConsumer(StepConsumer):
    """
    Buffers everything it is told.  The web API polls it; tests assert on it.

    Attributes:
        run_id : Run the buffered steps belong to (None when idle).
        steps  : Steps delivered in that run.
        states : ControllerStates published since that run began.
        errors : Failures reported since that run began.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.run_id: Optional[int]             = None
        self.steps:  List[Step]                = []
        self.states: List["ControllerState"]   = []
        self.errors: List[BaseException]       = []

    def on_step(self, step: Step) -> None:
        with self._lock:
            self.steps.append(step)

    def on_state_change(self, state: "ControllerState") -> None:
        with self._lock:
            if state.run_id != self.run_id:
                # new run (or reset): the old run is history
                self.run_id = state.run_id
                self.steps = []
                self.states = []
                self.errors = []
            self.states.append(state)

    def on_error(self, exc: BaseException) -> None:
        with self._lock:
            self.errors.append(exc)

    @property
    def latest(self) -> Optional[Step]:
        with self._lock:
            return self.steps[-1] if self.steps else None

    def since(self, index: int) -> List[Step]:
        """Steps of the current run with Step.index >= index."""
        with self._lock:
            return [s for s in self.steps if s.index >= index]
