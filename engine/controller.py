"""
controller.py — Paced Playback Controller
==========================================
The PlaybackController is the ONLY object the UI drives during a run.
It pulls Steps from a StepProducer one at a time, hands each to the
consumer, then asks the scheduler to wake it again after `delay_ms`.

State machine:
    IDLE      →  start()            →  RUNNING   (step 0 delivered at once)
    RUNNING   →  pause()            →  PAUSED
    PAUSED    →  resume()           →  RUNNING
    RUNNING   →  (terminal step)    →  COMPLETED
    any       →  reset()            →  IDLE
    RUNNING / PAUSED → producer raised → IDLE (consumer.on_error)

Concurrency:
  Every delivery happens under one re-entrant lock, so deliveries never
  overlap and a consumer may call pause() / reset() from inside
  on_step.  Each scheduled advancement carries a (run_id, generation)
  token; pause, reset and start bump the generation and cancel the
  pending call, so a late timer from a superseded run finds a stale
  token and delivers nothing.

The controller never looks inside a Step beyond `index` and `terminal`.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from algorithms.step import Step
from engine.config import SPEED_PRESETS, StepperConfig, preset_delay, validate_delay
from engine.consumer import StepConsumer
from engine.errors import AlreadyRunning, ProducerExhausted
from engine.scheduler import ScheduledCall, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class PlaybackState(Enum):
    IDLE      = "idle"
    RUNNING   = "running"
    PAUSED    = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ControllerState:
    """
    Snapshot published through on_state_change.

    Attributes:
        run_id        : Id of the active / last completed run, None when idle.
        current_index : Index of the last delivered Step, -1 before the first.
        is_running    : True while a run is RUNNING or PAUSED.
        is_paused     : True only while PAUSED.
        delay_ms      : Pause between two deliveries.
        phase         : The PlaybackState.
    """

    run_id:        Optional[int]  = None
    current_index: int            = -1
    is_running:    bool           = False
    is_paused:     bool           = False
    delay_ms:      float          = SPEED_PRESETS["medium"]
    phase:         PlaybackState  = PlaybackState.IDLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id":        self.run_id,
            "current_index": self.current_index,
            "is_running":    self.is_running,
            "is_paused":     self.is_paused,
            "delay_ms":      self.delay_ms,
            "phase":         self.phase.value,
        }


# ---------------------------------------------------------------------------
# One run's iterator
# ---------------------------------------------------------------------------
class _RunCursor:
    def __init__(self, run_id: int, producer: Iterable[Step]):
        self.run_id    = run_id
        self.producer  = producer
        self.exhausted = False
        self._steps: Iterator[Step] = iter(producer)

    def next_step(self) -> Step:
        if self.exhausted:
            raise ProducerExhausted(f"run {self.run_id} already delivered its terminal step")
        step = next(self._steps)
        if step.terminal:
            self.exhausted = True
        return step

    def close(self) -> None:
        close = getattr(self._steps, "close", None)
        if close is not None:
            close()


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------
class PlaybackController:
    """
    Attributes:
        consumer   : StepConsumer receiving steps, state changes and errors.
        scheduler  : Scheduler used for the delay between steps.
        last_error : Exception that aborted the most recent run, if any.
    """

    def __init__(
        self,
        consumer: Optional[StepConsumer] = None,
        scheduler: Optional[Scheduler] = None,
        default_delay_ms: float = SPEED_PRESETS["medium"],
    ):
        self.consumer:   StepConsumer = consumer or StepConsumer()
        self.scheduler:  Scheduler    = scheduler or ThreadingScheduler()
        self.last_error: Optional[BaseException] = None

        self._default_delay = validate_delay(default_delay_ms)
        self._lock       = threading.RLock()
        self._run_ids    = itertools.count(1)
        self._generation = 0
        self._cursor:    Optional[_RunCursor]    = None
        self._pending:   Optional[ScheduledCall] = None
        self._delivered: List[Step]              = []
        self._state = self._initial_state()

    @classmethod
    def from_config(
        cls,
        config: StepperConfig,
        consumer: Optional[StepConsumer] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> "PlaybackController":
        return cls(consumer, scheduler, default_delay_ms=config.default_delay_ms)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, producer: Iterable[Step], delay_ms: Optional[float] = None) -> int:
        """
        Begin a new run and deliver its first step immediately.
        Returns the new run id.
        """
        with self._lock:
            if self._state.phase in (PlaybackState.RUNNING, PlaybackState.PAUSED):
                raise AlreadyRunning(
                    f"run {self._state.run_id} is still {self._state.phase.value}; reset() first"
                )
            delay = self._state.delay_ms if delay_ms is None else validate_delay(delay_ms)

            self._cancel_pending()
            self._close_cursor()
            run_id = next(self._run_ids)
            self._cursor     = _RunCursor(run_id, producer)
            self._delivered  = []
            self.last_error  = None
            self._set_state(
                run_id=run_id,
                current_index=-1,
                is_running=True,
                is_paused=False,
                delay_ms=delay,
                phase=PlaybackState.RUNNING,
            )
            logger.debug("run %d started: %r at %s ms/step", run_id, producer, delay)
            self._advance()
            return run_id

    def reset(self) -> None:
        """Back to IDLE.  Safe at any time, any number of times."""
        with self._lock:
            self._cancel_pending()
            if self._cursor is not None:
                logger.debug("run %d discarded by reset", self._cursor.run_id)
            self._close_cursor()
            self._delivered = []
            self.last_error = None
            self._publish(self._initial_state())

    def shutdown(self) -> None:
        """reset() and stop the scheduler."""
        self.reset()
        self.scheduler.shutdown()

    # ------------------------------------------------------------------
    # Play / Pause
    # ------------------------------------------------------------------
    def pause(self) -> None:
        """Stop after the step being delivered right now.  No-op unless RUNNING."""
        with self._lock:
            if self._state.phase is not PlaybackState.RUNNING:
                return
            self._cancel_pending()
            self._set_state(is_paused=True, phase=PlaybackState.PAUSED)

    def resume(self) -> None:
        """Continue from the paused position.  No-op unless PAUSED."""
        with self._lock:
            if self._state.phase is not PlaybackState.PAUSED:
                return
            self._set_state(is_paused=False, phase=PlaybackState.RUNNING)
            self._schedule_next()

    def toggle_play(self) -> None:
        with self._lock:
            if self._state.phase is PlaybackState.RUNNING:
                self.pause()
            else:
                self.resume()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def step(self) -> bool:
        """
        Deliver exactly one step while PAUSED.  Returns False (and does
        nothing) when running, idle, or past the terminal step.
        """
        with self._lock:
            if self._cursor is None or self._state.phase is PlaybackState.RUNNING:
                return False
            return self._advance(schedule=False)

    def seek_to_end(self) -> int:
        """Deliver every remaining step right now, in order.  Returns how many."""
        with self._lock:
            if self._state.phase not in (PlaybackState.RUNNING, PlaybackState.PAUSED):
                return 0
            self._cancel_pending()
            cursor, generation = self._cursor, self._generation
            delivered = 0
            while (
                self._cursor is cursor
                and self._generation == generation
                and self._state.phase in (PlaybackState.RUNNING, PlaybackState.PAUSED)
            ):
                if not self._advance(schedule=False):
                    break
                delivered += 1
            return delivered

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_delay(self, delay_ms: float) -> None:
        """New pacing for subsequent steps; the run is not restarted."""
        delay = validate_delay(delay_ms)
        with self._lock:
            self._set_state(delay_ms=delay)

    def set_speed(self, preset: str) -> None:
        self.set_delay(preset_delay(preset))

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def phase(self) -> PlaybackState:
        return self._state.phase

    @property
    def current_step(self) -> Optional[Step]:
        with self._lock:
            return self._delivered[-1] if self._delivered else None

    @property
    def delivered(self) -> Tuple[Step, ...]:
        """Steps delivered so far in the current run."""
        with self._lock:
            return tuple(self._delivered)

    @property
    def has_pending(self) -> bool:
        pending = self._pending
        return pending is not None and pending.pending

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _initial_state(self) -> ControllerState:
        return ControllerState(delay_ms=self._default_delay)

    def _set_state(self, **changes: Any) -> None:
        self._publish(replace(self._state, **changes))

    def _publish(self, new: ControllerState) -> None:
        if new != self._state:
            self._state = new
            self.consumer.on_state_change(new)

    def _advance(self, schedule: bool = True) -> bool:
        """Deliver one step.  Caller holds the lock.  Returns True if a step was delivered."""
        cursor = self._cursor
        if cursor is None:
            return False
        try:
            step = cursor.next_step()
        except ProducerExhausted:
            logger.debug("run %d: advancement after terminal step ignored", cursor.run_id)
            return False
        except Exception as exc:
            self._fail(cursor, exc)
            return False

        generation = self._generation
        self._delivered.append(step)
        before = self._state
        self._state = replace(before, current_index=step.index)
        try:
            self.consumer.on_step(step)
        except Exception as exc:
            self._fail(cursor, exc)
            return True

        if self._cursor is not cursor:
            # consumer reset / restarted from inside on_step
            return True

        if step.terminal:
            # a pause requested during the last on_step still ends the run
            cursor.close()
            self._set_state(is_running=False, is_paused=False, phase=PlaybackState.COMPLETED)
            logger.debug("run %d completed after %d step(s)", cursor.run_id, step.index + 1)
            return True

        if self._generation != generation:
            # consumer paused from inside on_step
            return True

        self.consumer.on_state_change(self._state)
        if schedule and self._state.phase is PlaybackState.RUNNING:
            self._schedule_next()
        return True

    def _schedule_next(self) -> None:
        cursor = self._cursor
        if cursor is None:
            return
        token = (cursor.run_id, self._generation)
        self._pending = self.scheduler.schedule(
            self._state.delay_ms / 1000.0,
            lambda: self._on_timer(token),
        )

    def _on_timer(self, token: Tuple[int, int]) -> None:
        with self._lock:
            run_id, generation = token
            cursor = self._cursor
            if cursor is None or cursor.run_id != run_id or generation != self._generation:
                logger.debug("stale advancement for run %d dropped", run_id)
                return
            if self._state.phase is not PlaybackState.RUNNING:
                return
            self._pending = None
            self._advance()

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _close_cursor(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

    def _fail(self, cursor: _RunCursor, exc: BaseException) -> None:
        logger.error("run %d aborted: producer failed", cursor.run_id, exc_info=exc)
        self._cancel_pending()
        self._close_cursor()
        self._delivered = []
        self._publish(self._initial_state())
        self.last_error = exc
        self.consumer.on_error(exc)
