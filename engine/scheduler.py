"""
scheduler.py — Cancellable Delayed Calls
=========================================
The only place the stepper waits.  The controller asks a Scheduler to
run one callback after `delay` seconds and keeps the returned handle;
pause / reset / a new start cancel that handle.

Contract:
  - schedule(delay, fn) returns a ScheduledCall.
  - ScheduledCall.cancel() is idempotent.  Once it returns, `fn` will
    not START.  (A callback already running is allowed to finish; the
    controller's token check makes such a late callback a no-op.)

Two implementations:
  ThreadingScheduler – real time, one daemon threading.Timer per call.
                       Used by the Flask app.
  ManualScheduler    – virtual clock.  Nothing runs until the host calls
                       advance(seconds) / run_pending().  Used by
                       tick-driven hosts and by the tests.
"""

import heapq
import itertools
import logging
import threading
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------
class ScheduledCall:
    """Handle for one pending callback."""

    def __init__(self, fn: Callable[[], None], due: float = 0.0):
        self.due = due
        self._fn = fn
        self._lock = threading.Lock()
        self._cancelled = False
        self._started = False

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._started)

    def run(self) -> bool:
        """Run the callback unless cancelled.  Returns True if it ran."""
        with self._lock:
            if self._cancelled or self._started:
                return False
            self._started = True
        self._fn()
        return True


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------
class Scheduler:
    def schedule(self, delay: float, fn: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError

    def shutdown(self) -> None:
        """Cancel everything still pending."""


# ---------------------------------------------------------------------------
# Real-time scheduler
# ---------------------------------------------------------------------------
class ThreadingScheduler(Scheduler):
    def __init__(self):
        self._lock = threading.Lock()
        self._timers: List[Tuple[ScheduledCall, threading.Timer]] = []

    def schedule(self, delay: float, fn: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(fn)
        timer = threading.Timer(max(0.0, delay), self._fire, args=(call,))
        timer.daemon = True
        with self._lock:
            self._timers = [(c, t) for c, t in self._timers if c.pending]
            self._timers.append((call, timer))
        timer.start()
        return call

    def _fire(self, call: ScheduledCall) -> None:
        try:
            call.run()
        except Exception:
            logger.exception("scheduled callback failed")

    def shutdown(self) -> None:
        with self._lock:
            timers, self._timers = self._timers, []
        for call, timer in timers:
            call.cancel()
            timer.cancel()


# ---------------------------------------------------------------------------
# Virtual-clock scheduler
# ---------------------------------------------------------------------------
class ManualScheduler(Scheduler):
    """
    Deterministic scheduler: `now` only moves when advance() is called.

        sched = ManualScheduler()
        controller = PlaybackController(consumer, scheduler=sched)
        controller.start(producer, delay_ms=100)
        sched.advance(0.1)          # exactly one more step delivered
    """

    def __init__(self):
        self.now: float = 0.0
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._seq = itertools.count()

    def schedule(self, delay: float, fn: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(fn, due=self.now + max(0.0, delay))
        heapq.heappush(self._queue, (call.due, next(self._seq), call))
        return call

    @property
    def pending(self) -> int:
        return sum(1 for _, _, c in self._queue if c.pending)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running everything that falls due.  Returns calls run."""
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if call.run():
                ran += 1
        self.now = target
        return ran

    def run_pending(self, limit: int = 100_000) -> int:
        """Jump the clock through every pending call (including ones they schedule)."""
        ran = 0
        while self._queue and ran < limit:
            due, _, call = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if call.run():
                ran += 1
        return ran

    def shutdown(self) -> None:
        for _, _, call in self._queue:
            call.cancel()
        self._queue.clear()
