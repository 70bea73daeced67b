"""
Instrumented quicksort and the controller that drives it.

quicksort_steps() is a plain generator over an ArrayModel: it mutates the
array and yields a StepState after every observable event. SortController
publishes each state to a RenderSink and suspends on the PlaybackClock
between them, on a background worker thread or synchronously via run().
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from quicksort_visualizer.errors import Cancelled

logger = logging.getLogger(__name__)

# StepState.event values
PARTITION = "partition"     # new partition, pivot chosen
COMPARE   = "compare"       # A[scan] about to be compared with the pivot
SWAP      = "swap"          # two values exchanged (or a reported self-swap)
ADVANCE   = "advance"       # boundary advanced past the swapped value
PLACED    = "placed"        # pivot moved to its final position
DONE      = "done"          # terminal state, nothing highlighted

IDLE      = "idle"
RUNNING   = "running"
FINISHED  = "finished"
CANCELLED = "cancelled"
FAILED    = "failed"


@dataclass(frozen=True)
class StepState:
    pivot:      Optional[int] = None
    low_cursor: Optional[int] = None
    scan:       Optional[int] = None
    values:     tuple = ()
    event:      str = DONE
    moved:      bool = False

    @property
    def is_terminal(self) -> bool:
        return self.pivot is None and self.low_cursor is None and self.scan is None


@dataclass
class RunStats:
    steps:       int = 0
    comparisons: int = 0
    swaps:       int = 0      # every swap() call, self-swaps included
    exchanges:   int = 0      # swaps that actually moved two values


class RenderSink:
    """Receiver of run events. Every hook is optional; the defaults do nothing."""

    def on_step(self, state: StepState) -> None:
        pass

    def on_array_changed(self) -> None:
        pass

    def on_run_finished(self) -> None:
        pass

    def on_run_aborted(self, reason: str) -> None:
        pass


# ============================================================
# ===================== SORTING ALGORITHM ====================
# ============================================================

def _state(arr, event, pivot=None, low=None, scan=None, moved=False):
    if low is not None and low < 0:
        low = None
    return StepState(pivot, low, scan, arr.snapshot(), event, moved)


def _swap(arr, stats, i, j, pivot):
    arr.swap(i, j)
    stats.swaps += 1
    if i != j:
        stats.exchanges += 1
    return _state(arr, SWAP, pivot, i, j, moved=i != j)


def _partition(arr, lo, hi, stats):
    pivot = arr.get(hi)
    i = lo - 1
    yield _state(arr, PARTITION, hi, i, lo)
    for j in range(lo, hi):
        yield _state(arr, COMPARE, hi, i, j)
        stats.comparisons += 1
        if arr.get(j) <= pivot:
            i += 1
            yield _swap(arr, stats, i, j, hi)
            yield _state(arr, ADVANCE, hi, i, j)
    yield _swap(arr, stats, i + 1, hi, hi)
    yield _state(arr, PLACED, None, i + 1, None)
    return i + 1


def quicksort_steps(arr, stats=None):
    """
    Lomuto quicksort (last element as pivot, `<=` comparison) as a generator.

    Ranges are kept on an explicit stack; the left range is always popped
    first, so states come out in the same order as the recursive version.
    """
    stats = stats if stats is not None else RunStats()
    stack = [(0, len(arr) - 1)]
    while stack:
        lo, hi = stack.pop()
        if lo >= hi:
            continue
        p = yield from _partition(arr, lo, hi, stats)
        stack.append((p + 1, hi))
        stack.append((lo, p - 1))


# ============================================================
# ======================== CONTROLLER ========================
# ============================================================

class SortController:
    """
    Runs quicksort over an ArrayModel as a pausable, cancellable unit of work.

    Commands (start, pause_toggle, reset, set_speed, shutdown) may be called
    from the UI thread at any time. The worker never touches the UI; it only
    calls the sink hooks.
    """

    def __init__(self, model, clock, sink=None, bar_count=None, value_range=None):
        self.model       = model
        self.clock       = clock
        self.sink        = sink or RenderSink()
        self.bar_count   = bar_count
        self.value_range = value_range
        self.stats       = RunStats()
        self.outcome     = IDLE
        self.error       = None
        self._thread     = None
        self._runner     = None

    @property
    def sorting(self) -> bool:
        return self.clock.sorting

    @property
    def paused(self) -> bool:
        return self.clock.paused

    # ---------------------------------------------------------- commands

    def start(self) -> bool:
        """Run the sort on a background thread. No-op if a run is in progress."""
        if not self.clock.begin_run():
            return False
        self.model.acquire()
        self._thread = threading.Thread(target=self._worker, name="quicksort-worker", daemon=True)
        self._thread.start()
        return True

    def run(self) -> str:
        """Run the sort on the calling thread. Faults are re-raised after cleanup."""
        if not self.clock.begin_run():
            return self.outcome
        self.model.acquire()
        return self._execute()

    def pause_toggle(self) -> bool:
        return self.clock.toggle_pause()

    def set_speed(self, value) -> int:
        return self.clock.set_speed(value)

    def cancel(self) -> bool:
        return self.clock.cancel()

    def reset(self, n=None, value_range=None) -> None:
        """
        Cancel any run in progress, wait for it to unwind, then refill the array.
        From inside a sink hook (the worker thread) only the cancel happens.
        """
        if self.clock.cancel():
            if threading.get_ident() == self._runner:
                logger.warning("reset() called from the sort worker; run cancelled, array left as is")
                return
            self.clock.wait_idle()
            self.join()
        n = n if n is not None else self.bar_count
        value_range = value_range if value_range is not None else self.value_range
        self.model.initialize(n, value_range)
        self.outcome = IDLE
        self.sink.on_step(_state(self.model, DONE))
        self.sink.on_array_changed()

    def join(self, timeout=None) -> None:
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)

    def shutdown(self, timeout=2.0) -> None:
        self.clock.cancel()
        self.join(timeout)

    # ---------------------------------------------------------- worker

    def _worker(self):
        try:
            self._execute()
        except Exception as e:
            if e is not self.error:
                logger.exception(f"Unexpected error in sort worker: {e}")

    def _publish(self, state):
        self.stats.steps += 1
        self.sink.on_step(state)
        if state.event == SWAP and state.moved:
            self.sink.on_array_changed()

    def _execute(self) -> str:
        # Caller has already done begin_run() and model.acquire().
        # Only locals are read once end_run() lets other commands in.
        self._runner = threading.get_ident()
        stats = self.stats = RunStats()
        self.error   = None
        self.outcome = RUNNING
        logger.info(f"Sorting {len(self.model)} values")
        steps = quicksort_steps(self.model, stats)
        outcome, fault = FINISHED, None
        try:
            for state in steps:
                self._publish(state)
                self.clock.suspend()
        except Cancelled:
            outcome = CANCELLED
        except Exception as e:
            outcome = FAILED
            fault = self.error = e
            logger.exception(f"Sort aborted: {e}")
        finally:
            steps.close()
            self.outcome = outcome
            self._runner = None
            self.model.release()
            self.clock.end_run()

        self.sink.on_step(_state(self.model, DONE))
        if outcome == FINISHED:
            logger.info(f"Sort finished: {stats.comparisons} comparisons, "
                        f"{stats.exchanges} exchanges")
            self.sink.on_run_finished()
        elif outcome == CANCELLED:
            logger.info("Sort cancelled")
            self.sink.on_run_aborted("cancelled")
        else:
            self.sink.on_run_aborted(f"error: {fault}")
            raise fault
        return outcome
