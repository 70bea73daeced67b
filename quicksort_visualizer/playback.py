"""
Playback clock: speed -> delay, pause/resume and cancellation.

All playback state (sorting, paused, cancelled, speed) lives behind one
threading.Condition. The worker only ever blocks inside suspend(); the UI
thread flips flags and notifies.
"""
import logging
import threading
import time

from quicksort_visualizer.errors import Cancelled

logger = logging.getLogger(__name__)

MIN_SPEED     = 1
MAX_SPEED     = 100
DEFAULT_SPEED = 50
MINIMUM_DELAY = 5          # time units
TIME_UNIT     = 0.001      # seconds per time unit


def clamp_speed(value) -> int:
    return max(MIN_SPEED, min(MAX_SPEED, int(value)))


class PlaybackClock:
    """
    Attributes
    ----------
    minimum_delay : int    floor of delay_for(), in time units
    time_unit     : float  seconds per time unit (0 makes every delay instant)
    last_delay    : int    delay applied by the most recent suspend(), or None
    """

    def __init__(self, speed=DEFAULT_SPEED, minimum_delay=MINIMUM_DELAY, time_unit=TIME_UNIT):
        self.minimum_delay = minimum_delay
        self.time_unit     = time_unit
        self.last_delay    = None
        self._cond         = threading.Condition()
        self._speed        = clamp_speed(speed)
        self._sorting      = False
        self._paused       = False
        self._cancelled    = False

    # ---------------------------------------------------------- state

    @property
    def speed(self) -> int:
        with self._cond:
            return self._speed

    @property
    def sorting(self) -> bool:
        with self._cond:
            return self._sorting

    @property
    def paused(self) -> bool:
        with self._cond:
            return self._paused

    @property
    def cancelled(self) -> bool:
        with self._cond:
            return self._cancelled

    def delay_for(self, speed) -> int:
        return max(self.minimum_delay, (MAX_SPEED + 1) - clamp_speed(speed))

    def set_speed(self, value) -> int:
        speed = clamp_speed(value)
        with self._cond:
            self._speed = speed
        logger.debug(f"Speed set to {speed}")
        return speed

    # ---------------------------------------------------------- run lifecycle

    def begin_run(self) -> bool:
        """Mark a run as started. Returns False if one is already in progress."""
        with self._cond:
            if self._sorting:
                return False
            self._sorting   = True
            self._paused    = False
            self._cancelled = False
            return True

    def end_run(self) -> None:
        with self._cond:
            self._sorting = False
            self._paused  = False
            self._cond.notify_all()

    def wait_idle(self, timeout=None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: not self._sorting, timeout)

    def cancel(self) -> bool:
        """Request cancellation and wake any pending wait. No-op when idle."""
        with self._cond:
            if not self._sorting:
                return False
            self._cancelled = True
            self._cond.notify_all()
        logger.debug("Cancellation requested")
        return True

    # ---------------------------------------------------------- pause

    def request_pause(self) -> bool:
        with self._cond:
            if not self._sorting or self._paused:
                return False
            self._paused = True
        logger.debug("Paused")
        return True

    def request_resume(self) -> bool:
        with self._cond:
            if not self._paused:
                return False
            self._paused = False
            self._cond.notify_all()
        logger.debug("Resumed")
        return True

    def toggle_pause(self) -> bool:
        """Flip paused while sorting; returns the new paused value."""
        with self._cond:
            if not self._sorting:
                return False
            self._paused = not self._paused
            if not self._paused:
                self._cond.notify_all()
            paused = self._paused
        logger.debug("Paused" if paused else "Resumed")
        return paused

    # ---------------------------------------------------------- suspension

    def suspend(self) -> None:
        """
        Sleep for delay_for(speed), then block while paused.

        Both waits loop on their predicate, so spurious or unrelated wake-ups
        (speed changes, pause toggles) never cut them short. Raises Cancelled
        as soon as a cancellation is pending.
        """
        with self._cond:
            if self._cancelled:
                raise Cancelled()
            delay = self.delay_for(self._speed)
            self.last_delay = delay
            deadline = time.monotonic() + delay * self.time_unit
            while not self._cancelled:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._cond.wait(remaining)
            while self._paused and not self._cancelled:
                self._cond.wait()
            if self._cancelled:
                raise Cancelled()
