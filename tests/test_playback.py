import threading
import time

import pytest

from quicksort_visualizer.errors import Cancelled
from quicksort_visualizer.playback import MINIMUM_DELAY, PlaybackClock


def _suspend_in_thread(clock):
    result = {}

    def target():
        try:
            clock.suspend()
            result["outcome"] = "returned"
        except Cancelled:
            result["outcome"] = "cancelled"

    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t, result


def test_delay_is_non_increasing_and_floored():
    clock = PlaybackClock()
    delays = [clock.delay_for(s) for s in range(1, 101)]
    assert delays == sorted(delays, reverse=True)
    assert min(delays) == MINIMUM_DELAY
    assert clock.delay_for(1) == 100
    assert clock.delay_for(50) == 51


def test_custom_minimum_delay():
    clock = PlaybackClock(minimum_delay=20)
    assert clock.delay_for(100) == 20
    assert clock.delay_for(90) == 20
    assert clock.delay_for(70) == 31


@pytest.mark.parametrize("value, expected", [(0, 1), (-5, 1), (101, 100), (250, 100), (42, 42)])
def test_set_speed_clamps(value, expected):
    clock = PlaybackClock()
    assert clock.set_speed(value) == expected
    assert clock.speed == expected


def test_next_suspend_uses_new_speed():
    clock = PlaybackClock(speed=10, time_unit=0)
    clock.begin_run()
    clock.suspend()
    assert clock.last_delay == 91
    clock.set_speed(100)
    clock.suspend()
    assert clock.last_delay == MINIMUM_DELAY


def test_pause_only_while_sorting():
    clock = PlaybackClock()
    assert clock.request_pause() is False
    assert clock.toggle_pause() is False
    assert clock.paused is False
    clock.begin_run()
    assert clock.toggle_pause() is True
    assert clock.toggle_pause() is False


def test_resume_when_not_paused_is_noop():
    clock = PlaybackClock()
    clock.begin_run()
    assert clock.request_resume() is False


def test_pause_blocks_until_resume():
    clock = PlaybackClock(time_unit=0)
    clock.begin_run()
    clock.request_pause()
    t, result = _suspend_in_thread(clock)
    time.sleep(0.05)
    assert t.is_alive()
    clock.request_resume()
    t.join(2)
    assert not t.is_alive()
    assert result["outcome"] == "returned"


def test_pause_survives_unrelated_wakeups():
    clock = PlaybackClock(time_unit=0)
    clock.begin_run()
    clock.request_pause()
    t, _ = _suspend_in_thread(clock)
    time.sleep(0.02)
    with clock._cond:
        clock._cond.notify_all()
    clock.set_speed(99)
    time.sleep(0.05)
    assert t.is_alive()
    clock.request_resume()
    t.join(2)
    assert not t.is_alive()


def test_cancel_interrupts_pause_wait():
    clock = PlaybackClock(time_unit=0)
    clock.begin_run()
    clock.request_pause()
    t, result = _suspend_in_thread(clock)
    time.sleep(0.02)
    assert clock.cancel() is True
    t.join(2)
    assert result["outcome"] == "cancelled"


def test_cancel_interrupts_sleep():
    # speed 1 at one second per unit would sleep for 100 s
    clock = PlaybackClock(speed=1, time_unit=1.0)
    clock.begin_run()
    t, result = _suspend_in_thread(clock)
    time.sleep(0.02)
    clock.cancel()
    t.join(2)
    assert not t.is_alive()
    assert result["outcome"] == "cancelled"


def test_cancel_when_idle_is_noop():
    clock = PlaybackClock()
    assert clock.cancel() is False
    assert clock.cancelled is False


def test_begin_run_guards_and_resets_flags():
    clock = PlaybackClock(time_unit=0)
    assert clock.begin_run() is True
    assert clock.begin_run() is False
    clock.request_pause()
    clock.cancel()
    clock.end_run()
    assert not clock.sorting and not clock.paused
    assert clock.begin_run() is True
    assert not clock.cancelled
    clock.suspend()


def test_wait_idle():
    clock = PlaybackClock()
    clock.begin_run()
    assert clock.wait_idle(0.01) is False
    threading.Timer(0.02, clock.end_run).start()
    assert clock.wait_idle(2) is True
