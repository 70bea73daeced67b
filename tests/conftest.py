import threading

import pytest

from quicksort_visualizer.array_model import ArrayModel
from quicksort_visualizer.controller import RenderSink, SortController
from quicksort_visualizer.playback import PlaybackClock


class RecordingSink(RenderSink):
    """Collects every event; optional callbacks let a test act mid-run."""

    def __init__(self):
        self.steps    = []
        self.changes  = 0
        self.finished = 0
        self.aborted  = []
        self.events   = []
        self.step_hook   = None
        self.change_hook = None
        self.finish_hook = None
        self.done = threading.Event()

    def on_step(self, state):
        self.steps.append(state)
        self.events.append(("step", state))
        if self.step_hook:
            self.step_hook(len(self.steps) - 1, state)

    def on_array_changed(self):
        self.changes += 1
        self.events.append(("changed", None))
        if self.change_hook:
            self.change_hook(self.changes)

    def on_run_finished(self):
        self.finished += 1
        self.events.append(("finished", None))
        if self.finish_hook:
            self.finish_hook()
        self.done.set()

    def on_run_aborted(self, reason):
        self.aborted.append(reason)
        self.events.append(("aborted", reason))
        self.done.set()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_controller(sink):
    """Controller over fixed values with an instant clock."""
    made = []

    def _make(values, speed=50, time_unit=0, **kwargs):
        model = ArrayModel(seed=7)
        model.load(values)
        clock = PlaybackClock(speed=speed, time_unit=time_unit)
        controller = SortController(model, clock, sink, **kwargs)
        made.append(controller)
        return controller

    yield _make
    for c in made:
        c.shutdown()
