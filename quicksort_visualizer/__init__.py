"""Animated quicksort with pause/resume, reset and speed control."""
from quicksort_visualizer.array_model import ArrayModel
from quicksort_visualizer.controller import RenderSink, RunStats, SortController, StepState, quicksort_steps
from quicksort_visualizer.errors import Cancelled, InvalidConfiguration, OutOfRange, VisualizerError
from quicksort_visualizer.playback import PlaybackClock

__version__ = "1.0.0"
