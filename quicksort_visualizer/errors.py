class VisualizerError(Exception):
    """Base class for everything the visualizer raises on purpose."""


class InvalidConfiguration(VisualizerError, ValueError):
    """Bad initialization parameters (bar count, value range, settings file)."""


class OutOfRange(VisualizerError, IndexError):
    """An index outside [0, length) reached the array model. Fatal to a run."""

    def __init__(self, index, length):
        super().__init__(f"index {index} out of range for array of length {length}")
        self.index  = index
        self.length = length


class Cancelled(VisualizerError):
    """Raised out of PlaybackClock.suspend() when a run is cancelled. Not a fault."""
