import logging
import operator

import numpy as np

from quicksort_visualizer.errors import InvalidConfiguration, OutOfRange

logger = logging.getLogger(__name__)


class ArrayModel:
    """
    The integer sequence drawn as bars.

    Backed by a numpy int64 array. swap() is the only mutation; the controller
    holds the model "busy" for the lifetime of a run, and initialize()/load()
    refuse to run while it does.
    """

    def __init__(self, seed=None):
        self._rng    = np.random.default_rng(seed)
        self._values = np.zeros(0, dtype=np.int64)
        self._busy   = False

    # ---------------------------------------------------------- setup

    def initialize(self, n: int, value_range) -> None:
        """Fill with n values drawn uniformly from the half-open range [low, high)."""
        if self._busy:
            raise InvalidConfiguration("cannot initialize the array while a sort is running")
        try:
            low, high = (int(v) for v in value_range)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"value range must be a (low, high) pair, got {value_range!r}") from e
        if n is None or int(n) <= 0:
            raise InvalidConfiguration(f"bar count must be positive, got {n!r}")
        if high <= low:
            raise InvalidConfiguration(f"value range [{low}, {high}) is empty")
        self._values = self._rng.integers(low, high, size=int(n), dtype=np.int64)
        logger.debug(f"Initialized {n} values in [{low}, {high})")

    def load(self, values) -> None:
        """Replace the contents with a fixed sequence (replays and tests)."""
        if self._busy:
            raise InvalidConfiguration("cannot load values while a sort is running")
        self._values = np.array(list(values), dtype=np.int64)

    # ---------------------------------------------------------- access

    def __len__(self):
        return len(self._values)

    def _check(self, index) -> int:
        try:
            i = operator.index(index)
        except TypeError:
            raise OutOfRange(index, len(self._values)) from None
        if not 0 <= i < len(self._values):
            raise OutOfRange(index, len(self._values))
        return i

    def get(self, index) -> int:
        return int(self._values[self._check(index)])

    def swap(self, i, j) -> None:
        i, j = self._check(i), self._check(j)
        if i == j:
            return
        a = self._values
        a[i], a[j] = a[j], a[i]

    def snapshot(self) -> tuple:
        return tuple(int(v) for v in self._values)

    def max_value(self) -> int:
        return int(self._values.max()) if len(self._values) else 0

    # ---------------------------------------------------------- run guard

    @property
    def busy(self) -> bool:
        return self._busy

    def acquire(self) -> None:
        self._busy = True

    def release(self) -> None:
        self._busy = False
