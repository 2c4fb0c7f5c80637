"""Thread-safe accumulation of elapsed times."""

import threading


class TimingAccumulator:
    """Running total of seconds, updated under a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0.0
        self._count = 0

    def add(self, seconds: float) -> None:
        """Add one elapsed time to the total.

        Args:
            seconds (float): Elapsed time to add.
        """
        with self._lock:
            self._total += seconds
            self._count += 1

    @property
    def total(self) -> float:
        """Sum of every added time, in seconds."""
        with self._lock:
            return self._total

    @property
    def count(self) -> int:
        """Number of times added so far."""
        with self._lock:
            return self._count
