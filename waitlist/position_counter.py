import threading


class PositionCounter:
    """Process-local waitlist position sequence.

    Positions start at ``start`` and grow by one per call to ``next``. The
    sequence is not persisted and restarts with the process.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError("Position counter must start at 1 or higher")
        self._next_value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next_value
            self._next_value += 1
            return value

    def peek(self) -> int:
        """Returns the position the next submission would receive."""
        with self._lock:
            return self._next_value
