"""Thread-safe output index."""

import threading


class IndexCounter:
    """Monotonic counter handing out output indices.

    One counter is shared by every chain execution of a run, including
    executions on different worker threads, so increments take a lock.

    Args:
        start: First index handed out.

    Example:
        >>> counter = IndexCounter()
        >>> counter.next(), counter.next()
        (0, 1)
    """

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return the current index and advance."""
        with self._lock:
            index = self._value
            self._value += 1
        return index

    @property
    def value(self) -> int:
        """The index the next call to :meth:`next` returns."""
        with self._lock:
            return self._value

    def reset(self, start: int = 0) -> None:
        with self._lock:
            self._value = start

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(value={self.value})"
