from __future__ import annotations

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Debouncer(Generic[T]):
    """
    Cancellable timer for a cooperative loop.

    ``schedule`` replaces any pending value and restarts the delay; ``poll``
    hands back the latest value once the delay has elapsed, exactly once.
    """

    def __init__(self, delay: float = 0.15, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = float(delay)
        self.clock = clock
        self._value: Optional[T] = None
        self._due: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._due is not None

    def schedule(self, value: T) -> None:
        self._value = value
        self._due = self.clock() + self.delay

    def cancel(self) -> None:
        self._value = None
        self._due = None

    def remaining(self) -> float:
        if self._due is None:
            return 0.0
        return max(0.0, self._due - self.clock())

    def fire(self) -> Optional[T]:
        """Hand back the pending value now, regardless of the delay."""
        if self._due is None:
            return None
        value = self._value
        self.cancel()
        return value

    def poll(self) -> Optional[T]:
        if self._due is None or self.clock() < self._due:
            return None
        value = self._value
        self.cancel()
        return value
