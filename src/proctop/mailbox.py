"""Single-slot mailbox shared between a collector thread and the UI."""

import threading
import time
from typing import Generic, TypeVar

T = TypeVar("T")


class Mailbox(Generic[T]):
    """
    Thread-safe slot holding at most one unconsumed value.

    Publishing replaces any value the consumer has not taken yet, so a
    stalled consumer never builds up a backlog and always sees the latest
    snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T | None = None
        self._has_value = False
        self._published_at: float | None = None

    def publish(self, value: T) -> None:
        """Store a value, overwriting any unconsumed one."""
        with self._lock:
            self._value = value
            self._has_value = True
            self._published_at = time.monotonic()

    def take(self) -> T | None:
        """Remove and return the pending value, or None without blocking."""
        with self._lock:
            if not self._has_value:
                return None
            value = self._value
            self._value = None
            self._has_value = False
            return value

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._has_value

    def age(self) -> float | None:
        """Seconds since the last publish, or None if nothing was ever published."""
        with self._lock:
            if self._published_at is None:
                return None
            return time.monotonic() - self._published_at
