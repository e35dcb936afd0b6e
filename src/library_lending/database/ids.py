"""Monotonic id generation for the lending stores."""

import threading


class IdGenerator:
    """
    Hands out integer ids for one entity type.

    ``next_id`` returns max-so-far + 1, starting at 1. The counter is seeded
    from the largest id already stored when the engine starts and never
    moves backwards, so ids of deleted entities are not reused.
    """

    def __init__(self, name: str, start: int = 0):
        self.name = name
        self._last = start
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            self._last += 1
            return self._last

    def seed(self, max_existing: int | None) -> None:
        """Advance past ``max_existing``; lower values are ignored."""
        with self._lock:
            if max_existing is not None and max_existing > self._last:
                self._last = max_existing

    def __repr__(self) -> str:
        return f"IdGenerator({self.name!r}, last={self._last})"
