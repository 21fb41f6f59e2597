"""A boolean flag that is safe to share between threads."""

from __future__ import annotations

import threading


class AtomicBool:
    """A boolean value guarded by a lock."""

    __slots__ = ("_lock", "_state")

    def __init__(self, initial_state: bool) -> None:
        self._lock = threading.Lock()
        self._state = bool(initial_state)

    @property
    def value(self) -> bool:
        """The current value."""
        with self._lock:
            return self._state

    def set(self, new_state: bool) -> bool:
        """Store a new value and return it."""
        new_state = bool(new_state)
        with self._lock:
            self._state = new_state
        return new_state

    def __bool__(self) -> bool:
        return self.value

    def __repr__(self) -> str:
        return f"AtomicBool({self.value!r})"