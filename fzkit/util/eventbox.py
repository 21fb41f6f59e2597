"""A mailbox of keyed events that threads wait on."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Hashable

Events = Dict[Hashable, Any]


class EventBox:
    """Collects events by type and wakes waiting threads when one arrives."""

    def __init__(self) -> None:
        self._events: Events = {}
        self._cond = threading.Condition()
        self._ignore: set = set()

    def wait(self, callback: Callable[[Events], Any]) -> None:
        """Block until some event is set, then run callback on the events.

        The callback runs with the box locked and may clear the dictionary.
        """
        with self._cond:
            if not self._events:
                self._cond.wait()
            callback(self._events)

    def set(self, event: Hashable, value: Any) -> None:
        """Record an event; waiters are woken unless the event is ignored."""
        with self._cond:
            self._events[event] = value
            if event not in self._ignore:
                self._cond.notify_all()

    def peek(self, event: Hashable) -> bool:
        with self._cond:
            return event in self._events

    def watch(self, *events: Hashable) -> None:
        """Let the given events wake waiters again."""
        with self._cond:
            self._ignore.difference_update(events)

    def unwatch(self, *events: Hashable) -> None:
        """Stop the given events from waking waiters."""
        with self._cond:
            self._ignore.update(events)

    def wait_for(self, event: Hashable) -> None:
        """Block until the given event has been set."""
        with self._cond:
            self._cond.wait_for(lambda: event in self._events)