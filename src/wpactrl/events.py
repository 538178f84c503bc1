"""Arrival-ordered queue for unsolicited control events."""

from collections import deque

from .frames import Event


class EventQueue:
    """FIFO of events received but not yet handed to a consumer."""

    def __init__(self) -> None:
        self._events: deque[Event] = deque()

    def __len__(self) -> int:
        return len(self._events)

    def push(self, event: Event) -> None:
        self._events.append(event)

    def pop(self) -> Event | None:
        """Remove and return the oldest event, or None when empty."""
        return self._events.popleft() if self._events else None

    def drain(self) -> list[Event]:
        """Remove and return every queued event, oldest first."""
        events = list(self._events)
        self._events.clear()
        return events
