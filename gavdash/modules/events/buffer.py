"""In-memory ring buffer of recent webhook events, newest first."""

from collections import deque


class EventBuffer:
    def __init__(self, capacity: int = 200):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._events: deque = deque(maxlen=capacity)

    def push(self, event: dict) -> None:
        # appendleft on a full deque drops the oldest from the right
        self._events.appendleft(event)

    def latest(self, limit: int | None = None) -> list[dict]:
        events = list(self._events)
        if limit is not None and limit >= 0:
            return events[:limit]
        return events

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
