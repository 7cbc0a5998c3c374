"""A one-to-many event bus with per-subscriber buffers."""

from __future__ import annotations

import itertools
import queue
import threading
from collections import deque
from typing import Any, Callable


class Subscription:
    """Interest in one event; values published for it are read with get()."""

    def __init__(
        self,
        sub_id: int,
        event_id: int,
        size: int,
        once: bool,
        on_delete: Callable[[int, int], None],
    ) -> None:
        self._id = sub_id
        self._event_id = event_id
        self._size = size
        self._once = once
        self._on_delete = on_delete
        self._cond = threading.Condition()
        self._items: deque[Any] = deque()
        self._closed = False

    @property
    def event_id(self) -> int:
        return self._event_id

    def get(self, timeout: float | None = None) -> Any:
        """Return the next value; raise queue.Empty if none comes in time.

        A closed subscription still hands out values already buffered, then
        raises queue.Empty at once.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._items or self._closed, timeout
            )
            if not ready or not self._items:
                raise queue.Empty
            value = self._items.popleft()
            self._cond.notify_all()
            return value

    def unsubscribe(self) -> None:
        """Remove interest in the event."""
        self._close()
        self._on_delete(self._event_id, self._id)

    def _publish(self, value: Any) -> None:
        with self._cond:
            self._cond.wait_for(
                lambda: len(self._items) < self._size or self._closed
            )
            if self._closed:
                return
            self._items.append(value)
            self._cond.notify_all()
        if self._once:
            self.unsubscribe()

    def _close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()


class MsgBus:
    """Distributes values broadcast for an event id to all its subscribers."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._events: dict[int, dict[int, Subscription]] = {}

    def subscribe(self, event_id: int) -> Subscription:
        return self._subscribe(event_id, 1, False)

    def subscribe_buffered(self, event_id: int, size: int) -> Subscription:
        if size < 1:
            raise ValueError("buffer size must be at least 1")
        return self._subscribe(event_id, size, False)

    def subscribe_once(self, event_id: int) -> Subscription:
        return self._subscribe(event_id, 1, True)

    def broadcast_to_all(self, value: Any) -> None:
        """Send ``value`` to the subscribers of every event."""
        with self._lock:
            for event_id in list(self._events):
                self._broadcast(event_id, value)

    def broadcast(self, event_id: int, value: Any) -> None:
        """Send ``value`` to the subscribers of ``event_id``."""
        with self._lock:
            self._broadcast(event_id, value)

    def close(self) -> None:
        """Close every subscription and forget them."""
        with self._lock:
            for subs in self._events.values():
                for sub in subs.values():
                    sub._close()
            self._events.clear()

    def __enter__(self) -> MsgBus:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _broadcast(self, event_id: int, value: Any) -> None:
        subs = self._events.get(event_id)
        if not subs:
            return
        targets = list(subs.values())

        def deliver() -> None:
            for sub in targets:
                sub._publish(value)

        threading.Thread(target=deliver, daemon=True).start()

    def _subscribe(self, event_id: int, size: int, once: bool) -> Subscription:
        with self._lock:
            sub = Subscription(next(self._ids), event_id, size, once, self._delete)
            self._events.setdefault(event_id, {})[sub._id] = sub
            return sub

    def _delete(self, event_id: int, sub_id: int) -> None:
        with self._lock:
            subs = self._events.get(event_id)
            if subs is None:
                return
            subs.pop(sub_id, None)
            if not subs:
                del self._events[event_id]