import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .models import Event

logger = logging.getLogger(__name__)

Subscriber = Callable[[Event], None]

_pending = threading.local()


@contextmanager
def deferred_notifications() -> Iterator[None]:
    """Hold back subscriber calls made on this thread until the outermost block exits.

    Components enter this before taking their locks, so subscribers only run
    once every lock of the operation has been released.
    """
    depth = getattr(_pending, "depth", 0)
    if depth == 0:
        _pending.queue = []
    _pending.depth = depth + 1
    try:
        yield
    finally:
        _pending.depth = depth
        if depth == 0:
            queue, _pending.queue = _pending.queue, []
            for log, event in queue:
                log._notify(event)


class EventLog:
    """Ordered record of emitted events.

    Components emit only after their state change has committed, so every
    event here corresponds to exactly one successful call. Subscribers are
    notified after the emitting component has released its locks.
    """

    def __init__(self):
        self._events: list[Event] = []
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def emit(self, event: Event) -> Event:
        with self._lock:
            event = event.model_copy(update={"sequence": len(self._events) + 1})
            self._events.append(event)

        if getattr(_pending, "depth", 0) > 0:
            _pending.queue.append((self, event))
        else:
            self._notify(event)
        return event

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def history(self, name: Optional[str] = None, limit: int = 50, offset: int = 0) -> list[Event]:
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        with self._lock:
            events = [e for e in self._events if name is None or e.name == name]
        return events[offset:offset + limit]

    def count(self, name: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for e in self._events if name is None or e.name == name)

    def __len__(self) -> int:
        return self.count()

    def _notify(self, event: Event) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.exception("Event subscriber failed for %s #%d", event.name, event.sequence)
