"""In-process fan-out of mutation events to connected observers.

`publish` snapshots the observers connected at that instant and queues
the event; one dispatcher thread delivers queued events in FIFO order.
Each observer therefore sees events in publication order, and a slow or
failing observer never blocks the publisher. There is no replay: an
observer only receives events published while it is subscribed.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..domain.models import Event

Observer = Callable[[Event], None]

_STOP = object()


@dataclass
class Subscription:
    """Handle returned by `EventBus.subscribe`."""

    bus: EventBus
    token: int

    def close(self) -> None:
        """Disconnect the observer. Events already queued for it still arrive."""
        self.bus.unsubscribe(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@dataclass
class EventBus:
    """Best-effort, ordered, non-blocking publisher (PublisherPort)."""

    name: str = "events"

    _observers: Dict[int, Observer] = field(default_factory=dict, repr=False)
    _next_token: int = field(default=0, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _queue: "queue.Queue[Any]" = field(default_factory=queue.Queue, repr=False)
    _thread: Optional[threading.Thread] = field(default=None, repr=False)
    _closed: bool = field(default=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def subscribe(self, observer: Observer) -> Subscription:
        """Connect an observer; it receives events published from now on."""
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._observers[token] = observer
        self._logger.debug("Observer connected", extra={"token": token})
        return Subscription(bus=self, token=token)

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._observers.pop(subscription.token, None)
        if removed is not None:
            self._logger.debug("Observer disconnected", extra={"token": subscription.token})

    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def publish(self, event_type: str, payload: Mapping[str, Any]) -> None:
        """Queue an event for the observers connected right now."""
        event = Event(type=event_type, payload=payload)
        with self._lock:
            if self._closed:
                self._logger.warning(
                    "Event dropped, bus closed", extra={"event_type": event_type}
                )
                return
            recipients: Tuple[Observer, ...] = tuple(self._observers.values())
            self._ensure_dispatcher()
            # Enqueue under the lock so queue order matches snapshot order.
            self._queue.put((event, recipients))
        self._logger.debug(
            "Event published",
            extra={"event_type": event_type, "recipients": len(recipients)},
        )

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued event has been delivered.

        Returns:
            True if the queue emptied within `timeout`.
        """
        pending = self._queue.all_tasks_done
        with pending:
            return pending.wait_for(lambda: self._queue.unfinished_tasks == 0, timeout)

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Deliver what is queued, then stop the dispatcher."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
            if thread is not None:
                self._queue.put(_STOP)
        if thread is not None:
            thread.join(timeout)

    def _ensure_dispatcher(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(
                target=self._dispatch_loop, name=f"{self.name}-dispatch", daemon=True
            )
            self._thread.start()

    def _dispatch_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                event, recipients = item
                for observer in recipients:
                    self._deliver(observer, event)
            finally:
                self._queue.task_done()

    def _deliver(self, observer: Observer, event: Event) -> None:
        try:
            observer(event)
        except Exception as e:
            self._logger.warning(
                "Observer delivery failed",
                extra={"event_type": event.type, "error": str(e)},
            )
