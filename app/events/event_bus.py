"""Synchronous publish/subscribe bus for tick pipeline events.

The pipeline collects the events a tick produces and hands them to the bus
once the tracker and classifier updates for that tick are complete. Consumers
(animation, sound cues) subscribe per event class.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Type, TypeVar

from log_config.logger import get_logger

logger = get_logger(__name__)

E = TypeVar("E")
Handler = Callable[[E], None]


class EventBus:
    """Thread-safe event bus keyed by event class.

    Handlers run on the publishing thread in the order they subscribed. A
    handler that raises is logged and counted; the remaining handlers and the
    publishing tick carry on.

    Example:
        ```python
        bus = EventBus()
        bus.subscribe(StateChangedEvent, lambda e: print(e.identity, e.current.value))
        bus.publish_all(tick_events)
        ```
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type, List[Handler]] = {}
        self._published: Dict[Type, int] = {}
        self._failures = 0
        self._lock = threading.Lock()
        self._created = time.time()

    def subscribe(self, event_type: Type[E], handler: Handler) -> None:
        """Register ``handler`` for ``event_type``. Re-registering is a no-op."""
        with self._lock:
            handlers = self._handlers.setdefault(event_type, [])
            if handler in handlers:
                return
            handlers.append(handler)
            logger.debug("events.subscribe type={} handlers={}", event_type.__name__, len(handlers))

    def unsubscribe(self, event_type: Type[E], handler: Handler) -> bool:
        """Remove ``handler``; returns False if it was not registered."""
        with self._lock:
            handlers = self._handlers.get(event_type)
            if not handlers or handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    def publish(self, event: Any) -> None:
        event_type = type(event)
        with self._lock:
            handlers = list(self._handlers.get(event_type, ()))
            self._published[event_type] = self._published.get(event_type, 0) + 1

        failed = 0
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                failed += 1
                logger.opt(exception=e).error(
                    "events.handler_failed type={} error={}: {}", event_type.__name__, type(e).__name__, e
                )
        if failed:
            with self._lock:
                self._failures += failed

    def publish_all(self, events: Iterable[Any]) -> None:
        """Publish a batch of events in order."""
        for event in events:
            self.publish(event)

    def get_subscriber_count(self, event_type: Type[E]) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def get_stats(self) -> Dict[str, Any]:
        """Counts of registered types, subscriptions, publishes and handler failures."""
        with self._lock:
            return {
                "event_types": len(self._handlers),
                "total_subscribers": sum(len(h) for h in self._handlers.values()),
                "event_counts": {t.__name__: n for t, n in self._published.items()},
                "handler_failures": self._failures,
                "uptime_seconds": time.time() - self._created,
            }

    def clear_all_subscribers(self) -> None:
        with self._lock:
            self._handlers.clear()
            self._published.clear()
        logger.warning("events.cleared")

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (
            f"EventBus(event_types={stats['event_types']}, "
            f"subscribers={stats['total_subscribers']}, "
            f"uptime={stats['uptime_seconds']:.1f}s)"
        )
