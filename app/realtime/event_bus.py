"""
app/realtime/event_bus.py

In-process publish/subscribe registry keyed by publisher id.

Delivery model
--------------
- ``emit`` calls every callback currently subscribed to the publisher,
  synchronously, in subscription order, on the caller's thread.
- No queueing, no persistence, no retry.  A subscriber that is not
  registered at emit time misses the event.
- A publisher's entry disappears when its last subscriber unsubscribes.

Thread safety
-------------
Refresh jobs emit from APScheduler worker threads while API handlers
subscribe and unsubscribe, so registry mutation happens under a lock and
``emit`` iterates over a snapshot.  A callback may therefore unsubscribe
itself (or others) mid-emission without disturbing the current delivery.

One bus instance is created by the application's composition root and
injected wherever it is needed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from app.domain.analytics_event import AnalyticsEvent
from app.realtime.logging_utils import log_event

logger = logging.getLogger(__name__)

EventCallback = Callable[[AnalyticsEvent], None]
Unsubscribe = Callable[[], None]


class AnalyticsEventBus:
    """
    Usage::

        bus = AnalyticsEventBus()
        unsubscribe = bus.subscribe("pub-1", on_event)
        bus.emit("pub-1", event)
        unsubscribe()
    """

    def __init__(self) -> None:
        # dict keys act as an insertion-ordered set of callbacks
        self._listeners: dict[str, dict[EventCallback, None]] = {}
        self._lock = threading.Lock()

    def subscribe(self, publisher_id: str, callback: EventCallback) -> Unsubscribe:
        """
        Register *callback* for *publisher_id*.

        Subscribing the same callback twice has no additional effect.
        Returns an idempotent function that removes the subscription.
        """
        with self._lock:
            self._listeners.setdefault(publisher_id, {})[callback] = None
            count = len(self._listeners[publisher_id])
        log_event(logger, logging.DEBUG, "bus_subscribe", publisher_id=publisher_id, subscribers=count)

        def unsubscribe() -> None:
            self._remove(publisher_id, callback)

        return unsubscribe

    def _remove(self, publisher_id: str, callback: EventCallback) -> None:
        with self._lock:
            subscribers = self._listeners.get(publisher_id)
            if subscribers is None or callback not in subscribers:
                return
            del subscribers[callback]
            if not subscribers:
                del self._listeners[publisher_id]
        log_event(logger, logging.DEBUG, "bus_unsubscribe", publisher_id=publisher_id)

    def emit(self, publisher_id: str, event: AnalyticsEvent) -> int:
        """
        Deliver *event* to the current subscribers of *publisher_id*.

        A callback that raises is logged and skipped; the remaining
        subscribers still receive the event.

        Returns
        -------
        int
            Number of callbacks that returned without raising.
        """
        with self._lock:
            snapshot = list(self._listeners.get(publisher_id, {}))

        delivered = 0
        for callback in snapshot:
            try:
                callback(event)
                delivered += 1
            except Exception:  # noqa: BLE001
                logger.exception(
                    "Analytics subscriber failed publisher=%r event=%s", publisher_id, event.id
                )

        log_event(
            logger,
            logging.DEBUG,
            "bus_emit",
            publisher_id=publisher_id,
            event_id=event.id,
            event_type=event.type,
            delivered=delivered,
            subscribers=len(snapshot),
        )
        return delivered

    def subscriber_count(self, publisher_id: str) -> int:
        with self._lock:
            return len(self._listeners.get(publisher_id, {}))

    def has_subscribers(self, publisher_id: str) -> bool:
        return self.subscriber_count(publisher_id) > 0

    def publisher_ids(self) -> list[str]:
        with self._lock:
            return list(self._listeners)

    def clear(self) -> None:
        """Drop every subscription; used on application shutdown."""
        with self._lock:
            self._listeners.clear()
