"""In-process publish/subscribe bus backing GraphQL subscriptions."""
from __future__ import annotations

import asyncio
import threading
from typing import Any, Dict, Optional, Set

from .logging_config import configure_logging

MESSAGE_ADDED = "MESSAGE_ADDED"
USER_JOINED = "USER_JOINED"
TOPICS = (MESSAGE_ADDED, USER_JOINED)

logger = configure_logging()

_CLOSED = object()


class Subscription:
    """Handle for one subscriber on one topic.

    Iterate it with ``async for`` to receive payloads published after it was
    created. ``cancel()`` detaches it from the bus and ends the iteration.
    """

    def __init__(self, bus: "EventBus", topic: str, loop: asyncio.AbstractEventLoop):
        self.bus = bus
        self.topic = topic
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue()
        self.cancelled = False

    def deliver(self, payload: Any) -> bool:
        """Hand a payload to the subscriber's loop; False if the loop is gone."""
        if self.cancelled:
            return False
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, payload)
        except RuntimeError:
            # Loop closed underneath us: the connection is gone.
            self.cancel()
            return False
        return True

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self.bus._discard(self)
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, _CLOSED)
        except RuntimeError:
            pass

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        if self.cancelled and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class EventBus:
    """Fan-out of events to the subscribers connected at publish time."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, Set[Subscription]] = {topic: set() for topic in TOPICS}
        self._lock = threading.Lock()

    def _check_topic(self, topic: str) -> None:
        if topic not in self._subscribers:
            raise ValueError(f"Unknown topic: {topic}")

    def subscribe(self, topic: str, loop: Optional[asyncio.AbstractEventLoop] = None) -> Subscription:
        """Register a subscriber; must run inside the subscriber's event loop unless ``loop`` is given."""
        self._check_topic(topic)
        subscription = Subscription(self, topic, loop or asyncio.get_running_loop())
        with self._lock:
            self._subscribers[topic].add(subscription)
        logger.info("SUBSCRIBED topic=%s subscribers=%s", topic, self.subscriber_count(topic))
        return subscription

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver ``payload`` to current subscribers and return how many were reached."""
        self._check_topic(topic)
        with self._lock:
            targets = list(self._subscribers[topic])
        delivered = sum(1 for subscription in targets if subscription.deliver(payload))
        logger.info("EVENT_PUBLISHED topic=%s delivered=%s", topic, delivered)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        self._check_topic(topic)
        with self._lock:
            return len(self._subscribers[topic])

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers[subscription.topic].discard(subscription)
        logger.info("UNSUBSCRIBED topic=%s", subscription.topic)
