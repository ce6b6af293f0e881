"""
In-process event broker.

Services publish events after a successful commit; GraphQL subscriptions
consume them. Every subscriber owns a bounded queue: when a slow consumer
lets it fill up, the oldest event is dropped with a warning so publishers
never block.

Topics:
- ``user:<user id>``: notifications for one account across spaces
- ``space_user:<space user id>``: inbox and membership changes of one member
- ``space:<space id>``: space-wide changes
- ``group:<group id>``: posts and settings of one group
- ``post:<post id>``: replies, reactions and state of one post
"""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Deque, Dict, Iterable, Optional, Set

from level.core.logging_config import get_logger
from level.server.core.config import settings

logger = get_logger(__name__)


def user_topic(user_id: str) -> str:
    return f"user:{user_id}"


def space_user_topic(space_user_id: str) -> str:
    return f"space_user:{space_user_id}"


def space_topic(space_id: str) -> str:
    return f"space:{space_id}"


def group_topic(group_id: str) -> str:
    return f"group:{group_id}"


def post_topic(post_id: str) -> str:
    return f"post:{post_id}"


@dataclass
class Event:
    """Something that happened; ``objects`` holds the affected entities by name."""

    type: str
    objects: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> Optional[Any]:
        return self.objects.get(name)


class Subscription:
    """Bounded queue of events for one consumer."""

    def __init__(self, topics: Iterable[str], capacity: int) -> None:
        self.topics = frozenset(topics)
        self.capacity = capacity
        self._queue: Deque[Event] = deque()
        self._ready = asyncio.Event()
        self._closed = False

    def push(self, event: Event) -> None:
        if self._closed:
            return
        if len(self._queue) >= self.capacity:
            self._queue.popleft()
            logger.warning(f"Subscription queue full for {sorted(self.topics)}; dropped oldest event")
        self._queue.append(event)
        self._ready.set()

    def close(self) -> None:
        self._closed = True
        self._ready.set()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Event:
        while True:
            if self._queue:
                return self._queue.popleft()
            if self._closed:
                raise StopAsyncIteration
            self._ready.clear()
            await self._ready.wait()


class Broker:
    """Fan-out of events to topic subscribers."""

    def __init__(self, queue_capacity: Optional[int] = None) -> None:
        self.queue_capacity = queue_capacity or settings.pubsub.queue_capacity
        self._subscribers: Dict[str, Set[Subscription]] = {}

    def publish(self, topic: str, event: Event) -> int:
        """Deliver ``event`` to every subscriber of ``topic``.

        Returns:
            Number of subscriptions the event was queued on
        """
        subscribers = self._subscribers.get(topic, set())
        for subscription in list(subscribers):
            subscription.push(event)
        logger.debug(f"Published {event.type} on {topic} to {len(subscribers)} subscriber(s)")
        return len(subscribers)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    @asynccontextmanager
    async def subscribe(self, *topics: str) -> AsyncIterator[Subscription]:
        """Subscribe to one or more topics for the duration of the context."""
        subscription = Subscription(topics, self.queue_capacity)
        for topic in subscription.topics:
            self._subscribers.setdefault(topic, set()).add(subscription)
        try:
            yield subscription
        finally:
            subscription.close()
            for topic in subscription.topics:
                subscribers = self._subscribers.get(topic)
                if subscribers is not None:
                    subscribers.discard(subscription)
                    if not subscribers:
                        del self._subscribers[topic]


broker = Broker()


def get_broker() -> Broker:
    """Dependency returning the process-wide broker."""
    return broker
