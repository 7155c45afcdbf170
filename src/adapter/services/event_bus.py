"""In-process event bus

Each subscriber owns a bounded asyncio.Queue. Publishing never blocks:
a subscriber whose queue is full misses the event.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List
from src.app.services.event_publisher import EventPublisher
from src.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventPublisher):
    """
    Fan-out event bus for one process

    Usage:
        bus = InMemoryEventBus(queue_size=100)
        async with bus.subscription() as queue:
            event = await queue.get()
    """

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: List[asyncio.Queue] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    @asynccontextmanager
    async def subscription(self) -> AsyncIterator[asyncio.Queue]:
        queue = self.subscribe()
        try:
            yield queue
        finally:
            self.unsubscribe(queue)

    def publish(self, event: DomainEvent) -> None:
        """
        Hand the event to every subscriber without waiting

        Args:
            event: Event to publish
        """
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full, dropping {event.name} {event.event_id}")
