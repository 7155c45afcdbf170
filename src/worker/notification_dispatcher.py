"""Notification Dispatcher Background Worker

Subscribes to the in-process event bus and forwards every domain event
to the configured notification service (log, webhook, or both).
"""

import asyncio
import logging
from typing import Optional

from config import ApplicationConfig
from src.adapter.services.event_bus import InMemoryEventBus
from src.adapter.services.notification_service import create_notification_service
from src.app.services.notification_service import NotificationService
from src.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Forwards bus events to a NotificationService

    A failing notification is logged and dropped; it never reaches the
    code that published the event.

    Usage:
        dispatcher = NotificationDispatcher(event_bus)
        dispatcher.start()
        ...
        await dispatcher.stop()
    """

    def __init__(
        self,
        event_bus: InMemoryEventBus,
        notification_service: Optional[NotificationService] = None,
    ):
        self.event_bus = event_bus
        self.notification_service = notification_service or create_notification_service(
            ApplicationConfig.NOTIFICATION_WEBHOOK
        )
        self.delivered = 0
        self.failed = 0
        self._task: Optional[asyncio.Task] = None

    async def dispatch(self, event: DomainEvent) -> bool:
        try:
            delivered = await self.notification_service.notify(event)
        except Exception as e:
            logger.error(f"Notification failed for {event.name} {event.event_id}: {e}")
            delivered = False

        if delivered:
            self.delivered += 1
        else:
            self.failed += 1
        return delivered

    async def run_forever(self) -> None:
        logger.info("Starting notification dispatcher")
        async with self.event_bus.subscription() as queue:
            while True:
                event = await queue.get()
                await self.dispatch(event)

    def start(self) -> None:
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"Notification dispatcher stopped ({self.delivered} delivered, {self.failed} failed)")
