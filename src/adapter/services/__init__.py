from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    LoggingNotificationService,
    WebhookNotificationService,
    CompositeNotificationService,
    create_notification_service,
)
from .event_bus import InMemoryEventBus
from .rate_cache import InMemoryRateCache
from .allocation_lock import InProcessAllocationLock

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotificationService",
    "WebhookNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
    "InMemoryEventBus",
    "InMemoryRateCache",
    "InProcessAllocationLock",
]
