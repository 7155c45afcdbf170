from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .event_publisher import EventPublisher
from .rate_cache import RateCache
from .allocation_lock import AllocationLock

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "EventPublisher",
    "RateCache",
    "AllocationLock",
]
