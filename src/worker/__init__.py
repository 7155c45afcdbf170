"""Background workers for the dairy ledger service"""
from .amcu_listener import AmcuListenerWorker
from .notification_dispatcher import NotificationDispatcher

__all__ = ["AmcuListenerWorker", "NotificationDispatcher"]
