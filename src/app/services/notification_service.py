"""Notification Service Interface

Defines the contract for telling the outside world about collection events.
"""

from abc import ABC, abstractmethod
from src.domain.events import DomainEvent


class NotificationService(ABC):
    """
    Abstract notification service for farmer/operator alerts

    Implementations can send notifications via:
    - Log output
    - Webhook (HTTP POST)
    - SMS gateway
    - etc.

    Delivery is best effort; callers never depend on it.
    """

    @abstractmethod
    async def notify(self, event: DomainEvent) -> bool:
        """
        Send a notification for a domain event

        Args:
            event: Event to notify about

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
