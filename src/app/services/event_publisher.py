"""Event Publisher Interface

Explicit channel for domain events, replacing ad-hoc emitters.
"""

from abc import ABC, abstractmethod
from src.domain.events import DomainEvent


class EventPublisher(ABC):
    """
    Publishes domain events to in-process subscribers

    publish() must never raise and never block on slow subscribers.
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Hand an event to every current subscriber

        Args:
            event: Event to publish
        """
        pass
