"""Notification Service Implementations

Provides concrete implementations for sending collection notifications.
"""

import logging
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.events import DomainEvent, EntryCreated, DecoderError, PaymentRecorded

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs events

    Useful for development and testing, or as a fallback.
    """

    async def notify(self, event: DomainEvent) -> bool:
        """
        Log a one-line summary of the event

        Args:
            event: Event to notify about

        Returns:
            Always True (logging never fails)
        """
        if isinstance(event, EntryCreated):
            logger.info(
                f"[ENTRY] Customer: {event.customer_external_id or event.customer_id}, "
                f"Shift: {event.shift}, Qty: {event.quantity_litre}L, "
                f"Rate: {event.rate_per_litre}, Amount: {event.amount}"
            )
        elif isinstance(event, PaymentRecorded):
            logger.info(
                f"[PAYMENT] Customer: {event.customer_id}, Amount: {event.amount}, "
                f"Advance used: {event.advance_used}, Mode: {event.mode}"
            )
        elif isinstance(event, DecoderError):
            logger.warning(f"[AMCU {event.error_type.value}] {event.reason}")
        else:
            logger.info(f"[EVENT] {event.name}")
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that sends events via HTTP webhook

    Sends the event as a JSON payload to the configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST events to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def notify(self, event: DomainEvent) -> bool:
        """
        Send an event via webhook

        Args:
            event: Event to notify about

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {"type": event.name, "data": event.model_dump(mode="json")}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(f"Webhook notification sent for {event.name} {event.event_id}")
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook notification for {event.name} {event.event_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error sending webhook notification for {event.name}: {e}")
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def notify(self, event: DomainEvent) -> bool:
        """
        Send an event to all configured services

        Returns:
            True if at least one service succeeded, False otherwise
        """
        success = False
        for service in self.services:
            try:
                if await service.notify(event):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
