"""
Notification sender collaborator.

Delivery is external to the skill engine; the engine only hands over a
recipient, a template name and template data.
"""

from abc import ABC, abstractmethod
from typing import Any

from ...core.observability import get_logger

logger = get_logger(__name__)


class NotificationSender(ABC):
    """Outbound notification port."""

    @abstractmethod
    async def send_email(self, to: str, template: str, data: dict[str, Any]) -> None:
        """
        Send a templated email.

        Args:
            to: Recipient address or user id
            template: Template name, e.g. ``skill_assessment_received``
            data: Template variables
        """
        pass


class LoggingNotificationSender(NotificationSender):
    """Notification sender that only logs; used when no delivery is wired."""

    async def send_email(self, to: str, template: str, data: dict[str, Any]) -> None:
        logger.info("Notification dispatched", to=to, template=template, data=data)
