"""
Analytics sink collaborator.
"""

from abc import ABC, abstractmethod
from typing import Any

from ...core.observability import get_logger

logger = get_logger(__name__)


class AnalyticsSink(ABC):
    """Outbound analytics port."""

    @abstractmethod
    async def track_event(
        self,
        event_type: str,
        entity_type: str,
        entity_id: str,
        tenant_id: str,
        payload: dict[str, Any],
    ) -> None:
        pass


class LoggingAnalyticsSink(AnalyticsSink):
    """Analytics sink that records events in the structured log."""

    async def track_event(
        self,
        event_type: str,
        entity_type: str,
        entity_id: str,
        tenant_id: str,
        payload: dict[str, Any],
    ) -> None:
        logger.info(
            "Analytics event",
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            tenant_id=tenant_id,
            payload=payload,
        )
