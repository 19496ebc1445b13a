"""
Retry with Exponential Backoff

Small retry helper used for best-effort side effects (projection sync,
notifications, analytics). The primary write path never retries.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .observability import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 2
    base_delay_seconds: float = 0.05
    max_delay_seconds: float = 2.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_max_seconds: float = 0.05

    retry_on_exceptions: tuple[type[Exception], ...] = (Exception,)
    stop_on_exceptions: tuple[type[Exception], ...] = field(default_factory=tuple)


class RetryDelayCalculator:
    """Calculates exponential backoff delays."""

    def __init__(self, config: RetryConfig):
        self.config = config

    def calculate_delay(self, attempt_number: int) -> float:
        """Calculate delay after the given attempt number (1-based)."""
        delay = self.config.base_delay_seconds * (
            self.config.exponential_base ** (attempt_number - 1)
        )
        if self.config.jitter:
            delay += random.uniform(0, self.config.jitter_max_seconds)
        return min(delay, self.config.max_delay_seconds)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    config: RetryConfig | None = None,
) -> T:
    """
    Execute an async operation, retrying on failure.

    Args:
        operation: Zero-argument coroutine factory
        operation_name: Name for logging
        config: Retry configuration (uses default if None)

    Returns:
        Result from the operation

    Raises:
        The last exception raised once attempts are exhausted, or immediately
        for exceptions listed in ``stop_on_exceptions``.
    """
    config = config or RetryConfig()
    calculator = RetryDelayCalculator(config)
    attempts = max(1, config.max_attempts)

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except config.stop_on_exceptions:
            raise
        except config.retry_on_exceptions as e:
            if attempt >= attempts:
                raise
            delay = calculator.calculate_delay(attempt)
            logger.debug(
                "Retrying operation",
                operation=operation_name,
                attempt=attempt,
                delay_seconds=round(delay, 3),
                error=str(e),
            )
            await asyncio.sleep(delay)

    raise RuntimeError(f"{operation_name} made no attempts")  # pragma: no cover


def retry_config_from_settings(settings: Any) -> RetryConfig:
    """Build the side-effect retry configuration from application settings."""
    return RetryConfig(
        max_attempts=settings.SIDE_EFFECT_MAX_ATTEMPTS,
        base_delay_seconds=settings.SIDE_EFFECT_RETRY_BASE_DELAY,
        max_delay_seconds=settings.SIDE_EFFECT_RETRY_MAX_DELAY,
    )
