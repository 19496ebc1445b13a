"""
Observability Infrastructure

Structured logging with correlation tracking for the skill engine.
Callers bind the request correlation ID and acting user once per request;
every log entry emitted while handling that request carries both.
"""

import contextvars
import functools
import logging
import sys
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from .config import settings

F = TypeVar("F", bound=Callable[..., Any])

# Context variables for correlation tracking
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="")


class CorrelationIdProcessor:
    """Structlog processor to add correlation ID to all log entries."""

    def __call__(
        self, logger: Any, name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id = correlation_id_var.get("")
        user_id = user_id_var.get("")

        if correlation_id:
            event_dict["correlation_id"] = correlation_id
        if user_id:
            event_dict["user_id"] = user_id

        return event_dict


def setup_structured_logging() -> None:
    """Configure structured logging with JSON output and correlation tracking."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        CorrelationIdProcessor(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if settings.DATABASE_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID for request tracking."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    correlation_id_var.set(correlation_id)
    return correlation_id


def set_user_id(user_id: str) -> None:
    """Set user ID for request tracking."""
    user_id_var.set(user_id)


def log_error_with_context(
    error: Exception,
    operation: str,
    context: dict[str, Any] | None = None,
    severity: str = "error",
) -> None:
    """Log errors with structured context, including domain error details."""
    logger = get_logger("error_tracking")

    error_data = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    details = getattr(error, "details", None)
    if details:
        error_data["error_details"] = details
    if context:
        error_data.update(context)

    if severity == "warning":
        logger.warning("Operation issue", **error_data)
    else:
        logger.error("Operation failed", **error_data)


def monitor_operation(operation_type: str) -> Callable[[F], F]:
    """Decorator logging start, completion and failure of an async operation."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_logger(func.__module__)
            start_time = time.perf_counter()
            logger.debug("Operation started", operation=operation_type)

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log_error_with_context(
                    e,
                    operation_type,
                    {"duration_seconds": round(time.perf_counter() - start_time, 4)},
                )
                raise

            logger.debug(
                "Operation completed",
                operation=operation_type,
                duration_seconds=round(time.perf_counter() - start_time, 4),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
