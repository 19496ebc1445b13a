"""
Tests for structured logging helpers and operation monitoring.
"""

import uuid

import pytest
import structlog
from structlog.testing import capture_logs

from consultant_skills.core.observability import (
    CorrelationIdProcessor,
    correlation_id_var,
    monitor_operation,
    set_correlation_id,
    set_user_id,
    setup_structured_logging,
)
from consultant_skills.domain.shared.exceptions import ValidationError


class TestCorrelationTracking:
    def test_generated_correlation_id(self):
        correlation_id = set_correlation_id()

        assert uuid.UUID(correlation_id)
        assert correlation_id_var.get() == correlation_id

    def test_processor_adds_context(self):
        set_correlation_id("req-42")
        set_user_id("manager-1")

        event = CorrelationIdProcessor()(None, "info", {"event": "Skill record created"})

        assert event["correlation_id"] == "req-42"
        assert event["user_id"] == "manager-1"


@pytest.mark.asyncio
class TestMonitorOperation:
    async def test_logs_completion(self):
        @monitor_operation("lookup")
        async def lookup(value):
            return value * 2

        with capture_logs() as logs:
            assert await lookup(21) == 42

        events = [entry["event"] for entry in logs]
        assert events == ["Operation started", "Operation completed"]
        assert logs[-1]["operation"] == "lookup"

    async def test_failure_is_logged_and_reraised(self):
        @monitor_operation("create_skill_record")
        async def create():
            raise ValidationError("Skill validation failed", errors=["Skill name is required"])

        with capture_logs() as logs:
            with pytest.raises(ValidationError):
                await create()

        failure = next(entry for entry in logs if entry["event"] == "Operation failed")
        assert failure["log_level"] == "error"
        assert failure["error_type"] == "ValidationError"
        assert failure["error_details"] == {"errors": ["Skill name is required"]}


def test_setup_structured_logging_configures_structlog():
    try:
        setup_structured_logging()
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()
