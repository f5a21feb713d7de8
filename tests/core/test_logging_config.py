"""
Tests for workspine.core.logging.

Tests verify:
- configure_logging builds the JSON and console processor chains
- ECS field renaming and service metadata
- LogContext binds and unbinds contextvars
"""

import json
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from workspine.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_renderer_last(self):
        configure_logging(level="INFO", json_format=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_logging(level="INFO", json_format=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_timestamp_optional(self):
        configure_logging(json_format=True, add_timestamp=False)
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_level_filters(self):
        configure_logging(level="ERROR", json_format=True)
        wrapper = structlog.get_config()["wrapper_class"]
        assert wrapper is structlog.make_filtering_bound_logger(logging.ERROR)

    def test_json_output_is_ecs_compatible(self):
        configure_logging(level="DEBUG", json_format=True, service="billing", add_timestamp=False)
        processors = structlog.get_config()["processors"]
        wrapped = logging.getLogger("workspine.test")
        event_dict = {"event": "worker_executed", "timestamp": "now"}
        for processor in processors:
            event_dict = processor(wrapped, "debug", event_dict)
        rendered = json.loads(event_dict)
        assert rendered["service.name"] == "billing"
        assert rendered["log.level"] == "debug"
        assert rendered["logger"] == "workspine.test"
        assert rendered["@timestamp"] == "now"
        assert rendered["event"] == "worker_executed"


class TestContextHelpers:
    def test_bind_and_unbind(self):
        bind_context(orchestrator="SyncUsers", step=1)
        assert structlog.contextvars.get_contextvars() == {"orchestrator": "SyncUsers", "step": 1}
        unbind_context("step")
        assert structlog.contextvars.get_contextvars() == {"orchestrator": "SyncUsers"}

    def test_clear(self):
        bind_context(orchestrator="SyncUsers")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scopes_fields(self):
        with LogContext(orchestrator="SyncUsers") as ctx:
            assert isinstance(ctx, LogContext)
            assert structlog.contextvars.get_contextvars()["orchestrator"] == "SyncUsers"
        assert "orchestrator" not in structlog.contextvars.get_contextvars()

    def test_log_context_fields_reach_events(self):
        structlog.configure(
            processors=[structlog.contextvars.merge_contextvars, structlog.testing.LogCapture()]
        )
        capture = structlog.get_config()["processors"][-1]
        with LogContext(orchestrator="SyncUsers"):
            structlog.get_logger().debug("step_skipped", step=2)
        assert capture.entries[0]["orchestrator"] == "SyncUsers"
        assert capture.entries[0]["step"] == 2


class TestGetLogger:
    def test_logs_events_with_fields(self):
        with capture_logs() as logs:
            get_logger("workspine.test").info("worker_executed", worker="UpdateUser")
        assert logs == [{"event": "worker_executed", "worker": "UpdateUser", "log_level": "info"}]
