"""Unit tests for structured logging helpers."""

import json
import logging

from identity_injector.observability.logging import (
    CorrelationIDFilter,
    HealthProbeFilter,
    InjectorLogger,
    StructuredFormatter,
    set_correlation_id,
)


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Test cases for the JSON formatter."""

    def test_structured_fields_are_included(self):
        record = _record("Add volume", pod="ns/p", volume="certs", unrelated="x")
        record.correlation_id = "abc12345"

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Add volume"
        assert data["pod"] == "ns/p"
        assert data["volume"] == "certs"
        assert data["correlation_id"] == "abc12345"
        assert "unrelated" not in data


class TestFilters:
    """Test cases for logging filters."""

    def test_health_probe_filter(self):
        probe_filter = HealthProbeFilter()

        assert probe_filter.filter(_record('"GET /healthz HTTP/1.1" 200')) is False
        assert probe_filter.filter(_record("Injected identity containers")) is True

    def test_correlation_id_filter(self):
        set_correlation_id("fixed-id")
        record = _record("hello")

        assert CorrelationIDFilter().filter(record) is True
        assert record.correlation_id == "fixed-id"


class TestMutationHookLogging:
    """Test cases for the mutation hook logger."""

    def test_volume_added_is_logged(self, caplog):
        hook = InjectorLogger("identity_injector.test").mutation_hook("ns/p", "ns")

        with caplog.at_level(logging.INFO, logger="identity_injector.test"):
            hook("volume_added", {"volume": "identity-tokens"})
            hook("container_removed", {"image": "legacy/sia:1", "list": "containers"})

        messages = [r.getMessage() for r in caplog.records]
        assert "Add volume identity-tokens to pod ns/p" in messages
        assert "Removed legacy container legacy/sia:1 from pod ns/p" in messages

    def test_skip_is_debug(self, caplog):
        hook = InjectorLogger("identity_injector.test").mutation_hook("ns/p", "ns")

        with caplog.at_level(logging.DEBUG, logger="identity_injector.test"):
            hook("skipped", {"reason": "not annotated"})

        assert caplog.records[0].levelno == logging.DEBUG
        assert "not annotated" in caplog.records[0].getMessage()

    def test_warning_carries_extra_fields(self, caplog):
        injector_logger = InjectorLogger("identity_injector.test")

        with caplog.at_level(logging.WARNING, logger="identity_injector.test"):
            injector_logger.warning("Invalid pod specification", operation="validate")

        assert caplog.records[0].levelno == logging.WARNING
        assert caplog.records[0].operation == "validate"
