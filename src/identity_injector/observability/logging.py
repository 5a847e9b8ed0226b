"""
Structured logging utilities for the identity injector.

This module provides correlation ID tracking, structured log formatting,
and helpers for logging pod mutation outcomes.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Context variable for tracking correlation IDs across async operations
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Paths that should be filtered from access logs (health probes)
HEALTH_PROBE_PATHS = frozenset({"/healthz", "/metrics"})

# Record attributes copied into the JSON document when present
STRUCTURED_FIELDS = [
    "pod",
    "namespace",
    "operation",
    "duration",
    "error_type",
    "injector",
    "event",
    "image",
    "volume",
    "env_keys",
    "volumes_added",
    "dry_run",
]


class HealthProbeFilter(logging.Filter):
    """
    Logging filter that suppresses health probe and metrics endpoint logs.

    These endpoints are hit frequently by Kubernetes probes and Prometheus,
    generating excessive noise in logs.
    """

    def __init__(self, suppress_health_logs: bool = True):
        super().__init__()
        self.suppress_health_logs = suppress_health_logs

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.suppress_health_logs:
            return True

        message = record.getMessage()
        return all(path not in message for path in HEALTH_PROBE_PATHS)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        current_correlation_id = correlation_id.get()
        if not current_correlation_id:
            current_correlation_id = generate_correlation_id()
            correlation_id.set(current_correlation_id)

        record.correlation_id = current_correlation_id
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with correlation ID support.

    Formats log records as structured JSON for log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        Unique correlation ID string
    """
    return str(uuid.uuid4())[:8]


def set_correlation_id(corr_id: str) -> str:
    """Set the correlation ID for the current context."""
    correlation_id.set(corr_id)
    return corr_id


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = True,
    correlation_id_enabled: bool = True,
    log_health_probes: bool = False,
) -> None:
    """
    Set up structured logging for the injector.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
        correlation_id_enabled: Whether to enable correlation ID tracking
        log_health_probes: Whether to log health probe requests (default: False)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()

    if enable_json_formatting:
        formatter = StructuredFormatter()
    elif correlation_id_enabled:
        formatter = logging.Formatter(
            "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())

    if not log_health_probes:
        handler.addFilter(HealthProbeFilter(suppress_health_logs=True))

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Third-party libraries
    logging.getLogger("kopf").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.server").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.web").setLevel(logging.WARNING)


class InjectorLogger:
    """
    Logger for pod mutation events with structured logging support.

    Also provides a hook factory so the pure mutator can report what it did
    without logging itself.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_mutation(
        self,
        pod: str,
        namespace: str | None,
        injector: str,
        duration: float,
        dry_run: bool = False,
    ) -> None:
        """Log a successful pod mutation."""
        self.logger.info(
            f"Injected identity containers into pod {pod}",
            extra={
                "pod": pod,
                "namespace": namespace,
                "injector": injector,
                "operation": "mutate",
                "duration": duration,
                "dry_run": dry_run,
            },
        )

    def log_skip(self, pod: str, namespace: str | None, reason: str) -> None:
        """Log a pod that was not selected for injection."""
        self.logger.debug(
            f"Skipping pod {pod}: {reason}",
            extra={"pod": pod, "namespace": namespace, "operation": "skip"},
        )

    def log_mutation_error(
        self,
        pod: str,
        namespace: str | None,
        error: Exception,
        duration: float,
    ) -> None:
        """Log a failed pod mutation."""
        self.logger.error(
            f"Identity injection failed for pod {pod}: {error}",
            extra={
                "pod": pod,
                "namespace": namespace,
                "operation": "mutate_error",
                "error_type": type(error).__name__,
                "duration": duration,
            },
        )

    def mutation_hook(self, pod: str, namespace: str | None):
        """
        Build a mutator hook that logs mutation events for one pod.

        Args:
            pod: Pod reference used in messages
            namespace: Pod namespace

        Returns:
            Callable accepting (event, details)
        """

        def hook(event: str, details: dict[str, Any]) -> None:
            extra = {"pod": pod, "namespace": namespace, "event": event, **details}
            if event == "skipped":
                self.log_skip(pod, namespace, details.get("reason", ""))
            elif event == "container_removed":
                self.logger.info(
                    f"Removed legacy container {details.get('image')} from pod {pod}",
                    extra=extra,
                )
            elif event == "volume_added":
                self.logger.info(
                    f"Add volume {details.get('volume')} to pod {pod}", extra=extra
                )
            else:
                self.logger.debug(f"Mutation event {event} for pod {pod}", extra=extra)

        return hook

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message with extra data."""
        self.logger.warning(message, extra=kwargs)
