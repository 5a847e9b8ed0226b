"""
Observability utilities for the identity injector.

This module provides metrics and structured logging capabilities for
production monitoring and troubleshooting.
"""

from .logging import InjectorLogger, setup_structured_logging
from .metrics import MetricsCollector, MetricsServer, get_metrics_registry

__all__ = [
    "MetricsCollector",
    "MetricsServer",
    "get_metrics_registry",
    "InjectorLogger",
    "setup_structured_logging",
]
