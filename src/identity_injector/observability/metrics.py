"""
Prometheus metrics for the identity injector.

This module provides metrics for pod mutation outcomes and an HTTP server
exposing them for scraping.
"""

import logging
import time
from contextlib import contextmanager

from aiohttp.web import Application, AppRunner, Request, Response, TCPSite
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

MUTATIONS_TOTAL = Counter(
    "identity_injector_mutations_total",
    "Total number of pods seen by the injector",
    ["namespace", "result"],
    registry=None,
)

MUTATION_DURATION = Histogram(
    "identity_injector_mutation_duration_seconds",
    "Time spent mutating a pod",
    ["namespace"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=None,
)

VOLUMES_ADDED_TOTAL = Counter(
    "identity_injector_volumes_added_total",
    "Total number of emptyDir volumes added to pods",
    ["namespace"],
    registry=None,
)

CONTAINERS_REMOVED_TOTAL = Counter(
    "identity_injector_containers_removed_total",
    "Total number of legacy identity containers removed from pods",
    ["namespace"],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()
        for metric in [
            MUTATIONS_TOTAL,
            MUTATION_DURATION,
            VOLUMES_ADDED_TOTAL,
            CONTAINERS_REMOVED_TOTAL,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Records pod mutation metrics."""

    def __init__(self):
        self.registry = get_metrics_registry()

    @contextmanager
    def track_mutation(self, namespace: str | None):
        """
        Context manager timing one mutation.

        The body sets ``state["result"]`` to ``"mutated"`` or ``"skipped"``;
        an exception records ``"error"`` and is re-raised.
        """
        namespace = namespace or ""
        state = {"result": "mutated"}
        start_time = time.time()
        try:
            yield state
        except Exception:
            state["result"] = "error"
            raise
        finally:
            MUTATIONS_TOTAL.labels(namespace=namespace, result=state["result"]).inc()
            MUTATION_DURATION.labels(namespace=namespace).observe(
                time.time() - start_time
            )

    def record_volume_added(self, namespace: str | None) -> None:
        VOLUMES_ADDED_TOTAL.labels(namespace=namespace or "").inc()

    def record_container_removed(self, namespace: str | None) -> None:
        CONTAINERS_REMOVED_TOTAL.labels(namespace=namespace or "").inc()


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            metrics_data = generate_latest(get_metrics_registry())
            return Response(
                body=metrics_data, headers={"Content-Type": CONTENT_TYPE_LATEST}
            )
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        """Liveness endpoint, 200 while the server is running."""
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        self.runner = AppRunner(self.app)
        await self.runner.setup()
        self.site = TCPSite(self.runner, self.host, self.port)
        await self.site.start()
        logger.info(f"Metrics server started on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the metrics server."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            self.site = None
            logger.info("Metrics server stopped")
