"""
Unit tests for MetricsServer HTTP endpoints.

Uses ``aiohttp.test_utils`` to drive the server's aiohttp application.
"""

from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from identity_injector.observability.metrics import MetricsCollector, MetricsServer


@pytest.fixture
def metrics_server():
    """Create a fresh MetricsServer instance per test."""
    return MetricsServer(port=0)


@pytest.fixture
async def client(metrics_server):
    """Create an aiohttp TestClient from the MetricsServer app."""
    server = TestServer(metrics_server.app)
    async with TestClient(server) as cli:
        yield cli


class TestMetricsEndpoint:
    """Tests for ``GET /metrics``."""

    @pytest.mark.asyncio
    async def test_metrics_exposes_injector_metrics(self, client):
        with MetricsCollector().track_mutation("scrape-ns"):
            pass

        resp = await client.get("/metrics")

        assert resp.status == 200
        body = await resp.text()
        assert "identity_injector_mutations_total" in body
        assert 'namespace="scrape-ns"' in body

    @pytest.mark.asyncio
    async def test_metrics_content_type_is_prometheus_text(self, client):
        resp = await client.get("/metrics")

        assert resp.status == 200
        assert resp.headers["Content-Type"].startswith("text/plain")
        assert "version=" in resp.headers["Content-Type"]

    @pytest.mark.asyncio
    async def test_metrics_error_returns_500(self, client):
        with patch(
            "identity_injector.observability.metrics.generate_latest",
            side_effect=RuntimeError("boom"),
        ):
            resp = await client.get("/metrics")

        assert resp.status == 500
        assert "RuntimeError" in await resp.text()


class TestHealthzEndpoint:
    """Tests for ``GET /healthz``."""

    @pytest.mark.asyncio
    async def test_healthz_ok(self, client):
        resp = await client.get("/healthz")

        assert resp.status == 200
        assert await resp.text() == "ok"


class TestMetricsCollector:
    """Tests for mutation tracking."""

    def test_error_result_recorded_and_reraised(self):
        collector = MetricsCollector()
        labels = {"namespace": "collector-ns", "result": "error"}
        before = (
            collector.registry.get_sample_value(
                "identity_injector_mutations_total", labels
            )
            or 0.0
        )

        with pytest.raises(ValueError):
            with collector.track_mutation("collector-ns"):
                raise ValueError("boom")

        after = collector.registry.get_sample_value(
            "identity_injector_mutations_total", labels
        )
        assert after == before + 1
