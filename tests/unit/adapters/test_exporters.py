"""Unit tests for the renderer and pusher adapters."""

from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from httpmeter.adapters.http_metrics import PrometheusHttpMetrics
from httpmeter.adapters.metrics_pusher import FakeMetricsPusher, PushgatewayMetricsPusher
from httpmeter.adapters.metrics_renderer import FakeMetricsRenderer, PrometheusMetricsRenderer
from httpmeter.core.labels import RequestLabels
from httpmeter.core.protocols import MetricsPusher, MetricsRenderer


class TestPrometheusMetricsRenderer:
    def test_satisfies_protocol(self):
        assert isinstance(PrometheusMetricsRenderer(CollectorRegistry()), MetricsRenderer)

    def test_renders_text_format_by_default(self):
        metrics = PrometheusHttpMetrics()
        metrics.observe_duration(RequestLabels("GET", "/hello", "200", "localhost"), 0.01)
        renderer = PrometheusMetricsRenderer(metrics.registry)

        body, content_type = renderer.render()

        assert isinstance(body, bytes)
        assert content_type.startswith("text/plain")
        assert b"http_server_request_duration_seconds_count" in body
        assert b'http_route="/hello"' in body

    def test_negotiates_openmetrics(self):
        renderer = PrometheusMetricsRenderer(PrometheusHttpMetrics().registry)

        body, content_type = renderer.render("application/openmetrics-text; version=1.0.0")

        assert content_type.startswith("application/openmetrics-text")
        assert b"# UNIT http_server_request_duration_seconds seconds" in body
        assert body.endswith(b"# EOF\n")


class TestFakeMetricsRenderer:
    def test_records_accept_headers(self):
        fake = FakeMetricsRenderer()
        assert fake.render("text/plain") == (b"# fake metrics\n", "text/plain")
        assert fake.render() == (b"# fake metrics\n", "text/plain")
        assert fake.accept_headers == ["text/plain", None]
        assert fake.render_calls == 2


class TestPushgatewayMetricsPusher:
    def test_satisfies_protocol(self):
        pusher = PushgatewayMetricsPusher(CollectorRegistry(), "localhost:9091", job="svc")
        assert isinstance(pusher, MetricsPusher)

    def test_push_uses_service_as_job(self):
        registry = CollectorRegistry()
        pusher = PushgatewayMetricsPusher(
            registry,
            "pushgateway:9091",
            job="orders-api",
            grouping_key={"instance": "pod-1"},
        )

        with patch("httpmeter.adapters.metrics_pusher.pushgateway.push_to_gateway") as push:
            pusher.push()

        push.assert_called_once_with(
            "pushgateway:9091",
            job="orders-api",
            registry=registry,
            grouping_key={"instance": "pod-1"},
            timeout=10.0,
        )


class TestFakeMetricsPusher:
    def test_counts_pushes(self):
        fake = FakeMetricsPusher()
        fake.push()
        fake.push()
        assert fake.push_count == 2

    def test_fail_with_raises(self):
        fake = FakeMetricsPusher(fail_with=ConnectionError("down"))
        with pytest.raises(ConnectionError):
            fake.push()
        assert fake.push_count == 0
        assert fake.failed_count == 1
