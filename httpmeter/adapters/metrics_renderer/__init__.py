"""Metrics renderer adapters."""

from httpmeter.adapters.metrics_renderer.fake import FakeMetricsRenderer
from httpmeter.adapters.metrics_renderer.prometheus import PrometheusMetricsRenderer

__all__ = ["PrometheusMetricsRenderer", "FakeMetricsRenderer"]
