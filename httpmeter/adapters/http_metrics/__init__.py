"""HTTP metrics adapters."""

from httpmeter.adapters.http_metrics.fake import FakeHttpMetrics
from httpmeter.adapters.http_metrics.prometheus import PrometheusHttpMetrics

__all__ = ["PrometheusHttpMetrics", "FakeHttpMetrics"]
