"""Core protocols for dependency injection.

Collection (``HttpMetrics``), export (``MetricsRenderer``, ``MetricsPusher``)
and the facade (``MetricsService``) are kept apart so each side can be
swapped or faked on its own.
"""

from httpmeter.core.protocols.exporters import MetricsPusher, MetricsRenderer
from httpmeter.core.protocols.http_metrics import HttpMetrics
from httpmeter.core.protocols.metrics_service import MetricsService

__all__ = [
    "HttpMetrics",
    "MetricsPusher",
    "MetricsRenderer",
    "MetricsService",
]
