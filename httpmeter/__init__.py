"""HTTP server metrics for Starlette and FastAPI applications."""

from httpmeter.api.middleware import HttpMetricsMiddleware
from httpmeter.core.builder import HttpMetricsBuilder
from httpmeter.core.exceptions import MetricsConfigError
from httpmeter.core.labels import UNMATCHED_ROUTE
from httpmeter.core.metrics_service import PrometheusMetricsService
from httpmeter.core.skip import PathSkipper

__all__ = [
    "HttpMetricsBuilder",
    "HttpMetricsMiddleware",
    "MetricsConfigError",
    "PathSkipper",
    "PrometheusMetricsService",
    "UNMATCHED_ROUTE",
]
