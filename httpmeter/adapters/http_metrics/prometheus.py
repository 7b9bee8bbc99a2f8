"""Prometheus implementation of the HttpMetrics protocol.

Creates a dedicated CollectorRegistry (unless one is supplied) so the HTTP
server metrics are isolated from the default global registry.  Bucket
boundaries are fixed at construction; only measurement values change
afterwards.
"""

from collections.abc import Sequence
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, Histogram

from httpmeter.core.buckets import (
    DEFAULT_DURATION_BUCKETS,
    DEFAULT_SIZE_BUCKETS,
    validate_boundaries,
)
from httpmeter.core.labels import (
    IN_FLIGHT_LABEL_NAMES,
    REQUEST_LABEL_NAMES,
    InFlightLabels,
    RequestLabels,
)
from httpmeter.core.protocols.http_metrics import HttpMetrics

ACTIVE_REQUESTS = "http_server_active_requests"
REQUEST_DURATION = "http_server_request_duration_seconds"
REQUEST_BODY_SIZE = "http_server_request_body_size_bytes"
RESPONSE_BODY_SIZE = "http_server_response_body_size_bytes"


class PrometheusHttpMetrics(HttpMetrics):
    """Prometheus-backed HTTP server metrics collection."""

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        *,
        duration_buckets: Sequence[float] = DEFAULT_DURATION_BUCKETS,
        request_size_buckets: Sequence[float] = DEFAULT_SIZE_BUCKETS,
        response_size_buckets: Sequence[float] = DEFAULT_SIZE_BUCKETS,
    ) -> None:
        self._registry = registry or CollectorRegistry()

        self.duration_buckets = validate_boundaries("duration_buckets", duration_buckets)
        self.request_size_buckets = validate_boundaries(
            "request_size_buckets", request_size_buckets
        )
        self.response_size_buckets = validate_boundaries(
            "response_size_buckets", response_size_buckets
        )

        self._active_requests = Gauge(
            ACTIVE_REQUESTS,
            "Number of active HTTP server requests.",
            IN_FLIGHT_LABEL_NAMES,
            registry=self._registry,
        )

        self._request_duration = Histogram(
            REQUEST_DURATION,
            "Duration of HTTP server requests in seconds.",
            REQUEST_LABEL_NAMES,
            buckets=self.duration_buckets,
            unit="seconds",
            registry=self._registry,
        )

        self._request_body_size = Histogram(
            REQUEST_BODY_SIZE,
            "Size of HTTP server request bodies in bytes.",
            REQUEST_LABEL_NAMES,
            buckets=self.request_size_buckets,
            unit="bytes",
            registry=self._registry,
        )

        self._response_body_size = Histogram(
            RESPONSE_BODY_SIZE,
            "Size of HTTP server response bodies in bytes.",
            REQUEST_LABEL_NAMES,
            buckets=self.response_size_buckets,
            unit="bytes",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Registry the exporters read from."""
        return self._registry

    # -- HttpMetrics protocol methods --

    def inc_active(self, labels: InFlightLabels) -> None:
        self._active_requests.labels(**labels.as_dict()).inc()

    def dec_active(self, labels: InFlightLabels) -> None:
        self._active_requests.labels(**labels.as_dict()).dec()

    def observe_duration(self, labels: RequestLabels, seconds: float) -> None:
        self._request_duration.labels(**labels.as_dict()).observe(seconds)

    def observe_request_size(self, labels: RequestLabels, size: int) -> None:
        self._request_body_size.labels(**labels.as_dict()).observe(size)

    def observe_response_size(self, labels: RequestLabels, size: int) -> None:
        self._response_body_size.labels(**labels.as_dict()).observe(size)
