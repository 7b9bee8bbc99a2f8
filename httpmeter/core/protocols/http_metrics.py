"""HttpMetrics protocol for HTTP request/response instrumentation.

Abstracts metric collection so the middleware depends on a protocol rather
than a concrete library.  Production uses Prometheus; tests inject a fake
that records calls in memory.

Implementations are shared by every concurrent request and must accept
calls from any number of simultaneous callers without external locking.
"""

from typing import Protocol, runtime_checkable

from httpmeter.core.labels import InFlightLabels, RequestLabels


@runtime_checkable
class HttpMetrics(Protocol):
    """Protocol for HTTP server metrics collection."""

    def inc_active(self, labels: InFlightLabels) -> None:
        """Increment the in-flight gauge."""
        ...

    def dec_active(self, labels: InFlightLabels) -> None:
        """Decrement the in-flight gauge.

        Always called with the same labels as the matching ``inc_active``.
        """
        ...

    def observe_duration(self, labels: RequestLabels, seconds: float) -> None:
        """Record a completed request's duration in seconds."""
        ...

    def observe_request_size(self, labels: RequestLabels, size: int) -> None:
        """Record the request body size in bytes."""
        ...

    def observe_response_size(self, labels: RequestLabels, size: int) -> None:
        """Record the response body size in bytes."""
        ...
