"""HTTP metrics middleware.

Per request: ENTERED -> (SKIPPED | MEASURING) -> COMPLETED.

A skipped request is forwarded untouched and produces no metric side
effects.  A measured request holds the in-flight gauge for exactly the
duration of the inner call; the gauge is released on every exit path,
including exceptions and task cancellation.  Recording problems are logged
and never change the outcome of the request.
"""

import time
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from httpmeter.core.labels import InFlightLabels, in_flight_labels, request_labels
from httpmeter.core.logging import logger
from httpmeter.core.protocols.http_metrics import HttpMetrics
from httpmeter.core.skip import PathSkipper

CallNext = Callable[[Request], Awaitable[Response]]

_logger = logger.with_context(operation="http_metrics_middleware")


@dataclass
class RequestMeasurementContext:
    """State of one measured request.  Never shared between requests."""

    in_flight: InFlightLabels
    request_size: Optional[int]
    start: float

    def elapsed(self) -> float:
        """Seconds since entry, from the monotonic clock."""
        return max(0.0, time.perf_counter() - self.start)


@contextmanager
def track_in_flight(metrics: HttpMetrics, labels: InFlightLabels) -> Iterator[bool]:
    """Hold the in-flight gauge for the body of the ``with`` block.

    Yields ``True`` when the gauge was incremented.  The matching decrement
    runs when the block exits, whatever the reason.  If the increment
    itself fails nothing is held and ``False`` is yielded.
    """
    try:
        metrics.inc_active(labels)
    except Exception:
        _logger.exception("Failed to increment the in-flight gauge")
        yield False
        return

    try:
        yield True
    finally:
        try:
            metrics.dec_active(labels)
        except Exception:
            _logger.exception("Failed to decrement the in-flight gauge")


def content_length(headers: Mapping[str, str]) -> Optional[int]:
    """Parse ``Content-Length``; ``None`` when absent or malformed."""
    raw = headers.get("content-length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        _logger.debug(f"Ignoring malformed content-length {raw!r}")
        return None
    return value if value >= 0 else None


def request_body_size(headers: Mapping[str, str]) -> Optional[int]:
    """Request body size in bytes, or ``None`` when it cannot be known cheaply.

    Without ``Content-Length`` or ``Transfer-Encoding`` an HTTP/1.1 request
    has no body, so its size is 0.  A chunked body would have to be read to
    be measured; it is omitted instead.
    """
    size = content_length(headers)
    if size is not None:
        return size
    if headers.get("transfer-encoding") is not None or headers.get("content-length") is not None:
        return None
    return 0


class HttpMetricsMiddleware:
    """Starlette dispatch callable that records HTTP server metrics.

    Usage:
        middleware = HttpMetricsMiddleware(PrometheusHttpMetrics())
        middleware.install(app)
        # or: app.add_middleware(BaseHTTPMiddleware, dispatch=middleware)
    """

    def __init__(
        self,
        metrics: HttpMetrics,
        *,
        skipper: Optional[PathSkipper] = None,
        is_tls: bool = False,
        server_address: Optional[str] = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            metrics: Instrument set every request records into.
            skipper: Paths excluded from measurement.  Defaults to none.
            is_tls: Whether this server terminates TLS itself; forces the
                ``url_scheme`` label to ``https``.
            server_address: Fixed ``server_address`` label value.  When unset
                the host of the ``Host`` header is used.
        """
        self.metrics = metrics
        self.skipper = skipper or PathSkipper.never()
        self.is_tls = is_tls
        self.server_address = server_address

    def install(self, app: Starlette) -> None:
        """Attach this middleware to a Starlette or FastAPI application."""
        app.add_middleware(BaseHTTPMiddleware, dispatch=self)

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        if self._should_skip(request):
            return await call_next(request)

        context = self._begin(request)
        if context is None:
            return await call_next(request)

        with track_in_flight(self.metrics, context.in_flight):
            try:
                response = await call_next(request)
            except Exception:
                # The host framework turns an unhandled error into a 500.
                self._record(request, context, status_code=500, response_size=None)
                raise

            self._record(
                request,
                context,
                status_code=response.status_code,
                response_size=content_length(response.headers),
            )
            return response

    # -- internals --

    def _should_skip(self, request: Request) -> bool:
        try:
            return self.skipper.should_skip(request.url.path)
        except Exception:
            _logger.exception("Skip predicate failed; measuring the request")
            return False

    def _begin(self, request: Request) -> Optional[RequestMeasurementContext]:
        try:
            labels = in_flight_labels(
                request.method,
                request.headers,
                request.scope.get("scheme"),
                is_tls=self.is_tls,
            )
            return RequestMeasurementContext(
                in_flight=labels,
                request_size=request_body_size(request.headers),
                start=time.perf_counter(),
            )
        except Exception:
            _logger.exception("Failed to start request measurement; request is not measured")
            return None

    def _record(
        self,
        request: Request,
        context: RequestMeasurementContext,
        *,
        status_code: int,
        response_size: Optional[int],
    ) -> None:
        duration = context.elapsed()
        try:
            labels = request_labels(
                request.method,
                request.scope,
                status_code,
                request.headers,
                server_address=self.server_address,
            )
            self.metrics.observe_duration(labels, duration)
            if context.request_size is not None:
                self.metrics.observe_request_size(labels, context.request_size)
            if response_size is not None:
                self.metrics.observe_response_size(labels, response_size)
        except Exception:
            _logger.exception("Failed to record request metrics")
