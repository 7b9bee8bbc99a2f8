"""Builder for the HTTP metrics layer.

Validates user options and assembles the instrument set, the recording
middleware and the requested exporters into a ``PrometheusMetricsService``.
Every check happens in ``build()``, before a single request is served; a
bad option raises ``MetricsConfigError`` rather than failing at runtime.

Usage:
    service = (
        HttpMetricsBuilder()
        .with_service_name("orders-api")
        .with_duration_buckets([0.01, 0.1, 1.0])
        .with_skip_paths(exact=["/health"], prefixes=["/metrics"])
        .with_pull_exporter(port=9090)
        .build()
    )
    service.install(app)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from prometheus_client import CollectorRegistry

from httpmeter.adapters.http_metrics import PrometheusHttpMetrics
from httpmeter.adapters.metrics_pusher import PushgatewayMetricsPusher
from httpmeter.adapters.metrics_renderer import PrometheusMetricsRenderer
from httpmeter.api.metrics_server import MetricsServer
from httpmeter.api.middleware import HttpMetricsMiddleware
from httpmeter.core.buckets import (
    DEFAULT_DURATION_BUCKETS,
    DEFAULT_SIZE_BUCKETS,
    validate_boundaries,
)
from httpmeter.core.config import Settings
from httpmeter.core.exceptions import MetricsConfigError
from httpmeter.core.logging import logger
from httpmeter.core.metrics_pusher import PeriodicMetricsPusher
from httpmeter.core.metrics_service import PrometheusMetricsService
from httpmeter.core.skip import PathSkipper

DEFAULT_SERVICE_NAME = "httpmeter"


class HttpMetricsBuilder:
    """Fluent, fail-fast builder.  No option is required."""

    def __init__(self) -> None:
        self._service_name: str = DEFAULT_SERVICE_NAME
        self._duration_buckets: Sequence[float] = DEFAULT_DURATION_BUCKETS
        self._request_size_buckets: Sequence[float] = DEFAULT_SIZE_BUCKETS
        self._response_size_buckets: Sequence[float] = DEFAULT_SIZE_BUCKETS
        self._skipper: Optional[PathSkipper] = None
        self._skip_exact: Optional[tuple[str, ...]] = None
        self._skip_prefixes: Optional[tuple[str, ...]] = None
        self._is_tls: bool = False
        self._server_address: Optional[str] = None
        self._registry: Optional[CollectorRegistry] = None
        self._pull: Optional[tuple[str, int]] = None
        self._push: Optional[dict] = None

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> HttpMetricsBuilder:
        """Seed a builder from ``Settings`` (the process settings by default)."""
        if config is None:
            from httpmeter.core.config import settings as config

        builder = (
            cls()
            .with_service_name(config.SERVICE_NAME)
            .with_duration_buckets(config.METRICS_DURATION_BUCKETS)
            .with_request_size_buckets(config.METRICS_REQUEST_SIZE_BUCKETS)
            .with_response_size_buckets(config.METRICS_RESPONSE_SIZE_BUCKETS)
            .with_tls(config.METRICS_TLS)
            .with_server_address(config.METRICS_SERVER_ADDRESS)
        )
        if config.METRICS_SKIP_PATHS or config.METRICS_SKIP_PREFIXES:
            builder.with_skip_paths(
                exact=config.METRICS_SKIP_PATHS,
                prefixes=config.METRICS_SKIP_PREFIXES,
            )
        if config.METRICS_SERVER_ENABLED:
            builder.with_pull_exporter(host=config.METRICS_HOST, port=config.METRICS_PORT)
        if config.METRICS_PUSHGATEWAY_URL:
            builder.with_push_exporter(
                config.METRICS_PUSHGATEWAY_URL,
                interval=config.METRICS_PUSH_INTERVAL,
            )
        return builder

    # -- options --

    def with_service_name(self, name: str) -> HttpMetricsBuilder:
        self._service_name = name
        return self

    def with_duration_buckets(self, boundaries: Iterable[float]) -> HttpMetricsBuilder:
        """Request-duration bucket boundaries, in seconds."""
        self._duration_buckets = tuple(boundaries)
        return self

    def with_request_size_buckets(self, boundaries: Iterable[float]) -> HttpMetricsBuilder:
        """Request-body bucket boundaries, in bytes."""
        self._request_size_buckets = tuple(boundaries)
        return self

    def with_response_size_buckets(self, boundaries: Iterable[float]) -> HttpMetricsBuilder:
        """Response-body bucket boundaries, in bytes."""
        self._response_size_buckets = tuple(boundaries)
        return self

    def with_skipper(self, skipper: PathSkipper | Callable[[str], bool]) -> HttpMetricsBuilder:
        """Exclude requests from measurement with a custom predicate."""
        self._skipper = skipper if isinstance(skipper, PathSkipper) else PathSkipper(skipper)
        return self

    def with_skip_paths(
        self,
        exact: Iterable[str] = (),
        prefixes: Iterable[str] = (),
    ) -> HttpMetricsBuilder:
        """Exclude exact paths and path prefixes from measurement."""
        self._skip_exact = tuple(exact)
        self._skip_prefixes = tuple(prefixes)
        return self

    def with_tls(self, is_tls: bool = True) -> HttpMetricsBuilder:
        """Mark the server as terminating TLS itself (``url_scheme=https``)."""
        self._is_tls = is_tls
        return self

    def with_server_address(self, address: Optional[str]) -> HttpMetricsBuilder:
        """Pin the ``server_address`` label instead of reading the Host header."""
        self._server_address = address
        return self

    def with_registry(self, registry: CollectorRegistry) -> HttpMetricsBuilder:
        """Register the instruments on *registry* instead of a private one."""
        self._registry = registry
        return self

    def with_pull_exporter(self, host: str = "0.0.0.0", port: int = 9090) -> HttpMetricsBuilder:
        """Serve ``/metrics`` from a sidecar server."""
        self._pull = (host, port)
        return self

    def with_push_exporter(
        self,
        gateway: str,
        interval: float = 15.0,
        grouping_key: Optional[dict[str, str]] = None,
    ) -> HttpMetricsBuilder:
        """Push to a Pushgateway every *interval* seconds."""
        self._push = {"gateway": gateway, "interval": interval, "grouping_key": grouping_key}
        return self

    # -- assembly --

    def build(self) -> PrometheusMetricsService:
        """Validate every option and assemble the service.

        Raises:
            MetricsConfigError: On invalid or conflicting options.
        """
        service_name = (self._service_name or "").strip()
        if not service_name:
            raise MetricsConfigError("service name must not be empty")

        duration_buckets = validate_boundaries("duration_buckets", self._duration_buckets)
        request_size_buckets = validate_boundaries(
            "request_size_buckets", self._request_size_buckets
        )
        response_size_buckets = validate_boundaries(
            "response_size_buckets", self._response_size_buckets
        )

        skipper = self._build_skipper()
        self._validate_exporters()

        registry = self._registry or CollectorRegistry()
        try:
            http = PrometheusHttpMetrics(
                registry,
                duration_buckets=duration_buckets,
                request_size_buckets=request_size_buckets,
                response_size_buckets=response_size_buckets,
            )
        except ValueError as exc:
            # prometheus_client rejects a second set of instruments on one registry.
            raise MetricsConfigError(f"cannot register HTTP metrics: {exc}") from exc

        middleware = HttpMetricsMiddleware(
            http,
            skipper=skipper,
            is_tls=self._is_tls,
            server_address=self._server_address,
        )
        renderer = PrometheusMetricsRenderer(registry)

        server = None
        if self._pull is not None:
            host, port = self._pull
            server = MetricsServer(renderer, port=port, host=host)

        pusher = None
        if self._push is not None:
            pusher = PeriodicMetricsPusher(
                PushgatewayMetricsPusher(
                    registry,
                    gateway=self._push["gateway"],
                    job=service_name,
                    grouping_key=self._push["grouping_key"],
                ),
                interval=self._push["interval"],
            )

        logger.with_context(operation="metrics_builder", service_name=service_name).info(
            f"HTTP metrics configured (pull={'on' if server else 'off'}, "
            f"push={'on' if pusher else 'off'})"
        )

        return PrometheusMetricsService(
            http,
            middleware,
            renderer,
            service_name=service_name,
            server=server,
            pusher=pusher,
        )

    def _build_skipper(self) -> PathSkipper:
        has_paths = self._skip_exact is not None or self._skip_prefixes is not None
        if self._skipper is not None and has_paths:
            raise MetricsConfigError("with_skipper and with_skip_paths are mutually exclusive")
        if self._skipper is not None:
            return self._skipper
        if has_paths:
            for path in (*(self._skip_exact or ()), *(self._skip_prefixes or ())):
                if not path.startswith("/"):
                    raise MetricsConfigError(f"skip path {path!r} must start with '/'")
            return PathSkipper.from_paths(self._skip_exact or (), self._skip_prefixes or ())
        return PathSkipper.never()

    def _validate_exporters(self) -> None:
        if self._pull is not None:
            _host, port = self._pull
            if not isinstance(port, int) or not 0 <= port <= 65535:
                raise MetricsConfigError(f"invalid metrics server port {port!r}")

        if self._push is not None:
            if not (self._push["gateway"] or "").strip():
                raise MetricsConfigError("push exporter needs a gateway address")
            if self._push["interval"] <= 0:
                raise MetricsConfigError("push interval must be positive")
