"""Prometheus-backed MetricsService implementation.

Composes the instrument set, the recording middleware and the optional
exporters (sidecar scrape server, periodic pusher) behind a single
lifecycle API so application wiring only deals with one object.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from httpmeter.core.logging import logger
from httpmeter.core.protocols.exporters import MetricsRenderer
from httpmeter.core.protocols.http_metrics import HttpMetrics

if TYPE_CHECKING:
    from starlette.applications import Starlette

    from httpmeter.api.metrics_server import MetricsServer
    from httpmeter.api.middleware import HttpMetricsMiddleware
    from httpmeter.core.metrics_pusher import PeriodicMetricsPusher


class PrometheusMetricsService:
    """Facade that owns the instrument set and its exporters.

    Satisfies the ``MetricsService`` protocol structurally.  Built by
    ``HttpMetricsBuilder``; the same ``http`` instrument set is read by
    every attached exporter, so pull and push export can run side by side.
    """

    http: HttpMetrics

    def __init__(
        self,
        http: HttpMetrics,
        middleware: HttpMetricsMiddleware,
        renderer: MetricsRenderer,
        *,
        service_name: str,
        server: Optional[MetricsServer] = None,
        pusher: Optional[PeriodicMetricsPusher] = None,
    ) -> None:
        self.http = http
        self.middleware = middleware
        self.renderer = renderer
        self.service_name = service_name
        self._server = server
        self._pusher = pusher
        self.logger = logger.with_context(operation="metrics_service", service_name=service_name)

    @property
    def server(self) -> Optional[MetricsServer]:
        return self._server

    @property
    def pusher(self) -> Optional[PeriodicMetricsPusher]:
        return self._pusher

    def install(self, app: Starlette) -> None:
        """Attach the recording middleware to *app*."""
        self.middleware.install(app)

    async def start(self) -> None:
        """Start the sidecar server, then the push loop."""
        if self._server:
            await self._server.start()
        if self._pusher:
            await self._pusher.start()
        self.logger.info("Metrics exporters started")

    async def stop(self) -> None:
        """Stop the push loop (with a final flush), then the sidecar."""
        try:
            if self._pusher:
                await self._pusher.stop()
        finally:
            if self._server:
                await self._server.stop()
        self.logger.info("Metrics exporters stopped")
