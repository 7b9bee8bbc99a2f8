"""Sidecar HTTP server exposing ``/metrics`` for pull-based export.

Runs on its own port next to the application so scrapes never pass through
(or get counted by) the instrumented application.
"""

from typing import Optional

from aiohttp import web

from httpmeter.core.logging import logger
from httpmeter.core.protocols.exporters import MetricsRenderer

METRICS_PATH = "/metrics"


class MetricsServer:
    """aiohttp server that serves the renderer's output on ``GET /metrics``."""

    def __init__(
        self,
        renderer: MetricsRenderer,
        port: int = 9090,
        host: str = "0.0.0.0",
    ):
        """Initialize the metrics server.

        Args:
            renderer: Serializes the instrument set on each scrape.
            port: The port to listen on.  ``0`` lets the OS pick one.
            host: The host to listen on.
        """
        self.renderer = renderer
        self.host = host
        self.port = port
        self.app = web.Application()
        self.app.add_routes([web.get(METRICS_PATH, self._handle_metrics)])
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self.logger = logger.with_context(operation="metrics_server", port=port)

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        body, content_type = self.renderer.render(request.headers.get("Accept"))
        # aiohttp refuses a charset inside content_type, so set the raw header.
        return web.Response(body=body, headers={"Content-Type": content_type})

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when started with ``port=0``."""
        if self._runner is None:
            return None
        addresses = self._runner.addresses
        return addresses[0][1] if addresses else None

    async def start(self) -> None:
        """Start serving.  Meant to run in the background next to the app."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=self.host, port=self.port)
        await self._site.start()
        self.logger.info(f"Metrics server listening on http://{self.host}:{self.bound_port}{METRICS_PATH}")

    async def stop(self) -> None:
        """Stops the server gracefully.  Safe to call when never started."""
        if self._site:
            await self._site.stop()
            self._site = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
