"""In-app ``/metrics`` endpoint for Starlette and FastAPI applications.

An alternative to the sidecar ``MetricsServer`` when the scrape should hit
the application port.  Add the path to the skip list so the scrape itself
is not measured.
"""

from collections.abc import Awaitable, Callable

from starlette.requests import Request
from starlette.responses import Response

from httpmeter.core.protocols.exporters import MetricsRenderer


def metrics_endpoint(renderer: MetricsRenderer) -> Callable[[Request], Awaitable[Response]]:
    """Build a Starlette endpoint that serves *renderer*'s output.

    Usage:
        app.add_route("/metrics", metrics_endpoint(service.renderer), methods=["GET"])
    """

    async def endpoint(request: Request) -> Response:
        body, content_type = renderer.render(request.headers.get("accept"))
        return Response(content=body, headers={"Content-Type": content_type})

    return endpoint
