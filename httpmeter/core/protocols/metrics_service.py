"""MetricsService protocol for the metrics facade.

Lets application wiring depend on a protocol rather than the concrete
Prometheus-backed class.  Production uses ``PrometheusMetricsService``;
tests inject ``FakeMetricsService``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from httpmeter.core.protocols.http_metrics import HttpMetrics

if TYPE_CHECKING:
    from starlette.applications import Starlette


@runtime_checkable
class MetricsService(Protocol):
    """Protocol for the metrics facade.

    ``http`` is the instrument set shared by every request.
    """

    http: HttpMetrics

    def install(self, app: Starlette) -> None:
        """Attach the recording middleware to *app*."""
        ...

    async def start(self) -> None:
        """Start the attached exporters."""
        ...

    async def stop(self) -> None:
        """Stop the attached exporters, flushing pending pushes."""
        ...
