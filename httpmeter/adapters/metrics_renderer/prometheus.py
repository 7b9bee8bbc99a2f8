"""Prometheus implementation of the MetricsRenderer protocol.

Wraps the instrument set's CollectorRegistry so a scrape endpoint can
serialize it.  The exposition format is negotiated from the scraper's
``Accept`` header: OpenMetrics when asked for, the classic text format
otherwise.
"""

from typing import Optional

from prometheus_client import CollectorRegistry
from prometheus_client.exposition import choose_encoder

from httpmeter.core.protocols.exporters import MetricsRenderer


class PrometheusMetricsRenderer(MetricsRenderer):
    """Render every collector in a registry."""

    def __init__(self, registry: CollectorRegistry) -> None:
        self._registry = registry

    def render(self, accept: Optional[str] = None) -> tuple[bytes, str]:
        encoder, content_type = choose_encoder(accept or "")
        return encoder(self._registry), content_type
