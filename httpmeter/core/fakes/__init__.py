"""In-memory fakes for core services."""

from httpmeter.core.fakes.metrics_service import FakeMetricsService

__all__ = ["FakeMetricsService"]
