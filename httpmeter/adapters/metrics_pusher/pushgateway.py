"""Pushgateway implementation of the MetricsPusher protocol.

Each push replaces the whole metric group ``job=<service name>`` (plus any
extra grouping key) on the gateway with the registry's current state, so
repeated pushes are idempotent.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, push_to_gateway

from httpmeter.core.protocols.exporters import MetricsPusher


class PushgatewayMetricsPusher(MetricsPusher):
    """Push a CollectorRegistry to a Prometheus Pushgateway."""

    def __init__(
        self,
        registry: CollectorRegistry,
        gateway: str,
        job: str,
        grouping_key: Optional[dict[str, str]] = None,
        timeout: Optional[float] = 10.0,
    ) -> None:
        self._registry = registry
        self.gateway = gateway
        self.job = job
        self.grouping_key = dict(grouping_key or {})
        self.timeout = timeout

    def push(self) -> None:
        push_to_gateway(
            self.gateway,
            job=self.job,
            registry=self._registry,
            grouping_key=self.grouping_key,
            timeout=self.timeout,
        )
