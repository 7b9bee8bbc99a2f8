"""Metrics pusher adapters."""

from httpmeter.adapters.metrics_pusher.fake import FakeMetricsPusher
from httpmeter.adapters.metrics_pusher.pushgateway import PushgatewayMetricsPusher

__all__ = ["PushgatewayMetricsPusher", "FakeMetricsPusher"]
