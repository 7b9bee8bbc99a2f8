"""Fake HttpMetrics for testing.

Records all calls in memory so tests can assert on metrics behaviour
without reaching into prometheus-client internals.
"""

import threading
from dataclasses import dataclass

from httpmeter.core.labels import InFlightLabels, RequestLabels


@dataclass
class Observation:
    """Single histogram observation."""

    labels: RequestLabels
    value: float


class FakeHttpMetrics:
    """In-memory spy implementing the HttpMetrics protocol.

    Usage:
        fake = FakeHttpMetrics()
        # … inject into the middleware …
        assert fake.active_value("GET") == 0
        assert len(fake.durations) == 1
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.active: dict[InFlightLabels, int] = {}
        self.durations: list[Observation] = []
        self.request_sizes: list[Observation] = []
        self.response_sizes: list[Observation] = []
        self.calls: list[str] = []

    def inc_active(self, labels: InFlightLabels) -> None:
        with self._lock:
            self.active[labels] = self.active.get(labels, 0) + 1
            self.calls.append("inc_active")

    def dec_active(self, labels: InFlightLabels) -> None:
        with self._lock:
            self.active[labels] = self.active.get(labels, 0) - 1
            self.calls.append("dec_active")

    def observe_duration(self, labels: RequestLabels, seconds: float) -> None:
        with self._lock:
            self.durations.append(Observation(labels, seconds))
            self.calls.append("observe_duration")

    def observe_request_size(self, labels: RequestLabels, size: int) -> None:
        with self._lock:
            self.request_sizes.append(Observation(labels, size))
            self.calls.append("observe_request_size")

    def observe_response_size(self, labels: RequestLabels, size: int) -> None:
        with self._lock:
            self.response_sizes.append(Observation(labels, size))
            self.calls.append("observe_response_size")

    # -- test helpers --

    def active_value(self, method: str, url_scheme: str = "http") -> int:
        """Current gauge value for one in-flight label set."""
        return self.active.get(InFlightLabels(method, url_scheme), 0)

    def total_active(self) -> int:
        """Sum of the gauge across all label sets."""
        return sum(self.active.values())

    def clear(self) -> None:
        """Reset all recorded state."""
        with self._lock:
            self.active.clear()
            self.durations.clear()
            self.request_sizes.clear()
            self.response_sizes.clear()
            self.calls.clear()
