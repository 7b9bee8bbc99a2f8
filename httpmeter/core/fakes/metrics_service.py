"""Fake metrics service for testing."""

from __future__ import annotations

from typing import Any


class FakeMetricsService:
    """In-memory MetricsService stand-in for testing.

    Structurally satisfies the ``MetricsService`` protocol and records the
    lifecycle calls it receives.
    """

    def __init__(self, http: Any) -> None:
        self.http = http
        self.installed_apps: list[Any] = []
        self.started = False
        self.stopped = False

    def install(self, app: Any) -> None:
        self.installed_apps.append(app)

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True
