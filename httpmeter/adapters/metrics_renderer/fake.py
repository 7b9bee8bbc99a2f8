"""Fake MetricsRenderer for testing.

Records render() calls so tests can assert on scrape-endpoint behaviour
without depending on prometheus-client.
"""

from typing import Optional


class FakeMetricsRenderer:
    """In-memory spy implementing the MetricsRenderer protocol."""

    body = b"# fake metrics\n"
    content_type = "text/plain"

    def __init__(self) -> None:
        self.accept_headers: list[Optional[str]] = []

    @property
    def render_calls(self) -> int:
        return len(self.accept_headers)

    def render(self, accept: Optional[str] = None) -> tuple[bytes, str]:
        self.accept_headers.append(accept)
        return self.body, self.content_type
