"""Exporter-facing protocols.

Two independent capabilities over the same collected state:

* ``MetricsRenderer`` — pull.  A scraper asks for the current state and the
  renderer serializes it (served on ``/metrics``).
* ``MetricsPusher`` — push.  The process transmits the current state to a
  collector; ``PeriodicMetricsPusher`` drives it on a timer.

Both may be attached to one instrument set at the same time.  The
middleware knows about neither.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class MetricsRenderer(Protocol):
    """Serializes collected metrics into a scrapeable format."""

    def render(self, accept: Optional[str] = None) -> tuple[bytes, str]:
        """Serialize all collected metrics.

        Args:
            accept: The scraper's ``Accept`` header, used to negotiate the
                exposition format.  ``None`` selects the plain text format.

        Returns:
            ``(body, content_type)``.
        """
        ...


@runtime_checkable
class MetricsPusher(Protocol):
    """Transmits the current metric state once per call."""

    def push(self) -> None:
        """Send a snapshot of all collected metrics.

        Blocking; callers on an event loop run it in a worker thread.
        Transport errors propagate to the caller.
        """
        ...
