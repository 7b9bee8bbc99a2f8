"""Histogram bucket boundaries.

Python constants for the default boundaries plus the validator shared by
the builder and the settings model.
"""

import math
from collections.abc import Iterable

from httpmeter.core.exceptions import MetricsConfigError

KB = 1024.0
MB = 1024.0 * KB

# Seconds.  Sub-millisecond up to ten seconds; anything slower lands in +Inf.
DEFAULT_DURATION_BUCKETS: tuple[float, ...] = (
    0.0005,
    0.001,
    0.0025,
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    7.5,
    10.0,
)

# Bytes.  Shared default for request and response bodies.
DEFAULT_SIZE_BUCKETS: tuple[float, ...] = (
    100.0,
    1.0 * KB,
    2.0 * KB,
    5.0 * KB,
    10.0 * KB,
    100.0 * KB,
    500.0 * KB,
    1.0 * MB,
    2.5 * MB,
    5.0 * MB,
    10.0 * MB,
)


def validate_boundaries(name: str, boundaries: Iterable[float]) -> tuple[float, ...]:
    """Return *boundaries* as an immutable tuple, or raise ``MetricsConfigError``.

    Boundaries must be non-empty, finite and strictly increasing.  The
    implicit ``+Inf`` bucket is added by the metrics backend, so it must not
    be passed here.
    """
    try:
        values = tuple(float(b) for b in boundaries)
    except (TypeError, ValueError) as exc:
        raise MetricsConfigError(f"{name}: bucket boundaries must be numbers ({exc})") from exc

    if not values:
        raise MetricsConfigError(f"{name}: bucket boundaries must not be empty")

    for value in values:
        if not math.isfinite(value):
            raise MetricsConfigError(f"{name}: bucket boundary {value!r} is not finite")

    for previous, current in zip(values, values[1:]):
        if current <= previous:
            raise MetricsConfigError(
                f"{name}: bucket boundaries must be strictly increasing "
                f"({previous!r} is followed by {current!r})"
            )

    return values
