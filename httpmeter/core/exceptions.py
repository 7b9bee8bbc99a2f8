"""Exceptions raised by httpmeter."""


class MetricsConfigError(Exception):
    """Hard error raised when the metrics configuration is invalid.

    Raised while the instrument set is being assembled, before any request
    is served.  Never raised from inside the request path.
    """
