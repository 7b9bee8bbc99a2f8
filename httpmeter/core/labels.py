"""Label extraction for HTTP server metrics.

Pure functions only.  Every label value produced here comes from a closed
or otherwise bounded set: the HTTP method is folded onto the standard verbs,
the scheme onto http/https, and the route is always the router's matched
template, never the raw request path.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from starlette.routing import Mount

# Route label used when the router matched nothing (404s, bot scans, ...).
UNMATCHED_ROUTE = "unmatched"

# Method / scheme label for values outside the known set.
OTHER = "_OTHER"

UNKNOWN_SERVER_ADDRESS = "unknown"

KNOWN_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"}
)

_KNOWN_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class InFlightLabels:
    """Labels of the in-flight gauge.  Known at request entry."""

    http_request_method: str
    url_scheme: str

    def as_dict(self) -> dict[str, str]:
        return {
            "http_request_method": self.http_request_method,
            "url_scheme": self.url_scheme,
        }


@dataclass(frozen=True)
class RequestLabels:
    """Labels of the duration and body-size histograms.  Known at completion."""

    http_request_method: str
    http_route: str
    http_response_status_code: str
    server_address: str

    def as_dict(self) -> dict[str, str]:
        return {
            "http_request_method": self.http_request_method,
            "http_route": self.http_route,
            "http_response_status_code": self.http_response_status_code,
            "server_address": self.server_address,
        }


IN_FLIGHT_LABEL_NAMES = ("http_request_method", "url_scheme")
REQUEST_LABEL_NAMES = (
    "http_request_method",
    "http_route",
    "http_response_status_code",
    "server_address",
)


def normalize_method(method: str) -> str:
    """Upper-case *method*, folding non-standard verbs onto ``_OTHER``."""
    method = (method or "").upper()
    return method if method in KNOWN_METHODS else OTHER


def resolve_url_scheme(
    headers: Mapping[str, str],
    default_scheme: Optional[str],
    *,
    is_tls: bool = False,
) -> str:
    """Determine the ``url_scheme`` label.

    A server that terminates TLS itself is always ``https``.  Otherwise the
    usual reverse-proxy headers are consulted before falling back to the
    scheme of the connection.
    """
    if is_tls:
        return "https"

    scheme = headers.get("x-forwarded-proto") or headers.get("x-forwarded-protocol")
    if not scheme and (headers.get("x-forwarded-ssl") or "").lower() == "on":
        scheme = "https"
    if not scheme:
        scheme = headers.get("x-url-scheme") or default_scheme or "http"

    # X-Forwarded-Proto may carry a comma-separated chain; the client side is first.
    scheme = scheme.split(",")[0].strip().lower()
    return scheme if scheme in _KNOWN_SCHEMES else OTHER


def resolve_server_address(headers: Mapping[str, str], configured: Optional[str] = None) -> str:
    """Determine the ``server_address`` label.

    The configured virtual-host name wins.  Otherwise the host part of the
    ``Host`` header is used, without the port.
    """
    if configured:
        return configured

    host = (headers.get("host") or "").strip().lower()
    if not host:
        return UNKNOWN_SERVER_ADDRESS

    if host.startswith("["):
        # IPv6 literal: "[::1]:8000"
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    return host.rsplit(":", 1)[0] if ":" in host else host


def resolve_route(scope: Mapping[str, Any]) -> str:
    """Return the matched route template, or ``UNMATCHED_ROUTE``.

    FastAPI stores the matched route object in the ASGI scope under
    ``"route"``; its ``path`` is the template (``/users/{user_id}``).  Plain
    Starlette only stores the matched ``"endpoint"``, so the route is looked
    up on the router by endpoint identity.  Routes reached through one or
    more ``Mount`` get the mount path templates prepended, so
    ``/api/items/{item_id}`` and ``/v2/items/{item_id}`` stay distinct.
    """
    prefix, routes = _mounted_routes(scope)
    route = scope.get("route")
    if route is None:
        route = _route_for_endpoint(scope.get("endpoint"), routes)
    path = getattr(route, "path", None) if route is not None else None
    if isinstance(path, str) and path:
        return prefix + path
    return UNMATCHED_ROUTE


def _mounted_routes(scope: Mapping[str, Any]) -> tuple[str, Sequence[Any]]:
    """Follow the mounts the request went through.

    Returns the joined mount templates and the routes of the innermost
    mounted app.  Starlette rewrites ``root_path`` while descending, so the
    walk starts again from the application's own root path.
    """
    router = scope.get("router")
    routes: Sequence[Any] = getattr(router, "routes", None) or ()
    path = scope.get("path") or ""
    root_path = scope.get("app_root_path", scope.get("root_path")) or ""
    if root_path and path.startswith(root_path):
        path = path[len(root_path):]

    prefix = ""
    while True:
        for candidate in routes:
            regex = getattr(candidate, "path_regex", None)
            match = regex.match(path) if regex is not None else None
            if match is None:
                continue
            if isinstance(candidate, Mount):
                prefix += candidate.path
                path = "/" + match.group("path")
                routes = candidate.routes
                break
            return prefix, routes
        else:
            return prefix, routes


def _route_for_endpoint(endpoint: Any, routes: Sequence[Any]) -> Any:
    if endpoint is None:
        return None
    for candidate in routes:
        if getattr(candidate, "endpoint", None) is endpoint:
            return candidate
    return None


def in_flight_labels(
    method: str,
    headers: Mapping[str, str],
    default_scheme: Optional[str],
    *,
    is_tls: bool = False,
) -> InFlightLabels:
    """Build the gauge label set for a request that is just starting."""
    return InFlightLabels(
        http_request_method=normalize_method(method),
        url_scheme=resolve_url_scheme(headers, default_scheme, is_tls=is_tls),
    )


def request_labels(
    method: str,
    scope: Mapping[str, Any],
    status_code: int,
    headers: Mapping[str, str],
    *,
    server_address: Optional[str] = None,
) -> RequestLabels:
    """Build the histogram label set for a completed request."""
    return RequestLabels(
        http_request_method=normalize_method(method),
        http_route=resolve_route(scope),
        http_response_status_code=str(int(status_code)),
        server_address=resolve_server_address(headers, server_address),
    )
