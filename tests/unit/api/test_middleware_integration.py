"""End-to-end tests: FastAPI / Starlette apps instrumented by the builder."""

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, StreamingResponse
from fastapi.testclient import TestClient
from starlette.applications import Starlette
from starlette.routing import Mount, Route

from httpmeter import HttpMetricsBuilder
from httpmeter.api.metrics import metrics_endpoint
from httpmeter.core.labels import UNMATCHED_ROUTE


def _labels(route: str, status: str = "200", method: str = "GET") -> dict[str, str]:
    return {
        "http_request_method": method,
        "http_route": route,
        "http_response_status_code": status,
        "server_address": "testserver",
    }


def _route_values(registry) -> set[str]:
    values = set()
    for family in registry.collect():
        for sample in family.samples:
            if "http_route" in sample.labels:
                values.add(sample.labels["http_route"])
    return values


@pytest.fixture
def service():
    return HttpMetricsBuilder().with_skip_paths(exact=["/health"], prefixes=["/metrics"]).build()


@pytest.fixture
def app(service):
    app = FastAPI()

    @app.get("/hello")
    async def hello():
        return PlainTextResponse("0123456789")

    @app.get("/users/{user_id}")
    async def get_user(user_id: int):
        return {"id": user_id}

    @app.post("/echo")
    async def echo(payload: dict):
        return payload

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    @app.get("/stream")
    async def stream():
        async def chunks():
            yield b"abc"
            yield b"def"

        return StreamingResponse(chunks(), media_type="text/plain")

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_route("/metrics", metrics_endpoint(service.renderer), methods=["GET"])
    service.install(app)
    return app


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def test_hello_scenario(client, service):
    response = client.get("/hello")
    assert response.status_code == 200
    assert response.text == "0123456789"

    registry = service.http.registry
    labels = _labels("/hello")
    assert registry.get_sample_value("http_server_request_duration_seconds_count", labels) == 1.0
    assert registry.get_sample_value("http_server_response_body_size_bytes_sum", labels) == 10.0
    assert (
        registry.get_sample_value(
            "http_server_active_requests", {"http_request_method": "GET", "url_scheme": "http"}
        )
        == 0.0
    )


def test_route_template_not_raw_path(client, service):
    for user_id in range(5):
        assert client.get(f"/users/{user_id}").status_code == 200

    registry = service.http.registry
    assert (
        registry.get_sample_value(
            "http_server_request_duration_seconds_count", _labels("/users/{user_id}")
        )
        == 5.0
    )
    assert _route_values(registry) == {"/users/{user_id}"}


def test_unregistered_path_uses_placeholder(client, service):
    for i in range(50):
        assert client.get(f"/nope/{i}").status_code == 404

    registry = service.http.registry
    assert _route_values(registry) == {UNMATCHED_ROUTE}
    assert (
        registry.get_sample_value(
            "http_server_request_duration_seconds_count", _labels(UNMATCHED_ROUTE, "404")
        )
        == 50.0
    )


def test_request_body_size(client, service):
    response = client.post("/echo", content=b'{"a": 1}', headers={"content-type": "application/json"})
    assert response.status_code == 200

    registry = service.http.registry
    assert (
        registry.get_sample_value(
            "http_server_request_body_size_bytes_sum", _labels("/echo", method="POST")
        )
        == 8.0
    )


def test_handler_error_recorded_as_500(client, service):
    response = client.get("/boom")
    assert response.status_code == 500

    registry = service.http.registry
    assert registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels("/boom", "500")
    ) == 1.0
    assert (
        registry.get_sample_value(
            "http_server_active_requests", {"http_request_method": "GET", "url_scheme": "http"}
        )
        == 0.0
    )


def test_streaming_response_size_omitted(client, service):
    response = client.get("/stream")
    assert response.text == "abcdef"

    registry = service.http.registry
    assert registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels("/stream")
    ) == 1.0
    assert registry.get_sample_value(
        "http_server_response_body_size_bytes_count", _labels("/stream")
    ) is None


def test_skipped_paths_produce_no_samples(client, service):
    assert client.get("/health").status_code == 200
    assert client.get("/metrics").status_code == 200

    registry = service.http.registry
    assert _route_values(registry) == set()
    assert (
        registry.get_sample_value(
            "http_server_active_requests", {"http_request_method": "GET", "url_scheme": "http"}
        )
        is None
    )


def test_in_app_metrics_endpoint(client):
    client.get("/hello")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 'http_server_request_duration_seconds_count{' in response.text
    assert 'http_route="/hello"' in response.text


def test_forwarded_proto_sets_scheme(client, service):
    client.get("/hello", headers={"x-forwarded-proto": "https"})

    assert (
        service.http.registry.get_sample_value(
            "http_server_active_requests", {"http_request_method": "GET", "url_scheme": "https"}
        )
        == 0.0
    )


def test_plain_starlette_route_template():
    async def item(request):
        return PlainTextResponse("ok")

    service = HttpMetricsBuilder().build()
    app = Starlette(routes=[Route("/items/{item_id}", item)])
    service.install(app)

    with TestClient(app) as client:
        assert client.get("/items/7").status_code == 200

    assert service.http.registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels("/items/{item_id}")
    ) == 1.0


def test_starlette_mount_prefix_is_kept():
    async def item(request):
        return PlainTextResponse("ok")

    service = HttpMetricsBuilder().build()
    app = Starlette(
        routes=[
            Mount("/api", routes=[Route("/items/{item_id}", item)]),
            Mount("/v2", routes=[Route("/items/{item_id}", item)]),
        ]
    )
    service.install(app)

    with TestClient(app) as client:
        assert client.get("/api/items/7").status_code == 200
        assert client.get("/v2/items/8").status_code == 200
        assert client.get("/v2/items/9").status_code == 200

    registry = service.http.registry
    assert registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels("/api/items/{item_id}")
    ) == 1.0
    assert registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels("/v2/items/{item_id}")
    ) == 2.0
    assert _route_values(registry) == {"/api/items/{item_id}", "/v2/items/{item_id}"}


def test_fastapi_mounted_sub_application():
    sub = FastAPI()

    @sub.get("/items/{item_id}")
    async def item(item_id: int):
        return {"id": item_id}

    service = HttpMetricsBuilder().build()
    app = FastAPI()
    app.mount("/v1", sub)
    service.install(app)

    with TestClient(app) as client:
        assert client.get("/v1/items/3").status_code == 200
        assert client.get("/v1/missing").status_code == 404

    registry = service.http.registry
    assert registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels("/v1/items/{item_id}")
    ) == 1.0
    assert registry.get_sample_value(
        "http_server_request_duration_seconds_count", _labels(UNMATCHED_ROUTE, status="404")
    ) == 1.0
