# tests/test_edge_endpoints.py
from __future__ import annotations

import socket

import httpx
import pytest
from fastapi.testclient import TestClient

import edge_api  # imports app + module-level objects
import inner_api
from functions.edge.inner_service_client import InnerServiceClient
from functions.inner.data_producer import DataProducer

INNER_OK = {"value": "hi there!", "now": "2024-05-01T10:00:00.123456Z"}
INNER_FAILURE_BODY = "internal error in inner service: processing error\nTraceback (most recent call last):\n..."


@pytest.fixture()
def client() -> TestClient:
    return TestClient(edge_api.app)


def _use_inner(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    monkeypatch.setattr(
        edge_api,
        "inner_client",
        InnerServiceClient("http://inner.test", transport=httpx.MockTransport(handler)),
    )


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=INNER_OK)


def _inner_failure(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, text=INNER_FAILURE_BODY)


def _refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


def _dns(request: httpx.Request) -> httpx.Response:
    try:
        raise socket.gaierror(-2, "Name or service not known")
    except socket.gaierror as exc:
        raise httpx.ConnectError(str(exc), request=request) from exc


def _read_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def _connect_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectTimeout("timed out", request=request)


def test_health_ok(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["service"] == edge_api.settings.service_name
    assert "innerServiceUrl" in body


@pytest.mark.parametrize("path", ["/data1", "/data2"])
def test_success_relays_inner_body(
    path: str, client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _ok)

    r = client.get(path)

    assert r.status_code == 200
    body = r.json()
    assert list(body.keys()) == ["value", "now"]
    assert body["value"] == "hi there!"
    assert body["now"] == "2024-05-01T10:00:00.123456Z"


# -------------------------------------------------------------------
# /data1: naive relay
# -------------------------------------------------------------------
def test_data1_connection_refused_returns_generic_message(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _refused)

    r = client.get("/data1")

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "internal error: [Errno 111] Connection refused"


def test_data1_connect_timeout_is_not_mapped(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _connect_timeout)

    r = client.get("/data1")

    assert r.status_code == 500
    assert r.text == "internal error: timed out"


def test_data1_dns_failure_is_not_mapped(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_inner(monkeypatch, _dns)

    r = client.get("/data1")

    assert r.status_code == 500
    assert r.text == "internal error: [Errno -2] Name or service not known"


def test_data1_inner_error_response_is_not_mapped(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _inner_failure)

    r = client.get("/data1")

    assert r.status_code == 500
    assert r.text.startswith("internal error: Server error '500 Internal Server Error'")
    assert "processing error" not in r.text


# -------------------------------------------------------------------
# /data2: mapped relay
# -------------------------------------------------------------------
def test_data2_connection_refused_returns_mapped_message(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _refused)

    r = client.get("/data2")

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "internal error: internal service not available: data service"


def test_data2_dns_failure_returns_address_unknown(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _dns)

    r = client.get("/data2")

    assert r.status_code == 500
    assert r.text.startswith("internal error: internal service address unknown: ")
    assert r.text.endswith("Name or service not known")


def test_data2_inner_error_response_exposes_raw_body(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _inner_failure)

    r = client.get("/data2")

    assert r.status_code == 500
    assert r.text == "internal error: " + INNER_FAILURE_BODY


def test_data2_connect_timeout_returns_mapped_message(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _connect_timeout)

    r = client.get("/data2")

    assert r.status_code == 500
    assert r.text == "internal error: internal service not available: data service"


def test_data2_unmapped_error_falls_through_to_generic_message(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, _read_timeout)

    r = client.get("/data2")

    assert r.status_code == 500
    assert r.text == "internal error: timed out"


def test_data2_malformed_body_falls_through_to_generic_message(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _use_inner(monkeypatch, lambda request: httpx.Response(200, json={"value": "x"}))

    r = client.get("/data2")

    assert r.status_code == 500
    assert r.text.startswith("internal error: ")
    assert "now" in r.text


# -------------------------------------------------------------------
# Real sockets / real inner app
# -------------------------------------------------------------------
def test_unreachable_inner_service_on_real_socket(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    # Nothing listens on port 1 of the loopback interface.
    monkeypatch.setattr(edge_api, "inner_client", InnerServiceClient("http://127.0.0.1:1"))

    r1 = client.get("/data1")
    assert r1.status_code == 500
    assert r1.text.startswith("internal error: ")
    assert "internal service not available" not in r1.text

    monkeypatch.setattr(edge_api, "inner_client", InnerServiceClient("http://127.0.0.1:1"))

    r2 = client.get("/data2")
    assert r2.status_code == 500
    assert r2.text == "internal error: internal service not available: data service"


def test_edge_relays_real_inner_app(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        edge_api,
        "inner_client",
        InnerServiceClient("http://inner.test", transport=httpx.ASGITransport(app=inner_api.app)),
    )

    monkeypatch.setattr(inner_api, "producer", DataProducer(failure_probability=0.0))
    r_ok = client.get("/data2")
    assert r_ok.status_code == 200
    assert r_ok.json()["value"] == "hi there!"

    monkeypatch.setattr(inner_api, "producer", DataProducer(failure_probability=1.0))
    r_fail = client.get("/data2")
    assert r_fail.status_code == 500
    assert r_fail.text.startswith(
        "internal error: internal error in inner service: processing error\n"
    )
    assert "Traceback" in r_fail.text


def test_shutdown_closes_pooled_inner_client(monkeypatch: pytest.MonkeyPatch) -> None:
    inner = InnerServiceClient("http://inner.test", transport=httpx.MockTransport(_ok))
    monkeypatch.setattr(edge_api, "inner_client", inner)

    with TestClient(edge_api.app) as client:
        assert client.get("/data1").status_code == 200
        pooled = inner.client
        assert not pooled.is_closed

    assert pooled.is_closed
    assert inner._client is None
