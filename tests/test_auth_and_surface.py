from __future__ import annotations

from fastapi.testclient import TestClient

from agentline.apps.api.main import create_app
from conftest import make_config, rpc


def test_rejects_unauthorized_request_on_every_path() -> None:
    with TestClient(create_app(make_config())) as client:
        for method, path in (("GET", "/"), ("GET", "/.well-known/agent-card.json"), ("POST", "/a2a"), ("GET", "/nope")):
            response = client.request(method, path)
            assert response.status_code == 401
            assert response.json() == {"error": "unauthorized"}


def test_rejects_wrong_or_malformed_credentials() -> None:
    with TestClient(create_app(make_config())) as client:
        for header in ("Bearer wrong-token", "test-token", "bearer test-token", "Bearer  test-token"):
            response = client.post("/a2a", json=rpc("message/send"), headers={"Authorization": header})
            assert response.status_code == 401


def test_liveness_payload(client) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "agentline-a2a-server"}


def test_returns_standards_agent_card(client_factory) -> None:
    client = client_factory(public_base_url="http://agent.example:9000/")
    response = client.get("/.well-known/agent-card.json")

    assert response.status_code == 200
    body = response.json()
    assert body["protocol"] == "a2a"
    assert body["protocolVersion"] == "0.3"
    assert body["url"] == "http://agent.example:9000/a2a"
    assert body["authentication"] == {"schemes": ["bearer"]}
    assert body["profiles"] == ["standards"]
    assert body["methods"] == ["message/send", "message/stream", "tasks/get", "tasks/resubscribe"]


def test_unknown_routes_are_empty_not_found(client) -> None:
    for method, path in (("GET", "/missing"), ("GET", "/a2a"), ("POST", "/"), ("DELETE", "/a2a")):
        response = client.request(method, path)
        assert response.status_code == 404
        assert response.content == b""


def test_correlation_id_is_echoed(client) -> None:
    response = client.get("/", headers={"X-Correlation-ID": "corr-123"})
    assert response.headers["X-Correlation-ID"] == "corr-123"
    assert client.get("/").headers.get("X-Correlation-ID")
