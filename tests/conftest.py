from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from agentline.apps.api.main import create_app
from agentline.core.config import ServerConfig, resolve_config
from agentline.core.semantic import SemanticResponder

TOKEN = "test-token"
AUTH_HEADERS = {"Authorization": f"Bearer {TOKEN}"}


def make_config(**overrides: Any) -> ServerConfig:
    return resolve_config({"host": "127.0.0.1", "port": 0, "auth_token": TOKEN}, overrides)


def rpc(method: str, params: dict[str, Any] | None = None, request_id: Any = "req-1") -> dict[str, Any]:
    payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def parse_sse(body: str) -> list[dict[str, Any]]:
    frames: list[dict[str, Any]] = []
    for block in body.split("\n\n"):
        if not block.strip():
            continue
        frame: dict[str, Any] = {}
        for line in block.splitlines():
            key, _, value = line.partition(": ")
            frame[key] = value
        frame["id"] = int(frame["id"])
        frame["data"] = json.loads(frame["data"])
        frames.append(frame)
    return frames


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "AGENTLINE_AUTH_TOKEN",
        "AGENTLINE_CONFIG_FILE",
        "AGENTLINE_SEMANTIC_MODE",
        "AGENTLINE_SEMANTIC_RESPONDER_URL",
        "AGENTLINE_LOG_TO_FILE",
        "AGENTLINE_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client_factory() -> Iterator[Callable[..., TestClient]]:
    opened: list[TestClient] = []

    def _factory(responder: SemanticResponder | None = None, **overrides: Any) -> TestClient:
        app = create_app(make_config(**overrides), responder=responder)
        client = TestClient(app, headers=AUTH_HEADERS)
        client.__enter__()
        opened.append(client)
        return client

    yield _factory
    for client in opened:
        client.__exit__(None, None, None)


@pytest.fixture
def client(client_factory: Callable[..., TestClient]) -> TestClient:
    return client_factory()
