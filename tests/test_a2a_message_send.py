from __future__ import annotations

import time

import httpx

from agentline.core.semantic import SemanticResponder
from conftest import rpc


def _poll_state(client, task_id: str, want: str, timeout_s: float = 2.0) -> dict:
    deadline = time.monotonic() + timeout_s
    while True:
        body = client.post("/a2a", json=rpc("tasks/get", {"taskId": task_id}, request_id="poll")).json()
        if body["result"]["status"]["state"] == want or time.monotonic() > deadline:
            return body
        time.sleep(0.01)


def test_blocking_send_acknowledges_without_task(client) -> None:
    response = client.post(
        "/a2a",
        json=rpc("message/send", {"message": {"messageId": "m1", "role": "user", "parts": [{"text": "hi"}]}}, request_id="r1"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "r1"
    assert body["result"] == {"status": "accepted", "clientOperation": "message/send"}
    assert len(client.app.state.task_store) == 0


def test_async_send_then_poll_reaches_succeeded(client) -> None:
    response = client.post(
        "/a2a",
        json=rpc(
            "message/send",
            {"metadata": {"executionMode": "async"}, "message": {"parts": [{"text": "run"}]}},
            request_id="req-2",
        ),
    )

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["status"] == "accepted"
    assert result["pollMethod"] == "tasks/get"
    assert result["pollAfterMs"] == 1000
    task_id = result["taskId"]

    body = _poll_state(client, task_id, "succeeded")
    assert body["id"] == "poll"
    assert body["result"]["taskId"] == task_id
    assert body["result"]["status"] == {"state": "succeeded", "message": "completed", "progress": 100}
    assert body["result"]["result"] == {"status": "accepted", "clientOperation": "message/send", "taskId": task_id}

    events = client.app.state.task_store.get(task_id).events
    assert [(event.id, event.state, event.final) for event in events] == [
        (1, "accepted", False),
        (2, "running", False),
        (3, "succeeded", True),
    ]


def test_poll_before_deferred_completion_sees_running_snapshot(client_factory) -> None:
    client = client_factory(async_completion_delay_ms=60_000)
    task_id = client.post(
        "/a2a", json=rpc("message/send", {"metadata": {"executionMode": "async"}})
    ).json()["result"]["taskId"]

    body = client.post("/a2a", json=rpc("tasks/get", {"taskId": task_id})).json()

    assert body["result"]["status"] == {"state": "running", "message": "processing", "progress": 40}
    assert body["result"]["result"] is None
    assert client.app.state.deferred.pending == 1


def test_semantic_mode_uses_local_template_without_responder_url(client_factory) -> None:
    client = client_factory(semantic_mode=True)

    response = client.post(
        "/a2a",
        json=rpc("message/send", {"message": {"parts": [{"text": "   "}, {"kind": "data"}, {"text": "  summarize this  "}]}}),
    )

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["clientOperation"] == "message/send"
    assert result["message"]["role"] == "assistant"
    assert "- Received prompt: summarize this" in result["message"]["parts"][0]["text"]


def test_semantic_mode_requires_prompt_text(client_factory) -> None:
    client = client_factory(semantic_mode=True)

    response = client.post("/a2a", json=rpc("message/send", {"message": {"parts": [{"text": ""}]}}, request_id=11))

    assert response.status_code == 400
    body = response.json()
    assert body["id"] == 11
    assert body["error"]["code"] == -32602
    assert body["error"]["data"]["code"] == "A2A_SEMANTIC_PROMPT_MISSING"


def test_semantic_mode_forwards_prompt_to_responder(client_factory) -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request.read()
        return httpx.Response(200, request=request, json={"answer": "forty-two"})

    responder = SemanticResponder(
        url="http://responder.local/answer",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    client = client_factory(responder=responder, semantic_mode=True)

    response = client.post("/a2a", json=rpc("message/send", {"message": {"parts": [{"text": "question"}]}}, request_id="q1"))

    assert response.status_code == 200
    assert response.json()["result"]["message"]["parts"] == [{"text": "forty-two"}]
    assert b'"prompt":"question"' in seen["body"].replace(b" ", b"")
    assert b'"requestId":"q1"' in seen["body"].replace(b" ", b"")


def test_semantic_bridge_failure_is_bridged_error(client_factory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, request=request)

    responder = SemanticResponder(
        url="http://responder.local/answer",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    client = client_factory(responder=responder, semantic_mode=True)

    response = client.post("/a2a", json=rpc("message/send", {"message": {"parts": [{"text": "question"}]}}, request_id="q2"))

    assert response.status_code == 502
    body = response.json()
    assert body["id"] == "q2"
    assert body["error"]["code"] == -32603
    assert body["error"]["data"]["code"] == "A2A_SEMANTIC_BRIDGE_ERROR"
    assert "503" in body["error"]["data"]["detail"]


def test_async_mode_takes_precedence_over_semantic_mode(client_factory) -> None:
    client = client_factory(semantic_mode=True)

    response = client.post("/a2a", json=rpc("message/send", {"metadata": {"executionMode": "async"}}))

    assert response.status_code == 200
    assert response.json()["result"]["status"] == "accepted"
    assert response.json()["result"]["taskId"]
