from __future__ import annotations

import os
import sys
from typing import Any

import httpx


def _base_url() -> str:
    explicit = os.getenv("AGENTLINE_PUBLIC_BASE_URL", "").strip()
    if explicit:
        return explicit.rstrip("/")
    host = os.getenv("AGENTLINE_HOST", "127.0.0.1").strip() or "127.0.0.1"
    port = os.getenv("AGENTLINE_PORT", "8787").strip() or "8787"
    return f"http://{host}:{port}"


def _rpc(client: httpx.Client, base_url: str, token: str, method: str, params: dict[str, Any]) -> dict[str, Any]:
    response = client.post(
        f"{base_url}/a2a",
        headers={"Authorization": f"Bearer {token}"},
        json={"jsonrpc": "2.0", "id": f"smoke-{method}", "method": method, "params": params},
    )
    response.raise_for_status()
    return response.json()


def main() -> int:
    errors: list[str] = []
    base_url = _base_url()
    token = os.getenv("AGENTLINE_AUTH_TOKEN", "").strip()
    if not token:
        print("ERROR: AGENTLINE_AUTH_TOKEN is missing. Fix: export the token the server was started with.")
        return 1

    with httpx.Client(timeout=5.0) as client:
        try:
            health = client.get(f"{base_url}/", headers={"Authorization": f"Bearer {token}"})
            if health.status_code == 200 and health.json().get("ok") is True:
                print(f"OK: {base_url}/ is healthy")
            else:
                errors.append(f"GET / returned {health.status_code}. Fix: verify the token and that the server is running.")
        except httpx.HTTPError as exc:
            print(f"ERROR: server unreachable at {base_url}: {exc}. Fix: start agentline-server or set AGENTLINE_PORT.")
            return 1

        card = client.get(f"{base_url}/.well-known/agent-card.json", headers={"Authorization": f"Bearer {token}"})
        if card.status_code == 200 and card.json().get("url", "").endswith("/a2a"):
            print(f"OK: agent card served ({card.json().get('name')})")
        else:
            errors.append(f"agent card returned {card.status_code}")

        try:
            sent = _rpc(
                client,
                base_url,
                token,
                "message/send",
                {"message": {"parts": [{"kind": "text", "text": "smoke"}]}, "metadata": {"executionMode": "async"}},
            )
            task_id = (sent.get("result") or {}).get("taskId")
            if not task_id:
                errors.append(f"message/send returned no taskId: {sent}")
            else:
                print(f"OK: message/send accepted task {task_id}")
                fetched = _rpc(client, base_url, token, "tasks/get", {"taskId": task_id})
                state = ((fetched.get("result") or {}).get("status") or {}).get("state")
                if state:
                    print(f"OK: tasks/get reports state {state}")
                else:
                    errors.append(f"tasks/get failed: {fetched}")
        except httpx.HTTPError as exc:
            errors.append(f"RPC round trip failed: {exc}")

    if errors:
        for message in errors:
            print(f"ERROR: {message}")
        return 1

    print("OK: smoke check passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
