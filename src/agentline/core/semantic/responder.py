from __future__ import annotations

import asyncio

import httpx

from agentline.core.errors import AgentlineError
from agentline.core.http import AgentlineHTTPError, request_with_retry

_TEXT_FIELDS = ("text", "answer", "result")


class SemanticBridgeError(AgentlineError):
    """Raised when the semantic responder cannot produce an answer."""


def local_semantic_response(prompt: str) -> str:
    return "\n".join(
        [
            "Agentline response:",
            f"- Received prompt: {prompt}",
            "- A2A standards methods are available on this host.",
            "- Semantic bridge path is active; returning assistant content for verification.",
        ]
    )


def _extract_text(payload: object) -> str | None:
    if not isinstance(payload, dict):
        return None
    for key in _TEXT_FIELDS:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class SemanticResponder:
    """Turns a prompt into assistant text through an external responder.

    Without a URL the answer comes from a fixed local template, which keeps
    local runs deterministic.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout_ms: int = 15_000,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url or None
        self.timeout_s = max(1, int(timeout_ms)) / 1000
        self._client = client

    @property
    def remote(self) -> bool:
        return self.url is not None

    async def respond(self, prompt: str, request_id: str | int | float | None) -> str:
        if self.url is None:
            return local_semantic_response(prompt)

        try:
            response = await asyncio.wait_for(
                request_with_retry(
                    "POST",
                    self.url,
                    headers={"Content-Type": "application/json"},
                    json={"prompt": prompt, "requestId": request_id},
                    timeout_override=self.timeout_s,
                    retries=0,
                    redact_url=True,
                    client=self._client,
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise SemanticBridgeError(f"semantic responder timed out after {int(self.timeout_s * 1000)}ms") from exc
        except AgentlineHTTPError as exc:
            raise SemanticBridgeError(str(exc)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SemanticBridgeError("semantic responder returned invalid JSON") from exc

        text = _extract_text(payload)
        if text is None:
            raise SemanticBridgeError("semantic responder returned no text")
        return text
