from __future__ import annotations

from typing import Any

from agentline.core.errors import AgentlineError

from .envelope import RequestId, format_error

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
TASK_NOT_FOUND = -32004


class A2AError(AgentlineError):
    """A protocol-level failure that maps onto one JSON-RPC error envelope."""

    def __init__(
        self,
        code: int,
        message: str,
        machine_code: str,
        *,
        http_status: int,
        detail: str | None = None,
    ) -> None:
        super().__init__(detail or message)
        self.code = code
        self.message = message
        self.machine_code = machine_code
        self.http_status = http_status
        self.detail = detail

    def to_envelope(self, request_id: RequestId) -> dict[str, Any]:
        return format_error(request_id, self.code, self.message, self.machine_code, self.detail)


def parse_error() -> A2AError:
    return A2AError(PARSE_ERROR, "Parse error", "A2A_PARSE_ERROR", http_status=400)


def invalid_request() -> A2AError:
    return A2AError(INVALID_REQUEST, "Invalid Request", "A2A_INVALID_REQUEST", http_status=400)


def method_not_found() -> A2AError:
    return A2AError(METHOD_NOT_FOUND, "Method not found", "A2A_METHOD_NOT_FOUND", http_status=404)


def task_not_found() -> A2AError:
    return A2AError(TASK_NOT_FOUND, "Task not found", "A2A_TASK_NOT_FOUND", http_status=404)


def prompt_missing() -> A2AError:
    return A2AError(INVALID_PARAMS, "Missing prompt text", "A2A_SEMANTIC_PROMPT_MISSING", http_status=400)


def semantic_bridge_failed(detail: str) -> A2AError:
    return A2AError(
        INTERNAL_ERROR,
        "Semantic dispatch failed",
        "A2A_SEMANTIC_BRIDGE_ERROR",
        http_status=502,
        detail=detail or "semantic bridge error",
    )


def internal_error() -> A2AError:
    return A2AError(INTERNAL_ERROR, "Internal error", "A2A_INTERNAL_ERROR", http_status=500)
