"""JSON-RPC 2.0 envelope parsing and formatting.

Parsing never raises: anything that is not a well-formed request envelope
comes back as ``None`` and the caller decides which protocol error to send.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Union

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int, float, None]


@dataclass(frozen=True)
class RPCRequest:
    id: RequestId
    method: str
    params: dict[str, Any] = field(default_factory=dict)


def _is_valid_id(value: object) -> bool:
    if value is None or isinstance(value, str):
        return True
    # bool is an int subclass but is not a JSON number
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def parse_request(raw: object) -> RPCRequest | None:
    if not isinstance(raw, dict):
        return None
    if raw.get("jsonrpc") != JSONRPC_VERSION:
        return None
    method = raw.get("method")
    if not isinstance(method, str):
        return None
    if "id" not in raw or not _is_valid_id(raw["id"]):
        return None
    params = raw.get("params")
    return RPCRequest(id=raw["id"], method=method, params=params if isinstance(params, dict) else {})


def format_result(request_id: RequestId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def format_error(
    request_id: RequestId,
    code: int,
    message: str,
    machine_code: str,
    detail: str | None = None,
) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {
            "code": code,
            "message": message,
            "data": {
                "code": machine_code,
                "detail": detail if detail else message,
            },
        },
    }
