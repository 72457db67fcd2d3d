"""The ``POST /a2a`` JSON-RPC endpoint.

Every protocol failure raised by a handler is an ``A2AError`` and becomes a
JSON-RPC error envelope here; nothing escapes to the transport.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from agentline.core.config import ServerConfig
from agentline.core.logging import log_context, redact_string
from agentline.core.rpc import RPCRequest, format_result, parse_request
from agentline.core.rpc import errors as rpc_errors
from agentline.core.rpc.errors import A2AError
from agentline.core.semantic import SemanticBridgeError, SemanticResponder
from agentline.core.streaming import parse_cursor, stream_task
from agentline.core.tasks import DeferredScheduler, TaskStore, normalize_task_id

from .deps import get_config, get_deferred, get_responder, get_task_store

logger = logging.getLogger("agentline.api.a2a")

router = APIRouter()


@dataclass
class RPCContext:
    rpc: RPCRequest
    request: Request
    config: ServerConfig
    task_store: TaskStore
    deferred: DeferredScheduler
    responder: SemanticResponder


RPCHandler = Callable[[RPCContext], Awaitable[Any]]


def extract_prompt_text(params: dict[str, Any]) -> str:
    message = params.get("message")
    parts = message.get("parts") if isinstance(message, dict) else None
    if not isinstance(parts, list):
        return ""
    for part in parts:
        if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"].strip():
            return part["text"].strip()
    return ""


def _execution_mode(params: dict[str, Any]) -> object:
    metadata = params.get("metadata")
    if isinstance(metadata, dict):
        return metadata.get("executionMode")
    return None


def _complete_async_send(task_store: TaskStore, task_id: str) -> None:
    task_store.update(
        task_id,
        "succeeded",
        progress=100,
        message="completed",
        final=True,
        result={"status": "accepted", "clientOperation": "message/send", "taskId": task_id},
    )


def hydrate_stream_task(task_store: TaskStore, task_id: str) -> None:
    task = task_store.get(task_id)
    if task is None or any(event.final for event in task.events):
        return
    task_store.update(task.task_id, "running", progress=35, message="started")
    task_store.update(task.task_id, "running", progress=75, message="working")
    task_store.update(
        task.task_id,
        "succeeded",
        progress=100,
        message="completed",
        final=True,
        result={"status": "accepted", "clientOperation": "message/stream", "taskId": task.task_id},
    )


async def handle_message_send(ctx: RPCContext) -> dict[str, Any]:
    if _execution_mode(ctx.rpc.params) == "async":
        task = ctx.task_store.create("accepted")
        ctx.task_store.update(task.task_id, "running", progress=40, message="processing")
        ctx.deferred.schedule(ctx.config.async_completion_delay_ms / 1000, _complete_async_send, ctx.task_store, task.task_id)
        return {
            "status": "accepted",
            "taskId": task.task_id,
            "pollMethod": "tasks/get",
            "pollAfterMs": ctx.config.poll_after_ms,
        }

    if ctx.config.semantic_mode:
        prompt = extract_prompt_text(ctx.rpc.params)
        if not prompt:
            raise rpc_errors.prompt_missing()
        try:
            answer = await ctx.responder.respond(prompt, ctx.rpc.id)
        except SemanticBridgeError as exc:
            logger.warning("semantic_bridge_failed", extra={"extra_fields": {"error": redact_string(str(exc))}})
            raise rpc_errors.semantic_bridge_failed(str(exc)) from exc
        return {
            "status": "accepted",
            "clientOperation": "message/send",
            "message": {"role": "assistant", "parts": [{"text": answer}]},
        }

    return {"status": "accepted", "clientOperation": "message/send"}


async def handle_tasks_get(ctx: RPCContext) -> dict[str, Any]:
    task = ctx.task_store.get(normalize_task_id(ctx.rpc.params.get("taskId")))
    if task is None:
        raise rpc_errors.task_not_found()
    payload: dict[str, Any] = {
        "taskId": task.task_id,
        "status": {"state": task.state, "message": task.message, "progress": task.progress},
        "result": task.result,
    }
    if task.error is not None:
        payload["error"] = task.error
    return payload


async def handle_message_stream(ctx: RPCContext) -> Response:
    task = ctx.task_store.create("accepted")
    hydrate_stream_task(ctx.task_store, task.task_id)
    return stream_task(task, cursor=0)


async def handle_tasks_resubscribe(ctx: RPCContext) -> Response:
    task = ctx.task_store.get(normalize_task_id(ctx.rpc.params.get("taskId")))
    if task is None:
        raise rpc_errors.task_not_found()
    cursor = parse_cursor(ctx.request.headers.get("Last-Event-ID"))
    return stream_task(task, cursor=cursor)


RPC_HANDLERS: dict[str, RPCHandler] = {
    "message/send": handle_message_send,
    "message/stream": handle_message_stream,
    "tasks/get": handle_tasks_get,
    "tasks/resubscribe": handle_tasks_resubscribe,
}


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid JSON constant: {name}")


def _error_response(exc: A2AError, request_id: Any) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_envelope(request_id))


async def _dispatch(ctx: RPCContext) -> Response:
    handler = RPC_HANDLERS.get(ctx.rpc.method)
    if handler is None:
        raise rpc_errors.method_not_found()
    result = await handler(ctx)
    if isinstance(result, Response):
        return result
    return JSONResponse(status_code=200, content=format_result(ctx.rpc.id, result))


@router.post("/a2a")
async def a2a_endpoint(request: Request) -> Response:
    raw = await request.body()
    try:
        decoded = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return _error_response(rpc_errors.parse_error(), None)

    rpc = parse_request(decoded)
    if rpc is None:
        return _error_response(rpc_errors.invalid_request(), None)

    ctx = RPCContext(
        rpc=rpc,
        request=request,
        config=get_config(request),
        task_store=get_task_store(request),
        deferred=get_deferred(request),
        responder=get_responder(request),
    )
    request_id = None if rpc.id is None else str(rpc.id)
    with log_context(rpc_method=rpc.method, request_id=request_id):
        logger.info("rpc_dispatch")
        try:
            return await _dispatch(ctx)
        except A2AError as exc:
            logger.info("rpc_error", extra={"extra_fields": {"code": exc.machine_code}})
            return _error_response(exc, rpc.id)
        except Exception:
            logger.exception("rpc_internal_error")
            return _error_response(rpc_errors.internal_error(), rpc.id)
