from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentline.core.config import ServerConfig, config_from_env
from agentline.core.logging import configure_logging
from agentline.core.logging.context import log_context
from agentline.core.scheduler import TTL_SWEEPER_JOB_ID, SchedulerService, sweep_expired_tasks
from agentline.core.semantic import SemanticResponder
from agentline.core.tasks import DeferredScheduler, TaskStore

from .auth import is_request_authorized
from .routes_a2a import router as a2a_router
from .routes_meta import router as meta_router

logger = logging.getLogger("agentline.api")


def create_app(
    config: ServerConfig,
    *,
    task_store: TaskStore | None = None,
    responder: SemanticResponder | None = None,
) -> FastAPI:
    store = task_store if task_store is not None else TaskStore()
    scheduler_service = SchedulerService()
    if config.task_ttl_ms > 0:
        scheduler_service.add_interval(
            TTL_SWEEPER_JOB_ID,
            config.task_sweep_interval_s,
            sweep_expired_tasks,
            kwargs={"task_store": store, "ttl_ms": config.task_ttl_ms},
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler_service.start()
        logger.info("server_started", extra={"extra_fields": {"service": config.service_name, "url": config.base_url}})
        try:
            yield
        finally:
            app.state.deferred.shutdown()
            scheduler_service.shutdown()
            logger.info("server_stopped")

    app = FastAPI(title="Agentline A2A Server", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.task_store = store
    app.state.deferred = DeferredScheduler()
    app.state.responder = responder or SemanticResponder(
        url=config.semantic_responder_url,
        timeout_ms=config.semantic_timeout_ms,
    )
    app.state.scheduler_service = scheduler_service

    app.include_router(meta_router)
    app.include_router(a2a_router)

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code in {404, 405}:
            return Response(status_code=404)
        return await http_exception_handler(request, exc)

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        if not is_request_authorized(request, config.auth_token):
            logger.info("request_unauthorized", extra={"extra_fields": {"path": request.url.path}})
            return JSONResponse(status_code=401, content={"error": "unauthorized"})
        return await call_next(request)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
        with log_context(correlation_id=correlation_id):
            response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    return app


def run() -> None:
    try:
        config = config_from_env()
    except (ValueError, OSError) as exc:
        print(f"agentline: invalid configuration: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    log_dir = Path.home() / ".agentline" / "logs"
    configure_logging(log_dir)
    uvicorn.run(create_app(config), host=config.host, port=config.port)
