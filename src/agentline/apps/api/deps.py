from __future__ import annotations

from fastapi import Request

from agentline.core.config import ServerConfig
from agentline.core.semantic import SemanticResponder
from agentline.core.tasks import DeferredScheduler, TaskStore


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store


def get_deferred(request: Request) -> DeferredScheduler:
    return request.app.state.deferred


def get_responder(request: Request) -> SemanticResponder:
    return request.app.state.responder
