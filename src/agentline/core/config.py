"""Server configuration: a validated model plus file and environment loaders."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_SERVICE_NAME = "agentline-a2a-server"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8787, ge=0, le=65535)
    public_base_url: Optional[str] = None
    auth_token: str
    task_ttl_ms: int = 3_600_000
    task_sweep_interval_s: int = Field(default=60, ge=1)
    semantic_mode: bool = False
    semantic_responder_url: Optional[str] = None
    semantic_timeout_ms: int = Field(default=15_000, ge=1)
    async_completion_delay_ms: int = Field(default=10, ge=0)
    poll_after_ms: int = Field(default=1000, ge=0)
    service_name: str = DEFAULT_SERVICE_NAME

    @field_validator("auth_token")
    @classmethod
    def _require_token(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("auth_token is required")
        return value

    @field_validator("public_base_url", "semantic_responder_url")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def base_url(self) -> str:
        if self.public_base_url:
            return self.public_base_url.rstrip("/")
        return f"http://{self.host}:{self.port}"


def resolve_config(*sources: Mapping[str, Any] | None) -> ServerConfig:
    """Merge config mappings left to right; later non-None values win."""
    merged: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        merged.update({key: value for key, value in source.items() if value is not None})
    return ServerConfig.model_validate(merged)


def _read_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).expanduser().open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return data


def load_config(path: str | Path, overrides: Mapping[str, Any] | None = None) -> ServerConfig:
    return resolve_config(_read_yaml(path), overrides)


def _env_bool(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip().casefold() in {"1", "true", "on", "yes"}


def config_from_env() -> ServerConfig:
    env_values: dict[str, Any] = {
        "host": os.getenv("AGENTLINE_HOST"),
        "port": os.getenv("AGENTLINE_PORT"),
        "public_base_url": os.getenv("AGENTLINE_PUBLIC_BASE_URL"),
        "auth_token": os.getenv("AGENTLINE_AUTH_TOKEN"),
        "task_ttl_ms": os.getenv("AGENTLINE_TASK_TTL_MS"),
        "semantic_mode": _env_bool("AGENTLINE_SEMANTIC_MODE"),
        "semantic_responder_url": os.getenv("AGENTLINE_SEMANTIC_RESPONDER_URL"),
        "semantic_timeout_ms": os.getenv("AGENTLINE_SEMANTIC_TIMEOUT_MS"),
    }
    config_file = os.getenv("AGENTLINE_CONFIG_FILE")
    base = _read_yaml(config_file) if config_file else None
    return resolve_config(base, env_values)
