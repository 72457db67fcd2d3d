from __future__ import annotations

from agentline.core.errors import AgentlineError


class AgentlineHTTPError(AgentlineError):
    """Base error for shared HTTP client operations."""


class AgentlineHTTPStatusError(AgentlineHTTPError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AgentlineHTTPNetworkError(AgentlineHTTPError):
    """Raised when request retries are exhausted for transport errors."""
