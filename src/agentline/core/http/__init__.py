from .client import build_http_client, request_with_retry
from .errors import AgentlineHTTPError, AgentlineHTTPNetworkError, AgentlineHTTPStatusError

__all__ = [
    "build_http_client",
    "request_with_retry",
    "AgentlineHTTPError",
    "AgentlineHTTPNetworkError",
    "AgentlineHTTPStatusError",
]
