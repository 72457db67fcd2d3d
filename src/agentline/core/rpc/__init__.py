from .envelope import RPCRequest, format_error, format_result, parse_request
from .errors import A2AError

__all__ = ["RPCRequest", "parse_request", "format_result", "format_error", "A2AError"]
