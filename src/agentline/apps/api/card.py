from __future__ import annotations

from agentline.core.config import ServerConfig

A2A_PROTOCOL_VERSION = "0.3"
SUPPORTED_METHODS = ["message/send", "message/stream", "tasks/get", "tasks/resubscribe"]
CAPABILITIES = ["jsonrpc", "request-response", "task-polling", "streaming"]


def build_agent_card(config: ServerConfig) -> dict[str, object]:
    return {
        "protocol": "a2a",
        "protocolVersion": A2A_PROTOCOL_VERSION,
        "name": config.service_name,
        "url": f"{config.base_url}/a2a",
        "authentication": {"schemes": ["bearer"]},
        "capabilities": list(CAPABILITIES),
        "profiles": ["standards"],
        "methods": list(SUPPORTED_METHODS),
    }
