from __future__ import annotations


class AgentlineError(RuntimeError):
    """Base error for agentline failures."""
