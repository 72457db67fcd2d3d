from fastapi import APIRouter, Depends

from agentline.core.config import ServerConfig

from .card import build_agent_card
from .deps import get_config

router = APIRouter()


@router.get("/")
def liveness(config: ServerConfig = Depends(get_config)) -> dict[str, object]:
    return {"ok": True, "service": config.service_name}


@router.get("/.well-known/agent-card.json")
def agent_card(config: ServerConfig = Depends(get_config)) -> dict[str, object]:
    return build_agent_card(config)
