from fastapi import APIRouter, Depends, Query
from src.tokens import generate_voice_token
from utils.ml_logging import get_logger

from apps.callcenter.backend.api.dependencies import get_app_config
from apps.callcenter.backend.api.schemas import VoiceTokenResponse
from apps.callcenter.backend.config import AppConfig

logger = get_logger("api.webrtc")

ANONYMOUS_AGENT_ID = "anonymous"

router = APIRouter(tags=["WebRTC"])


@router.get("/token", response_model=VoiceTokenResponse)
async def get_voice_token(
    agent_id: str = Query(ANONYMOUS_AGENT_ID, alias="agentId"),
    config: AppConfig = Depends(get_app_config),
) -> VoiceTokenResponse:
    """Issue a WebRTC token for the agent's softphone."""
    token = generate_voice_token(agent_id, ttl_seconds=config.calls.token_ttl_seconds)
    logger.info(f"Issued voice token for agent {agent_id}")
    return VoiceTokenResponse(token=token.token, expiresIn=token.expires_in)
