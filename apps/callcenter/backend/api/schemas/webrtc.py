from pydantic import BaseModel, Field


class VoiceTokenResponse(BaseModel):
    """Opaque WebRTC token for the agent's softphone."""

    token: str = Field(..., json_schema_extra={"example": "dummy-webrtc-token-AGENT_001"})
    expiresIn: int = Field(..., description="Token lifetime in seconds", json_schema_extra={"example": 3600})
