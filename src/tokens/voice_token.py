"""
WebRTC voice token issuance.

Placeholder issuer: the token is an opaque string derived from the agent id.
Swap ``generate_voice_token`` for a provider-backed implementation without
changing the endpoint contract.
"""

from dataclasses import dataclass

DEFAULT_TOKEN_TTL_SECONDS = 3600
TOKEN_PREFIX = "dummy-webrtc-token-"


@dataclass(frozen=True)
class VoiceToken:
    token: str
    expires_in: int


def generate_voice_token(agent_id: str, ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS) -> VoiceToken:
    return VoiceToken(token=f"{TOKEN_PREFIX}{agent_id}", expires_in=ttl_seconds)
