from src.tokens.voice_token import DEFAULT_TOKEN_TTL_SECONDS, VoiceToken, generate_voice_token

__all__ = ["DEFAULT_TOKEN_TTL_SECONDS", "VoiceToken", "generate_voice_token"]
