"""
Configuration Package
====================

Centralized configuration for the call center backend.

Structure:
  - settings.py   : All environment-loaded settings (flat, organized by domain)
  - types.py      : Dataclass config objects for structured access
  - __init__.py   : This file (exports everything)

Usage:
    # Direct settings access
    from apps.callcenter.backend.config import RELAY_INTERVAL_SECONDS

    # Structured config object
    from apps.callcenter.backend.config import AppConfig
    config = AppConfig()
    print(config.relay.interval_seconds)

    # Validation
    from apps.callcenter.backend.config import validate_settings
    result = validate_settings()
"""

# =============================================================================
# SETTINGS - All environment-loaded configuration
# =============================================================================
from .settings import (  # Stores; Identity; Relay; Calls; Runtime; Validation
    ALLOWED_ORIGINS,
    DEBUG_MODE,
    DEFAULT_INCOMING_NUMBER,
    ENVIRONMENT,
    IDENTITY_CREDENTIALS_FILE,
    IDENTITY_CREDENTIALS_JSON,
    LOG_SUPABASE_ANON_KEY,
    LOG_SUPABASE_URL,
    PORT,
    RELAY_EVENT_SOURCE,
    RELAY_INTERVAL_SECONDS,
    RELAY_SAMPLE_CALLER,
    RELAY_SAMPLE_NAME,
    RELAY_WEBSOCKET_PATH,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
    VOICE_TOKEN_TTL_SECONDS,
    validate_settings,
)

# =============================================================================
# TYPES - Structured configuration objects
# =============================================================================
from .types import (
    AppConfig,
    CallConfig,
    IdentityConfig,
    RelayConfig,
    StoreConfig,
    StoresConfig,
)

# =============================================================================
# EXPORTS
# =============================================================================
__all__ = [
    # Config objects
    "AppConfig",
    "CallConfig",
    "IdentityConfig",
    "RelayConfig",
    "StoreConfig",
    "StoresConfig",
    # Validation
    "validate_settings",
    # Settings (alphabetical)
    "ALLOWED_ORIGINS",
    "DEBUG_MODE",
    "DEFAULT_INCOMING_NUMBER",
    "ENVIRONMENT",
    "IDENTITY_CREDENTIALS_FILE",
    "IDENTITY_CREDENTIALS_JSON",
    "LOG_SUPABASE_ANON_KEY",
    "LOG_SUPABASE_URL",
    "PORT",
    "RELAY_EVENT_SOURCE",
    "RELAY_INTERVAL_SECONDS",
    "RELAY_SAMPLE_CALLER",
    "RELAY_SAMPLE_NAME",
    "RELAY_WEBSOCKET_PATH",
    "SUPABASE_ANON_KEY",
    "SUPABASE_URL",
    "VOICE_TOKEN_TTL_SECONDS",
]
