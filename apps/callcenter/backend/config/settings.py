"""
Application Settings
====================

All environment-loaded configuration in one place, organized by domain.
This is the single source of truth for runtime configuration.

Loading Order:
    1. Load .env.local (if exists) - local development overrides
    2. Environment variables (container/cloud deployments)

Usage:
    from apps.callcenter.backend.config import RELAY_INTERVAL_SECONDS
"""

import os
import sys
from pathlib import Path

# ==============================================================================
# LOAD .env.local FILE (FIRST PRIORITY FOR LOCAL DEVELOPMENT)
# ==============================================================================
# Variables already set in the environment are NOT overridden.


def _load_dotenv_local():
    """
    Load .env.local file if it exists.

    Search order:
    1. apps/callcenter/backend/.env.local (app-specific)
    2. Project root .env.local
    3. Project root .env (fallback)
    """
    from dotenv import load_dotenv

    backend_dir = Path(__file__).parent.parent  # apps/callcenter/backend
    project_root = backend_dir.parent.parent.parent

    env_files = [
        backend_dir / ".env.local",
        project_root / ".env.local",
        project_root / ".env",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)
            break


_load_dotenv_local()


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _env_bool(key: str, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes", "on")


def _env_int(key: str, default: int) -> int:
    """Parse integer from environment variable."""
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float) -> float:
    """Parse float from environment variable."""
    return float(os.getenv(key, str(default)))


def _env_list(key: str, default: str = "", sep: str = ",") -> list[str]:
    """Parse list from comma-separated environment variable."""
    raw = os.getenv(key, default)
    return [item.strip() for item in raw.split(sep) if item.strip()]


# ==============================================================================
# EXTERNAL STORES (supabase)
# ==============================================================================

# Call directory: AllowedNumber / User / Address tables
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")

# Logging store: request_logs / tickets tables
LOG_SUPABASE_URL: str = os.getenv("LOG_SUPABASE_URL", "")
LOG_SUPABASE_ANON_KEY: str = os.getenv("LOG_SUPABASE_ANON_KEY", "")


# ==============================================================================
# IDENTITY PLATFORM
# ==============================================================================

# One of these must be set or the process refuses to start
IDENTITY_CREDENTIALS_JSON: str = os.getenv("IDENTITY_CREDENTIALS_JSON", "")
IDENTITY_CREDENTIALS_FILE: str = os.getenv("IDENTITY_CREDENTIALS_FILE", "")


# ==============================================================================
# NOTIFICATION RELAY
# ==============================================================================

RELAY_INTERVAL_SECONDS: float = _env_float("RELAY_INTERVAL_SECONDS", 30.0)
RELAY_EVENT_SOURCE: str = os.getenv("RELAY_EVENT_SOURCE", "sample").lower()
RELAY_SAMPLE_CALLER: str = os.getenv("RELAY_SAMPLE_CALLER", "+91987657777")
RELAY_SAMPLE_NAME: str = os.getenv("RELAY_SAMPLE_NAME", "Test Caller")
RELAY_WEBSOCKET_PATH: str = os.getenv("RELAY_WEBSOCKET_PATH", "/ws/agent")


# ==============================================================================
# CALL ROUTING & TOKENS
# ==============================================================================

DEFAULT_INCOMING_NUMBER: str = os.getenv("DEFAULT_INCOMING_NUMBER", "+911234567890")
VOICE_TOKEN_TTL_SECONDS: int = _env_int("VOICE_TOKEN_TTL_SECONDS", 3600)


# ==============================================================================
# APPLICATION RUNTIME
# ==============================================================================

DEBUG_MODE: bool = _env_bool("DEBUG", False)
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
PORT: int = _env_int("PORT", 5000)
ALLOWED_ORIGINS: list[str] = _env_list("ALLOWED_ORIGINS", "*")


# ==============================================================================
# VALIDATION
# ==============================================================================

_VALID_EVENT_SOURCES = ("sample", "directory")


def validate_settings() -> dict:
    """
    Validate current settings and return validation results.

    Returns:
        Dict with 'valid' (bool), 'issues' (list), 'warnings' (list), 'settings_count' (int)
    """
    issues = []
    warnings = []

    if RELAY_INTERVAL_SECONDS <= 0:
        issues.append("RELAY_INTERVAL_SECONDS must be positive")

    if RELAY_EVENT_SOURCE not in _VALID_EVENT_SOURCES:
        issues.append(
            f"RELAY_EVENT_SOURCE must be one of {', '.join(_VALID_EVENT_SOURCES)}"
        )
    elif RELAY_EVENT_SOURCE == "directory" and not (SUPABASE_URL and SUPABASE_ANON_KEY):
        warnings.append("RELAY_EVENT_SOURCE=directory without call directory credentials")

    if not (IDENTITY_CREDENTIALS_JSON or IDENTITY_CREDENTIALS_FILE):
        issues.append("IDENTITY_CREDENTIALS_JSON or IDENTITY_CREDENTIALS_FILE is required")

    if not (LOG_SUPABASE_URL and LOG_SUPABASE_ANON_KEY):
        warnings.append("Logging store not configured; log and ticket saving disabled")

    if not (SUPABASE_URL and SUPABASE_ANON_KEY):
        warnings.append("Call directory not configured; callers resolve as unrecognized")

    if VOICE_TOKEN_TTL_SECONDS <= 0:
        issues.append("VOICE_TOKEN_TTL_SECONDS must be positive")

    current_module = sys.modules[__name__]
    settings_count = len(
        [name for name in dir(current_module) if name.isupper() and not name.startswith("_")]
    )

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings,
        "settings_count": settings_count,
    }
