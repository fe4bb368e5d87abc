"""
Configuration Types
===================

Structured dataclass configuration objects for type-safe access.
These wrap the flat settings from settings.py into organized objects.

Usage:
    from apps.callcenter.backend.config import AppConfig

    config = AppConfig()
    print(config.relay.interval_seconds)
"""

from dataclasses import dataclass, field
from typing import Any

from .settings import (
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
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
    VOICE_TOKEN_TTL_SECONDS,
)


@dataclass
class StoreConfig:
    """Connection details for one supabase project."""

    url: str = ""
    anon_key: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def to_dict(self) -> dict[str, Any]:
        # Never expose the key itself
        return {"url": self.url, "configured": self.configured}


@dataclass
class StoresConfig:
    """Both external stores."""

    call_directory: StoreConfig = field(
        default_factory=lambda: StoreConfig(url=SUPABASE_URL, anon_key=SUPABASE_ANON_KEY)
    )
    log_store: StoreConfig = field(
        default_factory=lambda: StoreConfig(url=LOG_SUPABASE_URL, anon_key=LOG_SUPABASE_ANON_KEY)
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "call_directory": self.call_directory.to_dict(),
            "log_store": self.log_store.to_dict(),
        }


@dataclass
class RelayConfig:
    """Notification relay configuration."""

    interval_seconds: float = RELAY_INTERVAL_SECONDS
    event_source: str = RELAY_EVENT_SOURCE
    sample_caller: str = RELAY_SAMPLE_CALLER
    sample_name: str = RELAY_SAMPLE_NAME

    def to_dict(self) -> dict[str, Any]:
        return {k: getattr(self, k) for k in self.__dataclass_fields__}


@dataclass
class CallConfig:
    """Call routing and voice token configuration."""

    default_incoming_number: str = DEFAULT_INCOMING_NUMBER
    token_ttl_seconds: int = VOICE_TOKEN_TTL_SECONDS

    def to_dict(self) -> dict[str, Any]:
        return {k: getattr(self, k) for k in self.__dataclass_fields__}


@dataclass
class IdentityConfig:
    """Identity platform credential sources."""

    credentials_json: str = IDENTITY_CREDENTIALS_JSON
    credentials_file: str = IDENTITY_CREDENTIALS_FILE

    @property
    def configured(self) -> bool:
        return bool(self.credentials_json or self.credentials_file)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": "env" if self.credentials_json else ("file" if self.credentials_file else None),
            "configured": self.configured,
        }


@dataclass
class AppConfig:
    """Complete application configuration."""

    stores: StoresConfig = field(default_factory=StoresConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    calls: CallConfig = field(default_factory=CallConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    allowed_origins: list[str] = field(default_factory=lambda: list(ALLOWED_ORIGINS))
    environment: str = ENVIRONMENT
    debug: bool = DEBUG_MODE
    port: int = PORT

    def to_dict(self) -> dict[str, Any]:
        return {
            "stores": self.stores.to_dict(),
            "relay": self.relay.to_dict(),
            "calls": self.calls.to_dict(),
            "identity": self.identity.to_dict(),
            "allowed_origins": self.allowed_origins,
            "environment": self.environment,
            "debug": self.debug,
            "port": self.port,
        }
