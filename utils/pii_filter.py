"""
PII filtering utilities for logs and telemetry.

Caller phone numbers and agent emails flow through almost every log line in
the call routing path; this module scrubs them before records leave the
process.

Configuration via environment variables:
- TELEMETRY_PII_SCRUBBING_ENABLED: Enable/disable PII scrubbing (default: true)
- TELEMETRY_PII_SCRUB_PHONE_NUMBERS: Scrub phone numbers (default: true)
- TELEMETRY_PII_SCRUB_EMAILS: Scrub email addresses (default: true)
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from re import Pattern
from typing import Any

# Each tuple: (pattern, replacement, pii type)
_PII_PATTERNS: list[tuple[Pattern[str], str, str]] = [
    # International or national numbers, 10-15 digits with optional separators
    (
        re.compile(r"(?<![\w-])\+?\d(?:[-.\s]?\d){9,14}\b"),
        "[PHONE_REDACTED]",
        "phone_number",
    ),
    (
        re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        "[EMAIL_REDACTED]",
        "email",
    ),
]

# Attribute names whose value is replaced entirely
REDACT_ATTRIBUTE_NAMES = frozenset(
    ["password", "secret", "credential", "token", "api_key", "anon_key", "authorization"]
)


@dataclass
class PIIScrubberConfig:
    """Configuration for PII scrubbing behavior."""

    enabled: bool = True
    scrub_phone_numbers: bool = True
    scrub_emails: bool = True

    @classmethod
    def from_env(cls) -> PIIScrubberConfig:
        def _bool_env(key: str, default: bool) -> bool:
            return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

        return cls(
            enabled=_bool_env("TELEMETRY_PII_SCRUBBING_ENABLED", True),
            scrub_phone_numbers=_bool_env("TELEMETRY_PII_SCRUB_PHONE_NUMBERS", True),
            scrub_emails=_bool_env("TELEMETRY_PII_SCRUB_EMAILS", True),
        )


class PIIScrubber:
    """Scrubs PII from strings and attribute dictionaries."""

    def __init__(self, config: PIIScrubberConfig | None = None):
        self.config = config or PIIScrubberConfig.from_env()
        self._active_patterns = self._build_active_patterns()

    def _build_active_patterns(self) -> list[tuple[Pattern[str], str]]:
        if not self.config.enabled:
            return []

        pattern_flags = {
            "phone_number": self.config.scrub_phone_numbers,
            "email": self.config.scrub_emails,
        }
        return [
            (pattern, replacement)
            for pattern, replacement, pii_type in _PII_PATTERNS
            if pattern_flags.get(pii_type, True)
        ]

    def scrub_string(self, value: str) -> str:
        if not self.config.enabled or not value:
            return value

        result = value
        for pattern, replacement in self._active_patterns:
            result = pattern.sub(replacement, result)
        return result

    def scrub_attribute_value(self, name: str, value: Any) -> Any:
        if not self.config.enabled:
            return value

        name_lower = name.lower()
        if any(redact_name in name_lower for redact_name in REDACT_ATTRIBUTE_NAMES):
            return "[REDACTED]"
        if isinstance(value, str):
            return self.scrub_string(value)
        return value

    def scrub_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        if not self.config.enabled:
            return data
        return {key: self.scrub_attribute_value(key, value) for key, value in data.items()}


_default_scrubber: PIIScrubber | None = None


def get_pii_scrubber() -> PIIScrubber:
    """Get the default PII scrubber instance (lazily initialized)."""
    global _default_scrubber
    if _default_scrubber is None:
        _default_scrubber = PIIScrubber()
    return _default_scrubber
