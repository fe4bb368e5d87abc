"""
Azure Monitor / Application Insights telemetry configuration.

Configuration via environment variables:
- APPLICATIONINSIGHTS_CONNECTION_STRING: Required for Azure Monitor export
- DISABLE_CLOUD_TELEMETRY: Set to "true" to disable all cloud telemetry
- SERVICE_NAME / SERVICE_VERSION: Resource attributes for the Application Map
"""

from __future__ import annotations

import logging
import os
import re
import socket
import uuid
from re import Pattern

from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor

logger = logging.getLogger("utils.telemetry_config")

NOISY_LOGGERS = [
    "azure.identity",
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.monitor.opentelemetry.exporter",
    "httpx",
    "httpcore",
    "hpack",
    "uvicorn.protocols.websockets",
    "uvicorn.access",
    "websockets",
]


def suppress_noisy_loggers(level: int = logging.WARNING) -> None:
    """Set noisy third-party loggers to the given level."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


suppress_noisy_loggers()


# Relay keep-alive traffic would otherwise flood the dependency view
NOISY_SPAN_PATTERNS: list[Pattern[str]] = [
    re.compile(r".*websocket\s*(receive|send).*", re.IGNORECASE),
    re.compile(r"^relay\.tick$", re.IGNORECASE),
]


class FilteringSpanProcessor(SpanProcessor):
    """SpanProcessor that drops noisy spans before handing off to the exporter."""

    def __init__(self, next_processor: SpanProcessor):
        self._next = next_processor

    def on_start(self, span, parent_context=None) -> None:
        self._next.on_start(span, parent_context)

    def on_end(self, span: ReadableSpan) -> None:
        for pattern in NOISY_SPAN_PATTERNS:
            if pattern.match(span.name):
                return
        self._next.on_end(span)

    def shutdown(self) -> None:
        self._next.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._next.force_flush(timeout_millis)


def _get_instance_id() -> str:
    """Generate unique instance ID for Application Map visualization."""
    if instance_id := os.getenv("WEBSITE_INSTANCE_ID"):
        return instance_id[:8]
    if replica := os.getenv("CONTAINER_APP_REPLICA_NAME"):
        return replica
    try:
        return socket.gethostname()
    except OSError:
        return str(uuid.uuid4())[:8]


_azure_monitor_configured = False


def is_azure_monitor_configured() -> bool:
    """Return True if Azure Monitor was configured successfully."""
    return _azure_monitor_configured


def setup_azure_monitor(logger_name: str | None = None) -> bool:
    """
    Configure Azure Monitor / Application Insights if a connection string is available.

    Returns:
        True if configuration succeeded, False otherwise.
    """
    global _azure_monitor_configured

    if os.getenv("DISABLE_CLOUD_TELEMETRY", "false").lower() == "true":
        logger.info("Telemetry disabled (DISABLE_CLOUD_TELEMETRY=true) – skipping Azure Monitor setup")
        return False

    connection_string = os.getenv("APPLICATIONINSIGHTS_CONNECTION_STRING")
    if not connection_string:
        logger.info("APPLICATIONINSIGHTS_CONNECTION_STRING not found, skipping Azure Monitor configuration")
        return False

    if _azure_monitor_configured:
        return True

    resource_attrs = {
        "service.name": os.getenv("SERVICE_NAME", "callcenter-api"),
        "service.namespace": os.getenv("SERVICE_NAMESPACE", "callcenter-app"),
        "service.instance.id": _get_instance_id(),
    }
    if env_name := os.getenv("ENVIRONMENT"):
        resource_attrs["service.environment"] = env_name
    if service_version := os.getenv("SERVICE_VERSION"):
        resource_attrs["service.version"] = service_version

    try:
        from azure.monitor.opentelemetry import configure_azure_monitor
        from opentelemetry.sdk.resources import Resource

        configure_azure_monitor(
            resource=Resource(attributes=resource_attrs),
            logger_name=logger_name or os.getenv("AZURE_MONITOR_LOGGER_NAME", ""),
            connection_string=connection_string,
            enable_live_metrics=False,
            instrumentation_options={
                "azure_sdk": {"enabled": True},
                "fastapi": {"enabled": True},
                "requests": {"enabled": False},
                "urllib3": {"enabled": False},
                "psycopg2": {"enabled": False},
                "django": {"enabled": False},
                "flask": {"enabled": False},
            },
        )
    except ImportError:
        logger.warning("Azure Monitor OpenTelemetry not available. Install azure-monitor-opentelemetry.")
        return False
    except Exception as e:
        logger.error(f"Failed to configure Azure Monitor: {e}")
        return False

    _install_filtering_processor()
    _azure_monitor_configured = True
    logger.info("Azure Monitor configured successfully")
    return True


def _install_filtering_processor() -> None:
    """Wrap the active span processor with FilteringSpanProcessor."""
    from opentelemetry import trace as otel_trace

    provider = otel_trace.get_tracer_provider()
    if hasattr(provider, "_active_span_processor"):
        provider._active_span_processor = FilteringSpanProcessor(provider._active_span_processor)
        logger.debug("FilteringSpanProcessor installed")
