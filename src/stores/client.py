"""
Shared plumbing for the supabase-backed external stores.

Both the call directory and the logging store are separate supabase projects,
each addressed by a URL and an anon key. Every store call runs inside a CLIENT
span so the dependency shows up on the Application Map, and any SDK failure is
converted to ExternalStoreError at this boundary.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar
from urllib.parse import urlparse

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode
from supabase import Client, create_client
from utils.ml_logging import get_logger

from src.enums.monitoring import SpanAttr
from src.stores.errors import ExternalStoreError

logger = get_logger("stores.client")

_tracer = trace.get_tracer(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def create_store_client(url: str | None, key: str | None, *, label: str) -> Client | None:
    """
    Build a supabase client, or return None when the store is not configured.

    A missing URL/key pair disables the paths that need the store; it never
    stops the process.
    """
    if not url or not key:
        logger.warning(f"Missing {label} credentials; {label} features are disabled")
        return None
    try:
        client = create_client(url, key)
    except Exception as exc:
        logger.error(f"Failed to initialize {label} client: {exc}")
        return None
    logger.debug(f"{label} client initialized", extra={"store_host": _extract_host(url)})
    return client


def _extract_host(url: str | None) -> str | None:
    if not url:
        return None
    return urlparse(url).hostname


def trace_store(operation: str, table: str) -> Callable[[F], F]:
    """
    Decorator for store methods: CLIENT span plus error conversion.

    The decorated method's instance must expose ``peer_service`` and
    ``server_address`` attributes.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(self, *args, **kwargs) -> Any:
            with _tracer.start_as_current_span(
                f"{self.peer_service}.{operation}",
                kind=SpanKind.CLIENT,
                attributes={
                    SpanAttr.PEER_SERVICE.value: self.peer_service,
                    SpanAttr.DB_SYSTEM.value: "postgresql",
                    SpanAttr.DB_OPERATION.value: operation,
                    SpanAttr.DB_NAME.value: table,
                    SpanAttr.SERVER_ADDRESS.value: self.server_address or "supabase",
                },
            ) as span:
                start_time = time.perf_counter()
                try:
                    result = func(self, *args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except ExternalStoreError as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.set_attribute(SpanAttr.ERROR_TYPE.value, type(e).__name__)
                    raise
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.set_attribute(SpanAttr.ERROR_TYPE.value, type(e).__name__)
                    span.set_attribute(SpanAttr.ERROR_MESSAGE.value, str(e))
                    logger.error(f"{self.peer_service} {operation} on '{table}' failed: {e}")
                    raise ExternalStoreError(f"{operation} on '{table}' failed", cause=e) from e
                finally:
                    duration_ms = (time.perf_counter() - start_time) * 1000
                    span.set_attribute(SpanAttr.DB_OPERATION_DURATION_MS.value, duration_ms)

        return wrapper  # type: ignore

    return decorator
