"""
Request-scoped access to the shared objects created during startup.

Everything lives on ``app.state`` (populated by the lifespan in ``main.py``)
and is handed to endpoints through ``Depends`` so tests can build a bare app
with dummy collaborators.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, WebSocket, status
from src.agent import StatusRegister
from src.relay import NotificationRelay
from src.stores import CallDirectory, RequestLogStore

from apps.callcenter.backend.config import AppConfig


def get_status_register(request: Request) -> StatusRegister:
    register = getattr(request.app.state, "status_register", None)
    if register is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Status register not initialised",
        )
    return register


def get_relay(request: Request) -> NotificationRelay | None:
    """The relay may be absent (e.g. during startup); callers skip the broadcast."""
    return getattr(request.app.state, "relay", None)


def get_ws_relay(websocket: WebSocket) -> NotificationRelay | None:
    return getattr(websocket.app.state, "relay", None)


def get_call_directory(request: Request) -> CallDirectory | None:
    """The call directory is optional; ``None`` means it is not configured."""
    return getattr(request.app.state, "call_directory", None)


def get_log_store(request: Request) -> RequestLogStore | None:
    """``None`` means the logging store is not configured; the endpoint answers 500."""
    return getattr(request.app.state, "log_store", None)


def get_app_config(request: Request) -> AppConfig:
    config = getattr(request.app.state, "config", None)
    if config is None:
        config = AppConfig()
        request.app.state.config = config
    return config
