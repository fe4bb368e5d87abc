"""
Health Endpoints
================

Liveness check plus a summary of what the backend is wired to.
Never fails: missing collaborators are reported, not raised.
"""

import time

from fastapi import APIRouter, Request
from utils.ml_logging import get_logger
from utils.telemetry_config import is_azure_monitor_configured

from apps.callcenter.backend.api.schemas import HealthResponse

logger = get_logger("api.health")

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    state = request.app.state
    now = time.time()
    started_at = getattr(state, "started_at", now)

    register = getattr(state, "status_register", None)
    relay = getattr(state, "relay", None)
    relay_stats = {}
    if relay is not None:
        stats = relay.stats()
        relay_stats = {
            "subscriptions": stats["subscriptions"],
            "interval_seconds": stats["interval_seconds"],
            "source": stats["source"],
            "broadcasts": stats["broadcasts"],
            "connections": stats["connections"],
        }

    return HealthResponse(
        status="healthy",
        timestamp=now,
        uptime_seconds=round(now - started_at, 2),
        agent_status=register.get().value if register is not None else "unknown",
        relay=relay_stats,
        stores={
            "call_directory": getattr(state, "call_directory", None) is not None,
            "log_store": getattr(state, "log_store", None) is not None,
        },
        identity=getattr(state, "credential", None) is not None,
        telemetry=is_azure_monitor_configured(),
    )
