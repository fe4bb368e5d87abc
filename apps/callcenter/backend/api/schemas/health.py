"""
Health API schemas.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus a summary of the collaborators the backend depends on."""

    status: str = Field(..., json_schema_extra={"example": "healthy"})
    timestamp: float
    uptime_seconds: float
    agent_status: str
    relay: dict[str, Any] = Field(default_factory=dict)
    stores: dict[str, bool] = Field(default_factory=dict)
    identity: bool = False
    telemetry: bool = False
