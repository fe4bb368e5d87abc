"""
Agent status API schemas.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AgentStatusResponse(BaseModel):
    """Current availability of the agent."""

    status: Literal["online", "offline"] = Field(
        ..., description="Agent availability", json_schema_extra={"example": "offline"}
    )


class AgentStatusUpdateRequest(BaseModel):
    """
    Status change requested by the dashboard.

    ``status`` is deliberately untyped so that a wrong value is answered with
    the same ``Invalid status`` message as an unknown string.
    """

    status: Any = Field(
        None,
        description="New availability, 'online' or 'offline'",
        json_schema_extra={"example": "online"},
    )

    model_config = ConfigDict(extra="ignore")


class OperationResult(BaseModel):
    """Generic success/failure envelope."""

    success: bool
    message: str | None = None
