"""
Request log API schemas.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LogSaveRequest(BaseModel):
    """
    Request log submitted from the agent dashboard.

    ``phone`` and ``notes`` are required by the endpoint, but are optional
    here so their absence is reported with the endpoint's own message.
    """

    phone: str | None = Field(None, json_schema_extra={"example": "9876543210"})
    notes: str | None = Field(None, json_schema_extra={"example": "called back"})
    category: str | None = Field(None, json_schema_extra={"example": "billing"})
    agentName: str | None = Field(
        None, description="Defaults to 'System' when omitted", json_schema_extra={"example": "Asha"}
    )

    model_config = ConfigDict(extra="ignore")


class LogSaveResponse(BaseModel):
    success: bool
    message: str
    data: list[dict[str, Any]] = Field(default_factory=list)
