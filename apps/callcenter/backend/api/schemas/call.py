"""
Call-related API schemas.

Pydantic schemas for the incoming call webhook, ticket creation and the
address book lookup.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IncomingCallResponse(BaseModel):
    """Answer returned to the telephony webhook."""

    message: str
    status: str = Field(
        ...,
        description="Subscription status of the caller, or 'Agent Offline'",
        json_schema_extra={"example": "Verified"},
    )
    redirect: str | None = Field(
        None,
        description="Dashboard route the agent is sent to",
        json_schema_extra={"example": "/user/dashboard/42"},
    )


class TicketCreateRequest(BaseModel):
    """Agent notes to be filed as a new ticket."""

    phoneNumber: str | None = Field(
        None, description="Caller phone number", json_schema_extra={"example": "+919876543210"}
    )
    requestDetails: str | None = Field(
        None,
        description="Free-form notes captured by the agent",
        json_schema_extra={"example": "AC not cooling, visit requested"},
    )

    model_config = ConfigDict(extra="ignore")


class TicketCreateResponse(BaseModel):
    message: str
    ticket_id: Any
    requestDetails: str


class AddressListResponse(BaseModel):
    message: str
    addresses: list[dict[str, Any]] = Field(default_factory=list)
