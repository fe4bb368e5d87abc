"""
API schemas.

Pydantic request/response models for the call center HTTP surface.
"""

from .agent import AgentStatusResponse, AgentStatusUpdateRequest, OperationResult
from .call import (
    AddressListResponse,
    IncomingCallResponse,
    TicketCreateRequest,
    TicketCreateResponse,
)
from .health import HealthResponse
from .log import LogSaveRequest, LogSaveResponse
from .webrtc import VoiceTokenResponse

__all__ = [
    "AddressListResponse",
    "AgentStatusResponse",
    "AgentStatusUpdateRequest",
    "HealthResponse",
    "IncomingCallResponse",
    "LogSaveRequest",
    "LogSaveResponse",
    "OperationResult",
    "TicketCreateRequest",
    "TicketCreateResponse",
    "VoiceTokenResponse",
]
