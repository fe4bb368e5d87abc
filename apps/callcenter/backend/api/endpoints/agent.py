"""
Agent Status Endpoints
======================

Read and toggle the agent's availability. The dashboard flips this switch;
the incoming call webhook reads it to decide whether calls reach the agent.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from src.agent import InvalidStatusError, StatusRegister
from utils.ml_logging import get_logger

from apps.callcenter.backend.api.dependencies import get_status_register
from apps.callcenter.backend.api.schemas import (
    AgentStatusResponse,
    AgentStatusUpdateRequest,
    OperationResult,
)

logger = get_logger("api.agent")

router = APIRouter(tags=["Agent"])


@router.get("/status", response_model=AgentStatusResponse)
async def get_agent_status(
    register: StatusRegister = Depends(get_status_register),
) -> AgentStatusResponse:
    """Return the current agent availability."""
    current = register.get()
    logger.debug(f"Status read: {current.value}")
    return AgentStatusResponse(status=current.value)


@router.post(
    "/status",
    response_model=OperationResult,
    response_model_exclude_none=True,
    responses={400: {"model": OperationResult, "description": "Status is not 'online' or 'offline'"}},
)
async def set_agent_status(
    body: AgentStatusUpdateRequest,
    register: StatusRegister = Depends(get_status_register),
):
    """Set the agent availability to ``online`` or ``offline``."""
    try:
        register.set(body.status)
    except InvalidStatusError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Invalid status"},
        )
    return OperationResult(success=True)
