"""
Request Log Endpoints
=====================

Persist agent notes to the dedicated logging store.
"""

import asyncio

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode
from src.enums.monitoring import PeerService, SpanAttr
from src.stores import ExternalStoreError, RequestLogStore
from utils.ml_logging import get_logger

from apps.callcenter.backend.api.dependencies import get_log_store
from apps.callcenter.backend.api.schemas import LogSaveRequest, LogSaveResponse, OperationResult

logger = get_logger("api.logs")
tracer = trace.get_tracer(__name__)

router = APIRouter(tags=["Logs"])


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@router.post(
    "/save",
    response_model=LogSaveResponse,
    responses={
        400: {"model": OperationResult, "description": "Phone number or notes missing"},
        500: {"model": OperationResult, "description": "Logging store unavailable"},
    },
)
async def save_request_log(
    body: LogSaveRequest,
    store: RequestLogStore | None = Depends(get_log_store),
):
    """
    Save a request log.

    ``phone`` and ``notes`` are required; ``agentName`` defaults to ``System``.
    Nothing is written when validation fails.
    """
    if not body.phone or not body.notes:
        logger.warning("Log save rejected: phone or notes missing")
        return _failure(status.HTTP_400_BAD_REQUEST, "Phone number and notes are required.")

    if store is None:
        logger.error("Log save failed: logging store is not configured")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Logging store is not configured.")

    with tracer.start_as_current_span(
        "api.logs.save",
        kind=SpanKind.SERVER,
        attributes={
            SpanAttr.OPERATION_NAME.value: "save_request_log",
            SpanAttr.PEER_SERVICE.value: PeerService.LOG_STORE,
        },
    ) as span:
        try:
            data = await asyncio.to_thread(
                store.save_request_log,
                body.phone,
                body.notes,
                category=body.category,
                agent_name=body.agentName,
            )
        except ExternalStoreError as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            logger.error(f"Log save failed: {exc} (cause: {exc.cause!r})")
            return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database insertion failed.")

    return LogSaveResponse(success=True, message="Log saved successfully", data=data)
