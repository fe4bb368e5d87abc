"""
Call Endpoints
==============

Incoming call webhook, ticket creation and the subscriber address book.

The webhook only reaches the agent while the Status Register says
``online``; otherwise the telephony provider is told the call was routed
to the queue. Directory failures never fail the webhook: the caller is
treated as unrecognized instead.
"""

import asyncio

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode
from src.agent import StatusRegister
from src.enums.monitoring import PeerService, SpanAttr
from src.relay import IncomingCallEvent, NotificationRelay
from src.stores import (
    CallDirectory,
    ExternalStoreError,
    RequestLogStore,
    SubscriberProfile,
    normalize_phone_number,
)
from src.stores.log_store import DEFAULT_AGENT_ID
from utils.ml_logging import get_logger

from apps.callcenter.backend.api.dependencies import (
    get_app_config,
    get_call_directory,
    get_log_store,
    get_relay,
    get_status_register,
)
from apps.callcenter.backend.api.schemas import (
    AddressListResponse,
    IncomingCallResponse,
    TicketCreateRequest,
    TicketCreateResponse,
)
from apps.callcenter.backend.config import AppConfig

logger = get_logger("api.calls")
tracer = trace.get_tracer(__name__)

router = APIRouter(tags=["Calls"])

AGENT_OFFLINE_MESSAGE = "Agent is offline. Call routed to queue or voicemail."
AGENT_OFFLINE_STATUS = "Agent Offline"
CALL_PROCESSED_MESSAGE = "Call processed, agent notified."


async def _resolve_profile(directory: CallDirectory | None, caller: str) -> SubscriberProfile:
    if directory is None:
        logger.warning("Call directory not configured; caller treated as unrecognized")
        return SubscriberProfile.inactive(normalize_phone_number(caller), "Directory Unavailable")
    return await asyncio.to_thread(directory.lookup_subscriber, caller)


@router.get("/incoming", response_model=IncomingCallResponse, response_model_exclude_none=True)
async def incoming_call(
    from_number: str | None = Query(None, alias="From"),
    caller: str | None = Query(None),
    register: StatusRegister = Depends(get_status_register),
    directory: CallDirectory | None = Depends(get_call_directory),
    relay: NotificationRelay | None = Depends(get_relay),
    config: AppConfig = Depends(get_app_config),
) -> IncomingCallResponse:
    """
    Telephony webhook for a new inbound call.

    Offline agent: the call is not looked up nor pushed to the dashboard.
    Online agent: the caller is resolved in the call directory and the
    resulting ``incoming-call`` event is broadcast to connected dashboards.
    """
    current = register.get()
    logger.info(f"Incoming call received; agent status is '{current.value}'")

    if not register.is_online:
        logger.warning("Agent offline; call not delivered to the dashboard")
        return IncomingCallResponse(message=AGENT_OFFLINE_MESSAGE, status=AGENT_OFFLINE_STATUS)

    incoming_number = from_number or caller or config.calls.default_incoming_number

    with tracer.start_as_current_span(
        "api.calls.incoming",
        kind=SpanKind.SERVER,
        attributes={
            SpanAttr.OPERATION_NAME.value: "incoming_call",
            SpanAttr.AGENT_STATUS.value: current.value,
        },
    ) as span:
        profile = await _resolve_profile(directory, incoming_number)
        event = IncomingCallEvent.from_profile(incoming_number, profile)

        delivered = 0
        if relay is not None:
            delivered = await relay.broadcast(event)
        else:
            logger.warning("Relay not available; incoming call not pushed to dashboards")

        span.set_attributes(
            {
                SpanAttr.CALL_SUBSCRIPTION_STATUS.value: profile.subscription_status,
                SpanAttr.CALL_DELIVERED.value: delivered,
            }
        )

    return IncomingCallResponse(
        message=CALL_PROCESSED_MESSAGE,
        status=profile.subscription_status,
        redirect=profile.dashboard_link,
    )


@router.post(
    "/ticket",
    status_code=status.HTTP_201_CREATED,
    response_model=TicketCreateResponse,
)
async def create_ticket(
    body: TicketCreateRequest,
    x_agent_id: str | None = Header(None),
    store: RequestLogStore | None = Depends(get_log_store),
):
    """File the agent's notes as a ``New`` ticket in the logging store."""
    if store is None:
        logger.error("Ticket creation failed: logging store is not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Ticket system is offline. Configuration error."},
        )

    if not body.phoneNumber or not body.requestDetails:
        logger.warning("Ticket rejected: phone number or request details missing")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Missing phone number or request details."},
        )

    agent_id = x_agent_id or DEFAULT_AGENT_ID
    with tracer.start_as_current_span(
        "api.calls.ticket",
        kind=SpanKind.SERVER,
        attributes={
            SpanAttr.OPERATION_NAME.value: "create_ticket",
            SpanAttr.AGENT_ID.value: agent_id,
            SpanAttr.PEER_SERVICE.value: PeerService.LOG_STORE,
        },
    ) as span:
        try:
            row = await asyncio.to_thread(
                store.create_ticket, body.phoneNumber, body.requestDetails, agent_id=agent_id
            )
        except ExternalStoreError as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            logger.error(f"Ticket creation failed: {exc} (cause: {exc.cause!r})")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"message": "Database insertion failed."},
            )

    return TicketCreateResponse(
        message="Ticket created successfully.",
        ticket_id=row.get("id"),
        requestDetails=body.requestDetails,
    )


@router.get("/address/{user_id}", response_model=AddressListResponse)
async def get_addresses(
    user_id: str,
    directory: CallDirectory | None = Depends(get_call_directory),
):
    """List the service addresses registered for ``user_id``."""
    if directory is None:
        logger.error("Address lookup failed: call directory is not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Address directory is offline. Configuration error."},
        )

    try:
        addresses = await asyncio.to_thread(directory.list_addresses, user_id)
    except ExternalStoreError as exc:
        logger.error(f"Address lookup failed for user {user_id}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Database query failed."},
        )

    logger.info(f"Found {len(addresses)} addresses for user {user_id}")
    return AddressListResponse(message="Addresses fetched successfully.", addresses=addresses)
