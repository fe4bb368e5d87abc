"""
Notification Relay WebSocket
============================

Agent dashboards connect here to receive ``incoming-call`` events. Each
connection gets its own subscription, armed at connect time and torn down
when the socket closes, whichever side closes it.
"""

import contextlib
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from src.relay.envelopes import make_status_envelope
from utils.ml_logging import get_logger

from apps.callcenter.backend.api.dependencies import get_ws_relay
from apps.callcenter.backend.config import RELAY_WEBSOCKET_PATH

logger = get_logger("api.relay")

router = APIRouter(tags=["Relay"])


@router.websocket(RELAY_WEBSOCKET_PATH)
async def agent_relay(websocket: WebSocket) -> None:
    relay = get_ws_relay(websocket)
    await websocket.accept()

    if relay is None:
        logger.error("Relay not initialised; closing agent connection")
        await websocket.close(code=1011)
        return

    connection_id = uuid.uuid4().hex[:12]
    try:
        await websocket.send_json(
            make_status_envelope("Connected to call relay", connection_id=connection_id)
        )
        async with relay.subscribe(websocket, connection_id=connection_id):
            # Inbound frames are ignored; the loop only watches for disconnect.
            while True:
                await websocket.receive_text()
    except WebSocketDisconnect as exc:
        logger.debug(
            f"Agent socket closed (code={exc.code})", extra={"connection_id": connection_id}
        )
    finally:
        if websocket.client_state == WebSocketState.CONNECTED:
            with contextlib.suppress(RuntimeError):
                await websocket.close()
