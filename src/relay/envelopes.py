"""
WebSocket message envelopes for the agent notification channel.

Every frame pushed to a dashboard shares one shape so the frontend can
dispatch on ``event`` without inspecting the payload.
"""

from datetime import UTC, datetime
from typing import Any, Literal

EnvelopeType = Literal["event", "status", "error"]
TopicType = Literal["agent", "system"]
SenderType = Literal["System", "Relay"]


def _utc_now_iso() -> str:
    """Return the current UTC timestamp in ISO-8601 format."""

    return datetime.now(UTC).isoformat()


def make_envelope(
    *,
    etype: EnvelopeType,
    event: str,
    payload: dict[str, Any],
    topic: TopicType = "agent",
    sender: SenderType = "Relay",
    connection_id: str | None = None,
) -> dict[str, Any]:
    """Build standard WebSocket message envelope."""
    return {
        "type": etype,
        "event": event,
        "topic": topic,
        "sender": sender,
        "connection_id": connection_id,
        "ts": _utc_now_iso(),
        "payload": payload,
    }


def make_event_envelope(
    event_type: str,
    event_data: dict[str, Any],
    *,
    connection_id: str | None = None,
) -> dict[str, Any]:
    """Create an agent-topic event envelope (e.g. ``incoming-call``)."""
    return make_envelope(
        etype="event",
        event=event_type,
        payload=dict(event_data or {}),
        connection_id=connection_id,
    )


def make_status_envelope(
    message: str,
    *,
    connection_id: str | None = None,
) -> dict[str, Any]:
    """Create a system status envelope, sent once when a dashboard connects."""
    return make_envelope(
        etype="status",
        event="connected",
        payload={"message": message},
        topic="system",
        sender="System",
        connection_id=connection_id,
    )
