"""
Real-time notification relay for agent dashboards.

Exports:
- NotificationRelay: owner of per-connection subscriptions and broadcast
- NotificationSubscription: one connection's periodic emission timer
- IncomingCallEvent: ``incoming-call`` payload value object
- SampleCallSource / DirectoryCallSource: event sources the relay pulls from
"""

from src.relay.events import (
    INCOMING_CALL_EVENT,
    CallEventSource,
    DirectoryCallSource,
    IncomingCallEvent,
    SampleCallSource,
)
from src.relay.relay import NotificationRelay
from src.relay.subscription import EventTransport, NotificationSubscription

__all__ = [
    "INCOMING_CALL_EVENT",
    "CallEventSource",
    "DirectoryCallSource",
    "EventTransport",
    "IncomingCallEvent",
    "NotificationRelay",
    "NotificationSubscription",
    "SampleCallSource",
]
