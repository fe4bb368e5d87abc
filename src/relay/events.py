"""
Incoming call events and the sources that produce them.

The relay never builds payloads itself: on every tick it asks its
``CallEventSource`` for the next event, so the fixed sample used during
development can be swapped for real call data without touching the relay.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from src.stores.call_directory import CallDirectory, SubscriberProfile

INCOMING_CALL_EVENT = "incoming-call"

DEFAULT_SAMPLE_CALLER = "+91987657777"
DEFAULT_SAMPLE_NAME = "Test Caller"


@dataclass(frozen=True)
class IncomingCallEvent:
    """Value object pushed to an agent's dashboard when a call arrives."""

    caller: str
    name: str
    subscription_status: str | None = None
    dashboard_link: str | None = None
    ticket: str | None = None
    is_existing_user: bool | None = None

    @classmethod
    def from_profile(cls, caller: str, profile: SubscriberProfile) -> IncomingCallEvent:
        return cls(
            caller=caller,
            name=profile.user_name,
            subscription_status=profile.subscription_status,
            dashboard_link=profile.dashboard_link,
            ticket=profile.ticket,
            is_existing_user=profile.has_active_subscription,
        )

    def to_payload(self) -> dict[str, Any]:
        """Wire payload; optional directory fields are omitted when unset."""
        payload: dict[str, Any] = {"caller": self.caller, "name": self.name}
        optional = {
            "subscriptionStatus": self.subscription_status,
            "dashboardLink": self.dashboard_link,
            "ticket": self.ticket,
            "isExistingUser": self.is_existing_user,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


class CallEventSource(Protocol):
    """Capability the relay calls to obtain the next event to emit."""

    async def next_event(self) -> IncomingCallEvent: ...


class SampleCallSource:
    """Emits the same sample caller on every tick."""

    def __init__(self, caller: str = DEFAULT_SAMPLE_CALLER, name: str = DEFAULT_SAMPLE_NAME):
        self.caller = caller
        self.name = name

    async def next_event(self) -> IncomingCallEvent:
        return IncomingCallEvent(caller=self.caller, name=self.name)


class DirectoryCallSource:
    """
    Emits the sample caller enriched with its subscriber profile.

    The directory client is synchronous, so the lookup runs in a worker thread
    to keep other subscriptions ticking.
    """

    def __init__(self, directory: CallDirectory, caller: str = DEFAULT_SAMPLE_CALLER):
        self._directory = directory
        self.caller = caller

    async def next_event(self) -> IncomingCallEvent:
        profile = await asyncio.to_thread(self._directory.lookup_subscriber, self.caller)
        return IncomingCallEvent.from_profile(self.caller, profile)
