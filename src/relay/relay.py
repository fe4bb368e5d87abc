"""
Notification Relay
==================

Pushes ``incoming-call`` events to every connected agent dashboard.

Features:
- One independent timer per connection, armed at connect time
- Scoped subscriptions: the timer is cancelled on every exit path
- Ad-hoc broadcast for calls arriving through the webhook
- Transport failures isolated to the failing connection

This is a relay, not a queue: nothing is buffered for absent clients and
there is no ordering guarantee across connections.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from utils.ml_logging import get_logger

from src.relay.events import CallEventSource, IncomingCallEvent
from src.relay.subscription import EventTransport, NotificationSubscription, SleepFn

logger = get_logger("relay")

DEFAULT_INTERVAL_SECONDS = 30.0


class NotificationRelay:
    """
    Owner of all NotificationSubscriptions.

    Simple API:
    - subscribe() - scoped subscription for one connection (async context manager)
    - open() / close() - explicit lifecycle when a scope cannot be used
    - broadcast() - push one event to every live subscription
    - stats() - subscription counts for health reporting
    - shutdown() - cancel every timer
    """

    def __init__(
        self,
        source: CallEventSource,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        *,
        sleep: SleepFn = asyncio.sleep,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.source = source
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._subscriptions: dict[str, NotificationSubscription] = {}
        self._broadcasts = 0

        logger.debug(
            f"NotificationRelay initialized: interval={interval_seconds}s, "
            f"source={type(source).__name__}"
        )

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def get(self, connection_id: str) -> NotificationSubscription | None:
        return self._subscriptions.get(connection_id)

    def open(
        self, transport: EventTransport, connection_id: str | None = None
    ) -> NotificationSubscription:
        """Create and arm a subscription for a freshly connected client."""
        connection_id = connection_id or uuid.uuid4().hex[:12]
        if connection_id in self._subscriptions:
            raise ValueError(f"Connection {connection_id} is already subscribed")

        subscription = NotificationSubscription(
            connection_id,
            transport,
            self.source,
            self.interval_seconds,
            sleep=self._sleep,
        )
        self._subscriptions[connection_id] = subscription
        subscription.start()

        logger.info(
            "Agent connected",
            extra={"connection_id": connection_id, "relay_subscriptions": self.subscription_count},
        )
        return subscription

    async def close(self, connection_id: str) -> bool:
        """Cancel and forget a subscription. Returns False if it was unknown."""
        subscription = self._subscriptions.pop(connection_id, None)
        if subscription is None:
            return False

        await subscription.close()
        logger.info(
            f"Agent disconnected after {subscription.emitted} events",
            extra={"connection_id": connection_id, "relay_subscriptions": self.subscription_count},
        )
        return True

    @asynccontextmanager
    async def subscribe(
        self, transport: EventTransport, connection_id: str | None = None
    ) -> AsyncIterator[NotificationSubscription]:
        """Subscription bound to the enclosing scope; closed on normal or abnormal exit."""
        subscription = self.open(transport, connection_id)
        try:
            yield subscription
        finally:
            await self.close(subscription.connection_id)

    async def broadcast(self, event: IncomingCallEvent) -> int:
        """Deliver ``event`` once to every live subscription; returns the delivery count."""
        subscriptions = list(self._subscriptions.values())
        self._broadcasts += 1
        if not subscriptions:
            logger.info(f"No agents connected; {event.caller} not delivered")
            return 0

        results = await asyncio.gather(*(sub.deliver(event) for sub in subscriptions))
        delivered = sum(1 for ok in results if ok)
        logger.info(f"Broadcast {event.caller} to {delivered}/{len(subscriptions)} agents")
        return delivered

    def stats(self) -> dict[str, Any]:
        return {
            "subscriptions": self.subscription_count,
            "interval_seconds": self.interval_seconds,
            "source": type(self.source).__name__,
            "broadcasts": self._broadcasts,
            "connections": [sub.snapshot() for sub in self._subscriptions.values()],
        }

    async def shutdown(self) -> None:
        """Cancel every subscription timer."""
        for connection_id in list(self._subscriptions):
            await self.close(connection_id)
        logger.debug("NotificationRelay shut down")
