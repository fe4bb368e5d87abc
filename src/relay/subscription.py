"""
Per-connection notification subscription.

A subscription owns exactly one timer task for exactly one connection. The
timer fires every interval measured from connect time; each firing runs as
its own tick task that asks the event source for an event and pushes it to
that connection only, so a slow source never delays the next firing.
Closing the subscription cancels the timer and any tick in flight; no
emission happens after ``close()`` returns.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from opentelemetry import trace
from utils.ml_logging import get_logger

from src.enums.monitoring import SpanAttr
from src.relay.envelopes import make_event_envelope
from src.relay.events import INCOMING_CALL_EVENT, CallEventSource, IncomingCallEvent

logger = get_logger("relay.subscription")
tracer = trace.get_tracer(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


class EventTransport(Protocol):
    """Anything that can push a JSON frame to one client (e.g. a FastAPI WebSocket)."""

    async def send_json(self, data: Any) -> None: ...


class NotificationSubscription:
    """Relay state for one connected dashboard: identifier plus periodic timer."""

    def __init__(
        self,
        connection_id: str,
        transport: EventTransport,
        source: CallEventSource,
        interval_seconds: float,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.connection_id = connection_id
        self.created_at = time.time()
        self.emitted = 0
        self.failed = 0
        self._transport = transport
        self._source = source
        self._interval = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._ticks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def timer(self) -> asyncio.Task | None:
        return self._task

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active(self) -> bool:
        return not self._closed and self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the periodic timer. Must be called from a running event loop."""
        if self._closed:
            raise RuntimeError(f"Subscription {self.connection_id} is closed")
        if self._task is None:
            self._task = asyncio.create_task(
                self._run(), name=f"relay-subscription-{self.connection_id}"
            )

    async def _run(self) -> None:
        try:
            while not self._closed:
                await self._sleep(self._interval)
                if self._closed:
                    return
                tick = asyncio.create_task(
                    self._tick(), name=f"relay-tick-{self.connection_id}"
                )
                self._ticks.add(tick)
                tick.add_done_callback(self._ticks.discard)
        except asyncio.CancelledError:
            logger.debug("Subscription timer cancelled", extra={"connection_id": self.connection_id})
            raise

    async def _tick(self) -> None:
        with tracer.start_as_current_span(
            "relay.tick",
            attributes={SpanAttr.RELAY_CONNECTION_ID.value: self.connection_id},
        ):
            try:
                event = await self._source.next_event()
            except Exception as exc:
                logger.warning(
                    f"Event source failed, skipping tick: {exc}",
                    extra={"connection_id": self.connection_id},
                )
                return
            await self.deliver(event)

    async def deliver(self, event: IncomingCallEvent) -> bool:
        """
        Push ``event`` to this connection.

        Transport failures are logged and reported as ``False``; they never
        propagate to the caller or to other subscriptions.
        """
        if self._closed:
            return False

        envelope = make_event_envelope(
            INCOMING_CALL_EVENT, event.to_payload(), connection_id=self.connection_id
        )
        try:
            await self._transport.send_json(envelope)
        except Exception as exc:
            self.failed += 1
            logger.warning(
                f"Failed to deliver {INCOMING_CALL_EVENT} event: {exc}",
                extra={"connection_id": self.connection_id},
            )
            return False

        self.emitted += 1
        logger.info(
            f"Sent {INCOMING_CALL_EVENT} for {event.caller}",
            extra={"connection_id": self.connection_id, "call_subscription_status": event.subscription_status},
        )
        return True

    async def close(self) -> None:
        """Cancel the timer and any tick in flight, then wait for them. Idempotent."""
        if self._closed:
            return
        self._closed = True

        pending = [t for t in (self._task, *self._ticks) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            # Cancellation of the caller itself still propagates out of gather.
            await asyncio.gather(*pending, return_exceptions=True)

    def snapshot(self) -> dict[str, Any]:
        return {
            "connection_id": self.connection_id,
            "created_at": self.created_at,
            "emitted": self.emitted,
            "failed": self.failed,
            "active": self.active,
            "ticks_in_flight": len(self._ticks),
        }
