import asyncio

import pytest
from src.relay import (
    INCOMING_CALL_EVENT,
    IncomingCallEvent,
    NotificationRelay,
    SampleCallSource,
)

INTERVAL = 30.0


@pytest.fixture
def relay(clock):
    return NotificationRelay(SampleCallSource(), INTERVAL, sleep=clock.sleep)


async def test_connection_open_for_90_seconds_receives_three_events(
    relay, clock, recording_transport_factory
):
    transport = recording_transport_factory()
    relay.open(transport, connection_id="agent-a")

    await clock.advance(89)
    assert len(transport.events()) == 2

    await clock.advance(1)
    events = transport.events()

    assert len(events) == 3
    assert all(frame["type"] == "event" for frame in events)
    assert all(frame["connection_id"] == "agent-a" for frame in events)
    assert events[0]["payload"] == {"caller": "+91987657777", "name": "Test Caller"}

    await relay.shutdown()


async def test_connection_closed_after_10_seconds_receives_nothing(
    relay, clock, recording_transport_factory
):
    transport = recording_transport_factory()
    subscription = relay.open(transport, connection_id="agent-a")

    await clock.advance(10)
    assert await relay.close("agent-a") is True

    assert subscription.closed
    assert subscription.timer.cancelled()
    assert relay.subscription_count == 0

    await clock.advance(120)
    assert transport.sent == []
    assert subscription.emitted == 0


async def test_connections_have_independent_cadence(relay, clock, recording_transport_factory):
    first = recording_transport_factory()
    second = recording_transport_factory()

    relay.open(first, connection_id="agent-a")  # t=0
    await clock.advance(15)
    relay.open(second, connection_id="agent-b")  # t=15

    await clock.advance(45)  # t=60: a fired at 30, 60; b at 45
    assert len(first.events()) == 2
    assert len(second.events()) == 1

    await relay.close("agent-a")
    await clock.advance(30)  # t=90: b fires at 75, a stays silent

    assert len(first.events()) == 2
    assert len(second.events()) == 2
    assert {frame["connection_id"] for frame in second.events()} == {"agent-b"}

    await relay.shutdown()


async def test_broken_transport_does_not_affect_other_subscriptions(
    relay, clock, recording_transport_factory, broken_transport_factory
):
    healthy = recording_transport_factory()
    broken = broken_transport_factory()

    relay.open(healthy, connection_id="healthy")
    broken_subscription = relay.open(broken, connection_id="broken")

    await clock.advance(60)

    assert len(healthy.events()) == 2
    assert broken.attempts == 2
    assert broken_subscription.failed == 2
    # The broken subscription stays armed until its connection is closed
    assert broken_subscription.active

    await relay.shutdown()


async def test_failing_source_skips_tick(clock, recording_transport_factory):
    class FlakySource:
        def __init__(self):
            self.calls = 0

        async def next_event(self):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("directory unavailable")
            return IncomingCallEvent(caller="+15550001111", name="Flaky")

    source = FlakySource()
    relay = NotificationRelay(source, INTERVAL, sleep=clock.sleep)
    transport = recording_transport_factory()
    relay.open(transport)

    await clock.advance(90)

    assert source.calls == 3
    assert len(transport.events()) == 2

    await relay.shutdown()


async def test_subscribe_context_closes_on_error(relay, clock, recording_transport_factory):
    transport = recording_transport_factory()

    with pytest.raises(RuntimeError):
        async with relay.subscribe(transport, connection_id="scoped") as subscription:
            assert relay.get("scoped") is subscription
            raise RuntimeError("handler crashed")

    assert relay.get("scoped") is None
    assert subscription.closed

    await clock.advance(60)
    assert transport.sent == []


async def test_broadcast_reaches_every_live_subscription(
    relay, recording_transport_factory, broken_transport_factory
):
    first = recording_transport_factory()
    second = recording_transport_factory()
    broken = broken_transport_factory()
    relay.open(first, connection_id="a")
    relay.open(second, connection_id="b")
    relay.open(broken, connection_id="c")

    event = IncomingCallEvent(
        caller="+919876543210",
        name="Asha",
        subscription_status="Verified",
        dashboard_link="/user/dashboard/42",
        ticket="Active Plan Call",
        is_existing_user=True,
    )
    delivered = await relay.broadcast(event)

    assert delivered == 2
    assert first.events()[0]["event"] == INCOMING_CALL_EVENT
    assert first.events()[0]["payload"] == {
        "caller": "+919876543210",
        "name": "Asha",
        "subscriptionStatus": "Verified",
        "dashboardLink": "/user/dashboard/42",
        "ticket": "Active Plan Call",
        "isExistingUser": True,
    }
    assert second.events()[0]["connection_id"] == "b"
    assert relay.stats()["broadcasts"] == 1

    await relay.shutdown()


async def test_broadcast_without_connections_is_dropped(relay):
    assert await relay.broadcast(IncomingCallEvent(caller="+1", name="Nobody")) == 0


async def test_duplicate_connection_id_is_rejected(relay, recording_transport_factory):
    relay.open(recording_transport_factory(), connection_id="dup")

    with pytest.raises(ValueError):
        relay.open(recording_transport_factory(), connection_id="dup")

    await relay.shutdown()


async def test_close_unknown_connection_returns_false(relay):
    assert await relay.close("missing") is False


async def test_shutdown_cancels_every_timer(relay, clock, recording_transport_factory):
    subscriptions = [relay.open(recording_transport_factory()) for _ in range(3)]
    await clock.advance(1)

    await relay.shutdown()

    assert relay.subscription_count == 0
    assert all(sub.closed and sub.timer.done() for sub in subscriptions)


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        NotificationRelay(SampleCallSource(), 0)


async def test_default_sleep_uses_real_time(recording_transport_factory):
    relay = NotificationRelay(SampleCallSource(caller="+15551234567", name="Real"), 0.01)
    transport = recording_transport_factory()

    async with relay.subscribe(transport):
        for _ in range(100):
            if transport.events():
                break
            await asyncio.sleep(0.01)

    assert transport.events()[0]["payload"]["name"] == "Real"


async def test_stats_snapshot_each_connection(relay, clock, recording_transport_factory):
    relay.open(recording_transport_factory(), connection_id="agent-a")
    await clock.advance(30)

    (snapshot,) = relay.stats()["connections"]

    assert snapshot["connection_id"] == "agent-a"
    assert snapshot["emitted"] == 1
    assert snapshot["failed"] == 0
    assert snapshot["active"] is True
    assert snapshot["ticks_in_flight"] == 0

    await relay.shutdown()


class SlowSource:
    """Event source whose lookup takes ``latency`` seconds of virtual time."""

    def __init__(self, clock, latency: float):
        self.clock = clock
        self.latency = latency
        self.calls = 0

    async def next_event(self):
        self.calls += 1
        await self.clock.sleep(self.latency)
        return IncomingCallEvent(caller="+15550002222", name=f"Slow {self.calls}")


async def test_slow_source_does_not_drift_cadence(clock, recording_transport_factory):
    relay = NotificationRelay(SlowSource(clock, latency=5), INTERVAL, sleep=clock.sleep)
    transport = recording_transport_factory()
    relay.open(transport, connection_id="agent-a")

    # Firings at 30/60/90 land 5s later each: 35, 65, 95.
    await clock.advance(94)
    assert len(transport.events()) == 2

    await clock.advance(1)
    assert len(transport.events()) == 3

    await clock.advance(30)
    assert [frame["payload"]["name"] for frame in transport.events()] == [
        "Slow 1",
        "Slow 2",
        "Slow 3",
        "Slow 4",
    ]

    await relay.shutdown()


async def test_close_cancels_tick_in_flight(clock, recording_transport_factory):
    relay = NotificationRelay(SlowSource(clock, latency=20), INTERVAL, sleep=clock.sleep)
    transport = recording_transport_factory()
    subscription = relay.open(transport, connection_id="agent-a")

    await clock.advance(40)  # tick started at 30, still waiting on the source
    assert subscription.snapshot()["ticks_in_flight"] == 1

    await relay.close("agent-a")
    await clock.advance(60)

    assert transport.sent == []
    assert subscription.snapshot()["ticks_in_flight"] == 0


async def test_close_propagates_cancellation_of_caller(clock, recording_transport_factory):
    release = asyncio.Event()

    class StubbornSource:
        async def next_event(self):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                await release.wait()
                raise

    relay = NotificationRelay(StubbornSource(), INTERVAL, sleep=clock.sleep)
    relay.open(recording_transport_factory(), connection_id="agent-a")
    await clock.advance(30)

    closer = asyncio.create_task(relay.close("agent-a"))
    await clock.settle()
    assert not closer.done()

    closer.cancel()
    await clock.settle()
    release.set()
    await clock.settle()

    assert closer.cancelled()
