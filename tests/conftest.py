import asyncio
import heapq
import itertools
import json
import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

# Disable telemetry for tests
os.environ["DISABLE_CLOUD_TELEMETRY"] = "true"

# Identity credential required at startup; values are never sent anywhere in tests
TEST_IDENTITY_CREDENTIALS = json.dumps(
    {
        "tenant_id": "00000000-0000-0000-0000-000000000000",
        "client_id": "11111111-1111-1111-1111-111111111111",
        "client_secret": "test-secret",
    }
)
os.environ.setdefault("IDENTITY_CREDENTIALS_JSON", TEST_IDENTITY_CREDENTIALS)


class VirtualClock:
    """
    Deterministic stand-in for ``asyncio.sleep``.

    Sleepers park on a future keyed by their virtual deadline; ``advance()``
    moves time forward and wakes them in deadline order, letting the event
    loop settle after each wake-up.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._sleepers: list[tuple[float, int, asyncio.Future]] = []
        self._seq = itertools.count()

    async def sleep(self, delay: float) -> None:
        future = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self.now + delay, next(self._seq), future))
        await future

    async def settle(self, rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        await self.settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            self.now = deadline
            if not future.done():
                future.set_result(None)
            await self.settle()
        self.now = target
        await self.settle()


class RecordingTransport:
    """Collects every frame pushed to it, like a healthy WebSocket."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_json(self, data) -> None:
        self.sent.append(data)

    def events(self, name: str = "incoming-call") -> list[dict]:
        return [frame for frame in self.sent if frame.get("event") == name]


class BrokenTransport:
    """A connection that died underneath the relay."""

    def __init__(self) -> None:
        self.attempts = 0

    async def send_json(self, data) -> None:
        self.attempts += 1
        raise ConnectionResetError("socket closed by peer")


def make_supabase_client(
    tables: dict[str, list[dict]] | None = None,
    errors: dict[str, Exception] | None = None,
) -> MagicMock:
    """
    MagicMock shaped like a supabase ``Client``.

    ``select``/``eq``/``limit`` chain back to the same query; ``execute``
    returns the rows configured for the table, or raises the configured
    error. ``insert`` echoes the inserted record back with an ``id``.
    """
    tables = tables or {}
    errors = errors or {}
    client = MagicMock()
    queries: dict[str, MagicMock] = {}

    def table(name: str) -> MagicMock:
        if name in queries:
            return queries[name]
        query = MagicMock(name=f"table[{name}]")
        query.select.return_value = query
        query.eq.return_value = query
        query.limit.return_value = query

        def insert(rows):
            inserted = MagicMock(name=f"insert[{name}]")
            if name in errors:
                inserted.execute.side_effect = errors[name]
            else:
                data = [{"id": index + 1, **row} for index, row in enumerate(rows)]
                inserted.execute.return_value = SimpleNamespace(data=data)
            return inserted

        query.insert.side_effect = insert
        if name in errors:
            query.execute.side_effect = errors[name]
        else:
            query.execute.return_value = SimpleNamespace(data=list(tables.get(name, [])))
        queries[name] = query
        return query

    client.table.side_effect = table
    return client


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def supabase_client_factory():
    return make_supabase_client


@pytest.fixture
def recording_transport_factory():
    return RecordingTransport


@pytest.fixture
def broken_transport_factory():
    return BrokenTransport


@pytest.fixture(autouse=True)
def _reset_credential_cache():
    from utils.azure_auth import get_credential

    get_credential.cache_clear()
    yield
    get_credential.cache_clear()


class DummyRelay:
    """Records broadcasts instead of pushing them to sockets."""

    def __init__(self, delivered: int = 1) -> None:
        self.delivered = delivered
        self.broadcasts: list = []

    async def broadcast(self, event) -> int:
        self.broadcasts.append(event)
        return self.delivered

    def stats(self) -> dict:
        return {
            "subscriptions": self.delivered,
            "interval_seconds": 30.0,
            "source": "SampleCallSource",
            "broadcasts": len(self.broadcasts),
            "connections": [
                {"connection_id": f"agent-{index}", "emitted": 0, "failed": 0, "active": True}
                for index in range(self.delivered)
            ],
        }


@pytest.fixture
def api_app():
    """
    Fully wired app (routes, CORS, error handlers) with startup skipped.

    Tests attach their own collaborators to ``app.state``.
    """
    from apps.callcenter.backend.config import AppConfig
    from apps.callcenter.backend.main import create_app, setup_app_middleware_and_routes
    from src.agent import StatusRegister

    app = create_app()
    setup_app_middleware_and_routes(app)
    app.state.config = AppConfig()
    app.state.status_register = StatusRegister()
    app.state.relay = None
    app.state.call_directory = None
    app.state.log_store = None
    return app


@pytest.fixture
def dummy_relay_factory():
    return DummyRelay
