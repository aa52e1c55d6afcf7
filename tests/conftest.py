from datetime import datetime, timedelta, timezone
from itertools import cycle

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from otp_login.domain.errors import DeliveryFailure
from otp_login.main import create_app
from otp_login.services.delivery_gate import DeliveryGate
from otp_login.services.otp_service import OtpService
from otp_login.services.otp_store import OtpStore


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kw) -> None:
        self.now += timedelta(**kw)


class FakeTransport:
    """Records sent messages; flip the flags to simulate an unreachable mail server."""

    def __init__(self, *, configured: bool = True, verify_ok: bool = True, send_ok: bool = True):
        self.configured = configured
        self.verify_ok = verify_ok
        self.send_ok = send_ok
        self.sent = []
        self.verify_calls = 0

    async def verify(self) -> None:
        self.verify_calls += 1
        if not self.verify_ok:
            raise DeliveryFailure("535 authentication failed")

    async def send(self, message) -> None:
        if not self.send_ok:
            raise DeliveryFailure("421 service not available")
        self.sent.append(message)


def fixed_codes(*codes: str):
    it = cycle(codes)
    return lambda: next(it)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store(clock) -> OtpStore:
    return OtpStore(clock=clock)


@pytest.fixture
def gate(transport) -> DeliveryGate:
    return DeliveryGate(transport, probe_timeout=0.5, send_timeout=0.5)


@pytest_asyncio.fixture
async def healthy_gate(gate) -> DeliveryGate:
    await gate.probe()
    return gate


@pytest.fixture
def service(store, gate) -> OtpService:
    return OtpService(store, gate, generator=fixed_codes("1234", "5678"))


@pytest.fixture
def client(service):
    # entering the context runs the lifespan, which probes the fake transport
    with TestClient(create_app(otp_service=service)) as c:
        yield c
