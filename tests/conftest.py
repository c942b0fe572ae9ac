"""
Pytest configuration and shared fixtures for panel server tests.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch
from httpx import AsyncClient, ASGITransport

from panel_server.auth import SessionGate
from panel_server.config import settings
from panel_server.integration import VendorClient
from panel_server.memory import SessionStore
from panel_server.models import VendorResponse

TEST_SECRET = "test-session-secret"
TEST_USERNAME = "admin"
TEST_PASSWORD = "hunter2"


def vendor_ok(**extra) -> VendorResponse:
    """A fully successful vendor response."""
    return VendorResponse(status=200, body={"code": 200, "msg": "success", **extra})


@pytest.fixture
def stub_vendor():
    """A VendorClient stand-in whose calls succeed unless reconfigured."""
    client = MagicMock(spec=VendorClient)
    client.list_devices = AsyncMock(return_value=vendor_ok(data=[]))
    client.fetch_state = AsyncMock(return_value=vendor_ok())
    client.send_control = AsyncMock(return_value=vendor_ok())
    client.close = AsyncMock()
    return client


@pytest.fixture
def session_gate():
    """A fresh gate over an empty in-memory store."""
    return SessionGate(
        store=SessionStore(),
        secret=TEST_SECRET,
        username=TEST_USERNAME,
        password=TEST_PASSWORD,
        timeout_minutes=30,
    )


@pytest.fixture
def open_app(stub_vendor, session_gate):
    """App configured with an API key, the stub vendor and the gate disabled."""
    with patch("panel_server.main.vendor_client", stub_vendor), \
         patch("panel_server.main.session_gate", session_gate), \
         patch.object(settings, "govee_api_key", "test-key"), \
         patch.object(settings, "auth_enabled", False), \
         patch.object(settings, "color_encoding", "int"), \
         patch.object(settings, "include_first_attempt", True):
        from panel_server.main import app
        yield app


@pytest.fixture
def gated_app(stub_vendor, session_gate):
    """App configured with the session gate enabled."""
    with patch("panel_server.main.vendor_client", stub_vendor), \
         patch("panel_server.main.session_gate", session_gate), \
         patch.object(settings, "govee_api_key", "test-key"), \
         patch.object(settings, "auth_enabled", True):
        from panel_server.main import app
        yield app


@pytest_asyncio.fixture
async def client(open_app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the ungated app."""
    async with AsyncClient(
        transport=ASGITransport(app=open_app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def gated_client(gated_app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the gated app."""
    async with AsyncClient(
        transport=ASGITransport(app=gated_app),
        base_url="http://test"
    ) as ac:
        yield ac
