# tests/conftest.py

import asyncio
from typing import Callable, Dict, List, Optional

import httpx
import orjson
import pytest
import respx
from pydantic import BaseModel

from webapi_client import BaseTransport, ClientOptions, WebApiClient

BASE_ADDRESS = "https://api.example.com/api/"


class User(BaseModel):
    """Sample entity used across the tests."""

    id: int
    name: str
    email: Optional[str] = None


class Order(BaseModel):
    id: int
    total: float


MOCK_USER = {"id": 1, "name": "Test User", "email": "test@example.com"}
MOCK_USERS = [{"id": 1, "name": "User 1"}, {"id": 2, "name": "User 2"}]


class RecordingTransport(BaseTransport):
    """Transport double that records every call and answers with a handler."""

    def __init__(self, handler: Optional[Callable[..., httpx.Response]] = None, delay: float = 0):
        self.handler = handler or (lambda method, url, headers, content: httpx.Response(200))
        self.delay = delay
        self.calls: List[Dict] = []
        self.closed = False
        self._cookies = httpx.Cookies()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._cookies

    async def request(self, method, url, *, headers=None, content=None) -> httpx.Response:
        self.calls.append({"method": method, "url": url, "headers": headers, "content": content})
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.handler(method, url, headers, content)

    async def close(self):
        self.closed = True


def json_response(status_code: int, data) -> httpx.Response:
    return httpx.Response(
        status_code, content=orjson.dumps(data), headers={"content-type": "application/json"}
    )


@pytest.fixture
def base_address():
    """Base address for testing."""
    return BASE_ADDRESS


@pytest.fixture
def options(base_address):
    """Options for a users controller."""
    return ClientOptions(base_address=base_address, controller="users", timeout=5000)


@pytest.fixture
def recording_transport():
    return RecordingTransport()


@pytest.fixture
async def client(options, recording_transport):
    """Create a client backed by the recording transport."""
    client = WebApiClient(User, options, transport=recording_transport)
    yield client
    await client.close()


@pytest.fixture
async def http_client(options):
    """Create a client backed by a real HttpxTransport."""
    client = WebApiClient(User, options)
    yield client
    await client.close()


@pytest.fixture
def mock_router():
    """Create a mock router for httpx testing."""
    with respx.mock(assert_all_called=False) as router:
        yield router


def register_mock_endpoints(router, base_url: str = BASE_ADDRESS):
    """Register common mock endpoints for testing."""
    router.get(f"{base_url}users").respond(status_code=200, json=MOCK_USERS)
    router.get(f"{base_url}users/1").respond(status_code=200, json=MOCK_USER)
    router.post(f"{base_url}users").respond(
        status_code=201, json={"id": 3, "name": "New User", "email": "new@example.com"}
    )
    router.put(f"{base_url}users").respond(
        status_code=200, json={"id": 1, "name": "Updated User", "email": "test@example.com"}
    )
    router.delete(f"{base_url}users/1").respond(status_code=204)

    router.get(f"{base_url}users/404").respond(status_code=404, json={"Message": "Not found"})
    router.get(f"{base_url}users/500").respond(status_code=500, text="Server exploded")

    return router


@pytest.fixture
def mock_api(mock_router, base_address):
    """Register mock API endpoints and return the router."""
    return register_mock_endpoints(mock_router, base_address)
