"""
Tests for the transport layer implementations.
"""

import httpx
import pytest

from webapi_client.transport import BaseTransport, HttpxTransport


def echo(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "url": str(request.url),
            "body": request.content.decode(),
            "accept": request.headers.get("Accept"),
        },
    )


@pytest.fixture
async def transport():
    transport = HttpxTransport(
        base_url="https://api.example.com/api/", transport=httpx.MockTransport(echo)
    )
    yield transport
    await transport.close()


class TestHttpxTransport:
    @pytest.mark.asyncio
    async def test_relative_url_resolved_against_base(self, transport):
        response = await transport.request("GET", "users/1")

        assert response.json()["url"] == "https://api.example.com/api/users/1"

    @pytest.mark.asyncio
    async def test_headers_and_content(self, transport):
        response = await transport.request(
            "POST", "users", headers={"Accept": "application/xml"}, content=b"<User/>"
        )

        data = response.json()
        assert data["method"] == "POST"
        assert data["body"] == "<User/>"
        assert data["accept"] == "application/xml"

    @pytest.mark.asyncio
    async def test_response_is_buffered(self, transport):
        response = await transport.request("DELETE", "users/1")

        assert response.content

    @pytest.mark.asyncio
    async def test_cookies(self, transport):
        transport.cookies.set("session", "abc")

        assert transport.cookies["session"] == "abc"

    @pytest.mark.asyncio
    async def test_close(self):
        transport = HttpxTransport(transport=httpx.MockTransport(echo))

        assert not transport.is_closed
        await transport.close()

        assert transport.is_closed

    def test_timeout_configuration(self):
        transport = HttpxTransport(timeout=2.5)

        assert transport.client.timeout.read == 2.5

    def test_no_timeout(self):
        transport = HttpxTransport(timeout=None)

        assert transport.client.timeout.read is None


class MinimalTransport(BaseTransport):
    async def request(self, method, url, *, headers=None, content=None):
        return httpx.Response(200)

    async def close(self):
        pass


def test_transport_without_cookie_jar():
    with pytest.raises(NotImplementedError):
        MinimalTransport().cookies
