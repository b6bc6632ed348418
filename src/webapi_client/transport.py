"""
Transport layer for WebApiClient.

The client talks to the network through a BaseTransport:
- HttpxTransport: the default, backed by httpx.AsyncClient

Other transports (test doubles, instrumented clients) only need to implement
``request`` and ``close``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx
from httpx import AsyncClient, Timeout

logger = logging.getLogger("webapi_client.transport")


class BaseTransport(ABC):
    """Abstract base class for transport implementations."""

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """Send an HTTP request and return a response."""
        pass

    @abstractmethod
    async def close(self):
        """Close the transport and release resources."""
        pass

    @property
    def cookies(self) -> httpx.Cookies:
        """Cookie jar sent with every request."""
        raise NotImplementedError(f"{type(self).__name__} does not keep cookies")


class HttpxTransport(BaseTransport):
    """Transport implementation using httpx."""

    def __init__(
        self,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        cookies: Optional[Dict[str, str]] = None,
        auth: Optional[httpx.Auth] = None,
        timeout: Optional[float] = 30.0,
        follow_redirects: bool = True,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the httpx transport.

        Args:
            base_url: Base URL relative request URLs are resolved against
            headers: Headers sent with every request
            cookies: Cookies sent with every request
            auth: Credentials used to answer authentication challenges
            timeout: Network timeout in seconds, None to disable
            follow_redirects: Whether to follow redirects
            verify_ssl: Whether to verify SSL certificates
            transport: Optional low-level httpx transport (e.g. httpx.MockTransport)
        """
        client_kwargs = {
            "base_url": base_url or "",
            "headers": headers,
            "cookies": cookies,
            "auth": auth,
            "timeout": Timeout(timeout),
            "follow_redirects": follow_redirects,
            "verify": verify_ssl,
        }
        if transport is not None:
            client_kwargs["transport"] = transport

        self.client = AsyncClient(**client_kwargs)

    @property
    def base_url(self) -> httpx.URL:
        return self.client.base_url

    @property
    def cookies(self) -> httpx.Cookies:
        return self.client.cookies

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """Send an HTTP request using httpx and return the buffered response."""
        return await self.client.request(method=method, url=url, headers=headers, content=content)

    async def close(self):
        """Close the httpx client session."""
        logger.debug(f"Closing transport for {self.client.base_url}")
        await self.client.aclose()

    @property
    def is_closed(self) -> bool:
        return self.client.is_closed
