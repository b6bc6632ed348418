"""Authentication providers for WebApiClient.

A provider contributes to each call in one of two ways: by adding an
Authorization header to the per-call header set (bearer tokens), or by handing
credentials to the transport so the handshake happens there (integrated
authentication).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Literal, Optional

import httpx
from pydantic import BaseModel

from .exceptions import AuthenticationError, InvalidArgumentError

logger = logging.getLogger("webapi_client.auth")


class AuthProvider(ABC):
    """Base class for all authentication providers."""

    @abstractmethod
    async def authenticate(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Return the headers for a call with authentication details added.

        Args:
            headers: The headers computed for the call so far

        Returns:
            A new header dictionary; the input is left untouched.
        """
        pass

    @property
    def credentials(self) -> Optional[httpx.Auth]:
        """Credentials handed to the transport, if any."""
        return None


class NoAuth(AuthProvider):
    """Calls are made anonymously."""

    async def authenticate(self, headers: Dict[str, str]) -> Dict[str, str]:
        return {**headers}


class TokenModel(BaseModel):
    """Model for token endpoint responses."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None


class BearerTokenAuth(AuthProvider):
    """Bearer token authentication provider.

    Either the token is supplied up front, or it is fetched from ``token_uri``
    with a password grant the first time a call is authenticated and reused for
    every call after that.
    """

    grant_type = "password"

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token_uri: Optional[str] = None,
    ):
        """Initialize bearer token authentication.

        Args:
            token: A bearer token. No token endpoint is called when it is given.
            username: Username sent to the token endpoint
            password: Password sent to the token endpoint
            token_uri: Absolute URI of the token endpoint
        """
        if token is None:
            if not username:
                raise InvalidArgumentError("username")
            if not password:
                raise InvalidArgumentError("password")
            if not token_uri:
                raise InvalidArgumentError("token_uri")
        elif not token:
            raise InvalidArgumentError("token")

        self.username = username
        self.password = password
        self.token_uri = token_uri
        self._supplied = token is not None
        self._token: Optional[str] = token
        self._lock = asyncio.Lock()

    @classmethod
    def from_credentials(cls, username: str, password: str, token_uri: str) -> "BearerTokenAuth":
        return cls(username=username, password=password, token_uri=token_uri)

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def has_token(self) -> bool:
        return self._token is not None

    async def authenticate(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Add the bearer token to the headers, fetching it first if needed."""
        if not self.has_token:
            async with self._lock:
                # Another call may have fetched it while we waited
                if not self.has_token:
                    await self._fetch_token()

        return {**headers, "Authorization": f"Bearer {self._token}"}

    def reset(self) -> None:
        """Forget a fetched token so the next call asks the token endpoint again."""
        if not self._supplied:
            self._token = None

    async def _fetch_token(self) -> None:
        """Fetch a new access token from the token endpoint."""
        token_request = {
            "username": self.username,
            "password": self.password,
            "grant_type": self.grant_type,
        }

        async with httpx.AsyncClient() as client:
            response = await client.post(self.token_uri, data=token_request)

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.error(f"Token endpoint {self.token_uri} not found")
            raise AuthenticationError(
                "TokenUri not found", status_code=httpx.codes.SERVICE_UNAVAILABLE
            )

        if not response.is_success:
            logger.error(
                f"Token request to {self.token_uri} failed with HTTP {response.status_code}"
            )
            raise AuthenticationError("Unauthorized access")

        try:
            token = TokenModel.model_validate(response.json())
        except ValueError as e:
            raise AuthenticationError(f"Invalid token response: {str(e)}") from e

        self._token = token.access_token
        logger.debug(f"Bearer token obtained from {self.token_uri}")


class IntegratedAuth(AuthProvider):
    """Authentication negotiated by the transport (Basic or Digest credentials).

    No header is produced here; the credentials are installed on the transport
    which answers the server's challenge itself.
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        domain: Optional[str] = None,
        *,
        scheme: Literal["basic", "digest"] = "basic",
        credentials: Optional[httpx.Auth] = None,
    ):
        """Initialize integrated authentication.

        Args:
            username: The account user name
            password: The account password
            domain: Optional domain, sent as ``DOMAIN\\username``
            scheme: Challenge scheme to answer with username/password
            credentials: Ready-made httpx credentials, used instead of username/password
        """
        if credentials is None:
            if not username:
                raise InvalidArgumentError("username")
            if not password:
                raise InvalidArgumentError("password")
            if domain is not None and not domain:
                raise InvalidArgumentError("domain")

            user = f"{domain}\\{username}" if domain else username
            if scheme == "digest":
                credentials = httpx.DigestAuth(user, password)
            elif scheme == "basic":
                credentials = httpx.BasicAuth(user, password)
            else:
                raise InvalidArgumentError("scheme", f"Unsupported scheme: {scheme}")

        self.username = username
        self.domain = domain
        self._credentials = credentials

    @property
    def credentials(self) -> Optional[httpx.Auth]:
        return self._credentials

    async def authenticate(self, headers: Dict[str, str]) -> Dict[str, str]:
        return {**headers}
