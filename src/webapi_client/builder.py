"""
Builder pattern for WebApiClient configuration.

This module provides a fluent API for assembling ClientOptions and creating
WebApiClient instances from them.
"""

from typing import Any, Dict, Literal, Optional, Type, TypeVar

from .auth import AuthProvider, BearerTokenAuth, IntegratedAuth, NoAuth
from .client import WebApiClient
from .models import DEFAULT_BASE_ADDRESS, DEFAULT_TIMEOUT, ClientOptions, ContentType
from .transport import BaseTransport

T = TypeVar("T")


class WebApiClientBuilder:
    """Builder class for WebApiClient with fluent API."""

    def __init__(self):
        """Initialize the builder with default values."""
        self._config: Dict[str, Any] = {
            "base_address": DEFAULT_BASE_ADDRESS,
            "controller": None,
            "action": None,
            "content_type": ContentType.JSON,
            "timeout": DEFAULT_TIMEOUT,
            "query_prefix": "",
            "debug": False,
        }
        self._authentication: AuthProvider = NoAuth()
        self._headers: Dict[str, str] = {}

    def with_base_address(self, base_address: str) -> "WebApiClientBuilder":
        """Set the base address of the Web Api."""
        self._config["base_address"] = base_address
        return self

    def with_controller(self, controller: str) -> "WebApiClientBuilder":
        """Set the controller called by the client."""
        self._config["controller"] = controller
        return self

    def with_action(self, action: str) -> "WebApiClientBuilder":
        """Set the action used when a call does not supply one."""
        self._config["action"] = action
        return self

    def with_content_type(self, content_type: ContentType) -> "WebApiClientBuilder":
        """Set the content type of request and response bodies."""
        self._config["content_type"] = content_type
        return self

    def with_timeout(self, timeout: int) -> "WebApiClientBuilder":
        """Set the call timeout in milliseconds."""
        self._config["timeout"] = timeout
        return self

    def with_query_prefix(self, prefix: str) -> "WebApiClientBuilder":
        """Set the text placed between the path and a query string."""
        self._config["query_prefix"] = prefix
        return self

    def with_debug(self, debug: bool = True) -> "WebApiClientBuilder":
        """Enable or disable request/response debug logging."""
        self._config["debug"] = debug
        return self

    def add_header(self, name: str, value: str) -> "WebApiClientBuilder":
        """Add a header sent with every call."""
        self._headers[name] = value
        return self

    def with_authentication(self, authentication: AuthProvider) -> "WebApiClientBuilder":
        """Use an already configured authentication provider."""
        self._authentication = authentication
        return self

    def with_bearer_token(self, token: str) -> "WebApiClientBuilder":
        """Authenticate with a fixed bearer token."""
        return self.with_authentication(BearerTokenAuth(token))

    def with_token_endpoint(
        self, username: str, password: str, token_uri: str
    ) -> "WebApiClientBuilder":
        """Authenticate with a bearer token fetched from a token endpoint."""
        return self.with_authentication(
            BearerTokenAuth(username=username, password=password, token_uri=token_uri)
        )

    def with_integrated_auth(
        self,
        username: str,
        password: str,
        domain: Optional[str] = None,
        scheme: Literal["basic", "digest"] = "basic",
    ) -> "WebApiClientBuilder":
        """Authenticate through the transport with Basic or Digest credentials."""
        return self.with_authentication(IntegratedAuth(username, password, domain, scheme=scheme))

    def build_options(self) -> ClientOptions:
        """Build the ClientOptions described by this builder."""
        return ClientOptions(**self._config, authentication=self._authentication)

    def build(
        self, entity_type: Type[T], transport: Optional[BaseTransport] = None
    ) -> WebApiClient[T]:
        """Build and return a configured WebApiClient instance."""
        client = WebApiClient(entity_type, self.build_options(), transport)
        client.headers.update(self._headers)
        return client
