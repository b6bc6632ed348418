import http.cookiejar
import logging
from collections.abc import Mapping
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

import httpx

from .cancellation import CancellationToken, run_cancellable
from .exceptions import (
    InvalidArgumentError,
    RequestTimeoutError,
    UnexpectedError,
    WebApiClientError,
    translate_error_response,
)
from .models import ClientOptions, HttpMethod
from .transport import BaseTransport, HttpxTransport
from .utils import generate_uri, log_request, log_response

logger = logging.getLogger("webapi_client")

T = TypeVar("T")
R = TypeVar("R")


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value):
        raise InvalidArgumentError(name)


class WebApiClient(Generic[T]):
    """
    A generic REST client for calling the controller of a Web Api.

    Each instance is bound to one entity type and one controller. Calls are
    sent through a single transport that lives as long as the client.

    Example:
        async with WebApiClient(User, ClientOptions(
            base_address="https://api.example.com/api", controller="users"
        )) as client:
            user = await client.get_one(1)
            users = await client.get_many({"active": True})
    """

    def __init__(
        self,
        entity_type: Type[T],
        options: Optional[ClientOptions] = None,
        transport: Optional[BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            entity_type: Type of the entities sent to and read from the controller
            options: Client options; defaults are used when omitted. The client
                keeps its own copy, so later changes to ``options`` have no effect.
            transport: Transport used for every call. When omitted an
                HttpxTransport is created from the options, including the
                authentication credentials.
        """
        if entity_type is None:
            raise InvalidArgumentError("entity_type")

        self.entity_type = entity_type
        self.options = (options if options is not None else ClientOptions()).model_copy()
        self.formatter = self.options.formatter

        # Extra headers sent with every call
        self.headers: Dict[str, str] = {}

        if transport is None:
            transport = HttpxTransport(
                base_url=self.options.base_address,
                auth=self.options.authentication.credentials,
                timeout=self.options.timeout_seconds or None,
            )
        self.transport = transport

        if self.options.debug:
            logger.setLevel(logging.DEBUG)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the transport."""
        await self.transport.close()

    # Cookies

    def add_cookie(self, name: str, value: str, path: str, domain: str) -> None:
        """Add a cookie sent with every call to the Web Api."""
        _require(name, "name")
        _require(value, "value")
        _require(path, "path")
        _require(domain, "domain")

        self.transport.cookies.set(name, value, domain=domain, path=path)

    def add_cookies(
        self, cookies: Union[Mapping, Iterable[http.cookiejar.Cookie]]
    ) -> None:
        """
        Add several cookies at once.

        Args:
            cookies: A mapping of cookie names to values, or cookiejar Cookie objects
        """
        if cookies is None:
            raise InvalidArgumentError("cookies")

        if isinstance(cookies, Mapping):
            for name, value in cookies.items():
                self.transport.cookies.set(name, value)
            return

        for cookie in cookies:
            if cookie is None:
                raise InvalidArgumentError("cookie")
            self.transport.cookies.jar.set_cookie(cookie)

    # Argument normalization

    def _controller(self) -> str:
        controller = self.options.controller
        if not controller:
            raise InvalidArgumentError("controller")
        return controller

    def _normalize(
        self, action: Optional[str], token: Optional[CancellationToken]
    ) -> Tuple[Optional[str], CancellationToken]:
        """Fill in the configured action and a timeout-bound token when not supplied."""
        if action is not None and (not isinstance(action, str) or not action):
            raise InvalidArgumentError("action")

        if token is None:
            token = CancellationToken.with_timeout(self.options.timeout)
        elif not isinstance(token, CancellationToken):
            raise InvalidArgumentError("token", "token must be a CancellationToken")

        return action or self.options.action, token

    # Public operations

    async def create(
        self,
        entity: T,
        action: Optional[str] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Optional[T]:
        """
        Send an entity to the Web Api to be created (POST).

        Args:
            entity: The entity to create
            action: Explicit action to call
            token: Token used to cancel the call; defaults to one bound to the
                configured timeout

        Returns:
            The created entity as returned by the Web Api, or None if the
            response body cannot be read as an entity
        """
        _require(entity, "entity")
        controller = self._controller()
        action, token = self._normalize(action, token)

        return await self._create(entity, controller, action, token)

    async def edit(
        self,
        entity: T,
        action: Optional[str] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Optional[T]:
        """
        Send an entity to the Web Api to be updated (PUT).

        Returns:
            The updated entity as returned by the Web Api, or None if the
            response body cannot be read as an entity
        """
        _require(entity, "entity")
        controller = self._controller()
        action, token = self._normalize(action, token)

        return await self._edit(entity, controller, action, token)

    async def delete(
        self,
        parameter: Any,
        action: Optional[str] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Ask the Web Api to delete an entity (DELETE).

        Args:
            parameter: Identifier of the entity, or a structured parameter
            action: Explicit action to call
            token: Token used to cancel the call
        """
        _require(parameter, "parameter")
        controller = self._controller()
        action, token = self._normalize(action, token)

        await self._delete(parameter, controller, action, token)

    async def get_one(
        self,
        parameter: Any = None,
        action: Optional[str] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> T:
        """
        Read a single entity (GET).

        Args:
            parameter: Identifier of the entity, or a structured parameter
            action: Explicit action to call
            token: Token used to cancel the call
        """
        if isinstance(parameter, str) and not parameter:
            raise InvalidArgumentError("parameter")
        controller = self._controller()
        action, token = self._normalize(action, token)

        return await self._get_one(parameter, controller, action, token)

    async def get_many(
        self,
        parameter: Any = None,
        action: Optional[str] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> List[T]:
        """
        Read a list of entities (GET).

        Args:
            parameter: A structured parameter used as a filter, or a path segment
            action: Explicit action to call
            token: Token used to cancel the call
        """
        if isinstance(parameter, str) and not parameter:
            raise InvalidArgumentError("parameter")
        controller = self._controller()
        action, token = self._normalize(action, token)

        return await self._get_many(parameter, controller, action, token)

    # Canonical calls

    async def _create(
        self, entity: T, controller: str, action: Optional[str], token: CancellationToken
    ) -> Optional[T]:
        return await self._execute(
            lambda: self._send_entity(HttpMethod.POST, entity, controller, action, token)
        )

    async def _edit(
        self, entity: T, controller: str, action: Optional[str], token: CancellationToken
    ) -> Optional[T]:
        return await self._execute(
            lambda: self._send_entity(HttpMethod.PUT, entity, controller, action, token)
        )

    async def _delete(
        self, parameter: Any, controller: str, action: Optional[str], token: CancellationToken
    ) -> None:
        async def operation() -> None:
            headers = await self._authenticate(token)
            uri = self._uri(controller, action, parameter)
            await self._send(HttpMethod.DELETE, uri, headers, None, token)

        await self._execute(operation)

    async def _get_one(
        self, parameter: Any, controller: str, action: Optional[str], token: CancellationToken
    ) -> T:
        async def operation() -> T:
            headers = await self._authenticate(token)
            uri = self._uri(controller, action, parameter)
            response = await self._send(HttpMethod.GET, uri, headers, None, token)
            return self.formatter.deserialize(response.content, self.entity_type)

        return await self._execute(operation)

    async def _get_many(
        self, parameter: Any, controller: str, action: Optional[str], token: CancellationToken
    ) -> List[T]:
        async def operation() -> List[T]:
            headers = await self._authenticate(token)
            uri = self._uri(controller, action, parameter)
            response = await self._send(HttpMethod.GET, uri, headers, None, token)
            return self.formatter.deserialize(response.content, List[self.entity_type])

        return await self._execute(operation)

    # Pipeline

    async def _execute(self, operation: Callable[[], Awaitable[R]]) -> R:
        """Run a call, mapping every failure onto a WebApiClientError."""
        try:
            return await operation()
        except WebApiClientError:
            raise
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except Exception as e:
            logger.error(f"Call to {self.options.base_address} failed: {str(e)}")
            raise UnexpectedError(e) from e

    async def _authenticate(self, token: CancellationToken) -> Dict[str, str]:
        """Compute the header set of one call, bound to the call's token."""
        headers = {**self.headers, "Accept": self.formatter.media_type}
        return await run_cancellable(self.options.authentication.authenticate(headers), token)

    def _uri(self, controller: str, action: Optional[str], parameter: Any) -> str:
        return generate_uri(controller, action, parameter, self.options.query_prefix)

    async def _send_entity(
        self,
        method: HttpMethod,
        entity: T,
        controller: str,
        action: Optional[str],
        token: CancellationToken,
    ) -> Optional[T]:
        headers = await self._authenticate(token)
        uri = self._uri(controller, action, None)

        content = self.formatter.serialize(entity, self.entity_type)
        headers["Content-Type"] = self.formatter.media_type

        response = await self._send(method, uri, headers, content, token)

        if not response.content:
            return None
        try:
            return self.formatter.deserialize(response.content, self.entity_type)
        except (ValueError, SyntaxError) as e:
            logger.debug(f"Response of {method.value} {uri} is not a {self.entity_type}: {e}")
            return None

    async def _send(
        self,
        method: HttpMethod,
        uri: str,
        headers: Dict[str, str],
        content: Optional[bytes],
        token: CancellationToken,
    ) -> httpx.Response:
        """Issue one HTTP call bound to the token and fail on non-success statuses."""
        if self.options.debug:
            log_request(f"{self.options.base_address}{uri}", method.value, headers, content)

        response = await run_cancellable(
            self.transport.request(method.value, uri, headers=headers, content=content), token
        )

        if self.options.debug:
            log_response(response)

        if not response.is_success:
            error = translate_error_response(response)
            logger.warning(
                f"{method.value} {uri} failed with HTTP {response.status_code}: {error.message}"
            )
            raise error

        return response
