"""
Factory and process-wide registry of WebApiClient instances.
"""

import logging
import threading
from typing import Any, Dict, Hashable, Optional, Type, TypeVar

from .client import WebApiClient
from .exceptions import InvalidArgumentError
from .models import ClientOptions
from .transport import BaseTransport

logger = logging.getLogger("webapi_client.factory")

T = TypeVar("T")


class ClientFactory:
    """
    Creates WebApiClient instances and caches one per entity type.

    The first ``get`` for a key creates the client; every later ``get`` for the
    same key returns that instance and ignores the options it is given. Pass an
    explicit ``key`` to keep several clients for the same entity type.
    """

    def __init__(self):
        self._cache: Dict[Hashable, WebApiClient[Any]] = {}
        self._lock = threading.Lock()

    def get(
        self,
        entity_type: Type[T],
        options: Optional[ClientOptions] = None,
        *,
        key: Optional[Hashable] = None,
        transport: Optional[BaseTransport] = None,
    ) -> WebApiClient[T]:
        """
        Return the client cached for ``key`` (default: the entity type), creating it if needed.

        Args:
            entity_type: Type of the entities handled by the client
            options: Options used only when the client is created
            key: Explicit cache key
            transport: Transport used only when the client is created
        """
        if entity_type is None:
            raise InvalidArgumentError("entity_type")

        cache_key = key if key is not None else entity_type

        with self._lock:
            client = self._cache.get(cache_key)
            if client is None:
                client = WebApiClient(entity_type, options or ClientOptions(), transport)
                self._cache[cache_key] = client
                logger.debug(f"Created client for {cache_key!r}")
            elif options is not None:
                logger.debug(f"Client for {cache_key!r} already exists; ignoring new options")

        return client

    def __contains__(self, key: Hashable) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        """Forget every cached client without closing it."""
        with self._lock:
            self._cache.clear()

    async def aclose(self) -> None:
        """Close every cached client and empty the cache."""
        with self._lock:
            clients = list(self._cache.values())
            self._cache.clear()

        for client in clients:
            await client.close()


default_factory = ClientFactory()


def get_client(
    entity_type: Type[T],
    options: Optional[ClientOptions] = None,
    *,
    key: Optional[Hashable] = None,
) -> WebApiClient[T]:
    """Return a client from the process-wide factory."""
    return default_factory.get(entity_type, options, key=key)
