"""
Utility functions for WebApiClient: URI generation and request logging.
"""

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
from pydantic import BaseModel

from .exceptions import InvalidArgumentError

logger = logging.getLogger("webapi_client")

SENSITIVE_HEADERS = ("authorization", "cookie", "proxy-authorization")
MAX_LOGGED_BODY = 1000


def flatten_parameter(parameter: Any) -> Optional[List[Tuple[str, Any]]]:
    """
    Return the (key, value) pairs of a structured parameter, in declaration order.

    Structured parameters are mappings, pydantic models, dataclass instances and
    sequences of (key, value) pairs. Anything else is a scalar and yields None.
    """
    if isinstance(parameter, Mapping):
        return [(str(key), value) for key, value in parameter.items()]

    if isinstance(parameter, BaseModel):
        return [
            (info.alias or name, getattr(parameter, name))
            for name, info in type(parameter).model_fields.items()
        ]

    if dataclasses.is_dataclass(parameter) and not isinstance(parameter, type):
        return [(field.name, getattr(parameter, field.name)) for field in dataclasses.fields(parameter)]

    if isinstance(parameter, (list, tuple)) and parameter and all(
        isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str)
        for item in parameter
    ):
        return list(parameter)

    return None


def to_query_string(pairs: Iterable[Tuple[str, Any]]) -> str:
    """
    Join (key, value) pairs as ``key=value`` with ``&``, skipping None values.

    Keys and values are not URL-encoded.
    """
    return "&".join(f"{key}={value}" for key, value in pairs if value is not None)


def generate_uri(
    controller: str,
    action: Optional[str] = None,
    parameter: Any = None,
    query_prefix: str = "",
) -> str:
    """
    Generate the relative URI of a call.

    The URI takes one of these shapes:
        {controller}
        {controller}/{parameter}
        {controller}{query_prefix}{key1}={value1}&{key2}={value2}
        {controller}/{action}
        {controller}/{action}/{parameter}
        {controller}/{action}{query_prefix}{key1}={value1}&{key2}={value2}

    Args:
        controller: The controller that will be called. Required.
        action: The action that will be called
        parameter: A scalar appended as a path segment, or a structured
            parameter rendered as a query string
        query_prefix: Text placed before the query string

    Returns:
        The relative URI

    Raises:
        InvalidArgumentError: If controller is empty
    """
    if not controller:
        raise InvalidArgumentError("controller")

    uri = controller

    if action:
        uri = f"{uri}/{action}"

    if parameter is not None:
        pairs = flatten_parameter(parameter)
        if pairs is None:
            uri = f"{uri}/{parameter}"
        else:
            query_string = to_query_string(pairs)
            if query_string:
                uri = f"{uri}{query_prefix}{query_string}"

    return uri


def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Mask the values of credential-bearing headers."""
    return {
        name: "********" if name.lower() in SENSITIVE_HEADERS and value else value
        for name, value in headers.items()
    }


def _truncate(body: str) -> str:
    if len(body) > MAX_LOGGED_BODY:
        return f"{body[:MAX_LOGGED_BODY]}... (truncated)"
    return body


def log_request(url: str, method: str, headers: Dict[str, str], body: Optional[bytes]) -> None:
    """
    Log details of an outgoing HTTP request.
    """
    logger.debug(f"> {method} {url}")
    for name, value in mask_headers(headers).items():
        logger.debug(f"> {name}: {value}")
    if body:
        logger.debug(f"> Body: {_truncate(body.decode('utf-8', errors='replace'))}")


def log_response(response: httpx.Response) -> None:
    """
    Log details of an HTTP response.
    """
    logger.debug(f"< HTTP {response.status_code} {response.reason_phrase}")
    for name, value in response.headers.items():
        logger.debug(f"< {name}: {value}")
    if response.content:
        logger.debug(f"< Body: {_truncate(response.text)}")
