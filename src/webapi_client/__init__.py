"""
webapi-client Package

This package provides a generic, typed client for CRUD-style Web Apis built on
top of httpx. A client is bound to one entity type and one controller, and
exposes create, edit, delete, get_one and get_many calls.

Features:
- Controller/action routing with scalar or structured parameters
- JSON and XML content negotiation
- Pluggable authentication (bearer tokens, token endpoints, Basic/Digest)
- Per-call cancellation tokens with a configurable timeout
- Structured errors parsed from the Web Api's error documents
- Type validation with Pydantic
- Fast JSON serialization with orjson
"""

__version__ = "0.1.0"

# Authentication
from .auth import AuthProvider, BearerTokenAuth, IntegratedAuth, NoAuth

# Builder
from .builder import WebApiClientBuilder

# Cancellation
from .cancellation import CancellationToken

# Core client
from .client import WebApiClient

# Configuration
from .config import build_authentication, load_options, options_from_dict, save_options

# Exceptions
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ExceptionDetails,
    InvalidArgumentError,
    RemoteCallError,
    RequestTimeoutError,
    UnexpectedError,
    WebApiClientError,
    translate_error_response,
)

# Factory
from .factory import ClientFactory, default_factory, get_client

# Formatters
from .formatters import BaseFormatter, JsonFormatter, XmlFormatter

# Models
from .models import ClientOptions, ContentType, HttpMethod

# Transport
from .transport import BaseTransport, HttpxTransport

# Utils
from .utils import generate_uri, to_query_string

__all__ = [
    # Client
    "WebApiClient",
    "WebApiClientBuilder",
    "ClientFactory",
    "default_factory",
    "get_client",
    # Models
    "ClientOptions",
    "ContentType",
    "HttpMethod",
    "CancellationToken",
    # Authentication
    "AuthProvider",
    "NoAuth",
    "BearerTokenAuth",
    "IntegratedAuth",
    # Formatters and transport
    "BaseFormatter",
    "JsonFormatter",
    "XmlFormatter",
    "BaseTransport",
    "HttpxTransport",
    # Exceptions
    "WebApiClientError",
    "InvalidArgumentError",
    "RequestTimeoutError",
    "RemoteCallError",
    "UnexpectedError",
    "AuthenticationError",
    "ConfigurationError",
    "ExceptionDetails",
    "translate_error_response",
    # Configuration
    "load_options",
    "save_options",
    "options_from_dict",
    "build_authentication",
    # Utils
    "generate_uri",
    "to_query_string",
]
