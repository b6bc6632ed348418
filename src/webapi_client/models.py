"""
Data models for the webapi-client library.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .auth import AuthProvider, NoAuth
from .formatters import BaseFormatter, JsonFormatter, XmlFormatter

DEFAULT_BASE_ADDRESS = "http://localhost/"
DEFAULT_TIMEOUT = 30000


class HttpMethod(str, Enum):
    """HTTP methods used by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ContentType(str, Enum):
    """Content type used in request and response bodies."""

    JSON = "json"
    XML = "xml"

    @property
    def media_type(self) -> str:
        if self is ContentType.XML:
            return "application/xml"
        return "application/json"

    def create_formatter(self) -> BaseFormatter:
        if self is ContentType.XML:
            return XmlFormatter()
        return JsonFormatter()


class ClientOptions(BaseModel):
    """
    Options used to create a WebApiClient.

    The client reads these once when it is created; changes made afterwards have
    no effect on an existing client.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    base_address: str = Field(
        default=DEFAULT_BASE_ADDRESS, description="Base address used in request calls"
    )
    controller: Optional[str] = Field(default=None, description="Controller called by the client")
    action: Optional[str] = Field(
        default=None, description="Action used when a call does not supply one"
    )
    content_type: ContentType = Field(
        default=ContentType.JSON, description="Content type of requests and responses"
    )
    timeout: int = Field(default=DEFAULT_TIMEOUT, ge=0, description="Call timeout in milliseconds")
    authentication: AuthProvider = Field(default_factory=NoAuth)
    query_prefix: str = Field(
        default="", description="Text placed between the path and a query string"
    )
    debug: bool = Field(default=False, description="Log request and response details")

    @field_validator("base_address")
    @classmethod
    def normalize_base_address(cls, v: str) -> str:
        """Ensure the base address is present and ends with a slash."""
        if not v:
            raise ValueError("base_address is required")
        return v if v.endswith("/") else f"{v}/"

    @property
    def formatter(self) -> BaseFormatter:
        """Formatter matching the current content type."""
        return self.content_type.create_formatter()

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000
