from typing import Any, Dict, List, Optional

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_ERROR_MESSAGE = "Error when trying to call the WebApi. See details for more information"
TIMEOUT_MESSAGE = "Task canceled due to timeout or token cancellation"


class ExceptionDetails(BaseModel):
    """Details of an error reported by the remote API."""

    message: Optional[str] = None
    reason: Optional[str] = None
    stack_trace: Optional[str] = None
    model_state: Dict[str, List[str]] = Field(default_factory=dict)
    exception_type: Optional[str] = None


class WebApiClientError(Exception):
    """Base class for exceptions raised by WebApiClient."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[ExceptionDetails] = None,
        inner_exception: Optional[BaseException] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details
        self.inner_exception = inner_exception
        super().__init__(message)


class ConfigurationError(WebApiClientError):
    """Exception raised for invalid client configuration."""

    pass


class InvalidArgumentError(WebApiClientError):
    """Exception raised when a required argument is missing or empty."""

    def __init__(self, argument: str, message: Optional[str] = None):
        self.argument = argument
        super().__init__(message or f"{argument} parameter is required")


class RequestTimeoutError(WebApiClientError):
    """Exception raised when a call is cancelled or exceeds its deadline."""

    def __init__(self, message: str = TIMEOUT_MESSAGE):
        super().__init__(message, status_code=httpx.codes.REQUEST_TIMEOUT)


class AuthenticationError(WebApiClientError):
    """Exception raised when a bearer token cannot be obtained."""

    def __init__(self, message: str, status_code: int = httpx.codes.UNAUTHORIZED):
        super().__init__(message, status_code=status_code)


class UnexpectedError(WebApiClientError):
    """Exception raised for any other failure during a call (network, serialization)."""

    def __init__(self, inner_exception: BaseException):
        super().__init__(
            "Error when trying to call the WebApi. See inner_exception for more information",
            status_code=httpx.codes.INTERNAL_SERVER_ERROR,
            inner_exception=inner_exception,
        )


class ErrorEnvelope(BaseModel):
    """The JSON error document returned by the remote API."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    message: Optional[str] = Field(default=None, alias="Message")
    exception_message: Optional[str] = Field(default=None, alias="ExceptionMessage")
    exception_type: Optional[str] = Field(default=None, alias="ExceptionType")
    stack_trace: Optional[str] = Field(default=None, alias="StackTrace")
    model_state: Optional[Dict[str, List[str]]] = Field(default=None, alias="ModelState")


class RemoteCallError(WebApiClientError):
    """Exception raised for non-success HTTP responses."""

    def __init__(self, status_code: int, details: ExceptionDetails, response: Any = None):
        self.response = response
        super().__init__(
            details.message or DEFAULT_ERROR_MESSAGE,
            status_code=status_code,
            details=details,
        )

    @property
    def model_state(self) -> Dict[str, List[str]]:
        return self.details.model_state

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RemoteCallError":
        """Create an error instance from a non-success response, parsing its error body."""
        details = ExceptionDetails()
        content = response.text

        try:
            envelope = ErrorEnvelope.model_validate(orjson.loads(content))
        except (orjson.JSONDecodeError, ValidationError):
            # Not an error envelope but may still carry useful information
            if content:
                details.message = content
        else:
            if envelope.exception_message is not None:
                details.message = envelope.exception_message
            else:
                details.message = envelope.message
            details.exception_type = envelope.exception_type
            details.stack_trace = envelope.stack_trace
            details.model_state = envelope.model_state or {}

        details.reason = response.reason_phrase

        return cls(response.status_code, details, response=response)


def translate_error_response(response: httpx.Response) -> RemoteCallError:
    """Convert a non-success response into a RemoteCallError."""
    return RemoteCallError.from_response(response)
