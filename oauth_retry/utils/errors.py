"""Error types for the OAuth retry library."""

from enum import Enum
from typing import Any

import httpx


class OAuthRetryError(Exception):
    """Base exception for OAuth retry errors."""

    pass


class OperationError(OAuthRetryError):
    """Raised when an operation fails with a status-coded response.

    This is the failure signal the retry engine classifies. Operations that
    wrap their own HTTP stack may raise it (or ``httpx.HTTPStatusError``);
    any other exception is treated as an opaque transport failure.
    """

    def __init__(self, status_code: int, detail: Any = None, message: str | None = None):
        super().__init__(message or f"Operation failed with HTTP {status_code}")
        self.status_code = status_code
        self.detail = detail


class ResponseError(OperationError):
    """Raised by the transport when the remote answers with an error status."""

    def __init__(self, response: Any, message: str | None = None):
        super().__init__(
            response.status_code,
            detail=response.entity,
            message=message or f"HTTP {response.status_code} from {response.url}",
        )
        self.response = response


class TokenRefreshError(OAuthRetryError):
    """Raised when the access token refresh exchange itself fails.

    Attributes:
        status_code: Status code of the failed refresh, if it had one
        message: Fixed description of the failure
        details: The refresher's original exception
    """

    MESSAGE = "Error refreshing token. Response in details field"

    def __init__(self, status_code: int | None, details: BaseException):
        super().__init__(self.MESSAGE)
        self.status_code = status_code
        self.message = self.MESSAGE
        self.details = details


# Configuration errors
class ConfigurationError(OAuthRetryError):
    """Raised when configuration is missing or invalid."""

    pass


class OAuthConfigurationError(ConfigurationError):
    """Raised when OAuth credentials or provider configuration are unusable."""

    pass


class MissingCredentialFieldError(OAuthConfigurationError):
    """Raised when a required credential or provider field is missing."""

    def __init__(self, field: str, source: str = "OAuth credentials"):
        super().__init__(f"{source} missing '{field}' field")
        self.field = field
        self.source = source


class FailureKind(Enum):
    """How the retry engine treats a failed attempt."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    OTHER = "other"
    TRANSPORT = "transport"


def status_code_of(error: BaseException) -> int | None:
    """Extract the HTTP status code carried by a failure, if any.

    Args:
        error: Exception raised by an operation or refresher

    Returns:
        Status code for status-coded failures, None for opaque failures
    """
    if isinstance(error, OperationError):
        return error.status_code
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def classify_status(status_code: int | None) -> FailureKind:
    """Map a failure's status code onto a FailureKind."""
    if status_code is None:
        return FailureKind.TRANSPORT
    if status_code == 400:
        return FailureKind.BAD_REQUEST
    if status_code in (401, 403):
        return FailureKind.UNAUTHORIZED
    return FailureKind.OTHER
