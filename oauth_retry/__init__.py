"""OAuth Retry - access token refresh-and-retry for OAuth2-protected HTTP calls."""

__version__ = "0.1.0"

from .core.config import Settings
from .core.transport import HttpxTransport, Transport, TransportResponse
from .oauth import (
    CallableRefresher,
    CredentialRefresher,
    OAuthCredentials,
    RefreshTokenGrantRefresher,
    RetryEngine,
    RetryState,
    build_authorize_url,
    build_oauth2_callback_body,
)
from .utils.errors import (
    OAuthRetryError,
    OperationError,
    ResponseError,
    TokenRefreshError,
)
from .utils.logging_config import setup_logging

__all__ = [
    "RetryEngine",
    "RetryState",
    "OAuthCredentials",
    "Settings",
    "setup_logging",
    # Collaborators
    "Transport",
    "HttpxTransport",
    "TransportResponse",
    "CredentialRefresher",
    "RefreshTokenGrantRefresher",
    "CallableRefresher",
    # Authorization code flow
    "build_authorize_url",
    "build_oauth2_callback_body",
    # Errors
    "OAuthRetryError",
    "OperationError",
    "ResponseError",
    "TokenRefreshError",
]
