"""OAuth 2.0 access token lifecycle support.

This package provides:
- Immutable OAuth credential sets
- Pluggable access token refreshers (refresh_token grant by default)
- The refresh-and-retry engine for protected operations
- Authorization code flow helpers (authorize URL, callback body)
"""

from .oauth_credentials import OAuthCredentials
from .oauth_util import (
    build_authorize_url,
    build_callback_redirect_url,
    build_oauth2_callback_body,
)
from .refresher import CallableRefresher, CredentialRefresher, RefreshTokenGrantRefresher
from .retry_engine import Operation, RetryEngine, RetryState

__all__ = [
    # Credentials
    "OAuthCredentials",
    # Refreshers
    "CredentialRefresher",
    "RefreshTokenGrantRefresher",
    "CallableRefresher",
    # Retry engine
    "RetryEngine",
    "RetryState",
    "Operation",
    # Authorization code flow
    "build_authorize_url",
    "build_callback_redirect_url",
    "build_oauth2_callback_body",
]
