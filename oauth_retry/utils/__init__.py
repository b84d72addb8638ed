"""Utility modules for the OAuth retry library."""

from .encoding import decode_state, encode_state
from .errors import (
    ConfigurationError,
    FailureKind,
    MissingCredentialFieldError,
    OAuthConfigurationError,
    OAuthRetryError,
    OperationError,
    ResponseError,
    TokenRefreshError,
    classify_status,
    status_code_of,
)
from .logging_config import setup_logging

__all__ = [
    "ConfigurationError",
    "FailureKind",
    "MissingCredentialFieldError",
    "OAuthConfigurationError",
    "OAuthRetryError",
    "OperationError",
    "ResponseError",
    "TokenRefreshError",
    "classify_status",
    "decode_state",
    "encode_state",
    "setup_logging",
    "status_code_of",
]
