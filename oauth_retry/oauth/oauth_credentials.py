"""OAuth credential sets passed through the retry engine.

A credential set is an immutable value: refreshing produces a new instance, so
concurrent operations holding the original credentials are unaffected.
"""

import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from typing import Any

from ..utils.errors import MissingCredentialFieldError

# camelCase keys used by callers that store credentials as plain JSON documents
_FIELD_ALIASES = {
    "accessToken": "access_token",
    "refreshToken": "refresh_token",
    "oauth2ConsumerKey": "consumer_key",
    "oauth2ConsumerSecret": "consumer_secret",
    "originServerTokenRequestUrl": "token_request_url",
    "tokenType": "token_type",
    "expiresIn": "expires_in",
    "issuedAt": "issued_at",
}


@dataclass(frozen=True)
class OAuthCredentials:
    """Caller's authorization state for one remote principal."""

    access_token: str | None = None
    refresh_token: str | None = None
    consumer_key: str | None = None
    consumer_secret: str | None = None
    token_request_url: str | None = None

    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str | None = None
    issued_at: float | None = None  # Unix timestamp

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check if the access token is expired or will expire soon.

        Args:
            buffer_seconds: Consider token expired if it expires within this many seconds

        Returns:
            True if token is expired or will expire within buffer_seconds
        """
        if self.expires_in is None or self.issued_at is None:
            # No expiration info, assume valid
            return False

        expires_at = self.issued_at + self.expires_in
        return time.time() >= (expires_at - buffer_seconds)

    def authorization_header(self) -> dict[str, str]:
        """Authorization header for the current access token (empty if none)."""
        if not self.access_token:
            return {}
        return {"Authorization": f"{self.token_type} {self.access_token}"}

    def require(self, *fields: str) -> None:
        """Raise MissingCredentialFieldError for the first empty field."""
        for name in fields:
            if not getattr(self, name):
                raise MissingCredentialFieldError(name)

    def with_token_response(self, response_data: Mapping[str, Any]) -> "OAuthCredentials":
        """Create refreshed credentials from a token endpoint response.

        The refresh token is replaced only when the provider rotates it.

        Args:
            response_data: JSON response from token endpoint

        Returns:
            New OAuthCredentials with issued_at set to current time
        """
        return replace(
            self,
            access_token=response_data["access_token"],
            token_type=response_data.get("token_type") or self.token_type,
            expires_in=response_data.get("expires_in"),
            scope=response_data.get("scope", self.scope),
            refresh_token=response_data.get("refresh_token") or self.refresh_token,
            issued_at=time.time(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OAuthCredentials":
        """Create from a mapping using snake_case or camelCase keys.

        Unknown keys are ignored.
        """
        known = {f for f in cls.__dataclass_fields__}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)
