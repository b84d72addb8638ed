"""Access token refreshers.

A refresher performs the provider-specific exchange that trades a refresh
token for a new access token. The retry engine depends only on
``CredentialRefresher.refresh``; ``RefreshTokenGrantRefresher`` is the default
RFC 6749 refresh_token grant, and providers whose exchange differs plug in
their own subclass or wrap a coroutine in ``CallableRefresher``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.transport import FORM_CONTENT_TYPE, Transport
from ..utils.errors import OperationError
from .oauth_credentials import OAuthCredentials

logger = logging.getLogger(__name__)

RefreshFunc = Callable[[Any, OAuthCredentials], Awaitable[OAuthCredentials]]


class CredentialRefresher(ABC):
    """Base class for access token refreshers."""

    @abstractmethod
    async def refresh(self, context: Any, credentials: OAuthCredentials) -> OAuthCredentials:
        """Exchange the current credentials for refreshed ones.

        Args:
            context: Operation context of the call being recovered
            credentials: Credentials that were rejected

        Returns:
            New credentials to retry the operation with

        Raises:
            Exception: Any failure; status-coded failures keep their status
        """
        pass


class RefreshTokenGrantRefresher(CredentialRefresher):
    """Default refresher: POST a refresh_token grant to the token endpoint."""

    def __init__(self, transport: Transport):
        """Initialize the refresher.

        Args:
            transport: Transport used for the token endpoint exchange
        """
        self.transport = transport

    def build_refresh_body(self, credentials: OAuthCredentials) -> dict[str, str]:
        """Form body for the refresh_token grant."""
        return {
            "grant_type": "refresh_token",
            "refresh_token": credentials.refresh_token or "",
            "client_id": credentials.consumer_key or "",
            "client_secret": credentials.consumer_secret or "",
        }

    async def refresh(self, context: Any, credentials: OAuthCredentials) -> OAuthCredentials:
        """Refresh an access token using the credentials' refresh token.

        Raises:
            MissingCredentialFieldError: If the refresh token or endpoint is missing
            ResponseError: If the token endpoint answers with an error status
            OperationError: If the token response carries no access token
        """
        credentials.require("refresh_token", "token_request_url")

        response = await self.transport.send(
            credentials.token_request_url,
            "POST",
            self.build_refresh_body(credentials),
            {"Content-Type": FORM_CONTENT_TYPE},
        )

        token_response = response.entity
        if not isinstance(token_response, dict) or not token_response.get("access_token"):
            raise OperationError(
                response.status_code,
                detail=token_response,
                message="Token response missing 'access_token' field",
            )

        logger.debug(f"Received new access token from {credentials.token_request_url}")
        return credentials.with_token_response(token_response)


class CallableRefresher(CredentialRefresher):
    """Adapts a plain coroutine function to the refresher interface.

    Example:
        async def refresh_with_signature(context, credentials):
            ...
            return replace(credentials, access_token=new_token)

        engine = RetryEngine(refresher=CallableRefresher(refresh_with_signature))
    """

    def __init__(self, func: RefreshFunc):
        self.func = func

    async def refresh(self, context: Any, credentials: OAuthCredentials) -> OAuthCredentials:
        return await self.func(context, credentials)
