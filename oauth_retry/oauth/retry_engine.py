"""Access token refresh-and-retry engine.

The engine runs an operation with OAuth credentials and recovers from
credential expiry with exactly one refresh-and-retry cycle:

1. Attempt the operation.
2. If it fails with 401 or 403, run the token refresh exchange.
3. If the refresh succeeds, retry the operation once with the new credentials.

Any other failure, a failed refresh, or a second 401/403 is surfaced to the
caller. Transport failures without a status code pass through untouched.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any

from ..core.config import Settings
from ..core.transport import HttpxTransport, Transport, TransportResponse
from ..utils.errors import (
    FailureKind,
    TokenRefreshError,
    classify_status,
    status_code_of,
)
from .oauth_credentials import OAuthCredentials
from .refresher import CredentialRefresher, RefreshTokenGrantRefresher

Operation = Callable[[Any, OAuthCredentials], Awaitable[Any]]


class RetryState(Enum):
    """States of a single perform_with_retry call."""

    ATTEMPTING = "attempting"
    REFRESHING = "refreshing"
    RETRYING = "retrying"
    DONE = "done"


def _with_authorization(
    headers: Mapping[str, str], credentials: OAuthCredentials
) -> dict[str, str]:
    """Merge the credentials' Authorization header over the caller's headers."""
    auth_header = credentials.authorization_header()
    if not auth_header:
        return dict(headers)
    merged = {k: v for k, v in headers.items() if k.lower() != "authorization"}
    merged.update(auth_header)
    return merged


class RetryEngine:
    """Runs operations with one token-refresh-and-retry cycle on 401/403.

    Usage:
        engine = RetryEngine(settings=Settings())

        # Plain request; Authorization header comes from the credentials
        response = await engine.perform_operation(
            "https://api.example.com/items",
            oauth={"access_token": "...", "refresh_token": "...", ...},
        )

        # Pre-built operation
        async def push(context, credentials):
            return await transport.send(
                context["url"], "POST", context["payload"],
                credentials.authorization_header(),
            )

        result = await engine.perform_with_retry(push, {"url": url, "payload": p}, creds)

        # Provider-specific refresh exchange
        engine = RetryEngine(refresher=MyProviderRefresher(transport))
    """

    def __init__(
        self,
        refresher: CredentialRefresher | None = None,
        transport: Transport | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize the engine.

        Args:
            refresher: Token refresher (default: refresh_token grant via transport)
            transport: Transport for perform_operation and the default refresher
                (default: HttpxTransport built from settings)
            settings: Settings for the default transport (default: loaded from env)
            logger: Logger for engine decisions (default: module logger)
        """
        self.settings = settings or Settings()
        self.transport = transport or HttpxTransport(settings=self.settings)
        self.refresher = refresher or RefreshTokenGrantRefresher(self.transport)
        self.logger = logger or logging.getLogger(__name__)

    async def perform_operation(
        self,
        url: str,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        oauth: OAuthCredentials | Mapping[str, Any] | None = None,
        post_body: Any = None,
        request_options: dict[str, Any] | None = None,
    ) -> TransportResponse:
        """Perform one HTTP request, refreshing the access token if it is rejected.

        Without credentials the request is sent once, unauthenticated, and no
        refresh logic runs.

        Args:
            url: Request URL
            method: HTTP method
            headers: Request headers
            oauth: Credentials, as OAuthCredentials or a mapping of credential fields
            post_body: Request body
            request_options: Extra options forwarded to the transport

        Returns:
            TransportResponse of the successful attempt

        Raises:
            OperationError: If the request fails and cannot be recovered
            TokenRefreshError: If the token refresh fails
        """
        headers = dict(headers or {})

        if oauth is None:
            self.logger.warning("No oauth credentials found. Continuing without them.")
            return await self.transport.send(url, method, post_body, headers, request_options)

        credentials = (
            oauth if isinstance(oauth, OAuthCredentials) else OAuthCredentials.from_dict(oauth)
        )

        async def operation(context: Any, current: OAuthCredentials) -> TransportResponse:
            return await self.transport.send(
                url,
                method,
                post_body,
                _with_authorization(headers, current),
                request_options,
            )

        return await self.perform_with_retry(operation, {}, credentials)

    async def perform_with_retry(
        self, operation: Operation, context: Any, credentials: OAuthCredentials
    ) -> Any:
        """Run an operation allowing one refresh-and-retry cycle.

        Args:
            operation: Coroutine function of (context, credentials)
            context: Caller state passed unchanged to the operation and refresher
            credentials: Credentials for the first attempt

        Returns:
            The operation's result
        """
        return await self.handle_operation(operation, context, credentials, retry_allowed=True)

    async def handle_operation(
        self,
        operation: Operation,
        context: Any,
        credentials: OAuthCredentials,
        retry_allowed: bool = True,
    ) -> Any:
        """Attempt an operation and, if permitted, refresh and retry it once.

        The operation runs at most twice: the retry always runs with
        retry_allowed=False, so a failure of the retry is terminal.

        Args:
            operation: Coroutine function of (context, credentials)
            context: Caller state passed unchanged
            credentials: Credentials for the first attempt
            retry_allowed: Whether a 401/403 may trigger a refresh

        Returns:
            The result of the successful attempt

        Raises:
            Exception: The failure that ended the call
        """
        state = self._enter(RetryState.ATTEMPTING)

        while True:
            try:
                result = await operation(context, credentials)
            except Exception as error:
                # A failed retry is never refreshed again
                retry_allowed = retry_allowed and state is RetryState.ATTEMPTING
                refreshing = (
                    retry_allowed
                    and classify_status(status_code_of(error)) is FailureKind.UNAUTHORIZED
                )
                state = self._enter(RetryState.REFRESHING if refreshing else RetryState.DONE)

                try:
                    credentials = await self.classify_and_recover(
                        context, credentials, error, retry_allowed
                    )
                except Exception:
                    if state is not RetryState.DONE:
                        self._enter(RetryState.DONE)
                    raise

                state = self._enter(RetryState.RETRYING)
                self.logger.debug("Retrying operation.")
                continue

            self._enter(RetryState.DONE)
            return result

    def _enter(self, state: RetryState) -> RetryState:
        self.logger.debug(f"Retry state: {state.value}")
        return state

    async def classify_and_recover(
        self,
        context: Any,
        credentials: OAuthCredentials,
        error: Exception,
        retry_allowed: bool,
    ) -> OAuthCredentials:
        """Decide whether a failed attempt is recoverable and recover if so.

        Args:
            context: Caller state of the failed operation
            credentials: Credentials the attempt used
            error: The attempt's failure
            retry_allowed: Whether a refresh may still be attempted

        Returns:
            Refreshed credentials for the retry

        Raises:
            Exception: The original error when it is not recoverable
            TokenRefreshError: If the refresh exchange fails
        """
        status = status_code_of(error)
        kind = classify_status(status)

        if kind is FailureKind.TRANSPORT:
            raise error

        if kind is FailureKind.BAD_REQUEST:
            self.logger.info(f"Bad request (400): {error}")
            raise error

        if kind is FailureKind.UNAUTHORIZED:
            self.logger.info(f"Unauthorized ({status}): {error}")

            if not retry_allowed:
                self.logger.error(
                    f"Not executing refresh flow. Failure on second attempt ({status})."
                )
                raise error

            return await self.refresh_and_recover(context, credentials)

        raise error

    async def refresh_and_recover(
        self, context: Any, credentials: OAuthCredentials
    ) -> OAuthCredentials:
        """Run the refresher and translate its failure.

        Args:
            context: Caller state passed to the refresher
            credentials: Credentials that were rejected

        Returns:
            Refreshed credentials

        Raises:
            TokenRefreshError: Carrying the refresher's status code and failure
        """
        self.logger.debug("Trying refresh flow")

        try:
            updated = await self.refresher.refresh(context, credentials)
        except Exception as e:
            self.logger.warning(f"Refresh token flow failed: {e}")
            raise TokenRefreshError(status_code_of(e), details=e) from e

        self.logger.debug("Successfully refreshed token.")
        return updated
