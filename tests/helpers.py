"""Stub collaborators shared by the test modules."""

from typing import Any

import httpx

from oauth_retry.core.transport import TransportResponse
from oauth_retry.oauth.oauth_credentials import OAuthCredentials
from oauth_retry.utils.errors import OperationError

TOKEN_URL = "https://auth.example.com/oauth2/token"
API_URL = "https://api.example.com/v1/items"


class ScriptedOperation:
    """Operation stub that replays a fixed sequence of outcomes.

    Each outcome is either a value to return or an exception to raise; the last
    outcome repeats once the script runs out. Every invocation is recorded with
    the context and credentials it received.
    """

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes)
        self.calls: list[tuple[Any, OAuthCredentials]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(self, context: Any, credentials: OAuthCredentials) -> Any:
        self.calls.append((context, credentials))
        outcome = self.outcomes[min(len(self.calls), len(self.outcomes)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_response(status_code: int = 200, entity: Any = None, url: str = API_URL):
    """Create a TransportResponse for stubs."""
    return TransportResponse(status_code=status_code, entity=entity, url=url)


def failure(status_code: int, detail: Any = None) -> OperationError:
    """Create a status-coded operation failure."""
    return OperationError(status_code, detail=detail)


def mock_http_client(handler) -> httpx.AsyncClient:
    """Create an httpx client whose requests are answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
