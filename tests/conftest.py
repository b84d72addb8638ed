"""Pytest configuration and fixtures for oauth-retry tests."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from oauth_retry.core.config import Settings
from oauth_retry.core.transport import HttpxTransport
from oauth_retry.oauth.oauth_credentials import OAuthCredentials
from tests.helpers import TOKEN_URL, make_response


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        client_url="http://localhost",
        port=8090,
        oauth_redirect_url=None,
        log_dir=tmp_path / "logs",
        _env_file=None,
    )


@pytest.fixture
def credentials() -> OAuthCredentials:
    """Credentials whose access token the remote side has expired."""
    return OAuthCredentials(
        access_token="expired_access_token",
        refresh_token="test_refresh_token_67890",
        consumer_key="test_client_id",
        consumer_secret="test_client_secret",  # pragma: allowlist secret
        token_request_url=TOKEN_URL,
    )


@pytest.fixture
def refreshed_credentials(credentials: OAuthCredentials) -> OAuthCredentials:
    """Credentials as returned by a successful refresh."""
    return OAuthCredentials(
        access_token="fresh_access_token",
        refresh_token=credentials.refresh_token,
        consumer_key=credentials.consumer_key,
        consumer_secret=credentials.consumer_secret,
        token_request_url=credentials.token_request_url,
    )


@pytest.fixture
def mock_refresher(refreshed_credentials: OAuthCredentials) -> AsyncMock:
    """Refresher stub returning refreshed credentials immediately."""
    refresher = AsyncMock()
    refresher.refresh = AsyncMock(return_value=refreshed_credentials)
    return refresher


@pytest.fixture
def mock_transport() -> AsyncMock:
    """Transport stub whose send() succeeds with HTTP 200."""
    transport = AsyncMock(spec=HttpxTransport)
    transport.send = AsyncMock(return_value=make_response(200, {"ok": True}))
    return transport
