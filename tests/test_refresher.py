"""Tests for access token refreshers."""

from dataclasses import replace
from unittest.mock import AsyncMock

import httpx
import pytest

from oauth_retry.core.transport import HttpxTransport
from oauth_retry.oauth.oauth_credentials import OAuthCredentials
from oauth_retry.oauth.refresher import (
    CallableRefresher,
    CredentialRefresher,
    RefreshTokenGrantRefresher,
)
from oauth_retry.utils.errors import (
    MissingCredentialFieldError,
    OperationError,
    ResponseError,
)
from tests.helpers import TOKEN_URL, make_response


@pytest.fixture
def token_transport() -> AsyncMock:
    """Transport stub answering like a token endpoint."""
    transport = AsyncMock(spec=HttpxTransport)
    transport.send = AsyncMock(
        return_value=make_response(
            200,
            {"access_token": "new_access", "token_type": "Bearer", "expires_in": 3600},
            url=TOKEN_URL,
        )
    )
    return transport


class TestRefreshTokenGrantRefresher:
    """Tests for the default refresh_token grant."""

    @pytest.mark.asyncio
    async def test_posts_refresh_grant(self, token_transport, credentials):
        """Test the request sent to the token endpoint."""
        refresher = RefreshTokenGrantRefresher(token_transport)

        await refresher.refresh({}, credentials)

        token_transport.send.assert_awaited_once_with(
            TOKEN_URL,
            "POST",
            {
                "grant_type": "refresh_token",
                "refresh_token": "test_refresh_token_67890",
                "client_id": "test_client_id",
                "client_secret": "test_client_secret",  # pragma: allowlist secret
            },
            {"Content-Type": "application/x-www-form-urlencoded"},
        )

    @pytest.mark.asyncio
    async def test_returns_new_credentials(self, token_transport, credentials):
        """Test that a new credential set is returned and the input is unchanged."""
        refresher = RefreshTokenGrantRefresher(token_transport)

        updated = await refresher.refresh({}, credentials)

        assert updated is not credentials
        assert updated.access_token == "new_access"
        assert updated.expires_in == 3600
        assert updated.issued_at is not None
        assert updated.refresh_token == credentials.refresh_token
        assert updated.consumer_key == credentials.consumer_key
        assert credentials.access_token == "expired_access_token"

    @pytest.mark.asyncio
    async def test_rotated_refresh_token_kept(self, token_transport, credentials):
        """Test that a rotated refresh token replaces the old one."""
        token_transport.send.return_value = make_response(
            200, {"access_token": "a2", "refresh_token": "rotated"}
        )

        updated = await RefreshTokenGrantRefresher(token_transport).refresh({}, credentials)

        assert updated.refresh_token == "rotated"

    @pytest.mark.asyncio
    async def test_missing_access_token_in_response(self, token_transport, credentials):
        """Test that a token response without access_token is a failure."""
        token_transport.send.return_value = make_response(200, {"token_type": "Bearer"})

        with pytest.raises(OperationError) as exc_info:
            await RefreshTokenGrantRefresher(token_transport).refresh({}, credentials)

        assert exc_info.value.status_code == 200
        assert "access_token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_response(self, token_transport, credentials):
        """Test that a text token response is a failure."""
        token_transport.send.return_value = make_response(200, "<html>login</html>")

        with pytest.raises(OperationError):
            await RefreshTokenGrantRefresher(token_transport).refresh({}, credentials)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["refresh_token", "token_request_url"])
    async def test_missing_fields_fail_before_request(self, token_transport, credentials, field):
        """Test that incomplete credentials are rejected without contacting the provider."""
        incomplete = replace(credentials, **{field: None})

        with pytest.raises(MissingCredentialFieldError) as exc_info:
            await RefreshTokenGrantRefresher(token_transport).refresh({}, incomplete)

        assert exc_info.value.field == field
        token_transport.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self, token_transport, credentials):
        """Test that token endpoint errors propagate with their status."""
        token_transport.send.side_effect = ResponseError(
            make_response(401, {"error": "invalid_client"}, url=TOKEN_URL)
        )

        with pytest.raises(ResponseError) as exc_info:
            await RefreshTokenGrantRefresher(token_transport).refresh({}, credentials)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_network_failure_propagates(self, token_transport, credentials):
        """Test that connection errors are not wrapped."""
        token_transport.send.side_effect = httpx.ConnectError("Connection refused")

        with pytest.raises(httpx.ConnectError):
            await RefreshTokenGrantRefresher(token_transport).refresh({}, credentials)


class TestCallableRefresher:
    """Tests for coroutine-backed refreshers."""

    @pytest.mark.asyncio
    async def test_delegates_to_function(self, credentials):
        """Test that the wrapped coroutine receives context and credentials."""
        expected = OAuthCredentials(access_token="signed")
        func = AsyncMock(return_value=expected)
        refresher = CallableRefresher(func)

        result = await refresher.refresh({"ctx": 1}, credentials)

        assert result is expected
        func.assert_awaited_once_with({"ctx": 1}, credentials)

    def test_is_credential_refresher(self):
        """Test that CallableRefresher implements the refresher interface."""
        assert isinstance(CallableRefresher(AsyncMock()), CredentialRefresher)


class TestCredentialRefresherInterface:
    """Tests for the abstract base class."""

    def test_cannot_instantiate_base(self):
        """Test that refresh must be implemented."""
        with pytest.raises(TypeError):
            CredentialRefresher()

    @pytest.mark.asyncio
    async def test_subclass_override(self, credentials):
        """Test a provider-specific subclass."""

        class HeaderSigningRefresher(CredentialRefresher):
            async def refresh(self, context, creds):
                return replace(creds, access_token=f"signed-{creds.consumer_key}")

        updated = await HeaderSigningRefresher().refresh(None, credentials)

        assert updated.access_token == "signed-test_client_id"
