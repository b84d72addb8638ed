"""OAuth 2.0 authorization code flow helpers.

Builds the provider authorization redirect and the token request body used
when the provider calls back with an authorization code.
"""

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from ..core.config import Settings
from ..utils.encoding import encode_state
from ..utils.errors import MissingCredentialFieldError

logger = logging.getLogger(__name__)

# Provider configuration keys and their snake_case aliases
_CONF_KEYS = {
    "oauth2ConsumerKey": "consumer_key",
    "oauth2ConsumerSecret": "consumer_secret",
    "originServerAuthorizationUrl": "authorization_url",
}


def _conf_value(oauth2_conf: Mapping[str, Any], key: str, required: bool = True) -> Any:
    value = oauth2_conf.get(key) or oauth2_conf.get(_CONF_KEYS[key])
    if required and not value:
        raise MissingCredentialFieldError(key, source="OAuth2 configuration")
    return value


def build_callback_redirect_url(settings: Settings) -> str:
    """Redirect URI the provider sends authorization codes to."""
    return settings.callback_url


def build_authorize_url(
    oauth2_conf: Mapping[str, Any],
    callback: str,
    state: Mapping[str, Any] | None = None,
    settings: Settings | None = None,
) -> dict[str, str]:
    """Build the provider authorization URL for the authorization code flow.

    The caller's callback URL travels inside the encoded ``state`` parameter so
    the callback handler can send the user back where they started.

    Args:
        oauth2_conf: Provider configuration (originServerAuthorizationUrl, oauth2ConsumerKey)
        callback: URL to return the user to once authorization completes
        state: Extra values to carry through the redirect
        settings: Settings providing the redirect URI (default: loaded from env)

    Returns:
        Dict with the authorization URL under "url"

    Raises:
        MissingCredentialFieldError: If a required configuration key is missing
    """
    settings = settings or Settings()
    authorization_url = _conf_value(oauth2_conf, "originServerAuthorizationUrl")
    consumer_key = _conf_value(oauth2_conf, "oauth2ConsumerKey")

    state_values: dict[str, Any] = {"jiveRedirectUrl": callback}
    if state:
        state_values.update(state)

    query = urlencode(
        {
            "state": encode_state(state_values),
            "redirect_uri": build_callback_redirect_url(settings),
            "client_id": consumer_key,
            "response_type": "code",
        }
    )
    separator = "&" if "?" in authorization_url else "?"

    logger.debug(f"Built authorization URL for {authorization_url}")
    return {"url": f"{authorization_url}{separator}{query}"}


def build_oauth2_callback_body(
    oauth2_conf: Mapping[str, Any],
    code: str,
    extra_params: Mapping[str, Any] | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Build the authorization_code grant body for the token endpoint.

    Args:
        oauth2_conf: Provider configuration (oauth2ConsumerKey, oauth2ConsumerSecret)
        code: Authorization code received on the callback
        extra_params: Provider-specific parameters; these override the defaults
        settings: Settings providing the redirect URI (default: loaded from env)

    Returns:
        Form body for the token request
    """
    settings = settings or Settings()
    body: dict[str, Any] = {
        "grant_type": "authorization_code",
        "client_id": _conf_value(oauth2_conf, "oauth2ConsumerKey"),
        "client_secret": _conf_value(oauth2_conf, "oauth2ConsumerSecret", required=False),
        "redirect_uri": build_callback_redirect_url(settings),
        "code": code,
    }

    if extra_params:
        body.update(extra_params)

    return body
