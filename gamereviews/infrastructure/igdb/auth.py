"""Twitch OAuth client-credentials exchange for IGDB access tokens.

The token is obtained once per process and never refreshed; runs are
short-lived and finish well before it expires.
"""

import logging
from typing import Optional

import httpx

from gamereviews.domain.errors import AuthenticationError, ConfigurationError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URL = "https://id.twitch.tv/oauth2/token"


async def request_access_token(
    http_client: httpx.AsyncClient,
    client_id: str,
    client_secret: str,
    token_url: str = DEFAULT_TOKEN_URL,
) -> str:
    """Exchanges a client ID/secret pair for a bearer token.

    Args:
        http_client: The HTTP client to send the request with.
        client_id: Twitch application client ID.
        client_secret: Twitch application client secret.
        token_url: The OAuth token endpoint.

    Returns:
        The access token string.

    Raises:
        TransportError: If the token endpoint cannot be reached.
        AuthenticationError: On a non-success status or an unusable body.
    """
    params = {
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "client_credentials",
    }
    try:
        response = await http_client.post(token_url, params=params)
    except httpx.HTTPError as e:
        logger.error(f"Cannot reach token endpoint {token_url}: {e}")
        raise TransportError(token_url, e) from e

    if not response.is_success:
        raise AuthenticationError(
            f"Token exchange failed with HTTP {response.status_code}: {response.text}"
        )

    try:
        body = response.json()
    except ValueError as e:
        raise AuthenticationError(f"invalid response from twitch: {response.text!r}") from e

    access_token = body.get("access_token") if isinstance(body, dict) else None
    if not isinstance(access_token, str) or not access_token:
        raise AuthenticationError(f"invalid response from twitch: {response.text!r}")

    logger.info("Obtained a new Twitch access token.")
    return access_token


async def resolve_access_token(
    http_client: httpx.AsyncClient,
    client_id: Optional[str],
    client_secret: Optional[str],
    access_token: Optional[str] = None,
    token_url: str = DEFAULT_TOKEN_URL,
) -> str:
    """Returns a pre-supplied token, or exchanges credentials for one.

    Raises:
        ConfigurationError: If a required credential is missing.
    """
    if not client_id:
        raise ConfigurationError("IGDB_TWITCH_CLIENT_ID is not set.")
    if access_token:
        logger.info("Found an access token in environment")
        return access_token
    if not client_secret:
        raise ConfigurationError("IGDB_TWITCH_CLIENT_SECRET is not set and no TWITCH_ACCESS_TOKEN was supplied.")
    return await request_access_token(http_client, client_id, client_secret, token_url)
