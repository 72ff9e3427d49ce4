"""Google OAuth 2.0 authorization-code and refresh-token exchanges."""

import logging
import secrets
from urllib.parse import urlencode

from integrations.base_client import UpstreamClient
from integrations.exceptions import IntegrationConfigError

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"
DEFAULT_EXPIRES_IN = 3600


def generate_state() -> str:
    """Random nonce for the ``state`` parameter."""
    return secrets.token_urlsafe(24)


class GoogleOAuthClient(UpstreamClient):
    source = "Google OAuth"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, **kwargs):
        super().__init__(**kwargs)
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    @property
    def has_client_id(self) -> bool:
        return bool(self.client_id)

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _require_config(self) -> None:
        if not self.is_configured:
            raise IntegrationConfigError(
                "OAuth credentials not configured", source=self.source
            )

    def authorization_url(self, state: str) -> str:
        if not self.client_id:
            raise IntegrationConfigError(
                "Google OAuth client ID not configured", source=self.source
            )
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": "code",
                "scope": CALENDAR_SCOPE,
                "access_type": "offline",
                "prompt": "consent",
                "state": state,
            }
        )
        return f"{AUTHORIZE_URL}?{query}"

    def exchange_code(self, code: str) -> dict:
        """Trade an authorization code for access and refresh tokens."""
        self._require_config()
        tokens = self._post_json(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        logger.info(
            "Google OAuth: code exchanged (refresh token %s)",
            "issued" if tokens.get("refresh_token") else "not issued",
        )
        return tokens

    def refresh_access_token(self, refresh_token: str) -> dict:
        """Return ``{"access_token", "expires_in"}`` for a refresh token."""
        self._require_config()
        tokens = self._post_json(
            TOKEN_URL,
            data={
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
            },
        )
        logger.info("Google OAuth: access token refreshed")
        return {
            "access_token": tokens.get("access_token"),
            "expires_in": tokens.get("expires_in") or DEFAULT_EXPIRES_IN,
        }
