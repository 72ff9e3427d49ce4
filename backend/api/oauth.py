"""Google OAuth authorization-code flow.

Tokens are handed to the dashboard through the callback redirect and kept
in the preferences document; nothing is stored in a server session.
"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import RedirectResponse

from api.helpers import error_response, error_status, get_oauth_client
from config import settings
from integrations.exceptions import IntegrationConfigError, IntegrationError
from integrations.google_oauth_client import (
    DEFAULT_EXPIRES_IN,
    GoogleOAuthClient,
    generate_state,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/oauth", tags=["oauth"])

STATE_COOKIE = "oauth_state"
STATE_MAX_AGE_SECONDS = 600


def _dashboard_redirect(**params: str) -> RedirectResponse:
    url = f"{settings.DASHBOARD_URL.rstrip('/')}/dashboard?{urlencode(params)}"
    return RedirectResponse(url, status_code=307)


@router.get("/authorize")
def authorize(oauth: GoogleOAuthClient = Depends(get_oauth_client)):
    """Redirect to Google's consent screen with a fresh state nonce."""
    if not oauth.has_client_id:
        return error_response("Google OAuth client ID not configured")

    state = generate_state()
    response = RedirectResponse(oauth.authorization_url(state), status_code=307)
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    logger.info("Starting Google OAuth flow")
    return response


@router.get("/callback")
def callback(
    request: Request,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
):
    """Validate state, exchange the code, and hand tokens to the dashboard."""
    params = request.query_params
    if params.get("error"):
        logger.warning("Google OAuth returned error: %s", params["error"])
        return _dashboard_redirect(oauth_error=params["error"])

    code = params.get("code")
    state = params.get("state")
    if not code or not state:
        return _dashboard_redirect(oauth_error="missing_parameters")

    stored_state = request.cookies.get(STATE_COOKIE)
    if not stored_state or stored_state != state:
        logger.warning("Google OAuth state mismatch")
        return _dashboard_redirect(oauth_error="invalid_state")

    if not oauth.is_configured:
        return _dashboard_redirect(oauth_error="server_config_error")

    try:
        tokens = oauth.exchange_code(code)
    except IntegrationError as e:
        logger.error("Google OAuth code exchange failed: %s", e)
        return _dashboard_redirect(oauth_error="token_exchange_failed")
    except Exception:
        logger.exception("Unexpected error in OAuth callback")
        return _dashboard_redirect(oauth_error="callback_error")

    if not tokens.get("access_token"):
        logger.error("Google OAuth code exchange returned no access token")
        return _dashboard_redirect(oauth_error="token_exchange_failed")

    query = {"oauth_success": "true", "access_token": tokens["access_token"]}
    if tokens.get("refresh_token"):
        query["refresh_token"] = tokens["refresh_token"]
    query["expires_in"] = str(tokens.get("expires_in") or DEFAULT_EXPIRES_IN)

    response = _dashboard_redirect(**query)
    response.delete_cookie(STATE_COOKIE)
    return response


@router.post("/refresh")
def refresh(
    refreshToken: str | None = Body(default=None, embed=True),
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
):
    """Exchange a refresh token for a new access token."""
    if not refreshToken:
        return error_response("Refresh token required", 400)
    try:
        return oauth.refresh_access_token(refreshToken)
    except IntegrationConfigError:
        return error_response("OAuth credentials not configured")
    except IntegrationError as e:
        logger.warning("Google OAuth refresh failed: %s", e)
        return error_response("Failed to refresh token", error_status(e))
