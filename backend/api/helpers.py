"""Shared API helpers for route handlers.

Dependency providers for the preference store and upstream clients, and
the typed-empty error response every proxy route returns on failure.
"""

from functools import lru_cache
from typing import Any

from fastapi.responses import JSONResponse

from config import settings
from database import get_session_local
from integrations.espn_client import EspnClient
from integrations.exceptions import IntegrationAPIError, IntegrationError
from integrations.google_calendar_client import GoogleCalendarClient
from integrations.google_oauth_client import GoogleOAuthClient
from integrations.ticketmaster_client import TicketmasterClient
from integrations.weather_client import WeatherClient
from services.preference_store import PreferenceStore, build_preference_store


@lru_cache
def get_preference_store() -> PreferenceStore:
    """Tiered preference store built from settings (cached)."""
    return build_preference_store(
        get_session_local(),
        settings.USER_DATA_PATH,
        settings.DASHBOARD_PASSWORD,
    )


@lru_cache
def get_espn_client() -> EspnClient:
    return EspnClient(timeout=settings.HTTP_TIMEOUT_SECONDS)


@lru_cache
def get_ticketmaster_client() -> TicketmasterClient:
    return TicketmasterClient(
        settings.TICKETMASTER_API_KEY, timeout=settings.HTTP_TIMEOUT_SECONDS
    )


@lru_cache
def get_calendar_client() -> GoogleCalendarClient:
    return GoogleCalendarClient(
        settings.GOOGLE_CALENDAR_API_KEY, timeout=settings.HTTP_TIMEOUT_SECONDS
    )


@lru_cache
def get_oauth_client() -> GoogleOAuthClient:
    redirect_uri = settings.GOOGLE_REDIRECT_URI or (
        f"{settings.DASHBOARD_URL.rstrip('/')}/api/oauth/callback"
    )
    return GoogleOAuthClient(
        settings.GOOGLE_CLIENT_ID,
        settings.GOOGLE_CLIENT_SECRET,
        redirect_uri,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


@lru_cache
def get_weather_client() -> WeatherClient:
    return WeatherClient(timeout=settings.HTTP_TIMEOUT_SECONDS)


def error_status(exc: IntegrationError) -> int:
    """Mirror the upstream status for API errors; anything else is a 500."""
    if isinstance(exc, IntegrationAPIError) and exc.status_code:
        return exc.status_code
    return 500


def error_response(message: str, status_code: int = 500, **empty: Any) -> JSONResponse:
    """A typed empty result: ``{"error": message, <entity>: <empty value>}``.

    Args:
        message: Human-readable error for the ``error`` field.
        status_code: HTTP status to respond with.
        **empty: Entity keys and their empty values (e.g. ``events=[]``).
    """
    return JSONResponse(status_code=status_code, content={"error": message, **empty})
