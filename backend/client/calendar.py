"""Google Calendar connection state and token refresh for the dashboard."""

import logging
import time
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from client.api import DashboardAPI, DashboardAPIError
from client.preferences import PreferenceSync
from services.preference_store import Section

logger = logging.getLogger(__name__)

# Refreshed tokens get a fixed lifetime regardless of what Google reports.
REFRESHED_TOKEN_LIFETIME_MS = 60 * 60 * 1000
DEFAULT_EXPIRES_IN_SECONDS = 3600

RECONNECT_MESSAGE = "Session expired. Please reconnect your Google account in Settings → Calendar."
AUTH_FAILED_MESSAGE = "Authentication failed. Please reconnect your Google account."
NO_CALENDARS_MESSAGE = "No calendars configured"

_TOKEN_FIELDS = ("accessToken", "refreshToken", "tokenExpiry")


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    EXPIRED = "expired"


class CalendarSession:
    """Owns the OAuth tokens stored in ``calendarPreferences``."""

    def __init__(
        self,
        api: DashboardAPI,
        preferences: PreferenceSync,
        clock: Callable[[], float] = time.time,
    ):
        self._api = api
        self._preferences = preferences
        self._clock = clock
        self.error: Optional[str] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def calendar_preferences(self) -> dict[str, Any]:
        return dict(self._preferences.get(Section.CALENDAR_PREFERENCES.value, {}))

    def _save(self, calendar: dict[str, Any]) -> None:
        self._preferences.update_section(Section.CALENDAR_PREFERENCES.value, calendar)

    @property
    def state(self) -> ConnectionState:
        prefs = self.calendar_preferences
        if not prefs.get("accessToken"):
            return ConnectionState.DISCONNECTED
        expiry = prefs.get("tokenExpiry")
        if expiry and self._now_ms() >= int(expiry):
            return ConnectionState.EXPIRED
        return ConnectionState.CONNECTED

    def connect_from_redirect(self, query: Mapping[str, str]) -> bool:
        """Store tokens from the OAuth callback redirect's query string."""
        if query.get("oauth_error"):
            self.error = f"Google connection failed: {query['oauth_error']}"
            logger.warning("OAuth callback reported %s", query["oauth_error"])
            return False
        if query.get("oauth_success") != "true" or not query.get("access_token"):
            return False

        try:
            expires_in = int(query.get("expires_in") or DEFAULT_EXPIRES_IN_SECONDS)
        except ValueError:
            expires_in = DEFAULT_EXPIRES_IN_SECONDS

        calendar = self.calendar_preferences
        calendar["accessToken"] = query["access_token"]
        if query.get("refresh_token"):
            calendar["refreshToken"] = query["refresh_token"]
        calendar["tokenExpiry"] = self._now_ms() + expires_in * 1000
        self._save(calendar)
        self.error = None
        logger.info("Google Calendar connected")
        return True

    def disconnect(self) -> None:
        calendar = {k: v for k, v in self.calendar_preferences.items() if k not in _TOKEN_FIELDS}
        self._save(calendar)
        logger.info("Google Calendar disconnected")

    def refresh(self) -> Optional[str]:
        """Exchange the refresh token once; returns the new access token or None.

        A 400/401 answer means the refresh token is dead: all token fields
        are cleared and the user is asked to reconnect.
        """
        calendar = self.calendar_preferences
        refresh_token = calendar.get("refreshToken")
        if not refresh_token:
            self.error = RECONNECT_MESSAGE
            return None

        try:
            tokens = self._api.refresh_token(refresh_token)
        except DashboardAPIError as e:
            logger.warning("Token refresh failed (status=%s)", e.status_code)
            if e.status_code in (400, 401):
                self._save({k: v for k, v in calendar.items() if k not in _TOKEN_FIELDS})
            self.error = RECONNECT_MESSAGE
            return None

        access_token = tokens.get("access_token")
        if not access_token:
            self.error = RECONNECT_MESSAGE
            return None

        self._preferences.merge_section(
            Section.CALENDAR_PREFERENCES.value,
            {"accessToken": access_token, "tokenExpiry": self._now_ms() + REFRESHED_TOKEN_LIFETIME_MS},
        )
        logger.info("Calendar access token refreshed")
        return access_token

    def ensure_fresh_token(self) -> Optional[str]:
        """Current access token, refreshed first if it has expired."""
        state = self.state
        if state is ConnectionState.DISCONNECTED:
            return None
        if state is ConnectionState.EXPIRED:
            return self.refresh()
        return self.calendar_preferences["accessToken"]

    def fetch_events(self) -> list[dict]:
        """Upcoming events for the selected calendars.

        Sets ``self.error`` and returns an empty list when nothing can be shown.
        """
        self.error = None
        calendar_ids = self.calendar_preferences.get("calendarIds") or []
        if not calendar_ids:
            self.error = NO_CALENDARS_MESSAGE
            return []

        access_token = None
        if self.state is not ConnectionState.DISCONNECTED:
            access_token = self.ensure_fresh_token()
            if access_token is None:
                return []

        try:
            result = self._api.calendar_events(calendar_ids, access_token)
        except DashboardAPIError as e:
            if e.status_code == 401 and access_token:
                return self._retry_after_unauthorized(calendar_ids)
            self.error = str(e) or "Failed to load calendar"
            return []

        if result.get("errors"):
            logger.warning("Some calendars failed to load: %s", result["errors"])
        return result.get("events") or []

    def _retry_after_unauthorized(self, calendar_ids: list[str]) -> list[dict]:
        new_token = self.refresh()
        if new_token:
            try:
                return self._api.calendar_events(calendar_ids, new_token).get("events") or []
            except DashboardAPIError as e:
                logger.warning("Calendar retry after refresh failed: %s", e)
        self.error = AUTH_FAILED_MESSAGE
        return []
