"""Dashboard composition: boot sequence, widget refreshes, and a snapshot view."""

import logging
import time
from typing import Any, Callable, Mapping, Optional

from client.api import DashboardAPI, DashboardAPIError
from client.cache import SPORTS, WEATHER, DataCache, LocalStorage, SessionStorage, initialize_session
from client.calendar import CalendarSession
from client.concerts import load_concerts
from client.messages import poll_messages, unread_count
from client.motivation import daily_motivation
from client.notes import list_notes
from client.preferences import PreferenceSync
from client.scheduler import (
    CALENDAR_TASK,
    CONCERTS_TASK,
    MESSAGES_TASK,
    SPORTS_TASK,
    RefreshScheduler,
)
from client.sports import load_sports
from schemas.preference import DEFAULT_DASHBOARD_NAME
from services.preference_store import Section

logger = logging.getLogger(__name__)


class Dashboard:
    """One dashboard "tab": owns the cache, preferences and widget state."""

    def __init__(
        self,
        api: DashboardAPI,
        local_storage: Optional[LocalStorage] = None,
        session_storage: Optional[SessionStorage] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.api = api
        self.local_storage = local_storage or LocalStorage()
        self.session_storage = session_storage or SessionStorage()
        self._clock = clock
        self.cache = DataCache(self.local_storage, clock=clock)
        self.preferences = PreferenceSync(api, self.local_storage)
        self.calendar = CalendarSession(api, self.preferences, clock=clock)
        self.scheduler = RefreshScheduler(self.cache, clock=clock)

        self.calendar_events: list[dict] = []
        self.concerts: list[dict] = []
        self.motivation: Optional[str] = None
        self.unread_messages = 0

    def boot(self, redirect_query: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
        """First paint: session check, preference load, then every widget once."""
        reloaded = initialize_session(self.session_storage, self.cache, clock=self._clock)
        logger.info("Dashboard boot (%s)", "reload" if reloaded else "first load")

        self.preferences.load()
        if redirect_query:
            self.calendar.connect_from_redirect(redirect_query)

        self.scheduler.register(SPORTS_TASK, lambda: self.refresh_sports(force=True))
        self.scheduler.register(CALENDAR_TASK, self.refresh_calendar)
        self.scheduler.register(CONCERTS_TASK, self.refresh_concerts)
        self.scheduler.register(MESSAGES_TASK, self.refresh_messages)

        self.refresh_weather()
        self.refresh_sports()
        self.refresh_concerts()
        self.refresh_calendar()
        self.motivation = daily_motivation(self.api, self.local_storage)
        self.unread_messages = unread_count(self.preferences)
        for task in (SPORTS_TASK, CALENDAR_TASK, CONCERTS_TASK, MESSAGES_TASK):
            self.scheduler.mark(task)
        return self.snapshot()

    def _appearance(self) -> dict:
        return self.preferences.get(Section.APPEARANCE_PREFERENCES.value, {})

    def _weather_location(self) -> dict:
        location = (self.preferences.get(Section.CONCERT_PREFERENCES.value, {}) or {}).get("location") or {}
        if location.get("lat") is not None and location.get("lon") is not None:
            return {"lat": location["lat"], "lon": location["lon"]}
        return {"location": location.get("city")}

    def refresh_weather(self, force: bool = False) -> Optional[dict]:
        cached = self.cache.get(WEATHER)
        if cached and not force:
            return cached
        try:
            weather = self.api.weather(**self._weather_location())
        except DashboardAPIError as e:
            logger.warning("Weather unavailable: %s", e)
            return cached
        self.cache.set(WEATHER, weather)
        return weather

    def refresh_sports(self, force: bool = False) -> dict:
        return load_sports(self.api, self.preferences, self.cache, force=force)

    def refresh_concerts(self, force: bool = False) -> list[dict]:
        self.concerts = load_concerts(self.api, self.preferences, self.cache, force=force)
        return self.concerts

    def refresh_calendar(self) -> list[dict]:
        self.calendar_events = self.calendar.fetch_events()
        return self.calendar_events

    def refresh_messages(self) -> int:
        self.unread_messages = poll_messages(self.api, self.preferences)
        return self.unread_messages

    def snapshot(self) -> dict[str, Any]:
        """Everything the visible widgets would render, respecting visibility flags."""
        appearance = self._appearance()
        widgets: dict[str, Any] = {}
        if appearance.get("showWeather", True):
            widgets["weather"] = self.cache.get(WEATHER)
        if appearance.get("showSports", True):
            widgets["sports"] = self.cache.get(SPORTS) or {"teams": []}
        if appearance.get("showConcerts", True):
            widgets["concerts"] = self.concerts
        if appearance.get("showMotivation", True):
            widgets["motivation"] = self.motivation
        if appearance.get("showCalendar", True):
            widgets["calendar"] = {"events": self.calendar_events, "error": self.calendar.error}
        if appearance.get("showNotes", True):
            widgets["notes"] = list_notes(self.preferences)

        return {
            "dashboardName": appearance.get("dashboardName") or DEFAULT_DASHBOARD_NAME,
            "darkMode": bool(appearance.get("darkMode", False)),
            "widgetOrder": appearance.get("widgetOrder") or [],
            "leftPanelOrder": appearance.get("leftPanelOrder") or [],
            "unreadMessages": self.unread_messages,
            "widgets": widgets,
        }
