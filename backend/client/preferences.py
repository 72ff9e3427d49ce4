"""Client-side preference state with optimistic, fire-and-forget persistence."""

import logging
import re
from typing import Any, Optional

from client.api import DashboardAPI, DashboardAPIError
from client.cache import LocalStorage
from schemas.preference import TeamPreferences, default_document
from services.preference_store import REDACTED, Section, normalize_section

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def local_key(section: str) -> str:
    """Local-storage key for a section (``teamPreferences`` -> ``team_preferences``)."""
    return _CAMEL_BOUNDARY.sub("_", section).lower()


class PreferenceSync:
    """In-memory preferences backed by the server tiers and local storage.

    Updates apply to memory first; persistence failures are logged and
    never roll the in-memory state back.
    """

    def __init__(self, api: DashboardAPI, storage: LocalStorage):
        self._api = api
        self._storage = storage
        self.state: dict[str, Any] = {}

    def load(self) -> dict[str, Any]:
        """Boot read: server first, local storage if the server is unavailable."""
        try:
            document = self._api.get_preferences()
            source = "server"
        except DashboardAPIError as e:
            logger.warning("Preferences unavailable from server (%s), using local storage", e)
            document = self._load_local()
            source = "local"

        if source == "server":
            document = self._unmask_calendar(document)
        self.state = {key: normalize_section(key, value) for key, value in document.items()}
        logger.info("Preferences loaded from %s", source)
        self._migrate_legacy_teams()
        return self.state

    def _unmask_calendar(self, document: dict[str, Any]) -> dict[str, Any]:
        """Bulk reads mask OAuth tokens; fetch the calendar section itself when they are set."""
        calendar = document.get(Section.CALENDAR_PREFERENCES.value) or {}
        if REDACTED not in (calendar.get("accessToken"), calendar.get("refreshToken")):
            return document
        try:
            data = self._api.get_preferences(Section.CALENDAR_PREFERENCES.value)
        except DashboardAPIError as e:
            logger.warning("Could not load calendar tokens: %s", e)
            calendar = {k: v for k, v in calendar.items() if v != REDACTED}
        else:
            calendar = data.get(Section.CALENDAR_PREFERENCES.value) or {}
        return {**document, Section.CALENDAR_PREFERENCES.value: calendar}

    def _load_local(self) -> dict[str, Any]:
        document = default_document(password="")
        document.pop(Section.PASSWORD.value)
        for section in list(document):
            stored = self._storage.get(local_key(section))
            if stored is not None:
                document[section] = stored
        return document

    def _migrate_legacy_teams(self) -> None:
        teams = TeamPreferences.model_validate(self.state.get(Section.TEAM_PREFERENCES.value) or {})
        if teams.has_legacy_keys():
            logger.info("Clearing legacy team selection (pre composite keys)")
            self.update_section(
                Section.TEAM_PREFERENCES.value,
                {"selectedTeams": [], "favoriteTeams": []},
            )

    def get(self, section: str, default: Any = None) -> Any:
        value = self.state.get(section)
        return default if value is None else value

    def update_section(self, section: str, value: Any) -> Any:
        """Replace a section in memory, then persist it (best effort)."""
        value = normalize_section(section, value)
        self.state[section] = value
        self._persist(section, value)
        return value

    def merge_section(self, section: str, updates: dict[str, Any]) -> Any:
        """Shallow-merge fields into a section; only ``updates`` go to the server."""
        current = self.state.get(section)
        value = normalize_section(section, {**(current if isinstance(current, dict) else {}), **updates})
        self.state[section] = value
        self._storage.set(local_key(section), value)
        try:
            self._api.patch_section(section, updates)
        except DashboardAPIError as e:
            logger.warning("Failed to merge %s on server, kept locally: %s", section, e)
        return value

    def apply_remote(self, section: str, value: Any) -> None:
        """Adopt a server-side value without writing it back."""
        self.state[section] = value
        self._storage.set(local_key(section), value)

    def _persist(self, section: str, value: Any) -> None:
        self._storage.set(local_key(section), value)
        try:
            self._api.save_section(section, value)
        except DashboardAPIError as e:
            logger.warning("Failed to save %s to server, kept locally: %s", section, e)

    # Team helpers

    def _teams(self) -> TeamPreferences:
        return TeamPreferences.model_validate(self.get(Section.TEAM_PREFERENCES.value, {}))

    def _save_teams(self, teams: TeamPreferences) -> None:
        self.update_section(Section.TEAM_PREFERENCES.value, teams.to_document())

    def add_selected_team(self, key: str) -> None:
        teams = self._teams()
        self._save_teams(
            TeamPreferences(
                selected_teams=teams.selected_teams + [key],
                favorite_teams=teams.favorite_teams,
            )
        )

    def remove_selected_team(self, key: str) -> None:
        """Deselect a team; a deselected team cannot stay a favourite."""
        teams = self._teams()
        self._save_teams(
            TeamPreferences(
                selected_teams=[k for k in teams.selected_teams if k != key],
                favorite_teams=[k for k in teams.favorite_teams if k != key],
            )
        )

    def toggle_favorite_team(self, key: str) -> bool:
        """Flip a team's favourite flag; returns the new flag."""
        teams = self._teams()
        if key in teams.favorite_teams:
            self._save_teams(
                TeamPreferences(
                    selected_teams=teams.selected_teams,
                    favorite_teams=[k for k in teams.favorite_teams if k != key],
                )
            )
            return False
        self._save_teams(
            TeamPreferences(
                selected_teams=teams.selected_teams + [key],
                favorite_teams=teams.favorite_teams + [key],
            )
        )
        return True

    def set_widget_order(self, order: list[str], left_panel: Optional[list[str]] = None) -> dict:
        appearance = dict(self.get(Section.APPEARANCE_PREFERENCES.value, {}))
        appearance["widgetOrder"] = order
        if left_panel is not None:
            appearance["leftPanelOrder"] = left_panel
        return self.update_section(Section.APPEARANCE_PREFERENCES.value, appearance)
