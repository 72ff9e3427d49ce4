"""Pydantic schemas for the preferences document and its sections."""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WidgetId(str, Enum):
    """Dashboard widgets that can be ordered and hidden."""

    WEATHER = "weather"
    SPORTS = "sports"
    CONCERTS = "concerts"
    MOTIVATION = "motivation"
    CALENDAR = "calendar"
    NOTES = "notes"


# Canonical order for each panel; also the order missing ids are appended in.
DEFAULT_WIDGET_ORDER: tuple[str, ...] = (
    WidgetId.WEATHER.value,
    WidgetId.SPORTS.value,
    WidgetId.CONCERTS.value,
    WidgetId.MOTIVATION.value,
)
DEFAULT_LEFT_PANEL_ORDER: tuple[str, ...] = (
    WidgetId.CALENDAR.value,
    WidgetId.NOTES.value,
)

DEFAULT_TEAM_KEY = "25-baseball-mlb"
DEFAULT_DASHBOARD_NAME = "Dad Dashboard"


def normalize_widget_order(order: Any, canonical: tuple[str, ...]) -> list[str]:
    """Return ``order`` restricted to ``canonical`` ids, completed in canonical order.

    Unknown and repeated ids are dropped; ids missing from ``order`` are
    appended in their canonical position order.
    """
    result: list[str] = []
    if isinstance(order, (list, tuple)):
        for widget_id in order:
            if widget_id in canonical and widget_id not in result:
                result.append(widget_id)
    for widget_id in canonical:
        if widget_id not in result:
            result.append(widget_id)
    return result


def dedupe_keys(keys: Any) -> list[str]:
    """De-duplicate a list of keys, keeping the first occurrence of each."""
    if not isinstance(keys, (list, tuple, set)):
        return []
    seen: list[str] = []
    for key in keys:
        if isinstance(key, str) and key not in seen:
            seen.append(key)
    return seen


class _CamelModel(BaseModel):
    """Section model stored with camelCase keys in the preferences document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TeamPreferences(_CamelModel):
    """Selected and favorite teams, keyed by ``{id}-{sport}-{league}``."""

    selected_teams: list[str] = Field(default_factory=list)
    favorite_teams: list[str] = Field(default_factory=list)

    @field_validator("selected_teams", "favorite_teams", mode="before")
    @classmethod
    def unique_keys(cls, v: Any) -> list[str]:
        return dedupe_keys(v)

    def has_legacy_keys(self) -> bool:
        """True when any selected team predates composite keys (no ``-``)."""
        return any("-" not in key for key in self.selected_teams)


class AppearancePreferences(_CamelModel):
    """Theme, widget visibility and widget ordering."""

    dark_mode: bool = False
    show_weather: bool = True
    show_sports: bool = True
    show_notes: bool = True
    show_motivation: bool = True
    show_concerts: bool = True
    show_calendar: bool = True
    dashboard_name: str = DEFAULT_DASHBOARD_NAME
    widget_order: list[str] = Field(default_factory=lambda: list(DEFAULT_WIDGET_ORDER))
    left_panel_order: list[str] = Field(default_factory=lambda: list(DEFAULT_LEFT_PANEL_ORDER))

    @field_validator("widget_order", mode="before")
    @classmethod
    def complete_widget_order(cls, v: Any) -> list[str]:
        return normalize_widget_order(v, DEFAULT_WIDGET_ORDER)

    @field_validator("left_panel_order", mode="before")
    @classmethod
    def complete_left_panel_order(cls, v: Any) -> list[str]:
        return normalize_widget_order(v, DEFAULT_LEFT_PANEL_ORDER)

    @field_validator("dashboard_name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> str:
        return v or DEFAULT_DASHBOARD_NAME


class ConcertLocation(_CamelModel):
    city: Optional[str] = None
    state_code: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None


class ConcertPreferences(_CamelModel):
    favorite_artists: list[str] = Field(default_factory=list)
    favorite_genres: list[str] = Field(default_factory=list)
    location: ConcertLocation = Field(default_factory=ConcertLocation)


class CalendarPreferences(_CamelModel):
    """Calendar selection plus OAuth tokens (``token_expiry`` in epoch millis)."""

    calendar_ids: list[str] = Field(default_factory=list)
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expiry: Optional[int] = None


class Message(BaseModel):
    """A message left for the dashboard owner from the send-message page."""

    id: str
    name: str
    message: str
    created_at: str
    read: bool = False


NoteColor = Literal["yellow", "pink", "blue", "green"]


class Note(BaseModel):
    """A sticky note."""

    model_config = ConfigDict(extra="allow")

    id: str
    content: str
    color: NoteColor = "yellow"
    created_at: str


class PreferenceWrite(BaseModel):
    """Request body for replacing one section."""

    section: Optional[str] = None
    data: Any = None


class PreferencePatch(BaseModel):
    """Request body for shallow-merging fields into one section."""

    section: Optional[str] = None
    updates: Optional[dict[str, Any]] = None


class PasswordCheck(BaseModel):
    password: str = ""


class MessageCreate(BaseModel):
    name: str = ""
    message: str = ""


def default_document(password: str) -> dict[str, Any]:
    """Build the full preferences document created on first access."""
    return {
        "password": password,
        "teamPreferences": TeamPreferences(
            selected_teams=[DEFAULT_TEAM_KEY],
            favorite_teams=[DEFAULT_TEAM_KEY],
        ).to_document(),
        "appearancePreferences": AppearancePreferences().to_document(),
        "concertPreferences": ConcertPreferences().to_document(),
        "calendarPreferences": CalendarPreferences().to_document(),
        "messages": [],
        "notes": [],
        "dailyMotivation": None,
        "dailyMotivationDate": None,
        "dailyMotivationData": None,
    }
