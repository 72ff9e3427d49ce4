"""HTTP client for the dashboard server's ``/api`` routes."""

import json
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class DashboardAPIError(Exception):
    """A dashboard API call failed.

    ``status_code`` is None for transport failures (server unreachable).
    """

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class DashboardAPI:
    """Thin wrapper over ``httpx.Client``; every non-2xx raises DashboardAPIError."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise DashboardAPIError(f"{method} {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise DashboardAPIError(
                message or f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )
        return payload

    # Preferences

    def get_preferences(self, section: Optional[str] = None) -> Any:
        params = {"section": section} if section else None
        return self._request("GET", "/api/preferences", params=params)

    def save_section(self, section: str, data: Any) -> None:
        self._request("POST", "/api/preferences", json={"section": section, "data": data})

    def patch_section(self, section: str, updates: dict) -> None:
        self._request("PATCH", "/api/preferences", json={"section": section, "updates": updates})

    def verify_password(self, password: str) -> bool:
        return bool(self._request("POST", "/api/auth/verify", json={"password": password}).get("valid"))

    def send_message(self, name: str, message: str) -> dict:
        return self._request("POST", "/api/messages", json={"name": name, "message": message})["message"]

    # Sports

    def all_teams(self) -> dict:
        return self._request("GET", "/api/sports/all-teams")

    def team_info(self, sport: str, league: str, team_id: str) -> dict:
        return self._request(
            "GET", "/api/sports/team-info",
            params={"sport": sport, "league": league, "teamId": team_id},
        )

    def team_news(self, sport: str, league: str, team_id: str, limit: int = 3) -> list[dict]:
        data = self._request(
            "GET", "/api/sports/news",
            params={"sport": sport, "league": league, "teamId": team_id, "limit": limit},
        )
        return data.get("articles") or []

    def scoreboard(self, sport: str, league: str, dates: Optional[str] = None) -> dict:
        params = {"sport": sport, "league": league}
        if dates:
            params["dates"] = dates
        return self._request("GET", "/api/sports/scoreboard", params=params)

    # Concerts, weather

    def concerts(self, params: dict) -> list[dict]:
        return self._request("GET", "/api/concerts", params=params).get("events") or []

    def weather(self, location: Optional[str] = None, lat=None, lon=None) -> dict:
        params = {}
        if lat is not None and lon is not None:
            params = {"lat": lat, "lon": lon}
        elif location:
            params = {"location": location}
        return self._request("GET", "/api/weather", params=params)["weather"]

    # Calendar and OAuth

    def calendar_list(self, access_token: str) -> list[dict]:
        data = self._request("GET", "/api/calendar/list", params={"accessToken": access_token})
        return data.get("calendars") or []

    def calendar_events(self, calendar_ids: list[str], access_token: Optional[str] = None) -> dict:
        params = {"calendarIds": json.dumps(calendar_ids)}
        if access_token:
            params["accessToken"] = access_token
        return self._request("GET", "/api/calendar/events", params=params)

    def refresh_token(self, refresh_token: str) -> dict:
        return self._request("POST", "/api/oauth/refresh", json={"refreshToken": refresh_token})
