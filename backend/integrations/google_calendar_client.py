"""Google Calendar v3 client (calendar list and per-calendar events)."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import quote

from integrations.base_client import UpstreamClient
from integrations.exceptions import IntegrationConfigError, IntegrationError
from integrations.parsing_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

EVENT_WINDOW_DAYS = 30
MAX_EVENTS = 50
READABLE_ROLES = frozenset({"owner", "reader"})


def normalize_event(calendar_id: str, event: dict) -> dict:
    start = event.get("start") or {}
    end = event.get("end") or {}
    return {
        "id": f"{calendar_id}-{event.get('id')}",
        "title": event.get("summary") or "No Title",
        "start": start.get("dateTime") or start.get("date"),
        "end": end.get("dateTime") or end.get("date"),
        "location": event.get("location") or "",
        "description": event.get("description") or "",
        "isAllDay": not start.get("dateTime"),
        "calendarId": calendar_id,
    }


def _start_sort_key(event: dict) -> datetime:
    return parse_iso_datetime(event.get("start")) or datetime.max.replace(tzinfo=timezone.utc)


class GoogleCalendarClient(UpstreamClient):
    """Reads calendars with either an OAuth bearer token or a static API key."""

    source = "Google Calendar"
    base_url = "https://www.googleapis.com/calendar/v3"

    def __init__(self, api_key: str = "", **kwargs):
        super().__init__(**kwargs)
        self._api_key = api_key

    def _auth(self, access_token: Optional[str]) -> dict[str, Any]:
        if access_token:
            return {"headers": {"Authorization": f"Bearer {access_token}"}, "params": {}}
        if self._api_key:
            return {"headers": {}, "params": {"key": self._api_key}}
        raise IntegrationConfigError(
            "No authentication method configured. Please connect your Google "
            "account or configure an API key.",
            source=self.source,
        )

    def list_calendars(self, access_token: str) -> list[dict]:
        """Calendars the token's owner can read (owner or reader role)."""
        data = self._get_json(
            "/users/me/calendarList",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        calendars = [
            {
                "id": item.get("id"),
                "summary": item.get("summary") or item.get("id"),
                "primary": bool(item.get("primary", False)),
                "accessRole": item.get("accessRole"),
            }
            for item in (data.get("items") or [])
        ]
        return [c for c in calendars if c["accessRole"] in READABLE_ROLES]

    def list_events(
        self,
        calendar_id: str,
        access_token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[dict]:
        """Upcoming single events for one calendar, normalised."""
        auth = self._auth(access_token)
        now = now or datetime.now(timezone.utc)
        params = {
            **auth["params"],
            "timeMin": now.isoformat(),
            "timeMax": (now + timedelta(days=EVENT_WINDOW_DAYS)).isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": str(MAX_EVENTS),
        }
        data = self._get_json(
            f"/calendars/{quote(calendar_id, safe='')}/events",
            params=params,
            headers=auth["headers"],
        )
        return [normalize_event(calendar_id, item) for item in (data.get("items") or [])]

    def get_events(
        self,
        calendar_ids: list[str],
        access_token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Merge events from several calendars.

        Failures are collected per calendar rather than failing the batch.
        Returns ``{"events": [...], "errors": [...], "auth_failed": bool}``
        where ``auth_failed`` is True only when every calendar was rejected
        for authentication reasons.
        """
        self._auth(access_token)

        events: list[dict] = []
        errors: list[dict] = []
        auth_failures = 0
        for calendar_id in calendar_ids:
            try:
                events.extend(self.list_events(calendar_id, access_token, now))
            except IntegrationError as e:
                logger.warning("Google Calendar: failed to load %s: %s", calendar_id, e)
                if getattr(e, "status_code", None) == 401:
                    auth_failures += 1
                errors.append({"calendarId": calendar_id, "error": str(e)})

        events.sort(key=_start_sort_key)
        return {
            "events": events[:MAX_EVENTS],
            "errors": errors,
            "auth_failed": bool(calendar_ids) and auth_failures == len(calendar_ids),
        }
