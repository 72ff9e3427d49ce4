"""Google Calendar proxy endpoints."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.helpers import error_response, error_status, get_calendar_client
from integrations.exceptions import IntegrationConfigError, IntegrationError
from integrations.google_calendar_client import GoogleCalendarClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/list")
def list_calendars(
    accessToken: Optional[str] = None,
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
):
    """Calendars the connected account can read."""
    if not accessToken:
        return error_response("Access token required", 400, calendars=[])
    try:
        return {"calendars": calendar.list_calendars(accessToken)}
    except IntegrationError as e:
        logger.error("Failed to fetch calendar list: %s", e)
        return error_response("Failed to fetch calendar list", error_status(e), calendars=[])


def _parse_calendar_ids(raw: Optional[str]) -> Optional[list[str]]:
    """Decode the JSON-array ``calendarIds`` parameter; None if invalid."""
    try:
        ids = json.loads(raw or "")
    except ValueError:
        return None
    if not isinstance(ids, list) or not ids or not all(isinstance(i, str) for i in ids):
        return None
    return ids


@router.get("/events")
def list_events(
    calendarIds: Optional[str] = None,
    accessToken: Optional[str] = None,
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
):
    """Merged upcoming events across calendars, soonest first."""
    if not calendarIds:
        return error_response("No calendar IDs provided", 400, events=[])
    ids = _parse_calendar_ids(calendarIds)
    if ids is None:
        return error_response("Invalid calendar IDs", 400, events=[])

    try:
        result = calendar.get_events(ids, accessToken)
    except IntegrationConfigError as e:
        logger.error("Calendar events unavailable: %s", e)
        return error_response(str(e), 500, events=[])
    except IntegrationError as e:
        logger.error("Calendar events failed: %s", e)
        return error_response("Failed to fetch calendar events", error_status(e), events=[])

    body = {"events": result["events"]}
    if result["errors"]:
        body["errors"] = result["errors"]
    if result["auth_failed"]:
        return error_response("Access token rejected", 401, **body)
    return body
