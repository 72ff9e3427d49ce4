"""Ticketmaster concert search proxy."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.helpers import error_response, error_status, get_ticketmaster_client
from integrations.exceptions import IntegrationConfigError, IntegrationError
from integrations.ticketmaster_client import TicketmasterClient, build_search_params
from services.concert_service import normalize_search_result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/concerts", tags=["concerts"])


@router.get("")
def search_concerts(
    city: Optional[str] = None,
    stateCode: Optional[str] = None,
    countryCode: Optional[str] = None,
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    radius: Optional[str] = None,
    size: Optional[str] = None,
    keyword: Optional[str] = None,
    classificationName: Optional[str] = None,
    ticketmaster: TicketmasterClient = Depends(get_ticketmaster_client),
):
    """Upcoming events near a city or coordinates (music by default)."""
    params = build_search_params(
        city=city,
        state_code=stateCode,
        country_code=countryCode,
        lat=lat,
        lon=lon,
        radius=radius,
        size=size,
        keyword=keyword,
        classification_name=classificationName,
    )
    try:
        payload = ticketmaster.search_events(params)
    except IntegrationConfigError as e:
        logger.error("Concert search unavailable: %s", e)
        return error_response(str(e), 500, events=[])
    except IntegrationError as e:
        logger.error("Concert search failed: %s", e)
        status = error_status(e)
        message = f"Ticketmaster API error: {status}" if status != 500 else "Failed to fetch events"
        return error_response(message, status, events=[])
    return normalize_search_result(payload)
