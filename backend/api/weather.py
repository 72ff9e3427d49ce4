"""Weather proxy (wttr.in)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.helpers import error_response, error_status, get_weather_client
from integrations.exceptions import IntegrationError
from integrations.weather_client import WeatherClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.get("")
def current_weather(
    location: Optional[str] = None,
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    weather: WeatherClient = Depends(get_weather_client),
):
    try:
        return {"weather": weather.get_current(location, lat, lon)}
    except IntegrationError as e:
        logger.error("Failed to fetch weather: %s", e)
        return error_response("Failed to fetch weather", error_status(e), weather=None)
