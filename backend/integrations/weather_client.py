"""wttr.in current-conditions client."""

import logging
from typing import Optional
from urllib.parse import quote

from integrations.base_client import UpstreamClient
from integrations.exceptions import IntegrationDataError

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "San Diego"


def _first_value(items) -> Optional[str]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get("value")
    return None


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_weather(data: dict, location: Optional[str] = None) -> dict:
    """Reduce a ``format=j1`` payload to the fields the widget shows."""
    conditions = data.get("current_condition") if isinstance(data, dict) else None
    if not conditions:
        raise IntegrationDataError("wttr.in payload has no current conditions", source="wttr.in")
    current = conditions[0]

    if not location:
        area = (data.get("nearest_area") or [{}])[0]
        location = _first_value(area.get("areaName")) or DEFAULT_LOCATION

    return {
        "temp": _to_int(current.get("temp_F")),
        "condition": _first_value(current.get("weatherDesc")) or "",
        "humidity": _to_int(current.get("humidity")),
        "windSpeed": _to_int(current.get("windspeedMiles")),
        "icon": current.get("weatherCode"),
        "location": location,
    }


class WeatherClient(UpstreamClient):
    source = "wttr.in"
    base_url = "https://wttr.in"

    def get_current(
        self,
        location: Optional[str] = None,
        lat: Optional[str] = None,
        lon: Optional[str] = None,
    ) -> dict:
        """Current conditions by coordinates, else by place name."""
        if lat and lon:
            data = self._get_json("/", params={"lat": lat, "lon": lon, "format": "j1"})
            return normalize_weather(data)

        place = location or DEFAULT_LOCATION
        data = self._get_json(f"/{quote(place)}", params={"format": "j1"})
        return normalize_weather(data, place)
