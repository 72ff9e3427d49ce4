"""Ticketmaster Discovery API client."""

import logging
from typing import Any, Optional

from integrations.base_client import UpstreamClient
from integrations.exceptions import IntegrationConfigError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
DEFAULT_RADIUS_MILES = 50
DEFAULT_COUNTRY_CODE = "US"
DEFAULT_CLASSIFICATION = "music"


def build_search_params(
    *,
    city: Optional[str] = None,
    state_code: Optional[str] = None,
    country_code: Optional[str] = None,
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    radius: Optional[str] = None,
    size: Optional[str] = None,
    keyword: Optional[str] = None,
    classification_name: Optional[str] = None,
) -> dict[str, str]:
    """Build event-search query parameters (without the API key).

    Coordinates take precedence over city; with neither, the search is
    not location-scoped.
    """
    params: dict[str, str] = {
        "size": str(size or DEFAULT_PAGE_SIZE),
        "sort": "date,asc",
    }
    if lat and lon:
        params["latlong"] = f"{lat},{lon}"
        params["radius"] = str(radius or DEFAULT_RADIUS_MILES)
        params["unit"] = "miles"
    elif city:
        params["city"] = city
        if state_code:
            params["stateCode"] = state_code
        params["countryCode"] = country_code or DEFAULT_COUNTRY_CODE

    if keyword:
        params["keyword"] = keyword
    params["classificationName"] = classification_name or DEFAULT_CLASSIFICATION
    return params


class TicketmasterClient(UpstreamClient):
    """Client for the Discovery v2 ``events.json`` search."""

    source = "Ticketmaster"
    base_url = "https://app.ticketmaster.com/discovery/v2"

    def __init__(self, api_key: str, **kwargs):
        super().__init__(**kwargs)
        self._api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def search_events(self, params: dict[str, str]) -> Any:
        """Run one event search and return the raw payload."""
        if not self._api_key:
            raise IntegrationConfigError(
                "Ticketmaster API key not configured", source=self.source
            )

        logger.info(
            "Ticketmaster: searching events (%s)",
            ", ".join(f"{k}={v}" for k, v in params.items()),
        )
        data = self._get_json("/events.json", params={"apikey": self._api_key, **params})
        if isinstance(data, dict) and data.get("errors"):
            logger.warning("Ticketmaster: API reported errors: %s", data["errors"])
        return data
