"""Concert search normalisation, filtering and favourite-first ranking."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from integrations.parsing_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

PAST_EVENT_GRACE = timedelta(hours=1)
WIDGET_PAGE_SIZE = 50
DEFAULT_CITY = "San Diego"
DEFAULT_STATE_CODE = "CA"

PRIORITY_ARTIST = 1
PRIORITY_GENRE = 2
PRIORITY_OTHER = 3


def _pick_image(images: list) -> str:
    for image in images:
        if (image.get("width") or 0) > 200 and image.get("ratio") == "16_9":
            return image.get("url") or ""
    return (images[0].get("url") if images else None) or ""


def normalize_event(event: dict) -> dict:
    """Flatten one Discovery API event."""
    embedded = event.get("_embedded") or {}
    venue = (embedded.get("venues") or [{}])[0]
    dates = event.get("dates") or {}
    start = dates.get("start") or {}

    classifications = event.get("classifications") or []
    primary = next((c for c in classifications if c.get("primary")), None) or {}
    genre = (primary.get("genre") or {}).get("name") or (primary.get("segment") or {}).get("name") or "Music"

    attractions = embedded.get("attractions") or []
    headliner = next(
        (a for a in attractions if ((a.get("classifications") or [{}])[0]).get("primary")),
        None,
    )
    artist = (headliner or {}).get("name") or (attractions[0].get("name") if attractions else None) or event.get("name")

    price_ranges = event.get("priceRanges") or []
    price_range = None
    if price_ranges:
        price_range = {
            "min": price_ranges[0].get("min"),
            "max": price_ranges[0].get("max"),
            "currency": price_ranges[0].get("currency") or "USD",
        }

    return {
        "id": event.get("id"),
        "name": event.get("name"),
        "artist": artist,
        "genre": genre,
        "url": event.get("url"),
        "image": _pick_image(event.get("images") or []),
        "venue": {
            "name": venue.get("name") or "TBD",
            "city": (venue.get("city") or {}).get("name") or "",
            "state": (venue.get("state") or {}).get("stateCode") or "",
            "address": (venue.get("address") or {}).get("line1") or "",
        },
        "date": start.get("dateTime") or start.get("localDate") or "",
        "timeZone": dates.get("timezone") or start.get("timezone") or "",
        "priceRange": price_range,
    }


def is_upcoming(event: dict, now: Optional[datetime] = None) -> bool:
    """Within the one-hour grace window or later.  Unparseable dates are kept."""
    when = parse_iso_datetime(event.get("date"))
    if when is None:
        return True
    now = now or datetime.now(timezone.utc)
    return when >= now - PAST_EVENT_GRACE


def filter_upcoming(events: Iterable[dict], now: Optional[datetime] = None) -> list[dict]:
    now = now or datetime.now(timezone.utc)
    return [event for event in events if is_upcoming(event, now)]


def normalize_search_result(payload: dict, now: Optional[datetime] = None) -> dict:
    """Shape a raw search payload as ``{"events", "total"}``."""
    raw_events = ((payload or {}).get("_embedded") or {}).get("events") or []
    events = filter_upcoming((normalize_event(e) for e in raw_events), now)
    total = ((payload or {}).get("page") or {}).get("totalElements") or len(events)
    logger.info("Concerts: %d upcoming events (of %d returned)", len(events), len(raw_events))
    return {"events": events, "total": total}


def event_priority(event: dict, favorite_artists: Iterable[str], favorite_genres: Iterable[str]) -> int:
    artist = (event.get("artist") or "").lower()
    name = (event.get("name") or "").lower()
    genre = (event.get("genre") or "").lower()

    if any(fav.lower() in artist or fav.lower() in name for fav in favorite_artists):
        return PRIORITY_ARTIST
    if any(fav.lower() in genre for fav in favorite_genres):
        return PRIORITY_GENRE
    return PRIORITY_OTHER


def dedupe_events(events: Iterable[dict]) -> list[dict]:
    """One entry per event id; a later duplicate replaces the earlier one in place."""
    by_id: dict = {}
    for event in events:
        by_id[event.get("id")] = event
    return list(by_id.values())


def _date_sort_key(event: dict) -> datetime:
    return parse_iso_datetime(event.get("date")) or datetime.max.replace(tzinfo=timezone.utc)


def rank_events(
    events: Iterable[dict],
    favorite_artists: list[str],
    favorite_genres: list[str],
    now: Optional[datetime] = None,
) -> list[dict]:
    """De-duplicate, drop past events, and sort by (priority, date)."""
    upcoming = filter_upcoming(dedupe_events(events), now)
    return sorted(
        upcoming,
        key=lambda e: (event_priority(e, favorite_artists, favorite_genres), _date_sort_key(e)),
    )


def location_params(location: Optional[dict]) -> dict[str, str]:
    """Search parameters for a saved concert location (San Diego by default)."""
    location = location or {}
    if location.get("lat") is not None and location.get("lon") is not None:
        return {"lat": str(location["lat"]), "lon": str(location["lon"]), "radius": "50"}
    if location.get("city"):
        params = {"city": location["city"]}
        if location.get("stateCode"):
            params["stateCode"] = location["stateCode"]
        return params
    return {"city": DEFAULT_CITY, "stateCode": DEFAULT_STATE_CODE}


def aggregate_concerts(
    fetch: Callable[[dict], list[dict]],
    preferences: Optional[dict],
    now: Optional[datetime] = None,
) -> list[dict]:
    """Collect events for each favourite artist plus one general search, then rank.

    ``fetch`` runs one search for the given query parameters and returns
    normalised events; a failing search is logged and contributes nothing.
    """
    preferences = preferences or {}
    artists = list(preferences.get("favoriteArtists") or [])
    genres = list(preferences.get("favoriteGenres") or [])
    base = {**location_params(preferences.get("location")), "size": str(WIDGET_PAGE_SIZE)}

    collected: list[dict] = []
    for query in [{**base, "keyword": artist} for artist in artists] + [base]:
        try:
            collected.extend(fetch(query))
        except Exception:
            logger.warning("Concerts: search failed for %s", query.get("keyword") or "general", exc_info=True)

    return rank_events(collected, artists, genres, now)
