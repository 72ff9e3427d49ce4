"""Concerts widget data."""

import logging
from datetime import datetime
from typing import Optional

from client.api import DashboardAPI
from client.cache import CONCERTS, DataCache
from client.preferences import PreferenceSync
from services.concert_service import aggregate_concerts, filter_upcoming
from services.preference_store import Section

logger = logging.getLogger(__name__)


def load_concerts(
    api: DashboardAPI,
    preferences: PreferenceSync,
    cache: DataCache,
    force: bool = False,
    now: Optional[datetime] = None,
) -> list[dict]:
    """Ranked upcoming concerts; cached for an hour unless every cached show has passed."""
    cached = cache.get(CONCERTS)
    if cached and not force:
        upcoming = filter_upcoming(cached.get("events") or [], now)
        if upcoming:
            return upcoming

    concert_prefs = preferences.get(Section.CONCERT_PREFERENCES.value, {})
    events = aggregate_concerts(api.concerts, concert_prefs, now)
    cache.set(CONCERTS, {"events": events})
    logger.info("Concerts: %d events after ranking", len(events))
    return events
