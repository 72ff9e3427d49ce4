"""Sports widget data: one card per selected team."""

import logging
from datetime import date, datetime
from typing import Any, Optional

from client.api import DashboardAPI, DashboardAPIError
from client.cache import SPORTS, DataCache
from client.preferences import PreferenceSync
from integrations.parsing_utils import format_espn_date
from schemas.preference import TeamPreferences
from services.preference_store import Section
from services.sports_service import (
    extract_record,
    find_current_game,
    sort_teams,
    team_colors,
    team_key,
)

logger = logging.getLogger(__name__)

NEWS_PER_TEAM = 3


def _safe(call, default: Any, what: str) -> Any:
    try:
        return call()
    except DashboardAPIError as e:
        logger.warning("Sports: %s unavailable: %s", what, e)
        return default


def build_team_card(
    api: DashboardAPI,
    key: str,
    team: dict,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> dict:
    sport, league, team_id = team["sport"], team["league"], str(team["id"])
    today = today or date.today()

    articles = _safe(lambda: api.team_news(sport, league, team_id, NEWS_PER_TEAM), [], "news")
    info = _safe(lambda: api.team_info(sport, league, team_id), {}, "team info")
    scoreboard = _safe(
        lambda: api.scoreboard(sport, league, format_espn_date(today)), {}, "scoreboard"
    )
    colors = team_colors(team)

    return {
        "id": key,
        "name": team.get("name") or "Unknown Team",
        "abbreviation": team.get("abbreviation") or "",
        "location": team.get("location") or "Unknown",
        "logo": team.get("logo"),
        "sport": sport,
        "league": league,
        "leagueName": team.get("leagueName") or league,
        "type": team.get("type") or "pro",
        "color": colors["primary"],
        "alternateColor": colors["secondary"],
        "textColor": colors["text"],
        "record": extract_record(info.get("team")),
        "game": find_current_game(scoreboard, info.get("schedule"), team_id, now),
        "news": [
            {k: article.get(k) for k in ("title", "url", "publishedAt", "image")}
            for article in articles
        ],
    }


def load_sports(
    api: DashboardAPI,
    preferences: PreferenceSync,
    cache: DataCache,
    force: bool = False,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Cards for the selected teams, favourites first.

    Served from the cache while fresh and the cached team set still
    matches the selection.
    """
    teams = TeamPreferences.model_validate(preferences.get(Section.TEAM_PREFERENCES.value, {}))
    if not teams.selected_teams:
        return {"teams": []}

    cached = cache.get(SPORTS)
    if cached and not force:
        cached_keys = sorted(card["id"] for card in cached.get("teams") or [])
        if cached_keys == sorted(teams.selected_teams):
            return cached

    try:
        catalog = api.all_teams().get("teams") or []
    except DashboardAPIError as e:
        logger.warning("Sports: team catalog unavailable: %s", e)
        return cached or {"teams": []}

    by_key = {team_key(t.get("id"), t.get("sport"), t.get("league")): t for t in catalog}
    cards = []
    for key in teams.selected_teams:
        team = by_key.get(key)
        if not team or not team.get("sport") or not team.get("league"):
            logger.debug("Sports: selected team %s not in catalog", key)
            continue
        cards.append(build_team_card(api, key, team, today, now))

    data = {"teams": sort_teams(cards, teams.favorite_teams)}
    cache.set(SPORTS, data)
    logger.info("Sports: loaded %d team cards", len(cards))
    return data
