"""ESPN public site API client (teams, schedules, scoreboards, news)."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Optional

from integrations.base_client import UpstreamClient
from integrations.exceptions import IntegrationError
from integrations.parsing_utils import format_espn_date

logger = logging.getLogger(__name__)

# News is always fetched in bulk; callers trim after prioritising.
NEWS_FETCH_LIMIT = 100
SCHEDULE_WINDOW_DAYS = 7


@dataclass(frozen=True)
class League:
    sport: str
    league: str
    name: str
    type: str  # "pro" or "college"


LEAGUES: tuple[League, ...] = (
    League("baseball", "mlb", "MLB", "pro"),
    League("football", "nfl", "NFL", "pro"),
    League("basketball", "nba", "NBA", "pro"),
    League("hockey", "nhl", "NHL", "pro"),
    League("football", "college-football", "NCAA Football", "college"),
    League("basketball", "mens-college-basketball", "NCAA Basketball", "college"),
)


def _dig(data: Any, *path) -> Any:
    """Follow a path of dict keys / list indexes, returning None on any miss."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(data, list) or len(data) <= step:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[step] if isinstance(step, int) else data.get(step)
        if data is None:
            return None
    return data


def _list_at(*path) -> Callable[[Any], Optional[list]]:
    def extract(payload: Any) -> Optional[list]:
        value = _dig(payload, *path)
        return value if isinstance(value, list) else None

    return extract


def _raw_list(payload: Any) -> Optional[list]:
    return payload if isinstance(payload, list) else None


# Known news payload shapes, most common first.  Each returns a list or None.
ARTICLE_EXTRACTORS: tuple[Callable[[Any], Optional[list]], ...] = (
    _list_at("articles"),
    _list_at("headlines"),
    _list_at("items"),
    _raw_list,
    _list_at("sports", 0, "leagues", 0, "teams", 0, "news"),
    _list_at("team", "news"),
)


def extract_articles(payload: Any) -> list:
    """Pull the article list out of any known news payload shape."""
    for extractor in ARTICLE_EXTRACTORS:
        articles = extractor(payload)
        if articles is not None:
            return articles
    return []


def summarize_team(entry: dict) -> dict:
    """Flatten one ``sports[0].leagues[0].teams[]`` entry."""
    team = entry.get("team") or {}
    return {
        "id": team.get("id"),
        "name": team.get("displayName") or team.get("name"),
        "abbreviation": team.get("abbreviation"),
        "location": team.get("location"),
        "logo": team.get("logo"),
        "color": team.get("color"),
        "alternateColor": team.get("alternateColor"),
        "slug": team.get("slug"),
    }


class EspnClient(UpstreamClient):
    """Client for ``site.api.espn.com``."""

    source = "ESPN"
    base_url = "https://site.api.espn.com/apis/site/v2/sports"

    def get_teams(self, sport: str, league: str) -> list[dict]:
        data = self._get_json(f"/{sport}/{league}/teams")
        entries = _dig(data, "sports", 0, "leagues", 0, "teams") or []
        return [summarize_team(entry) for entry in entries]

    def get_all_teams(self) -> dict:
        """Teams from every supported league, also grouped by city.

        A league that fails is logged and skipped; the others still load.
        """
        teams: list[dict] = []
        for league in LEAGUES:
            try:
                league_teams = self.get_teams(league.sport, league.league)
            except IntegrationError as e:
                logger.warning("ESPN: failed to load %s teams: %s", league.name, e)
                continue
            for team in league_teams:
                teams.append(
                    {
                        **team,
                        "sport": league.sport,
                        "league": league.league,
                        "leagueName": league.name,
                        "type": league.type,
                    }
                )

        teams_by_city: dict[str, list[dict]] = {}
        for team in teams:
            teams_by_city.setdefault(team.get("location") or "Unknown", []).append(team)

        logger.info("ESPN: loaded %d teams across %d leagues", len(teams), len(LEAGUES))
        return {"teams": teams, "teamsByCity": teams_by_city, "total": len(teams)}

    def get_team(self, sport: str, league: str, team_id: str) -> Optional[dict]:
        data = self._get_json(f"/{sport}/{league}/teams/{team_id}")
        return data.get("team") if isinstance(data, dict) else None

    def get_team_schedule(
        self, sport: str, league: str, team_id: str, start: date, end: date
    ) -> Any:
        dates = f"{format_espn_date(start)}-{format_espn_date(end)}"
        return self._get_json(
            f"/{sport}/{league}/teams/{team_id}/schedule", params={"dates": dates}
        )

    def get_team_info(
        self, sport: str, league: str, team_id: str, today: date | None = None
    ) -> dict:
        """Team detail plus the coming week's schedule.

        A failed schedule lookup yields ``schedule: None`` instead of an error.
        """
        team = self.get_team(sport, league, team_id)
        start = today or date.today()
        try:
            schedule = self.get_team_schedule(
                sport, league, team_id, start, start + timedelta(days=SCHEDULE_WINDOW_DAYS)
            )
        except IntegrationError as e:
            logger.warning("ESPN: schedule unavailable for team %s: %s", team_id, e)
            schedule = None
        return {"team": team, "schedule": schedule}

    def get_scoreboard(self, sport: str, league: str, dates: str | None = None) -> Any:
        params = {"dates": dates} if dates else None
        return self._get_json(f"/{sport}/{league}/scoreboard", params=params)

    def _news_endpoints(self, team_id: str | None) -> list[dict]:
        """Query variants for the news endpoint, in the order they are tried."""
        endpoints: list[dict] = []
        if team_id:
            endpoints.append({"team": team_id, "limit": NEWS_FETCH_LIMIT})
            endpoints.append({"team": team_id})
        endpoints.append({"limit": NEWS_FETCH_LIMIT})
        endpoints.append({})
        return endpoints

    def get_news(self, sport: str, league: str, team_id: str | None = None) -> list:
        """Raw article list from the first news endpoint that yields articles.

        Raises the last error only when every endpoint failed; endpoints that
        answer with no articles lead to an empty list.
        """
        last_error: IntegrationError | None = None
        answered = False
        for params in self._news_endpoints(team_id):
            try:
                payload = self._get_json(f"/{sport}/{league}/news", params=params or None)
            except IntegrationError as e:
                logger.debug("ESPN: news endpoint %s failed: %s", params, e)
                last_error = e
                continue

            answered = True
            articles = extract_articles(payload)
            if articles:
                logger.info(
                    "ESPN: %d articles for %s/%s (params=%s)",
                    len(articles), sport, league, params,
                )
                return articles

        if not answered and last_error is not None:
            raise last_error
        return []
