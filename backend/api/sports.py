"""ESPN proxy endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.helpers import error_response, error_status, get_espn_client
from integrations.espn_client import EspnClient
from integrations.exceptions import IntegrationError
from services.news_service import get_team_news

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sports", tags=["sports"])


@router.get("/teams")
def list_teams(
    sport: str = "baseball",
    league: str = "mlb",
    espn: EspnClient = Depends(get_espn_client),
):
    try:
        teams = espn.get_teams(sport, league)
    except IntegrationError as e:
        logger.error("Failed to fetch %s/%s teams: %s", sport, league, e)
        return error_response("Failed to fetch teams", error_status(e), teams=[])
    return {"teams": teams, "sport": sport, "league": league}


@router.get("/all-teams")
def list_all_teams(espn: EspnClient = Depends(get_espn_client)):
    """Teams from every supported league, plus a by-city grouping."""
    return espn.get_all_teams()


@router.get("/team-info")
def team_info(
    sport: Optional[str] = None,
    league: Optional[str] = None,
    teamId: Optional[str] = None,
    espn: EspnClient = Depends(get_espn_client),
):
    """Team detail and the coming week's schedule."""
    if not sport or not league or not teamId:
        return error_response("Missing required parameters", 400, team=None)
    try:
        return espn.get_team_info(sport, league, teamId)
    except IntegrationError as e:
        logger.error("Failed to fetch team %s (%s/%s): %s", teamId, sport, league, e)
        return error_response(
            "Failed to fetch team info", error_status(e), team=None, schedule=None
        )


@router.get("/scoreboard")
def scoreboard(
    sport: str = "baseball",
    league: str = "mlb",
    dates: Optional[str] = None,
    espn: EspnClient = Depends(get_espn_client),
):
    try:
        data = espn.get_scoreboard(sport, league, dates)
    except IntegrationError as e:
        logger.error("Failed to fetch %s/%s scoreboard: %s", sport, league, e)
        return error_response("Failed to fetch scoreboard", error_status(e), events=[])
    if not isinstance(data, dict):
        return {"events": []}
    data.setdefault("events", [])
    return data


@router.get("/news")
def news(
    sport: str = "baseball",
    league: str = "mlb",
    teamId: Optional[str] = None,
    limit: Optional[int] = None,
    espn: EspnClient = Depends(get_espn_client),
):
    """League news with the team's own stories first."""
    try:
        articles = get_team_news(espn, sport, league, teamId, limit)
    except IntegrationError as e:
        logger.error("Failed to fetch %s/%s news: %s", sport, league, e)
        return error_response("Failed to fetch news", error_status(e), articles=[])
    return {"articles": articles}
