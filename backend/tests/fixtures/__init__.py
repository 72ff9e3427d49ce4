"""Test fixtures and sample data."""
import pytest

from tests.fixtures.mocks import (
    FINAL_STATUS,
    LIVE_STATUS,
    MockEspnClient,
    make_article,
    make_espn_team,
    make_game,
    teams_payload,
)

TEST_PASSWORD = "dad2025"

PADRES = make_espn_team()
DODGERS = make_espn_team(
    "19", "Los Angeles Dodgers", "Los Angeles", "LAD", color="005A9C", alternate_color="FFFFFF"
)
CHARGERS = make_espn_team(
    "24", "Los Angeles Chargers", "Los Angeles", "LAC", color="0080C6", alternate_color="FFC20E"
)


def seed_sections(store, **sections) -> None:
    """Write several preference sections through ``store``."""
    for section, value in sections.items():
        store.write(section, value)


def espn_league_responses() -> dict:
    """ESPN path table with a two-team MLB and a one-team NFL catalog."""
    return {
        "/baseball/mlb/teams": teams_payload(PADRES, DODGERS),
        "/football/nfl/teams": teams_payload(CHARGERS),
        "/basketball/nba/teams": teams_payload(),
        "/hockey/nhl/teams": teams_payload(),
        "/football/college-football/teams": teams_payload(),
        "/basketball/mens-college-basketball/teams": teams_payload(),
    }


@pytest.fixture
def espn_catalog() -> MockEspnClient:
    """ESPN mock with league catalogs, a Padres team page, scoreboard and news."""
    responses = espn_league_responses()
    responses.update(
        {
            "/baseball/mlb/teams/25": {
                "team": {
                    **PADRES,
                    "record": {
                        "items": [
                            {
                                "summary": "45-36",
                                "stats": [
                                    {"name": "wins", "value": 45},
                                    {"name": "losses", "value": 36},
                                ],
                            }
                        ]
                    },
                }
            },
            "/baseball/mlb/teams/25/schedule": {"events": [make_game(status=FINAL_STATUS)]},
            "/baseball/mlb/scoreboard": {
                "events": [make_game(home_score="3", away_score="2", status=LIVE_STATUS)]
            },
            "/baseball/mlb/news": {
                "articles": [
                    make_article("Dodgers rally late", 1),
                    make_article("Padres walk off in 10th", 2),
                    make_article("MLB trade deadline primer", 3),
                ]
            },
        }
    )
    return MockEspnClient(responses)
