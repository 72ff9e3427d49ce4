"""Tests for the ESPN site API client."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from integrations.espn_client import (
    LEAGUES,
    NEWS_FETCH_LIMIT,
    EspnClient,
    extract_articles,
    summarize_team,
)
from integrations.exceptions import IntegrationAPIError, IntegrationConnectionError
from tests.fixtures import CHARGERS, DODGERS, PADRES, espn_league_responses
from tests.fixtures.mocks import MockEspnClient, make_espn_team, params_router, teams_payload


def _ok(payload):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = payload
    return response


class TestExtractArticles:
    """Every known news payload shape yields its article list."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"articles": [{"headline": "a"}]},
            {"headlines": [{"headline": "a"}]},
            {"items": [{"headline": "a"}]},
            [{"headline": "a"}],
            {"sports": [{"leagues": [{"teams": [{"news": [{"headline": "a"}]}]}]}]},
            {"team": {"news": [{"headline": "a"}]}},
        ],
    )
    def test_known_shapes(self, payload):
        assert extract_articles(payload) == [{"headline": "a"}]

    def test_first_matching_shape_wins(self):
        payload = {"articles": [{"headline": "a"}], "headlines": [{"headline": "b"}]}
        assert extract_articles(payload) == [{"headline": "a"}]

    def test_unknown_shape_is_empty(self):
        assert extract_articles({"foo": "bar"}) == []
        assert extract_articles(None) == []


class TestSummarizeTeam:
    def test_flattens_team(self):
        summary = summarize_team({"team": PADRES})
        assert summary["id"] == "25"
        assert summary["name"] == "San Diego Padres"
        assert summary["abbreviation"] == "SD"
        assert summary["location"] == "San Diego"
        assert summary["color"] == "2F241D"


class TestGetTeams:
    def test_requests_league_teams(self):
        client = EspnClient()
        with patch.object(client._client, "request", return_value=_ok(teams_payload(PADRES, DODGERS))) as mock_request:
            teams = client.get_teams("baseball", "mlb")

        assert [t["id"] for t in teams] == ["25", "19"]
        mock_request.assert_called_once_with("GET", "/baseball/mlb/teams")

    def test_empty_payload(self):
        client = EspnClient()
        with patch.object(client._client, "request", return_value=_ok({})):
            assert client.get_teams("baseball", "mlb") == []


class TestGetAllTeams:
    def test_tags_league_and_groups_by_city(self):
        client = MockEspnClient(espn_league_responses())
        result = client.get_all_teams()

        assert result["total"] == 3
        padres = next(t for t in result["teams"] if t["id"] == "25")
        assert padres["sport"] == "baseball"
        assert padres["league"] == "mlb"
        assert padres["leagueName"] == "MLB"
        assert padres["type"] == "pro"
        assert [t["id"] for t in result["teamsByCity"]["Los Angeles"]] == ["19", "24"]
        assert [t["id"] for t in result["teamsByCity"]["San Diego"]] == ["25"]

    def test_failed_league_is_skipped(self):
        responses = espn_league_responses()
        responses["/football/nfl/teams"] = IntegrationConnectionError("timeout", source="ESPN")
        result = MockEspnClient(responses).get_all_teams()

        assert result["total"] == 2
        assert all(t["league"] != "nfl" for t in result["teams"])

    def test_team_without_location_grouped_as_unknown(self):
        responses = espn_league_responses()
        responses["/hockey/nhl/teams"] = teams_payload(make_espn_team("9", "Mystery Club", location=""))
        result = MockEspnClient(responses).get_all_teams()
        assert [t["id"] for t in result["teamsByCity"]["Unknown"]] == ["9"]

    def test_covers_every_league(self):
        client = MockEspnClient(espn_league_responses())
        client.get_all_teams()
        requested = {url for url, _ in client.calls}
        assert requested == {f"/{l.sport}/{l.league}/teams" for l in LEAGUES}


class TestGetTeamInfo:
    def test_returns_team_and_week_schedule(self):
        client = MockEspnClient(
            {
                "/football/nfl/teams/24": {"team": CHARGERS},
                "/football/nfl/teams/24/schedule": {"events": []},
            }
        )
        info = client.get_team_info("football", "nfl", "24", today=date(2025, 9, 1))

        assert info == {"team": CHARGERS, "schedule": {"events": []}}
        assert client.calls[1] == (
            "/football/nfl/teams/24/schedule",
            {"dates": "20250901-20250908"},
        )

    def test_schedule_failure_yields_none(self):
        client = MockEspnClient({"/football/nfl/teams/24": {"team": CHARGERS}})
        info = client.get_team_info("football", "nfl", "24")
        assert info["team"] == CHARGERS
        assert info["schedule"] is None

    def test_team_failure_propagates(self):
        client = MockEspnClient({})
        with pytest.raises(IntegrationAPIError):
            client.get_team_info("football", "nfl", "24")


class TestGetScoreboard:
    def test_passes_dates(self):
        client = EspnClient()
        with patch.object(client._client, "request", return_value=_ok({"events": []})) as mock_request:
            client.get_scoreboard("baseball", "mlb", "20250628")
        mock_request.assert_called_once_with(
            "GET", "/baseball/mlb/scoreboard", params={"dates": "20250628"}
        )


class TestGetNews:
    """Tests for the multi-endpoint news lookup."""

    def test_endpoint_order_with_team(self):
        client = EspnClient()
        assert client._news_endpoints("25") == [
            {"team": "25", "limit": NEWS_FETCH_LIMIT},
            {"team": "25"},
            {"limit": NEWS_FETCH_LIMIT},
            {},
        ]

    def test_endpoint_order_without_team(self):
        assert EspnClient()._news_endpoints(None) == [{"limit": NEWS_FETCH_LIMIT}, {}]

    def test_first_endpoint_with_articles_wins(self):
        router = params_router(
            {
                frozenset({"team": "25", "limit": NEWS_FETCH_LIMIT}.items()): {"articles": []},
                frozenset({"team": "25"}.items()): {"headlines": [{"headline": "Padres win"}]},
                frozenset({"limit": NEWS_FETCH_LIMIT}.items()): {"articles": [{"headline": "League"}]},
            }
        )
        client = MockEspnClient({"/baseball/mlb/news": router})

        assert client.get_news("baseball", "mlb", "25") == [{"headline": "Padres win"}]
        assert len(client.calls) == 2

    def test_failing_endpoints_are_skipped(self):
        router = params_router(
            {
                frozenset({"team": "25", "limit": NEWS_FETCH_LIMIT}.items()): IntegrationAPIError(
                    "bad", source="ESPN", status_code=400
                ),
                frozenset({"team": "25"}.items()): IntegrationAPIError("bad", source="ESPN", status_code=400),
                frozenset({"limit": NEWS_FETCH_LIMIT}.items()): {"articles": [{"headline": "League"}]},
            }
        )
        client = MockEspnClient({"/baseball/mlb/news": router})
        assert client.get_news("baseball", "mlb", "25") == [{"headline": "League"}]

    def test_all_empty_returns_empty_list(self):
        client = MockEspnClient({"/baseball/mlb/news": {"articles": []}})
        assert client.get_news("baseball", "mlb", "25") == []
        assert len(client.calls) == 4

    def test_all_failed_raises_last_error(self):
        client = MockEspnClient({})
        with pytest.raises(IntegrationAPIError):
            client.get_news("baseball", "mlb", "25")
