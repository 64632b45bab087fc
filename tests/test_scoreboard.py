"""
Tests for the ESPN scoreboard client and slate assembly
Run with: pytest tests/test_scoreboard.py -v
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from rightcall.core.engine_config import EngineConfig
from rightcall.core.settlement import Matchup, SettlementResult, settle
from rightcall.services.odds import MarketPrice
from rightcall.services.scoreboard import (
    FALLBACK_URL,
    PRIMARY_URL,
    ScoreboardClient,
    ScoreboardError,
    ScoreboardQuery,
    parse_scoreboard,
    to_outcome_records,
    yyyymmdd,
)
from rightcall.services.slate import build_slate


def _competitor(side, abbr, score, name=None):
    return {
        "homeAway": side,
        "score": score,
        "team": {"abbreviation": abbr, "displayName": name or abbr},
    }


def _event(eid, home, away, home_score, away_score, completed=True, status="STATUS_FINAL"):
    return {
        "id": eid,
        "date": "2025-10-12T17:00Z",
        "competitions": [{
            "status": {"type": {"name": status, "completed": completed}},
            "competitors": [
                _competitor("home", home, home_score),
                _competitor("away", away, away_score),
            ],
        }],
    }


@pytest.fixture
def payload():
    return {"events": [
        _event(401, "BUF", "NYJ", "24", "17"),
        _event(402, "WSH", "DAL", "10", "13"),
        _event(403, "KC", "LV", "7", "0", completed=False, status="STATUS_IN_PROGRESS"),
    ]}


class TestScoreboardQuery:

    def test_date_params(self):
        q = ScoreboardQuery(date="20251012")
        assert q.params() == {"dates": "20251012"}
        assert q.label() == "20251012"

    def test_week_params(self):
        q = ScoreboardQuery(year=2025, week=6, seasontype=2)
        assert q.params() == {"dates": 2025, "week": 6, "seasontype": 2}
        assert q.label() == "2025-w6-st2"

    def test_today(self):
        assert ScoreboardQuery.today().date == yyyymmdd()

    def test_yyyymmdd(self):
        assert yyyymmdd(date(2025, 1, 5)) == "20250105"

    @pytest.mark.parametrize("kwargs", [
        {"date": "2025-10-12"},
        {"date": "2025101"},
        {},
        {"year": 2025},
        {"year": 2025, "week": 19, "seasontype": 2},
        {"year": 2025, "week": 4, "seasontype": 1},
        {"year": 2025, "week": 1, "seasontype": 4},
        {"year": 2025, "week": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ScoreboardQuery(**kwargs)


class TestParseScoreboard:

    def test_games(self, payload):
        games = parse_scoreboard(payload)
        assert [g.id for g in games] == ["401", "402", "403"]
        buf = games[0]
        assert buf.home.abbr == "BUF" and buf.home.score == 24
        assert buf.away.abbr == "NYJ" and buf.away.score == 17
        assert buf.completed
        assert buf.status == "STATUS_FINAL"
        assert buf.start == "2025-10-12T17:00Z"

    def test_aliases_normalized(self, payload):
        assert parse_scoreboard(payload)[1].home.abbr == "WAS"

    def test_bad_scores_become_zero(self):
        games = parse_scoreboard({"events": [_event(1, "BUF", "NYJ", None, "n/a")]})
        assert games[0].home.score == 0
        assert games[0].away.score == 0

    def test_missing_competitor(self):
        event = _event(1, "BUF", "NYJ", "3", "0")
        event["competitions"][0]["competitors"] = event["competitions"][0]["competitors"][:1]
        game = parse_scoreboard({"events": [event]})[0]
        assert game.away.abbr == ""
        assert game.away.score == 0

    def test_empty_payload(self):
        assert parse_scoreboard({}) == []
        assert parse_scoreboard({"events": [{"id": "9"}]})[0].completed is False

    def test_feeds_settlement(self, payload):
        records = to_outcome_records(parse_scoreboard(payload))
        results = settle([
            Matchup(id="a", home="BUF", away="NYJ"),
            Matchup(id="b", home="WAS", away="DAL"),
            Matchup(id="c", home="KC", away="LV"),
            Matchup(id="d", home="NYJ", away="BUF"),
        ], records)
        assert results == {
            "a": SettlementResult.HOME,
            "b": SettlementResult.AWAY,
            "c": SettlementResult.PENDING,
            "d": SettlementResult.MISSING,
        }


def _ok(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


class TestScoreboardClient:

    @patch("rightcall.services.scoreboard.requests.get")
    def test_primary(self, mock_get, payload):
        mock_get.return_value = _ok(payload)
        games = ScoreboardClient().fetch(ScoreboardQuery(date="20251012"))
        assert len(games) == 3
        assert mock_get.call_count == 1
        args, kwargs = mock_get.call_args
        assert args[0] == PRIMARY_URL
        assert kwargs["params"] == {"dates": "20251012"}
        assert "User-Agent" in kwargs["headers"]

    @patch("rightcall.services.scoreboard.requests.get")
    def test_fallback_after_primary_failure(self, mock_get, payload):
        mock_get.side_effect = [requests.exceptions.Timeout("slow"), _ok(payload)]
        games = ScoreboardClient().fetch(ScoreboardQuery(year=2025, week=6))
        assert len(games) == 3
        assert mock_get.call_args_list[1][0][0] == FALLBACK_URL

    @patch("rightcall.services.scoreboard.requests.get")
    def test_both_fail(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(ScoreboardError):
            ScoreboardClient().fetch(ScoreboardQuery(date="20251012"))
        assert mock_get.call_count == 2


class TestBuildSlate:

    def test_prices_joined_by_key(self, payload):
        games = parse_scoreboard(payload)
        board = {"NYJ@BUF": MarketPrice(home_american=-160, away_american=140)}
        slate = build_slate(games, board)
        assert [g.id for g in slate] == ["401", "402", "403"]
        assert (slate[0].home_price, slate[0].away_price) == (-160, 140)
        assert slate[0].matchup == Matchup(id="401", home="BUF", away="NYJ")

    def test_unpriced_games_use_default(self, payload):
        slate = build_slate(parse_scoreboard(payload))
        assert all((g.home_price, g.away_price) == (-110, -110) for g in slate)

    def test_custom_default(self, payload):
        slate = build_slate(parse_scoreboard(payload), {}, EngineConfig(default_price=-105))
        assert slate[2].home_price == -105

    def test_fair_probabilities(self, payload):
        slate = build_slate(parse_scoreboard(payload))
        fair = slate[0].fair_probabilities()
        assert fair.p_home == pytest.approx(0.5)
