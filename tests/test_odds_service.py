"""
Tests for The Odds API client and market board aggregation
Run with: pytest tests/test_odds_service.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from rightcall.services.odds import (
    MarketPrice,
    OddsAPIClient,
    build_market_board,
    parse_event_prices,
)


def _bookmaker(key, home_name, home_price, away_name, away_price):
    return {
        "key": key,
        "markets": [{
            "key": "h2h",
            "outcomes": [
                {"name": home_name, "price": home_price},
                {"name": away_name, "price": away_price},
            ],
        }],
    }


@pytest.fixture
def bills_jets():
    home, away = "Buffalo Bills", "New York Jets"
    return {
        "id": "evt1",
        "home_team": home,
        "away_team": away,
        "bookmakers": [
            _bookmaker("draftkings", home, -160, away, 140),
            _bookmaker("fanduel", home, -150, away, 130),
            _bookmaker("stalebook", home, -170, away, "bad"),
        ],
    }


class TestParseEventPrices:

    def test_collects_per_side(self, bills_jets):
        home, away = parse_event_prices(bills_jets)
        assert sorted(home) == [-170.0, -160.0, -150.0]
        assert sorted(away) == [130.0, 140.0]

    def test_ignores_other_markets_and_names(self):
        event = {
            "home_team": "Buffalo Bills",
            "away_team": "New York Jets",
            "bookmakers": [
                {"markets": [{"key": "spreads", "outcomes": [
                    {"name": "Buffalo Bills", "price": -110},
                ]}]},
                {"markets": [{"key": "h2h", "outcomes": [
                    {"name": "Draw", "price": 1500},
                    {"name": "Buffalo Bills", "price": -200},
                    {"name": "New York Jets", "price": 0},
                ]}]},
            ],
        }
        home, away = parse_event_prices(event)
        assert home == [-200.0]
        assert away == []

    def test_missing_bookmakers(self):
        assert parse_event_prices({"home_team": "A", "away_team": "B"}) == ([], [])


class TestBuildMarketBoard:

    def test_median_per_side(self, bills_jets):
        board = build_market_board([bills_jets])
        assert board == {"NYJ@BUF": MarketPrice(home_american=-160, away_american=135)}

    def test_side_without_quotes_dropped(self, bills_jets):
        for bm in bills_jets["bookmakers"]:
            bm["markets"][0]["outcomes"][1]["price"] = None
        assert build_market_board([bills_jets]) == {}

    def test_unmapped_team_dropped(self, bills_jets):
        bills_jets["home_team"] = "Springfield Isotopes"
        assert build_market_board([bills_jets]) == {}

    def test_several_games(self, bills_jets):
        kc_lv = {
            "home_team": "Kansas City Chiefs",
            "away_team": "Las Vegas Raiders",
            "bookmakers": [
                _bookmaker("dk", "Kansas City Chiefs", -400, "Las Vegas Raiders", 310),
            ],
        }
        board = build_market_board([bills_jets, kc_lv])
        assert set(board) == {"NYJ@BUF", "LV@KC"}
        assert board["LV@KC"] == MarketPrice(-400, 310)

    def test_empty(self):
        assert build_market_board([]) == {}


class TestOddsAPIClient:

    def test_requires_key(self, monkeypatch):
        monkeypatch.setattr("rightcall.services.odds.API_KEY", None)
        with pytest.raises(ValueError):
            OddsAPIClient()

    @patch("rightcall.services.odds.requests.get")
    def test_request_parameters(self, mock_get, bills_jets):
        response = MagicMock()
        response.json.return_value = [bills_jets]
        response.headers = {"x-requests-remaining": "480", "x-requests-used": "20"}
        mock_get.return_value = response

        client = OddsAPIClient(api_key="test-key")
        events = client.get_nfl_odds(regions="us")

        assert events == [bills_jets]
        args, kwargs = mock_get.call_args
        assert args[0].endswith("/sports/americanfootball_nfl/odds")
        assert kwargs["params"]["apiKey"] == "test-key"
        assert kwargs["params"]["markets"] == "h2h"
        assert kwargs["params"]["oddsFormat"] == "american"
        assert kwargs["params"]["regions"] == "us"

    @patch("rightcall.services.odds.requests.get")
    def test_request_failure_returns_empty(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("down")
        client = OddsAPIClient(api_key="test-key")
        assert client.get_nfl_odds() == []
        assert client.get_market_board() == {}

    @patch("rightcall.services.odds.requests.get")
    def test_http_error_returns_empty(self, mock_get):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("401")
        mock_get.return_value = response
        assert OddsAPIClient(api_key="bad").get_nfl_odds() == []

    @patch("rightcall.services.odds.requests.get")
    def test_market_board(self, mock_get, bills_jets):
        response = MagicMock()
        response.json.return_value = [bills_jets]
        response.headers = {}
        mock_get.return_value = response
        board = OddsAPIClient(api_key="k").get_market_board()
        assert board["NYJ@BUF"].home_american == -160
