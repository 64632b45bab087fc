"""
The Odds API integration for NFL moneylines.
https://the-odds-api.com/

Consensus pricing
-----------------
Every bookmaker that posts an h2h (moneyline) market contributes one quote
per side.  Quotes that are not finite numbers are discarded; the median of
the rest, rounded to an integer, is the representative American price for
that side.  The median damps a single stale or off-market book without
needing a sharp/retail split.

A game is dropped from the board when either side ends up with no valid
quote, or when either team name cannot be mapped to an abbreviation.

The board is keyed ``AWAY@HOME`` (abbreviations), the same key
:class:`~rightcall.core.settlement.Matchup` exposes, so slate games built
from the scoreboard can be joined to prices without shared ids.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests
from dotenv import load_dotenv

from rightcall.core.odds_math import aggregate_prices, parse_price
from rightcall.services.team_mapping import team_abbr

load_dotenv()

logger = logging.getLogger(__name__)

API_KEY = os.getenv("THE_ODDS_API_KEY")
BASE_URL = "https://api.the-odds-api.com/v4"
SPORT_KEY = "americanfootball_nfl"


@dataclass(frozen=True)
class MarketPrice:
    """Representative American prices for one game."""

    home_american: int
    away_american: int


class OddsAPIClient:
    """Client for The Odds API"""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or API_KEY
        if not self.api_key:
            raise ValueError("THE_ODDS_API_KEY not set in environment")

    def get_nfl_odds(
        self,
        regions: str = os.getenv("ODDS_API_REGIONS", "us"),
        odds_format: str = "american",
    ) -> List[Dict]:
        """
        Fetch current NFL moneyline odds.

        Returns list of events with h2h odds from multiple bookmakers, or an
        empty list when the request fails.
        """
        url = f"{BASE_URL}/sports/{SPORT_KEY}/odds"

        params = {
            "apiKey": self.api_key,
            "regions": regions,
            "markets": "h2h",
            "oddsFormat": odds_format,
            "dateFormat": "iso",
        }

        try:
            response = requests.get(url, params=params, timeout=10)
            response.raise_for_status()

            data = response.json()

            remaining = response.headers.get("x-requests-remaining")
            used = response.headers.get("x-requests-used")
            logger.info(
                "Odds API: %d events fetched. Quota: %s used, %s remaining",
                len(data), used, remaining,
            )

            return data

        except requests.exceptions.RequestException as e:
            logger.error("Odds API error: %s", e)
            return []

    def get_market_board(self) -> Dict[str, MarketPrice]:
        """Fetch and aggregate in one step."""
        return build_market_board(self.get_nfl_odds())


def parse_event_prices(event: Dict) -> Tuple[List[float], List[float]]:
    """
    Collect every valid h2h quote for the home and away side of one event.

    Outcomes are attributed by exact name match against the event's
    ``home_team`` / ``away_team``; anything else (e.g. "Draw") is ignored.
    """
    home_name = event.get("home_team") or ""
    away_name = event.get("away_team") or ""

    home_prices: List[float] = []
    away_prices: List[float] = []

    for bookmaker in event.get("bookmakers") or []:
        market = next(
            (m for m in bookmaker.get("markets") or [] if m.get("key") == "h2h"),
            None,
        )
        if market is None:
            continue
        for outcome in market.get("outcomes") or []:
            price = parse_price(outcome.get("price"))
            if price is None:
                continue
            name = outcome.get("name")
            if name == home_name:
                home_prices.append(price)
            elif name == away_name:
                away_prices.append(price)

    return home_prices, away_prices


def build_market_board(events: List[Dict]) -> Dict[str, MarketPrice]:
    """
    Reduce raw Odds API events to ``{"AWAY@HOME": MarketPrice}``.

    Events with unmapped teams or a side without any valid quote are skipped.
    """
    board: Dict[str, MarketPrice] = {}
    skipped = 0

    for event in events:
        home = team_abbr(event.get("home_team"))
        away = team_abbr(event.get("away_team"))
        if not home or not away:
            skipped += 1
            continue

        home_prices, away_prices = parse_event_prices(event)
        home_american = aggregate_prices(home_prices)
        away_american = aggregate_prices(away_prices)
        if home_american is None or away_american is None:
            logger.debug(
                "No usable quotes for %s@%s (home=%d, away=%d)",
                away, home, len(home_prices), len(away_prices),
            )
            skipped += 1
            continue

        board[f"{away}@{home}"] = MarketPrice(
            home_american=home_american,
            away_american=away_american,
        )

    logger.info("Market board: %d games priced, %d skipped", len(board), skipped)
    return board
