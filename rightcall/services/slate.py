"""
Slate assembly: scoreboard games + market board → priced slate games.

Every game on the scoreboard becomes a slate game.  Games the odds board
does not cover are priced at the configured default (a -110/-110 pick'em),
so the slate never shrinks because a market is missing.
"""

import logging
from typing import Dict, Iterable, List, Optional

from rightcall.core.engine_config import EngineConfig
from rightcall.core.picks import SlateGame
from rightcall.core.settlement import Matchup
from rightcall.services.odds import MarketPrice
from rightcall.services.scoreboard import ScoreboardGame

logger = logging.getLogger(__name__)


def build_slate(
    games: Iterable[ScoreboardGame],
    board: Optional[Dict[str, MarketPrice]] = None,
    config: Optional[EngineConfig] = None,
) -> List[SlateGame]:
    config = config or EngineConfig()
    board = board or {}

    slate: List[SlateGame] = []
    priced = 0
    for g in games:
        matchup = Matchup(id=g.id, home=g.home.abbr, away=g.away.abbr)
        market = board.get(matchup.key)
        if market is not None:
            priced += 1
            slate.append(SlateGame(matchup, market.home_american, market.away_american))
        else:
            slate.append(SlateGame(matchup, config.default_price, config.default_price))

    logger.info("Slate built: %d games, %d with market prices", len(slate), priced)
    return slate
