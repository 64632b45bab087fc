"""
ESPN NFL scoreboard: the single fetch-and-normalize collaborator for
game state.

One client serves both query shapes the app needs:

  ScoreboardQuery(date="20251012")                        # a calendar day
  ScoreboardQuery(year=2025, week=6, seasontype=2)        # a league week

The site API is tried first; the older v2 path is used as a fallback when
the first request fails.  Raw JSON is reshaped into :class:`ScoreboardGame`
objects here and nowhere else; settlement only ever sees
:class:`~rightcall.core.settlement.OutcomeRecord`.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date as date_cls
from typing import Any, Dict, List, Optional

import requests

from rightcall.core.settlement import OutcomeRecord
from rightcall.services.team_mapping import normalize_abbr

logger = logging.getLogger(__name__)

PRIMARY_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
FALLBACK_URL = "https://site.api.espn.com/apis/v2/sports/football/nfl/scoreboard"
USER_AGENT = os.getenv("SCOREBOARD_USER_AGENT", "Mozilla/5.0 (RightCall)")

# Season types as ESPN numbers them.
PRESEASON, REGULAR_SEASON, POSTSEASON = 1, 2, 3
MAX_WEEKS = {PRESEASON: 3, REGULAR_SEASON: 18, POSTSEASON: 5}


class ScoreboardError(RuntimeError):
    pass


def yyyymmdd(d: Optional[date_cls] = None) -> str:
    return (d or date_cls.today()).strftime("%Y%m%d")


@dataclass(frozen=True)
class ScoreboardQuery:
    """Either a calendar ``date`` (YYYYMMDD) or a ``year``/``week``/``seasontype``."""

    date: Optional[str] = None
    year: Optional[int] = None
    week: Optional[int] = None
    seasontype: int = REGULAR_SEASON

    def __post_init__(self):
        if self.date is not None:
            if len(self.date) != 8 or not self.date.isdigit():
                raise ValueError(f"date must be YYYYMMDD, got {self.date!r}")
            return
        if self.year is None or self.week is None:
            raise ValueError("ScoreboardQuery needs a date or a year and week")
        if self.seasontype not in MAX_WEEKS:
            raise ValueError(f"seasontype must be 1, 2 or 3, got {self.seasontype!r}")
        if not 1 <= self.week <= MAX_WEEKS[self.seasontype]:
            raise ValueError(
                f"week {self.week} out of range for seasontype {self.seasontype} "
                f"(1-{MAX_WEEKS[self.seasontype]})"
            )

    @classmethod
    def today(cls) -> "ScoreboardQuery":
        return cls(date=yyyymmdd())

    def params(self) -> Dict[str, Any]:
        if self.date is not None:
            return {"dates": self.date}
        return {"dates": self.year, "week": self.week, "seasontype": self.seasontype}

    def label(self) -> str:
        if self.date is not None:
            return self.date
        return f"{self.year}-w{self.week}-st{self.seasontype}"


@dataclass(frozen=True)
class TeamScore:
    abbr: str
    name: Optional[str]
    score: int


@dataclass(frozen=True)
class ScoreboardGame:
    id: str
    start: Optional[str]
    status: Optional[str]
    completed: bool
    home: TeamScore
    away: TeamScore

    def to_outcome_record(self) -> OutcomeRecord:
        return OutcomeRecord(
            id=self.id,
            home=self.home.abbr,
            away=self.away.abbr,
            completed=self.completed,
            home_score=self.home.score,
            away_score=self.away.score,
        )


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _team(competitor: Optional[Dict]) -> TeamScore:
    competitor = competitor or {}
    team = competitor.get("team") or {}
    return TeamScore(
        abbr=normalize_abbr(team.get("abbreviation")),
        name=team.get("displayName"),
        score=_to_int(competitor.get("score")),
    )


def parse_scoreboard(payload: Dict) -> List[ScoreboardGame]:
    """
    Reshape an ESPN scoreboard payload.

    The API returns:
        {"events": [{"id": "401", "date": "...", "competitions": [{
            "status": {"type": {"name": "STATUS_FINAL", "completed": true}},
            "competitors": [{"homeAway": "home", "score": "24",
                             "team": {"abbreviation": "BUF", ...}}, ...]}]}]}

    Missing or unparsable scores become 0; a missing competitor yields an
    empty abbreviation, which never matches a slate game.
    """
    games: List[ScoreboardGame] = []
    for event in payload.get("events") or []:
        competitions = event.get("competitions") or [{}]
        comp = competitions[0] or {}
        competitors = comp.get("competitors") or []
        home = next((c for c in competitors if c.get("homeAway") == "home"), None)
        away = next((c for c in competitors if c.get("homeAway") == "away"), None)
        status_type = (comp.get("status") or {}).get("type") or {}

        games.append(ScoreboardGame(
            id=str(event.get("id", "")),
            start=event.get("date"),
            status=status_type.get("name"),
            completed=bool(status_type.get("completed")),
            home=_team(home),
            away=_team(away),
        ))
    return games


def to_outcome_records(games: List[ScoreboardGame]) -> List[OutcomeRecord]:
    return [g.to_outcome_record() for g in games]


class ScoreboardClient:
    """Client for the ESPN NFL scoreboard"""

    def __init__(self, timeout: float = 15.0, user_agent: str = USER_AGENT):
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent}

    def _get(self, url: str, params: Dict[str, Any]) -> Optional[Dict]:
        try:
            resp = requests.get(url, params=params, headers=self.headers, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.RequestException as e:
            logger.warning("Scoreboard request %s failed: %s", url, e)
            return None

    def fetch(self, query: ScoreboardQuery) -> List[ScoreboardGame]:
        """Fetch and normalize one scoreboard; raises ScoreboardError if both URLs fail."""
        params = query.params()
        data = self._get(PRIMARY_URL, params)
        if data is None:
            data = self._get(FALLBACK_URL, params)
        if data is None:
            raise ScoreboardError(f"scoreboard fetch failed for {query.label()}")

        games = parse_scoreboard(data)
        logger.info(
            "Scoreboard %s: %d games, %d completed",
            query.label(), len(games), sum(1 for g in games if g.completed),
        )
        return games
