"""Settlement classification of matchups against scoreboard records.

Pure and stateless.  Matching is by (home, away) label pair, not by id:
the slate and the scoreboard come from different providers and do not
share identifiers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"


class SettlementResult(str, Enum):
    """Categorical result of one matchup."""

    HOME = "home"
    AWAY = "away"
    PENDING = "pending"  # matching record found, game not final
    MISSING = "missing"  # no record with the same home/away labels

    @property
    def is_final(self) -> bool:
        return self in (SettlementResult.HOME, SettlementResult.AWAY)


@dataclass(frozen=True)
class Matchup:
    """A single scheduled contest on a slate."""

    id: str
    home: str
    away: str

    @property
    def key(self) -> str:
        """``AWAY@HOME`` key used to join market prices."""
        return f"{self.away}@{self.home}"


@dataclass(frozen=True)
class OutcomeRecord:
    """Scoreboard state of one game."""

    id: str
    home: str
    away: str
    completed: bool
    home_score: float = 0
    away_score: float = 0

    def winner(self) -> SettlementResult:
        # Strict comparison: a tie resolves to the away side.
        if self.home_score > self.away_score:
            return SettlementResult.HOME
        return SettlementResult.AWAY


def find_record(matchup: Matchup, records: Iterable[OutcomeRecord]) -> Optional[OutcomeRecord]:
    """First record with the same home and away labels, in that order."""
    for rec in records:
        if rec.home == matchup.home and rec.away == matchup.away:
            return rec
    return None


def resolve(matchup: Matchup, records: Sequence[OutcomeRecord]) -> SettlementResult:
    rec = find_record(matchup, records)
    if rec is None:
        return SettlementResult.MISSING
    if not rec.completed:
        return SettlementResult.PENDING
    return rec.winner()


def settle(
    matchups: Iterable[Matchup],
    records: Iterable[OutcomeRecord],
) -> Dict[str, SettlementResult]:
    """Map each matchup id to ``home``, ``away``, ``pending`` or ``missing``.

    A record with swapped sides is not a match; it resolves to ``missing``
    rather than being re-oriented.
    """
    board = list(records)
    return {m.id: resolve(m, board) for m in matchups}
