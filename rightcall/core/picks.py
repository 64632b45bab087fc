"""Pick lifecycle and slate scoring for one participant session.

A :class:`PickSheet` owns the picks a participant makes against one slate.
Each pick moves Open → Locked → Settled:

* **Open**: a side may be chosen, changed or cleared.
* **Locked**: the whole sheet is frozen by an explicit :meth:`PickSheet.lock`;
  irreversible for the slate.
* **Settled**: a final ``home``/``away`` result has been attached.

Scores are always derived from the sheet's current state, so applying the
same settlement results twice never double-counts.  Persisting the summed
rating delta is the ledger's job and happens at most once per slate.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from rightcall.core.engine_config import EngineConfig
from rightcall.core.odds_math import FairProbabilityPair, fair_probabilities
from rightcall.core.rating import rating_delta
from rightcall.core.scoring import RightWrongPoints, display_points, right_wrong_points
from rightcall.core.settlement import Matchup, SettlementResult, Side


class PickSheetError(RuntimeError):
    """Operation not allowed in the sheet's current state."""


class PickLockedError(PickSheetError):
    """Attempt to change a pick after the sheet was locked."""


class PickState(str, Enum):
    OPEN = "open"
    LOCKED = "locked"
    SETTLED = "settled"


@dataclass(frozen=True)
class SlateGame:
    """A matchup with the representative price for each side."""

    matchup: Matchup
    home_price: float
    away_price: float

    @property
    def id(self) -> str:
        return self.matchup.id

    def fair_probabilities(self) -> FairProbabilityPair:
        return fair_probabilities(self.home_price, self.away_price)


@dataclass(frozen=True)
class Pick:
    matchup_id: str
    side: Optional[Side] = None
    state: PickState = PickState.OPEN
    result: Optional[SettlementResult] = None

    @property
    def won(self) -> Optional[bool]:
        if self.state is not PickState.SETTLED or self.side is None:
            return None
        return self.result.value == self.side.value


@dataclass(frozen=True)
class SlateScore:
    """Totals over the settled picks of a sheet."""

    display_points: int
    rating_delta: int
    settled: int
    won: int


class PickSheet:
    """Session-owned picks for a single slate."""

    def __init__(
        self,
        slate_id: str,
        games: Iterable[SlateGame],
        config: Optional[EngineConfig] = None,
    ):
        self.slate_id = slate_id
        self.config = config or EngineConfig()
        self._games: Dict[str, SlateGame] = {g.id: g for g in games}
        self._picks: Dict[str, Pick] = {gid: Pick(matchup_id=gid) for gid in self._games}
        self._locked = False

    # -----------------------------------------------------------------------
    # State
    # -----------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def picks(self) -> List[Pick]:
        return list(self._picks.values())

    def pick(self, matchup_id: str) -> Pick:
        try:
            return self._picks[matchup_id]
        except KeyError:
            raise KeyError(f"Matchup {matchup_id!r} is not on slate {self.slate_id!r}") from None

    # -----------------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------------

    def select(self, matchup_id: str, side: Optional[Side | str]) -> Pick:
        """Choose (or clear, with ``None``) the side for an open pick."""
        current = self.pick(matchup_id)
        if self._locked:
            raise PickLockedError(f"Slate {self.slate_id!r} is locked; pick {matchup_id!r} is frozen")
        updated = replace(current, side=Side(side) if side is not None else None)
        self._picks[matchup_id] = updated
        return updated

    def lock(self) -> None:
        """Freeze every pick on the sheet.  Locking twice is a no-op."""
        if self._locked:
            return
        self._picks = {
            gid: replace(p, state=PickState.LOCKED) for gid, p in self._picks.items()
        }
        self._locked = True

    def apply_results(self, results: Mapping[str, SettlementResult | str]) -> int:
        """Attach final results to locked picks that have a side.

        ``pending`` and ``missing`` results are ignored, as are results for
        matchups not on the slate.  A settled pick keeps its first result.

        Returns:
            Number of picks newly settled by this call.
        """
        if not self._locked:
            raise PickSheetError(f"Slate {self.slate_id!r} must be locked before settling")

        newly_settled = 0
        for gid, raw in results.items():
            current = self._picks.get(gid)
            if current is None or current.side is None:
                continue
            if current.state is PickState.SETTLED:
                continue
            result = SettlementResult(raw)
            if not result.is_final:
                continue
            self._picks[gid] = replace(current, state=PickState.SETTLED, result=result)
            newly_settled += 1
        return newly_settled

    def unsettled(self) -> List[str]:
        """Matchup ids of picks with a side that have no final result yet."""
        return [
            gid for gid, p in self._picks.items()
            if p.side is not None and p.state is not PickState.SETTLED
        ]

    # -----------------------------------------------------------------------
    # Scoring
    # -----------------------------------------------------------------------

    def feedback(self, matchup_id: str) -> Dict[str, RightWrongPoints]:
        """Right/wrong points for both sides of a game."""
        self.pick(matchup_id)
        fair = self._games[matchup_id].fair_probabilities()
        p0 = self.config.points_scale
        return {
            Side.HOME.value: right_wrong_points(fair.p_home, p0),
            Side.AWAY.value: right_wrong_points(fair.p_away, p0),
        }

    def score(self) -> SlateScore:
        total_display = 0
        total_delta = 0
        settled = 0
        won = 0
        for pick in self._picks.values():
            if pick.won is None:
                continue
            p = self._games[pick.matchup_id].fair_probabilities().for_side(pick.side.value)
            outcome = 1 if pick.won else 0
            total_display += display_points(outcome, p, self.config.points_scale)
            total_delta += rating_delta(self.config.elo_k, outcome, p, self.config.pick_cap)
            settled += 1
            won += outcome
        return SlateScore(
            display_points=total_display,
            rating_delta=total_delta,
            settled=settled,
            won=won,
        )
